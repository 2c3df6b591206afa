"""
taskboard/board.py

Task board engine: operations on the task collection embedded in a project.

Invariants:
- index: unique per project, max(existing) + 1 at creation (0 for the first
  task), never rewritten afterwards
- order: position of a task inside its stage; only reorder_board renumbers it
- stage: a board column name; new tasks start in "Requested"

Every mutation reads the project, transforms the task list in memory and
writes the whole list back in one version-checked UPDATE (see
projects.save_tasks), so a batch either lands completely or not at all.
"""

from __future__ import annotations

from typing import Any, Dict, List

from taskboard.config import DEFAULT_STAGE, IS_DEV, STRICT_STAGES
from taskboard.db import commit, get_db_connection
from taskboard.errors import NotFoundError, ValidationError
from taskboard.models import Project, Task, UpdateResult
from taskboard.projects import load_project, save_stages, save_tasks
from taskboard.schemas import BoardColumn, parse_board_state, validate_item


def _require_project(conn, project_id: str) -> Project:
    project = load_project(conn, project_id)
    if project is None:
        raise NotFoundError("project not found")
    return project


def next_index(tasks: List[Task]) -> int:
    return max((t.index for t in tasks), default=-1) + 1


# ---------------------------------------------------------
# Task CRUD
# ---------------------------------------------------------
def add_task(project_id: str, title: Any, description: Any) -> Task:
    """
    Append a task in the "Requested" stage.

    Raises:
        ValidationError: bad title/description
        NotFoundError: project absent
        ConflictError: concurrent write to the same project
    """
    item = validate_item(title, description)

    with get_db_connection() as conn:
        project = _require_project(conn, project_id)
        task = Task(
            title=item.title,
            description=item.description,
            stage=DEFAULT_STAGE,
            order=len(project.tasks),
            index=next_index(project.tasks),
        )
        save_tasks(conn, project, project.tasks + [task])
        commit(conn)

    if IS_DEV:
        print(f"[BOARD] Added task_id={task.id} index={task.index} to project_id={project_id}")
    return task


def get_task(project_id: str, task_id: str) -> Project:
    """
    Return the project carrying only the requested task.

    Raises:
        NotFoundError: project or task absent
    """
    with get_db_connection() as conn:
        project = _require_project(conn, project_id)

    matches = [t for t in project.tasks if t.id == task_id]
    if not matches:
        raise NotFoundError("record not found")
    return project.model_copy(update={"tasks": matches})


def update_task(project_id: str, task_id: str, title: Any, description: Any) -> UpdateResult:
    """
    Change title/description of one task; stage, order and index stay put.
    A missing project or task yields matchedCount=0.
    """
    item = validate_item(title, description)

    with get_db_connection() as conn:
        project = load_project(conn, project_id)
        if project is None:
            return UpdateResult()

        tasks = []
        result = UpdateResult()
        for task in project.tasks:
            if task.id == task_id:
                result.matchedCount = 1
                if task.title != item.title or task.description != item.description:
                    result.modifiedCount = 1
                task = task.model_copy(update={"title": item.title, "description": item.description})
            tasks.append(task)

        if result.modifiedCount:
            save_tasks(conn, project, tasks)
            commit(conn)

    return result


def delete_task(project_id: str, task_id: str) -> UpdateResult:
    """Remove a task. Deleting a missing task (or project) is not an error."""
    with get_db_connection() as conn:
        project = load_project(conn, project_id)
        if project is None:
            return UpdateResult()

        remaining = [t for t in project.tasks if t.id != task_id]
        removed = len(project.tasks) - len(remaining)
        if removed:
            save_tasks(conn, project, remaining)
            commit(conn)

    if IS_DEV:
        print(f"[BOARD] Delete task_id={task_id} from project_id={project_id}, removed={removed}")
    return UpdateResult(matchedCount=1, modifiedCount=removed)


# ---------------------------------------------------------
# Board
# ---------------------------------------------------------
def plan_reorder(columns: List[BoardColumn]) -> List[Dict[str, Any]]:
    """
    Flatten a board state into per-task assignments, in input order:
    each task gets its column's name as stage and its list position as order.
    """
    assignments = []
    for column in columns:
        for position, ref in enumerate(column.items):
            assignments.append({"_id": ref.id, "stage": column.name, "order": position})
    return assignments


def apply_assignments(tasks: List[Task], assignments: List[Dict[str, Any]]) -> List[Task]:
    """Return a new task list with the assignments applied. Unknown ids are ignored."""
    by_id = {t.id: t for t in tasks}
    for assignment in assignments:
        task = by_id.get(assignment["_id"])
        if task is None:
            continue
        by_id[task.id] = task.model_copy(update={
            "stage": assignment["stage"],
            "order": assignment["order"],
        })
    return [by_id[t.id] for t in tasks]


def reorder_board(project_id: str, board_state: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Apply a whole board state (column -> ordered task refs) to a project.

    Task ids not present in the project are skipped without error. The batch
    is written atomically; ``index`` is never touched.

    Returns:
        The list of computed assignments [{_id, stage, order}, ...]

    Raises:
        ValidationError: malformed payload, or (with STRICT_STAGES) a stage
            missing from the project's layout
        NotFoundError: project absent
        ConflictError: concurrent write to the same project
    """
    columns = parse_board_state(board_state)
    assignments = plan_reorder(columns)

    with get_db_connection() as conn:
        project = _require_project(conn, project_id)

        if STRICT_STAGES:
            unknown = sorted({c.name for c in columns} - set(project.stages))
            if unknown:
                raise ValidationError(f"Unknown stage(s): {', '.join(unknown)}")

        known_ids = {t.id for t in project.tasks}
        skipped = [a["_id"] for a in assignments if a["_id"] not in known_ids]

        if len(skipped) < len(assignments):
            save_tasks(conn, project, apply_assignments(project.tasks, assignments))
            commit(conn)

    if IS_DEV:
        print(f"[BOARD] Reorder project_id={project_id}: assignments={len(assignments)}, skipped={len(skipped)}")
    return assignments


def get_board(project_id: str) -> Dict[str, Any]:
    """
    Group a project's tasks by stage, each column sorted by order.
    Layout stages come first (even if empty), then any extra stages in use.
    """
    with get_db_connection() as conn:
        project = _require_project(conn, project_id)

    columns: Dict[str, List[Dict[str, Any]]] = {stage: [] for stage in project.stages}
    for task in sorted(project.tasks, key=lambda t: (t.order, t.index)):
        columns.setdefault(task.stage, []).append(task.model_dump(by_alias=True))

    return {"stages": project.stages, "columns": columns}


def set_stages(project_id: str, stages: List[str]) -> List[str]:
    """
    Replace the board layout of a project.

    Raises:
        ValidationError: blank or duplicate names, or "Requested" missing
        NotFoundError: project absent
    """
    cleaned = [s.strip() for s in stages]
    if not cleaned or any(not s for s in cleaned):
        raise ValidationError("stages must be non-empty names")
    if len(set(cleaned)) != len(cleaned):
        raise ValidationError("stages must be unique")
    if DEFAULT_STAGE not in cleaned:
        raise ValidationError(f"stages must include {DEFAULT_STAGE!r}")

    with get_db_connection() as conn:
        project = _require_project(conn, project_id)
        save_stages(conn, project, cleaned)
        commit(conn)

    return cleaned
