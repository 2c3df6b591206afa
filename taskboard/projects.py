"""
taskboard/projects.py

Project store. Each project row carries its task collection and board layout
as JSON documents, plus a version counter.

Guarantees:
- Title uniqueness enforced by the database (UNIQUE) and pre-checked
- Every write of the task collection is a single-row UPDATE guarded by the
  version the caller read; a stale version raises ConflictError
- Deletes are idempotent
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from taskboard.config import DEFAULT_STAGES, IS_DEV
from taskboard.db import INTEGRITY_ERRORS, commit, execute_query, fetch_all, fetch_one, get_db_connection
from taskboard.errors import ConflictError
from taskboard.models import DeleteResult, Project, Task, UpdateResult, now_iso
from taskboard.schemas import validate_item


# ---------------------------------------------------------
# Row helpers
# ---------------------------------------------------------
def _row_to_project(row: Dict[str, Any]) -> Project:
    try:
        tasks = json.loads(row.get("tasks_json") or "[]")
    except (json.JSONDecodeError, TypeError):
        tasks = []
    try:
        stages = json.loads(row.get("stages_json") or "[]")
    except (json.JSONDecodeError, TypeError):
        stages = []

    return Project(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        tasks=[Task.model_validate(t) for t in tasks],
        stages=stages or list(DEFAULT_STAGES),
        version=row["version"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _dump_tasks(tasks: List[Task]) -> str:
    return json.dumps([t.model_dump(by_alias=True) for t in tasks])


def _title_taken(conn, title: str, exclude_id: Optional[str] = None) -> bool:
    row = fetch_one(conn, "SELECT id FROM projects WHERE title = :title", {"title": title})
    return row is not None and row["id"] != exclude_id


def load_project(conn, project_id: str) -> Optional[Project]:
    row = fetch_one(conn, "SELECT * FROM projects WHERE id = :id", {"id": project_id})
    return _row_to_project(row) if row else None


def save_tasks(conn, project: Project, tasks: List[Task]) -> Project:
    """
    Replace the task collection of ``project`` in one atomic UPDATE.

    The write only lands if the stored version still equals project.version.
    Caller commits.

    Raises:
        ConflictError: another writer updated the project since it was read
    """
    updated_at = now_iso()
    cur = execute_query(
        conn,
        """
        UPDATE projects
        SET tasks_json = :tasks_json, version = version + 1, updated_at = :updated_at
        WHERE id = :id AND version = :version
        """,
        {
            "tasks_json": _dump_tasks(tasks),
            "updated_at": updated_at,
            "id": project.id,
            "version": project.version,
        },
    )
    if cur.rowcount == 0:
        print(f"[PROJECTS] Version conflict: project_id={project.id}, version={project.version}")
        raise ConflictError("Project was modified concurrently, reload and retry")

    return project.model_copy(update={
        "tasks": tasks,
        "version": project.version + 1,
        "updated_at": updated_at,
    })


def save_stages(conn, project: Project, stages: List[str]) -> Project:
    """Replace the board layout under the same version check. Caller commits."""
    updated_at = now_iso()
    cur = execute_query(
        conn,
        """
        UPDATE projects
        SET stages_json = :stages_json, version = version + 1, updated_at = :updated_at
        WHERE id = :id AND version = :version
        """,
        {
            "stages_json": json.dumps(stages),
            "updated_at": updated_at,
            "id": project.id,
            "version": project.version,
        },
    )
    if cur.rowcount == 0:
        raise ConflictError("Project was modified concurrently, reload and retry")

    return project.model_copy(update={
        "stages": stages,
        "version": project.version + 1,
        "updated_at": updated_at,
    })


# ---------------------------------------------------------
# CRUD
# ---------------------------------------------------------
def create_project(title: Any, description: Any) -> Project:
    """
    Create a project with an empty task list and the default board layout.

    Raises:
        ValidationError: title not 3-30 chars or description missing
        ConflictError: title already used
    """
    item = validate_item(title, description)
    project = Project(title=item.title, description=item.description, stages=list(DEFAULT_STAGES))

    with get_db_connection() as conn:
        if _title_taken(conn, project.title):
            raise ConflictError("title must be unique")
        try:
            execute_query(
                conn,
                """
                INSERT INTO projects (id, title, description, tasks_json, stages_json, version, created_at, updated_at)
                VALUES (:id, :title, :description, '[]', :stages_json, 0, :created_at, :updated_at)
                """,
                {
                    "id": project.id,
                    "title": project.title,
                    "description": project.description,
                    "stages_json": json.dumps(project.stages),
                    "created_at": project.created_at,
                    "updated_at": project.updated_at,
                },
            )
        except INTEGRITY_ERRORS:
            raise ConflictError("title must be unique")
        commit(conn)

    if IS_DEV:
        print(f"[PROJECTS] Created project_id={project.id}")
    return project


def get_project(project_id: str) -> Optional[Project]:
    with get_db_connection() as conn:
        return load_project(conn, project_id)


def list_projects() -> List[Project]:
    with get_db_connection() as conn:
        rows = fetch_all(conn, "SELECT * FROM projects ORDER BY created_at")
    return [_row_to_project(row) for row in rows]


def update_project(project_id: str, title: Any, description: Any) -> UpdateResult:
    """
    Replace title/description. A missing id is created with that id (upsert).

    Raises:
        ValidationError: bad title/description
        ConflictError: title used by another project
    """
    item = validate_item(title, description)
    now = now_iso()

    with get_db_connection() as conn:
        if _title_taken(conn, item.title, exclude_id=project_id):
            raise ConflictError("title must be unique")

        existing = load_project(conn, project_id)
        try:
            if existing is not None:
                execute_query(
                    conn,
                    """
                    UPDATE projects
                    SET title = :title, description = :description,
                        version = version + 1, updated_at = :updated_at
                    WHERE id = :id
                    """,
                    {"title": item.title, "description": item.description, "updated_at": now, "id": project_id},
                )
                modified = int(existing.title != item.title or existing.description != item.description)
                result = UpdateResult(matchedCount=1, modifiedCount=modified)
            else:
                execute_query(
                    conn,
                    """
                    INSERT INTO projects (id, title, description, tasks_json, stages_json, version, created_at, updated_at)
                    VALUES (:id, :title, :description, '[]', :stages_json, 0, :now, :now)
                    """,
                    {
                        "id": project_id,
                        "title": item.title,
                        "description": item.description,
                        "stages_json": json.dumps(list(DEFAULT_STAGES)),
                        "now": now,
                    },
                )
                result = UpdateResult(upsertedId=project_id)
        except INTEGRITY_ERRORS:
            raise ConflictError("title must be unique")
        commit(conn)

    if IS_DEV:
        print(f"[PROJECTS] Updated project_id={project_id}, upserted={result.upsertedId is not None}")
    return result


def delete_project(project_id: str) -> DeleteResult:
    with get_db_connection() as conn:
        cur = execute_query(conn, "DELETE FROM projects WHERE id = :id", {"id": project_id})
        deleted = cur.rowcount
        commit(conn)

    if IS_DEV:
        print(f"[PROJECTS] Delete project_id={project_id}, deleted={deleted}")
    return DeleteResult(deletedCount=deleted)
