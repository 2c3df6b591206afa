"""
taskboard/routes_projects.py

Project, task and board endpoints.

Each route group ("projects", "tasks", "board") is public unless switched on
in config.ROUTE_AUTH; see dependencies.require_auth_for.
"""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Path

from taskboard import board, projects
from taskboard.dependencies import require_auth_for
from taskboard.schemas import BoardStagesRequest, ItemInput


router = APIRouter(tags=["projects"])

projects_auth = [Depends(require_auth_for("projects"))]
tasks_auth = [Depends(require_auth_for("tasks"))]
board_auth = [Depends(require_auth_for("board"))]


# ---------------------------------------------------------
# Projects
# ---------------------------------------------------------
@router.get("/projects", dependencies=projects_auth)
def list_projects_route() -> List[Dict[str, Any]]:
    """List all projects without their task collections."""
    return [p.public(include_tasks=False) for p in projects.list_projects()]


@router.get("/project/{project_id}", dependencies=projects_auth)
def get_project_route(project_id: str = Path(..., min_length=1)) -> List[Dict[str, Any]]:
    """Return [project] with its tasks, or [] when the id is unknown."""
    project = projects.get_project(project_id)
    return [project.public()] if project else []


@router.post("/project", dependencies=projects_auth)
def create_project_route(req: ItemInput) -> Dict[str, Any]:
    project = projects.create_project(req.title, req.description)
    return {
        "data": {
            "title": project.title,
            "description": project.description,
            "updatedAt": project.updated_at,
            "_id": project.id,
        }
    }


@router.put("/project/{project_id}", dependencies=projects_auth)
def update_project_route(req: ItemInput, project_id: str = Path(..., min_length=1)) -> Dict[str, Any]:
    return projects.update_project(project_id, req.title, req.description).model_dump()


@router.delete("/project/{project_id}", dependencies=projects_auth)
def delete_project_route(project_id: str = Path(..., min_length=1)) -> Dict[str, Any]:
    return projects.delete_project(project_id).model_dump()


# ---------------------------------------------------------
# Tasks
# ---------------------------------------------------------
@router.post("/project/{project_id}/task", dependencies=tasks_auth)
def add_task_route(req: ItemInput, project_id: str = Path(..., min_length=1)) -> Dict[str, Any]:
    task = board.add_task(project_id, req.title, req.description)
    return {
        "acknowledged": True,
        "matchedCount": 1,
        "modifiedCount": 1,
        "upsertedId": None,
        "task": task.model_dump(by_alias=True),
    }


@router.get("/project/{project_id}/task/{task_id}", dependencies=tasks_auth)
def get_task_route(
    project_id: str = Path(..., min_length=1),
    task_id: str = Path(..., min_length=1),
) -> List[Dict[str, Any]]:
    return [board.get_task(project_id, task_id).public()]


@router.put("/project/{project_id}/task/{task_id}", dependencies=tasks_auth)
def update_task_route(
    req: ItemInput,
    project_id: str = Path(..., min_length=1),
    task_id: str = Path(..., min_length=1),
) -> Dict[str, Any]:
    return board.update_task(project_id, task_id, req.title, req.description).model_dump()


@router.delete("/project/{project_id}/task/{task_id}", dependencies=tasks_auth)
def delete_task_route(
    project_id: str = Path(..., min_length=1),
    task_id: str = Path(..., min_length=1),
) -> Dict[str, Any]:
    return board.delete_task(project_id, task_id).model_dump()


# ---------------------------------------------------------
# Board
# ---------------------------------------------------------
@router.put("/project/{project_id}/todo", dependencies=board_auth)
def reorder_board_route(
    payload: Dict[str, Any] = Body(...),
    project_id: str = Path(..., min_length=1),
) -> List[Dict[str, Any]]:
    """
    Bulk reorder. Body maps column keys to {name, items: [{_id}, ...]} (or to a
    bare list of items). Echoes the computed assignments.
    """
    return board.reorder_board(project_id, payload)


@router.get("/project/{project_id}/board", dependencies=board_auth)
def get_board_route(project_id: str = Path(..., min_length=1)) -> Dict[str, Any]:
    return board.get_board(project_id)


@router.put("/project/{project_id}/board", dependencies=board_auth)
def set_board_route(req: BoardStagesRequest, project_id: str = Path(..., min_length=1)) -> Dict[str, Any]:
    return {"stages": board.set_stages(project_id, req.stages)}
