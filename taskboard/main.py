# ---------------------------------------------------------
# taskboard/main.py
# Taskboard - project / task board backend
#
# Run: uvicorn taskboard.main:app --reload (from repo root)
#
# - FastAPI + SQLite (PostgreSQL when DATABASE_URL is set)
# - /signup, /login, /logout, /me : account + session lifecycle
# - /projects, /project/{id}      : project CRUD
# - /project/{id}/task[/{taskId}] : embedded task CRUD
# - /project/{id}/todo            : bulk board reorder
# - /project/{id}/board           : board layout
# ---------------------------------------------------------

from __future__ import annotations

from typing import Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskboard.config import CORS_ORIGINS, IS_DEV
from taskboard.errors import StoreError, TaskboardError
from taskboard.migrate import run_migrations
from taskboard.routes_auth import router as auth_router
from taskboard.routes_projects import router as projects_router
from taskboard.schemas import describe_errors


# ---------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------
app = FastAPI(title="Taskboard Backend", version="0.1")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if IS_DEV else CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

run_migrations()


# ---------------------------------------------------------
# Error rendering: every failure is {"error": true, "message": ...}
# ---------------------------------------------------------
@app.exception_handler(TaskboardError)
def taskboard_error_handler(request: Request, exc: TaskboardError) -> JSONResponse:
    if isinstance(exc, StoreError):
        print(f"[ERROR] Store failure on {request.method} {request.url.path}: {exc.__cause__!r}")
    elif IS_DEV:
        print(f"[ERROR] {type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": True, "message": exc.message},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    return JSONResponse(
        status_code=422,
        content={
            "error": True,
            "message": describe_errors(exc) or "Invalid request",
            "details": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors],
        },
    )


@app.exception_handler(StarletteHTTPException)
def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": True, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


# ---------------------------------------------------------
# Routes
# ---------------------------------------------------------
@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


app.include_router(auth_router)
app.include_router(projects_router)
