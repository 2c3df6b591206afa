"""
taskboard/dependencies.py

Reusable FastAPI dependencies for route-group authorization.
"""

from __future__ import annotations

from typing import Callable, Optional

from fastapi import Request

from taskboard.auth_context import AuthContext, require_auth_context
from taskboard.config import IS_DEV, ROUTE_AUTH


def require_auth_for(group: str) -> Callable:
    """
    FastAPI dependency factory that enforces authentication for a route group
    only when the group is switched on in ROUTE_AUTH.

    The switch is read per request, so flipping REQUIRE_AUTH_<GROUP> (or
    patching ROUTE_AUTH in tests) takes effect without rebuilding routes.

    Usage in routes:
        @router.get("/projects", dependencies=[Depends(require_auth_for("projects"))])

    Args:
        group: Key of ROUTE_AUTH ("projects", "tasks", "board")

    Returns:
        A dependency returning the AuthContext, or None when the group is public
    """
    if group not in ROUTE_AUTH:
        raise KeyError(f"Unknown route group: {group}")

    def _check_group(request: Request) -> Optional[AuthContext]:
        if not ROUTE_AUTH.get(group, False):
            return None
        ctx = require_auth_context(request)
        if IS_DEV:
            print(f"[AUTHZ] {group}: user_id={ctx.user_id} {request.method} {request.url.path}")
        return ctx

    return _check_group
