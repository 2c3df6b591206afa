"""
taskboard/routes_auth.py

Signup / login / logout endpoints.

Signup and login report every domain failure as 400, the status clients of
this API have always received for them. Token problems on protected routes
stay 401.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from taskboard.auth_context import AuthContext, current_user, login, logout, require_auth_context, signup_request
from taskboard.errors import StoreError, TaskboardError
from taskboard.schemas import LoginRequest, SignupRequest


router = APIRouter(tags=["auth"])


@router.post("/signup", status_code=201)
def signup_route(req: SignupRequest) -> Dict[str, Any]:
    """
    Register a user.

    Raises:
        HTTPException(400): passwords differ, or email/username taken
    """
    try:
        signup_request(req)
    except StoreError:
        raise
    except TaskboardError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return {"message": "User registered successfully"}


@router.post("/login")
def login_route(req: LoginRequest) -> Dict[str, Any]:
    """
    Exchange credentials for a bearer token (valid 2 hours by default).

    Returns:
        {"token", "expirationDate", "user"}; user never includes the password hash

    Raises:
        HTTPException(400): unknown email or wrong password
    """
    try:
        return login(req.email, req.password)
    except StoreError:
        raise
    except TaskboardError as e:
        raise HTTPException(status_code=400, detail=e.message)


@router.post("/logout")
def logout_route(ctx: AuthContext = Depends(require_auth_context)) -> Dict[str, Any]:
    """Revoke the session behind the presented token."""
    logout(ctx)
    return {"message": "Logged out"}


@router.get("/me")
def me_route(ctx: AuthContext = Depends(require_auth_context)) -> Dict[str, Any]:
    return current_user(ctx)
