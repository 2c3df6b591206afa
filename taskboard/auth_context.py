"""
taskboard/auth_context.py

Authentication service and the FastAPI dependency that enforces it.

Contains:
- signup / login / logout: account and session lifecycle
- verify_token: JWT signature + expiry check
- authenticate: token check plus server-side session lookup
- require_auth_context: FastAPI dependency for protected routes
- public_user: projection that strips credentials from a user record

A token is accepted only if BOTH its signature/expiry are valid AND a live
session row exists for it. Deleting the row revokes the token immediately.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Request
from pydantic import BaseModel

from taskboard.config import ALGORITHM, IS_DEV, SECRET_KEY, TOKEN_HOURS
from taskboard.credentials import create_user, find_user_by_email, find_user_by_id, verify_password
from taskboard.db import commit, get_db_connection
from taskboard.errors import AuthError, NotFoundError, ValidationError
from taskboard.models import User, new_id
from taskboard.schemas import SignupRequest
from taskboard.sessions import create_session, delete_session, find_active_session, purge_expired_sessions


# ---------------------------------------------------------
# AuthContext
# ---------------------------------------------------------
class AuthContext(BaseModel):
    """
    Identity derived from a verified token and its session row.

    Fields:
        user_id: User ID from the token's userId claim
        session_id: Session row ID (the token's jti claim)
        token: The raw bearer token (needed for logout)
    """
    user_id: str
    session_id: Optional[str] = None
    token: str


def public_user(user: User) -> Dict[str, Any]:
    """Projection of a user safe to return to clients (no password hash)."""
    return {
        "_id": user.id,
        "username": user.username,
        "email": user.email,
        "createdAt": user.created_at,
    }


def normalize_email(email: str) -> str:
    return email.strip().lower()


# ---------------------------------------------------------
# JWT
# ---------------------------------------------------------
def create_access_token(user_id: str, session_id: str, now: Optional[datetime] = None) -> tuple[str, datetime]:
    """Sign a token for ``user_id``. Returns (token, expiration)."""
    now = now or datetime.now(timezone.utc)
    expires_at = now + timedelta(hours=TOKEN_HOURS)
    payload = {
        "userId": user_id,
        "jti": session_id,
        "iat": now,
        "exp": expires_at,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM), expires_at


def verify_token(token: str) -> dict:
    """
    Verify JWT signature and expiration and return the decoded payload.

    Raises:
        AuthError: token expired, tampered with, or missing userId
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthError("Invalid token")

    if not payload.get("userId"):
        raise AuthError("Invalid token payload")
    return payload


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Pull the token out of an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise AuthError("No token provided")
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthError("No token provided")
    return token


# ---------------------------------------------------------
# Account lifecycle
# ---------------------------------------------------------
def signup(username: str, email: str, password: str, confirm_password: str) -> Dict[str, Any]:
    """
    Register a user.

    Raises:
        ValidationError: passwords differ (or password too long for bcrypt)
        ConflictError: email or username taken
    """
    if password != confirm_password:
        raise ValidationError("Passwords do not match")

    email_norm = normalize_email(email)
    with get_db_connection() as conn:
        user = create_user(conn, username.strip(), email_norm, password)
        commit(conn)

    print(f"[SIGNUP] User created: id={user.id}")
    return public_user(user)


def signup_request(req: SignupRequest) -> Dict[str, Any]:
    return signup(req.username, req.email, req.password, req.confirm_password)


def login(email: str, password: str) -> Dict[str, Any]:
    """
    Verify credentials, open a session and issue a token.

    Returns:
        {"token", "expirationDate", "user"} with the user scrubbed of its hash

    Raises:
        NotFoundError: no user with that email
        AuthError: wrong password
    """
    email_norm = normalize_email(email)

    with get_db_connection() as conn:
        user = find_user_by_email(conn, email_norm)
        if user is None:
            if IS_DEV:
                print("[LOGIN] User not found by email")
            raise NotFoundError("User not found")

        if not verify_password(password, user.password_hash):
            if IS_DEV:
                print(f"[LOGIN] Password verification failed: user_id={user.id}")
            raise AuthError("Invalid credentials")

        session_id = new_id()
        token, expires_at = create_access_token(user.id, session_id)

        purged = purge_expired_sessions(conn)
        create_session(conn, session_id, user.id, token, expires_at)
        commit(conn)

    if IS_DEV:
        print(f"[LOGIN] Session created: user_id={user.id}, session_id={session_id}, purged_expired={purged}")

    return {
        "token": token,
        "expirationDate": expires_at.isoformat(),
        "user": public_user(user),
    }


def authenticate(authorization: Optional[str]) -> AuthContext:
    """
    Validate a bearer header against the token signature and the session store.

    Raises:
        AuthError: header missing, token invalid/expired, or no live session
    """
    token = extract_bearer_token(authorization)
    payload = verify_token(token)
    user_id = str(payload["userId"])

    with get_db_connection() as conn:
        session = find_active_session(conn, user_id, token)

    if session is None:
        if IS_DEV:
            print(f"[AUTH] No live session: user_id={user_id}")
        raise AuthError("Session expired or invalid")

    return AuthContext(user_id=user_id, session_id=session.id, token=token)


def logout(ctx: AuthContext) -> int:
    """Revoke the session behind ``ctx``. Returns the number of rows removed."""
    with get_db_connection() as conn:
        removed = delete_session(conn, ctx.token)
        commit(conn)

    if IS_DEV:
        print(f"[AUTH] Logout: user_id={ctx.user_id}, sessions_removed={removed}")
    return removed


def current_user(ctx: AuthContext) -> Dict[str, Any]:
    with get_db_connection() as conn:
        user = find_user_by_id(conn, ctx.user_id)
    if user is None:
        raise AuthError("User not found")
    return public_user(user)


# ---------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------
def require_auth_context(request: Request) -> AuthContext:
    """
    Auth dependency for FastAPI routes.

    Usage:
        @router.get("/protected")
        def protected_route(ctx: AuthContext = Depends(require_auth_context)):
            ...

    On success the user id is also attached to ``request.state.user_id``.
    """
    ctx = authenticate(request.headers.get("Authorization"))
    request.state.user_id = ctx.user_id
    return ctx
