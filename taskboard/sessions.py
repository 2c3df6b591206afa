"""
taskboard/sessions.py

Session store: one row per issued token, used to revoke tokens whose
signature is still valid.

Only a SHA-256 hash of the token is persisted.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from typing import Optional

from taskboard.db import execute_query, fetch_one
from taskboard.models import Session


def hash_token(token: str) -> str:
    """Hash a token for storage and lookup (SHA-256)."""
    return hashlib.sha256(token.encode()).hexdigest()


def _utc(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def create_session(conn, session_id: str, user_id: str, token: str, expires_at: datetime) -> Session:
    """Record a session for ``token``. Caller commits."""
    session = Session(
        id=session_id,
        user_id=user_id,
        token_hash=hash_token(token),
        expiration_date=expires_at.isoformat(),
    )
    execute_query(
        conn,
        """
        INSERT INTO auth_sessions (id, user_id, token_hash, created_at, expiration_date)
        VALUES (:id, :user_id, :token_hash, :created_at, :expiration_date)
        """,
        session.model_dump(),
    )
    return session


def find_active_session(conn, user_id: str, token: str, now: Optional[datetime] = None) -> Optional[Session]:
    """Return the unexpired session for (user_id, token), or None."""
    row = fetch_one(
        conn,
        "SELECT * FROM auth_sessions WHERE user_id = :user_id AND token_hash = :token_hash",
        {"user_id": user_id, "token_hash": hash_token(token)},
    )
    if not row:
        return None

    session = Session(**row)
    now = now or datetime.now(timezone.utc)
    if now > _utc(session.expiration_date):
        return None
    return session


def delete_session(conn, token: str) -> int:
    """Revoke every session row holding ``token``. Idempotent. Caller commits."""
    cur = execute_query(
        conn,
        "DELETE FROM auth_sessions WHERE token_hash = :token_hash",
        {"token_hash": hash_token(token)},
    )
    return cur.rowcount


def purge_expired_sessions(conn, now: Optional[datetime] = None) -> int:
    """Delete session rows past their expiration date. Caller commits."""
    now = now or datetime.now(timezone.utc)
    cur = execute_query(
        conn,
        "DELETE FROM auth_sessions WHERE expiration_date < :now",
        {"now": now.isoformat()},
    )
    return cur.rowcount
