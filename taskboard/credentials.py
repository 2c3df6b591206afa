"""
taskboard/credentials.py

Credential store: user records and password hashing.

Passwords are hashed with bcrypt (salt embedded in the hash). Plaintext and
hashes never leave this module except through User.password_hash, which the
auth service scrubs before anything crosses the HTTP boundary.
"""

from __future__ import annotations

from typing import Optional

import bcrypt

from taskboard.config import BCRYPT_ROUNDS, IS_DEV
from taskboard.db import INTEGRITY_ERRORS, execute_query, fetch_one
from taskboard.errors import ConflictError, ValidationError
from taskboard.models import User

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash or oversized candidate
        return False


def find_user_by_email(conn, email: str) -> Optional[User]:
    row = fetch_one(conn, "SELECT * FROM users WHERE email = :email", {"email": email})
    return User(**row) if row else None


def find_user_by_id(conn, user_id: str) -> Optional[User]:
    row = fetch_one(conn, "SELECT * FROM users WHERE id = :id", {"id": user_id})
    return User(**row) if row else None


def user_exists(conn, email: str, username: str) -> bool:
    row = fetch_one(
        conn,
        "SELECT id FROM users WHERE email = :email OR username = :username",
        {"email": email, "username": username},
    )
    return row is not None


def create_user(conn, username: str, email: str, password: str) -> User:
    """
    Insert a new user with a bcrypt hash of ``password``.
    Caller commits.

    Raises:
        ConflictError: email or username already registered
    """
    if user_exists(conn, email, username):
        raise ConflictError("User with this email or username already exists")

    user = User(username=username, email=email, password_hash=hash_password(password))
    try:
        execute_query(
            conn,
            """
            INSERT INTO users (id, username, email, password_hash, created_at)
            VALUES (:id, :username, :email, :password_hash, :created_at)
            """,
            user.model_dump(),
        )
    except INTEGRITY_ERRORS as e:
        # Lost a race with a concurrent signup for the same identity
        if IS_DEV:
            print(f"[CREDENTIALS] IntegrityError on insert: {e}")
        raise ConflictError("User with this email or username already exists")

    return user
