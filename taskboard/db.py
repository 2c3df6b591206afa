# taskboard/db.py
# Database abstraction layer supporting PostgreSQL (production) and SQLite (dev)

import sqlite3
from contextlib import contextmanager
from pathlib import Path as FsPath
from typing import Any, Dict, Generator, List, Optional, Union
from urllib.parse import urlparse

from sqlalchemy import create_engine, pool, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError as SAIntegrityError
from sqlalchemy.exc import SQLAlchemyError

from taskboard.config import DATABASE_PATH, DATABASE_URL, IS_POSTGRES
from taskboard.errors import StoreError

# Driver errors grouped so callers can catch both backends at once
INTEGRITY_ERRORS = (sqlite3.IntegrityError, SAIntegrityError)
DB_ERRORS = (sqlite3.Error, SQLAlchemyError)

# Global engine (SQLAlchemy) or None for SQLite
_engine: Union[Engine, None] = None


def sqlite_path() -> str:
    """Absolute path of the SQLite database file."""
    return str(FsPath(__file__).resolve().parent / DATABASE_PATH)


def init_engine() -> None:
    """Initialize SQLAlchemy engine for PostgreSQL if DATABASE_URL is set."""
    global _engine

    if not IS_POSTGRES:
        # SQLite mode - no engine needed
        _engine = None
        print("[DB] Using SQLite (local dev mode)")
        return

    # Parse and validate URL
    parsed = urlparse(DATABASE_URL)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"Invalid DATABASE_URL: {DATABASE_URL[:20]}...")

    url = DATABASE_URL
    if url.startswith("postgres://"):
        # SQLAlchemy only accepts the long scheme name
        url = "postgresql://" + url[len("postgres://"):]

    _engine = create_engine(
        url,
        poolclass=pool.QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        echo=False,
    )

    print(f"[DB] Using PostgreSQL ({parsed.hostname})")


@contextmanager
def get_db_connection() -> Generator[Union[sqlite3.Connection, Connection], None, None]:
    """
    Context manager for database connections.
    Yields sqlite3.Connection for SQLite or sqlalchemy.Connection for Postgres.
    Uncommitted work is discarded when the block exits; driver errors that
    escape the block are re-raised as StoreError.
    """
    try:
        if IS_POSTGRES:
            if _engine is None:
                init_engine()

            with _engine.connect() as conn:
                yield conn
        else:
            conn = sqlite3.connect(sqlite_path(), check_same_thread=False)
            conn.row_factory = sqlite3.Row
            try:
                yield conn
            finally:
                conn.close()
    except DB_ERRORS as e:
        print(f"[DB] Error: {e}")
        raise StoreError("Database error") from e


def execute_query(
    conn: Union[sqlite3.Connection, Connection],
    query: str,
    params: Optional[Dict[str, Any]] = None,
) -> Any:
    """
    Execute a query with named parameters.

    Both backends accept the ``:name`` placeholder style, so queries are
    written once and run unchanged on SQLite and PostgreSQL.

    Returns:
        Cursor (SQLite) or CursorResult (PostgreSQL); both expose
        fetchone(), fetchall() and rowcount.
    """
    if IS_POSTGRES:
        return conn.execute(text(query), params or {})
    return conn.execute(query, params or {})


def row_to_dict(row) -> dict:
    """
    Convert a sqlite3.Row or SQLAlchemy Row to a plain dict.
    Returns {} for None.
    """
    if row is None:
        return {}
    if hasattr(row, "_mapping"):
        return dict(row._mapping)
    return dict(row)


def fetch_one(conn, query: str, params: Optional[Dict[str, Any]] = None) -> Optional[dict]:
    row = execute_query(conn, query, params).fetchone()
    return row_to_dict(row) if row is not None else None


def fetch_all(conn, query: str, params: Optional[Dict[str, Any]] = None) -> List[dict]:
    return [row_to_dict(row) for row in execute_query(conn, query, params).fetchall()]


def commit(conn: Union[sqlite3.Connection, Connection]) -> None:
    conn.commit()


def rollback(conn: Union[sqlite3.Connection, Connection]) -> None:
    conn.rollback()


# Initialize engine on module import if Postgres mode
if IS_POSTGRES and _engine is None:
    init_engine()
