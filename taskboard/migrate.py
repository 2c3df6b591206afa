# taskboard/migrate.py
# Database migration module for PostgreSQL and SQLite
# Run: python -m taskboard.migrate [--purge-sessions]

import sys

from taskboard.db import IS_POSTGRES, commit, execute_query, get_db_connection

# Column types below are valid on both SQLite and PostgreSQL
SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        username TEXT UNIQUE NOT NULL,
        email TEXT UNIQUE NOT NULL,
        password_hash TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS auth_sessions (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        token_hash TEXT NOT NULL,
        created_at TEXT NOT NULL,
        expiration_date TEXT NOT NULL,
        FOREIGN KEY (user_id) REFERENCES users (id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_auth_sessions_user_token ON auth_sessions(user_id, token_hash)",
    "CREATE INDEX IF NOT EXISTS idx_auth_sessions_expiration ON auth_sessions(expiration_date)",
    """
    CREATE TABLE IF NOT EXISTS projects (
        id TEXT PRIMARY KEY,
        title TEXT UNIQUE NOT NULL,
        description TEXT NOT NULL,
        tasks_json TEXT NOT NULL DEFAULT '[]',
        stages_json TEXT NOT NULL DEFAULT '[]',
        version INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
]


def run_migrations() -> None:
    """
    Run all database migrations (idempotent).
    Safe to run multiple times.
    """
    print(f"[MIGRATE] Ensuring schema ({'PostgreSQL' if IS_POSTGRES else 'SQLite'})...")

    with get_db_connection() as conn:
        for statement in SCHEMA:
            execute_query(conn, statement)
        commit(conn)

    print("[MIGRATE] Schema ready")


if __name__ == "__main__":
    run_migrations()
    if "--purge-sessions" in sys.argv[1:]:
        from taskboard.sessions import purge_expired_sessions

        with get_db_connection() as conn:
            removed = purge_expired_sessions(conn)
            commit(conn)
        print(f"[MIGRATE] Purged {removed} expired session(s)")
