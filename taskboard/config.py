# taskboard/config.py
# Environment-aware configuration for the Taskboard backend

import os
from typing import Dict, List, Literal

# Environment detection
ENV: Literal["dev", "staging", "prod"] = os.environ.get("ENV", "dev")  # type: ignore
IS_DEV = (ENV == "dev")
IS_STAGING = (ENV == "staging")
IS_PROD = (ENV == "prod")


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> List[str]:
    raw = os.environ.get(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_secret_key() -> str:
    """
    Read the JWT signing key from the environment.

    There is no fallback value: a missing or blank SECRET_KEY stops the
    service from starting.
    """
    secret = os.environ.get("SECRET_KEY", "").strip()
    if not secret:
        raise RuntimeError(
            "SECRET_KEY is not set. Export a strong random value before starting the service."
        )
    return secret


# JWT and session configuration
SECRET_KEY = load_secret_key()
ALGORITHM = "HS256"

# Token lifetime (access token and its session row share it)
TOKEN_HOURS = int(os.environ.get("TOKEN_HOURS", "2"))

# Password hashing cost
BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "10"))

# Database configuration
# DATABASE_URL takes precedence (managed Postgres)
# Falls back to SQLite for local development
DATABASE_URL = os.environ.get("DATABASE_URL", "").strip()
DATABASE_PATH = os.environ.get("DATABASE_PATH", "taskboard.db")

# Database type detection
IS_POSTGRES = DATABASE_URL.startswith(("postgres://", "postgresql://"))
IS_SQLITE = not IS_POSTGRES

# CORS origins (dev allows everything)
CORS_ORIGINS = _env_list("CORS_ORIGINS", "http://localhost:3000")

# Route groups that require a bearer token. The project board has historically
# been public, so every group is opt-in.
ROUTE_AUTH: Dict[str, bool] = {
    "projects": _env_flag("REQUIRE_AUTH_PROJECTS"),
    "tasks": _env_flag("REQUIRE_AUTH_TASKS"),
    "board": _env_flag("REQUIRE_AUTH_BOARD"),
}

# Board layout
DEFAULT_STAGE = "Requested"
DEFAULT_STAGES = _env_list("DEFAULT_STAGES", "Requested,In Progress,Done")
if DEFAULT_STAGE not in DEFAULT_STAGES:
    DEFAULT_STAGES.insert(0, DEFAULT_STAGE)

# Reject reorders that name a stage missing from the project's layout
STRICT_STAGES = _env_flag("STRICT_STAGES")

print(f"[CONFIG] Environment: {ENV}")
print(f"[CONFIG] Database: {'PostgreSQL' if IS_POSTGRES else 'SQLite (local dev)'}")
print(f"[CONFIG] Token lifetime: {TOKEN_HOURS} hours")
print(f"[CONFIG] Route auth: {ROUTE_AUTH}")
print(f"[CONFIG] Strict stages: {STRICT_STAGES}")
