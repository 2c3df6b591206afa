"""Shared test fixtures for the Taskboard backend tests."""

import os
import tempfile

import pytest

# Configure the environment BEFORE any taskboard module is imported:
# config.py reads these at import time and refuses to start without a secret.
TEST_DB_PATH = os.path.join(tempfile.mkdtemp(prefix="taskboard-test-"), "taskboard.db")
os.environ["DATABASE_PATH"] = TEST_DB_PATH
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.pop("DATABASE_URL", None)


@pytest.fixture(autouse=True)
def clean_db():
    """Start every test with empty tables."""
    from taskboard.db import commit, execute_query, get_db_connection
    from taskboard.migrate import run_migrations

    run_migrations()
    with get_db_connection() as conn:
        for table in ("auth_sessions", "users", "projects"):
            execute_query(conn, f"DELETE FROM {table}")
        commit(conn)
    yield


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from taskboard.main import app

    return TestClient(app)


@pytest.fixture
def registered_user(client):
    """Sign up and log in a user; returns the login payload plus credentials."""
    resp = client.post("/signup", json={
        "username": "alice",
        "email": "alice@example.com",
        "password": "s3cret-pass",
        "confirmPassword": "s3cret-pass",
    })
    assert resp.status_code == 201, resp.text

    resp = client.post("/login", json={"email": "alice@example.com", "password": "s3cret-pass"})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    data["headers"] = {"Authorization": f"Bearer {data['token']}"}
    return data
