"""
Tests for environment configuration and error rendering.

Run: pytest taskboard/test_config.py -v
"""

import pytest

from taskboard.config import DEFAULT_STAGE, DEFAULT_STAGES, ROUTE_AUTH, load_secret_key
from taskboard.dependencies import require_auth_for


class TestSecretKey:

    def test_missing_secret_fails(self, monkeypatch):
        monkeypatch.delenv("SECRET_KEY", raising=False)
        with pytest.raises(RuntimeError):
            load_secret_key()

    def test_blank_secret_fails(self, monkeypatch):
        monkeypatch.setenv("SECRET_KEY", "   ")
        with pytest.raises(RuntimeError):
            load_secret_key()

    def test_secret_is_read(self, monkeypatch):
        monkeypatch.setenv("SECRET_KEY", " abc123 ")
        assert load_secret_key() == "abc123"


class TestDefaults:

    def test_route_groups(self):
        assert set(ROUTE_AUTH) == {"projects", "tasks", "board"}

    def test_default_layout_starts_with_requested(self):
        assert DEFAULT_STAGE in DEFAULT_STAGES

    def test_unknown_route_group(self):
        with pytest.raises(KeyError):
            require_auth_for("billing")


class TestErrorRendering:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_unknown_route_uses_error_shape(self, client):
        resp = client.get("/definitely/not/here")
        assert resp.status_code == 404
        assert resp.json()["error"] is True

    def test_store_error_is_500(self, client):
        from unittest.mock import patch

        from taskboard.errors import StoreError

        with patch("taskboard.projects.list_projects", side_effect=StoreError("Database error")):
            resp = client.get("/projects")
        assert resp.status_code == 500
        assert resp.json() == {"error": True, "message": "Database error"}
