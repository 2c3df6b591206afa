"""
Test suite for the project store and its HTTP endpoints.

Tests:
- create / read / list / update (upsert) / delete
- title validation and uniqueness
- optimistic version check on task-collection writes
- per-group route auth switch

Run: pytest taskboard/test_projects.py -v
"""

from unittest.mock import patch

import pytest

from taskboard import projects
from taskboard.db import get_db_connection
from taskboard.errors import ConflictError, ValidationError
from taskboard.models import Task


class TestProjectStore:
    """Service-level project CRUD."""

    def test_create_and_get(self):
        project = projects.create_project("Website", "Relaunch the site")
        loaded = projects.get_project(project.id)
        assert loaded.title == "Website"
        assert loaded.description == "Relaunch the site"
        assert loaded.tasks == []
        assert loaded.stages[0] == "Requested"
        assert loaded.version == 0

    @pytest.mark.parametrize("title,description", [
        ("ab", "too short"),
        ("x" * 31, "too long"),
        ("Valid title", ""),
        (None, "missing title"),
        ("Valid title", None),
    ])
    def test_create_validation(self, title, description):
        with pytest.raises(ValidationError):
            projects.create_project(title, description)

    def test_title_boundaries_accepted(self):
        projects.create_project("abc", "three chars")
        projects.create_project("y" * 30, "thirty chars")

    def test_duplicate_title(self):
        projects.create_project("Website", "first")
        with pytest.raises(ConflictError):
            projects.create_project("Website", "second")

    def test_get_missing_returns_none(self):
        assert projects.get_project("does-not-exist") is None

    def test_update_existing(self):
        project = projects.create_project("Website", "first")
        result = projects.update_project(project.id, "Website v2", "second")
        assert result.matchedCount == 1
        assert result.modifiedCount == 1
        assert result.upsertedId is None

        loaded = projects.get_project(project.id)
        assert (loaded.title, loaded.description) == ("Website v2", "second")

    def test_update_same_values_is_not_a_modification(self):
        project = projects.create_project("Website", "first")
        result = projects.update_project(project.id, "Website", "first")
        assert result.matchedCount == 1
        assert result.modifiedCount == 0

    def test_update_missing_upserts(self):
        result = projects.update_project("brand-new-id", "Fresh", "created by update")
        assert result.upsertedId == "brand-new-id"
        loaded = projects.get_project("brand-new-id")
        assert loaded.title == "Fresh"

    def test_update_to_taken_title(self):
        projects.create_project("Website", "first")
        other = projects.create_project("Mobile", "second")
        with pytest.raises(ConflictError):
            projects.update_project(other.id, "Website", "second")

    def test_update_keeps_tasks(self):
        from taskboard import board

        project = projects.create_project("Website", "first")
        board.add_task(project.id, "Design", "Mockups")
        projects.update_project(project.id, "Website v2", "second")
        assert len(projects.get_project(project.id).tasks) == 1

    def test_delete_is_idempotent(self):
        project = projects.create_project("Website", "first")
        assert projects.delete_project(project.id).deletedCount == 1
        assert projects.delete_project(project.id).deletedCount == 0
        assert projects.delete_project("never-existed").deletedCount == 0

    def test_list_excludes_tasks(self):
        projects.create_project("Website", "first")
        projects.create_project("Mobile", "second")
        listed = [p.public(include_tasks=False) for p in projects.list_projects()]
        assert sorted(p["title"] for p in listed) == ["Mobile", "Website"]
        for item in listed:
            assert "tasks" not in item
            assert "version" not in item
            assert set(item) == {"_id", "title", "description", "createdAt"}


class TestVersionCheck:
    """Task-collection writes only land on the version they were read at."""

    def test_stale_version_conflicts(self):
        project = projects.create_project("Website", "first")
        task = Task(title="Design", description="Mockups", stage="Requested", order=0, index=0)

        with get_db_connection() as conn:
            projects.save_tasks(conn, project, [task])
            conn.commit()

        # `project` still carries version 0
        with get_db_connection() as conn:
            with pytest.raises(ConflictError):
                projects.save_tasks(conn, project, [])

        assert len(projects.get_project(project.id).tasks) == 1

    def test_save_bumps_version(self):
        project = projects.create_project("Website", "first")
        with get_db_connection() as conn:
            saved = projects.save_tasks(conn, project, [])
            conn.commit()
        assert saved.version == 1
        assert projects.get_project(project.id).version == 1


class TestProjectRoutes:
    """HTTP surface for /projects and /project/{id}."""

    def test_create_route_shape(self, client):
        resp = client.post("/project", json={"title": "Website", "description": "Relaunch"})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert set(data) == {"title", "description", "updatedAt", "_id"}
        assert data["title"] == "Website"

    def test_create_route_validation(self, client):
        resp = client.post("/project", json={"title": "ab", "description": "Relaunch"})
        assert resp.status_code == 422
        assert resp.json()["error"] is True

    def test_create_route_duplicate(self, client):
        client.post("/project", json={"title": "Website", "description": "Relaunch"})
        resp = client.post("/project", json={"title": "Website", "description": "Again"})
        assert resp.status_code == 422
        assert resp.json()["message"] == "title must be unique"

    def test_get_route(self, client):
        created = client.post("/project", json={"title": "Website", "description": "Relaunch"}).json()["data"]
        resp = client.get(f"/project/{created['_id']}")
        assert resp.status_code == 200
        body = resp.json()
        assert len(body) == 1
        assert body[0]["_id"] == created["_id"]
        assert body[0]["tasks"] == []

    def test_get_route_unknown_is_empty(self, client):
        resp = client.get("/project/unknown")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_list_route(self, client):
        client.post("/project", json={"title": "Website", "description": "Relaunch"})
        resp = client.get("/projects")
        assert resp.status_code == 200
        assert [p["title"] for p in resp.json()] == ["Website"]
        assert "tasks" not in resp.json()[0]

    def test_put_route_upsert(self, client):
        resp = client.put("/project/abc123", json={"title": "Upserted", "description": "Via PUT"})
        assert resp.status_code == 200
        assert resp.json()["upsertedId"] == "abc123"

    def test_put_route_validation(self, client):
        resp = client.put("/project/abc123", json={"title": "Upserted"})
        assert resp.status_code == 422

    def test_delete_route(self, client):
        created = client.post("/project", json={"title": "Website", "description": "Relaunch"}).json()["data"]
        first = client.delete(f"/project/{created['_id']}")
        second = client.delete(f"/project/{created['_id']}")
        assert first.status_code == second.status_code == 200
        assert first.json()["deletedCount"] == 1
        assert second.json()["deletedCount"] == 0


class TestRouteAuthSwitch:
    """Route groups are public until switched on."""

    def test_projects_public_by_default(self, client):
        assert client.get("/projects").status_code == 200

    def test_projects_require_token_when_enabled(self, client, registered_user):
        with patch.dict("taskboard.config.ROUTE_AUTH", {"projects": True}):
            assert client.get("/projects").status_code == 401
            assert client.get("/projects", headers=registered_user["headers"]).status_code == 200

    def test_switch_is_per_group(self, client):
        created = client.post("/project", json={"title": "Website", "description": "Relaunch"}).json()["data"]
        with patch.dict("taskboard.config.ROUTE_AUTH", {"tasks": True}):
            assert client.get("/projects").status_code == 200
            resp = client.post(f"/project/{created['_id']}/task", json={"title": "Design", "description": "x"})
            assert resp.status_code == 401

    def test_revoked_token_rejected_on_protected_group(self, client, registered_user):
        headers = registered_user["headers"]
        client.post("/logout", headers=headers)
        with patch.dict("taskboard.config.ROUTE_AUTH", {"board": True}):
            resp = client.put("/project/any/todo", json={}, headers=headers)
            assert resp.status_code == 401
