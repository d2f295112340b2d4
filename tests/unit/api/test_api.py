"""Tests for the HTTP API."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from gatekeeper.api.main import create_app
from gatekeeper.api.security import create_access_token, decode_actor
from gatekeeper.core.config import Settings
from gatekeeper.core.rbac import Actor, ActorType


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        secret_key="test-secret-key",
        log_dir=str(tmp_path / "logs"),
        audit_redis_enabled=False,
    )


@pytest.fixture
def client(settings, gatekeeper):
    app = create_app(settings, gatekeeper=gatekeeper)
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(settings, actor_id):
    token = create_access_token(Actor(id=actor_id), settings)
    return {"Authorization": f"Bearer {token}"}


class TestTokens:
    """Test token creation and decoding."""

    def test_round_trip_keeps_actor_type(self, settings):
        token = create_access_token(Actor(id=5, type=ActorType.SERVICE), settings)
        actor = decode_actor(token, settings)
        assert actor.id == "5"
        assert actor.type == ActorType.SERVICE

    def test_expired_token(self, settings):
        token = create_access_token(Actor(id=5), settings, expires_delta=timedelta(minutes=-1))
        assert decode_actor(token, settings) is None

    def test_wrong_key(self, settings):
        token = create_access_token(Actor(id=5), settings)
        other = Settings(_env_file=None, secret_key="another-key")
        assert decode_actor(token, other) is None


class TestAuthentication:
    """Test bearer authentication."""

    def test_health_needs_no_token(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_missing_token(self, client):
        assert client.get("/api/roles").status_code == 401

    def test_invalid_token(self, client):
        response = client.get("/api/roles", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401


class TestUsersApi:
    """Test the users endpoints."""

    def test_basic_user_cannot_see_age(self, client, settings):
        response = client.get("/api/users/2", headers=auth_headers(settings, 1))
        assert response.status_code == 200
        body = response.json()
        assert body["first_name"] == "Admin"
        assert "age" not in body

    def test_admin_sees_age(self, client, settings):
        response = client.get("/api/users/1", headers=auth_headers(settings, 2))
        assert response.json()["age"] == 18

    def test_list_users(self, client, settings):
        response = client.get("/api/users", headers=auth_headers(settings, 1))
        body = response.json()
        assert body["length"] == 2
        assert all("age" not in user for user in body["data"])

    def test_unknown_actor_is_forbidden(self, client, settings):
        response = client.get("/api/users/1", headers=auth_headers(settings, 99))
        assert response.status_code == 403
        assert response.json()["error"] == "authorization_denied"

    def test_user_roles(self, client, settings):
        headers = auth_headers(settings, 2)
        response = client.post("/api/users/1/roles", json={"id": "admin"}, headers=headers)
        assert response.status_code == 201
        assert sorted(r["id"] for r in response.json()["roles"]) == ["admin", "user"]

        response = client.delete("/api/users/1/roles/admin", headers=headers)
        assert [r["id"] for r in response.json()["roles"]] == ["user"]

        response = client.get("/api/users/1/roles", headers=headers)
        assert [r["id"] for r in response.json()] == ["user"]

    def test_create_update_delete_user(self, client, settings):
        headers = auth_headers(settings, 2)
        response = client.post(
            "/api/users",
            json={"first_name": "New", "last_name": "Person", "age": 40, "roles": [{"id": "user"}]},
            headers=headers,
        )
        assert response.status_code == 201
        user_id = response.json()["id"]

        response = client.put(f"/api/users/{user_id}", json={"age": 41}, headers=headers)
        assert response.json()["age"] == 41
        assert response.json()["first_name"] == "New"

        assert client.delete(f"/api/users/{user_id}", headers=headers).json() == {"deleted": True}

    def test_unknown_role_is_not_created(self, client, settings):
        headers = auth_headers(settings, 2)
        response = client.post("/api/users/1/roles", json={"id": "superuser"}, headers=headers)
        assert response.status_code == 404
        assert client.get("/api/roles/superuser", headers=headers).status_code == 404

    def test_basic_user_cannot_create_users(self, client, settings):
        response = client.post(
            "/api/users", json={"first_name": "New", "last_name": "Person"}, headers=auth_headers(settings, 1),
        )
        assert response.status_code == 403


class TestRolesApi:
    """Test the roles endpoints."""

    def test_basic_user_is_forbidden(self, client, settings):
        response = client.get("/api/roles", headers=auth_headers(settings, 1))
        assert response.status_code == 403

    def test_missing_role(self, client, settings):
        response = client.get("/api/roles/ghost", headers=auth_headers(settings, 2))
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_create_update_delete(self, client, settings):
        headers = auth_headers(settings, 2)
        response = client.post("/api/roles", json={"id": "auditor", "description": "Reads"}, headers=headers)
        assert response.status_code == 201
        assert response.json()["id"] == "auditor"

        response = client.put("/api/roles/auditor", json={"description": "Reads roles"}, headers=headers)
        assert response.json()["description"] == "Reads roles"

        response = client.delete("/api/roles/auditor", headers=headers)
        assert response.json() == {"deleted": True}
        assert client.get("/api/roles/auditor", headers=headers).status_code == 404

    def test_role_permissions(self, client, settings):
        headers = auth_headers(settings, 2)
        response = client.post(
            "/api/roles/user/permissions",
            json={"resource": "role", "action": "read:any", "attributes": "id"},
            headers=headers,
        )
        assert response.status_code == 201
        added = [p for p in response.json()["permissions"] if p["resource"] == "role"]
        assert len(added) == 1

        # The basic user may now list roles, reduced to their ids
        response = client.get("/api/roles", headers=auth_headers(settings, 1))
        assert response.status_code == 200
        assert all(set(role) == {"id"} for role in response.json()["data"])

        response = client.delete(f"/api/roles/user/permissions/{added[0]['id']}", headers=headers)
        assert all(p["resource"] != "role" for p in response.json()["permissions"])
        assert client.get("/api/roles", headers=auth_headers(settings, 1)).status_code == 403

    def test_invalid_payload(self, client, settings):
        response = client.post(
            "/api/roles/user/permissions",
            json={"resource": "", "action": "read"},
            headers=auth_headers(settings, 2),
        )
        assert response.status_code == 422


class TestGoalsApi:
    """Test the goals endpoints."""

    def test_goal_lifecycle(self, client, settings):
        headers = auth_headers(settings, 2)
        response = client.post(
            "/api/goals",
            json={"key": "signup", "name": "Sign up", "start": "2024-01-01T00:00:00Z"},
            headers=headers,
        )
        assert response.status_code == 201
        goal = response.json()
        assert goal["hits"] == 0
        assert goal["start"].startswith("2024-01-01T00:00:00")

        response = client.put(f"/api/goals/{goal['id']}", json={"hits": 3, "deleted": True}, headers=headers)
        assert response.json()["hits"] == 3
        assert response.json()["deleted"] is True

        assert client.get("/api/goals", headers=headers).json()["total"] == 1
        assert client.delete(f"/api/goals/{goal['id']}", headers=headers).json() == {"deleted": True}
        assert client.get(f"/api/goals/{goal['id']}", headers=headers).status_code == 404

    def test_basic_user_cannot_read_goals(self, client, settings):
        assert client.get("/api/goals", headers=auth_headers(settings, 1)).status_code == 403

    def test_negative_counter_rejected(self, client, settings):
        response = client.post(
            "/api/goals", json={"key": "k", "name": "n", "hits": -1}, headers=auth_headers(settings, 2),
        )
        assert response.status_code == 422
