"""Tests for admin user management endpoints."""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from taskflow.models.task import Task
from taskflow.scripts.create_user import create_user


def _add_task(db_session: Session, user_id: int, title: str, status: str = "pending") -> None:
    db_session.add(Task(user_id=user_id, title=title, status=status))
    db_session.commit()


class TestAdminAccess:
    """Role gate on admin routes."""

    def test_non_admin_forbidden(self, client: TestClient, test_user: dict, other_user: dict):
        for method, path in [
            ("get", "/api/v1/admin/stats"),
            ("get", "/api/v1/admin/users"),
            ("get", f"/api/v1/admin/users/{other_user['user_id']}"),
            ("put", f"/api/v1/admin/users/{other_user['user_id']}/deactivate"),
            ("put", f"/api/v1/admin/users/{other_user['user_id']}/activate"),
            ("delete", f"/api/v1/admin/users/{other_user['user_id']}"),
        ]:
            response = client.request(method, path, headers=test_user["headers"])
            assert response.status_code == 403, path
            assert response.json()["success"] is False

    def test_role_change_rejected_for_non_admin(self, client: TestClient, test_user: dict):
        response = client.put(
            f"/api/v1/admin/users/{test_user['user_id']}/role",
            json={"role": "admin"},
            headers=test_user["headers"],
        )
        assert response.status_code == 403

    def test_unauthenticated(self, client: TestClient):
        assert client.get("/api/v1/admin/users").status_code == 401

    def test_demoted_admin_loses_access_immediately(
        self, client: TestClient, admin_user: dict, db_session: Session
    ):
        """A role downgrade applies to an access token minted before it."""
        create_user(db_session, "Second Admin", "admin2@example.com", "adminpass2", role="admin")
        login = client.post("/api/v1/auth/login", json={"email": "admin2@example.com", "password": "adminpass2"})
        second_admin_headers = {"Authorization": f"Bearer {login.json()['data']['accessToken']}"}

        assert client.get("/api/v1/admin/users", headers=admin_user["headers"]).status_code == 200
        response = client.put(
            f"/api/v1/admin/users/{admin_user['user_id']}/role",
            json={"role": "user"},
            headers=second_admin_headers,
        )
        assert response.status_code == 200

        assert client.get("/api/v1/admin/users", headers=admin_user["headers"]).status_code == 403


class TestUserManagement:
    """Listing, inspecting and changing users."""

    def test_list_users(self, client: TestClient, admin_user: dict, test_user: dict, other_user: dict):
        response = client.get("/api/v1/admin/users", headers=admin_user["headers"])
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["pagination"] == {"page": 1, "limit": 10, "total": 3, "pages": 1}
        emails = {u["email"] for u in data["users"]}
        assert emails == {"admin@example.com", "test@example.com", "other@example.com"}
        for user in data["users"]:
            assert "passwordHash" not in user
            assert "refreshToken" not in user

    def test_list_users_filters(self, client: TestClient, admin_user: dict, test_user: dict, other_user: dict):
        by_role = client.get("/api/v1/admin/users?role=admin", headers=admin_user["headers"]).json()["data"]
        assert [u["email"] for u in by_role["users"]] == ["admin@example.com"]

        by_search = client.get("/api/v1/admin/users?search=OTHER", headers=admin_user["headers"]).json()["data"]
        assert [u["email"] for u in by_search["users"]] == ["other@example.com"]

        underscore = client.get("/api/v1/admin/users?search=_", headers=admin_user["headers"]).json()["data"]
        assert underscore["users"] == []

        paged = client.get("/api/v1/admin/users?page=2&limit=2", headers=admin_user["headers"]).json()["data"]
        assert len(paged["users"]) == 1
        assert paged["pagination"]["pages"] == 2

    def test_get_user_with_task_count(
        self, client: TestClient, admin_user: dict, test_user: dict, db_session: Session
    ):
        _add_task(db_session, test_user["user_id"], "One")
        _add_task(db_session, test_user["user_id"], "Two")
        response = client.get(f"/api/v1/admin/users/{test_user['user_id']}", headers=admin_user["headers"])
        assert response.status_code == 200
        assert response.json()["data"]["taskCount"] == 2

    def test_get_unknown_user(self, client: TestClient, admin_user: dict):
        response = client.get("/api/v1/admin/users/9999", headers=admin_user["headers"])
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "User not found"}

    def test_update_role(self, client: TestClient, admin_user: dict, test_user: dict):
        response = client.put(
            f"/api/v1/admin/users/{test_user['user_id']}/role",
            json={"role": "admin"},
            headers=admin_user["headers"],
        )
        assert response.status_code == 200
        assert response.json()["data"]["role"] == "admin"
        assert client.get("/api/v1/admin/stats", headers=test_user["headers"]).status_code == 200

    def test_update_role_invalid(self, client: TestClient, admin_user: dict, test_user: dict):
        response = client.put(
            f"/api/v1/admin/users/{test_user['user_id']}/role",
            json={"role": "superuser"},
            headers=admin_user["headers"],
        )
        assert response.status_code == 400


class TestActivation:
    """Deactivation, activation and deletion."""

    def test_deactivate_revokes_sessions(self, client: TestClient, admin_user: dict, test_user: dict):
        response = client.put(f"/api/v1/admin/users/{test_user['user_id']}/deactivate", headers=admin_user["headers"])
        assert response.status_code == 200

        assert client.get("/api/v1/auth/me", headers=test_user["headers"]).status_code == 401
        refresh = client.post("/api/v1/auth/refresh-token", json={"refreshToken": test_user["refresh_token"]})
        assert refresh.status_code == 401
        login = client.post("/api/v1/auth/login", json={"email": "test@example.com", "password": "password123"})
        assert login.status_code == 401
        assert "deactivated" in login.json()["message"]

    def test_activate(self, client: TestClient, admin_user: dict, test_user: dict):
        client.put(f"/api/v1/admin/users/{test_user['user_id']}/deactivate", headers=admin_user["headers"])
        response = client.put(f"/api/v1/admin/users/{test_user['user_id']}/activate", headers=admin_user["headers"])
        assert response.status_code == 200
        login = client.post("/api/v1/auth/login", json={"email": "test@example.com", "password": "password123"})
        assert login.status_code == 200

    def test_cannot_deactivate_self(self, client: TestClient, admin_user: dict):
        response = client.put(f"/api/v1/admin/users/{admin_user['user_id']}/deactivate", headers=admin_user["headers"])
        assert response.status_code == 400
        assert response.json()["message"] == "Cannot deactivate your own account"

    def test_cannot_delete_self(self, client: TestClient, admin_user: dict):
        response = client.delete(f"/api/v1/admin/users/{admin_user['user_id']}", headers=admin_user["headers"])
        assert response.status_code == 400
        assert response.json()["message"] == "Cannot delete your own account"

    def test_delete_cascades_tasks(
        self, client: TestClient, admin_user: dict, test_user: dict, other_user: dict, db_session: Session
    ):
        _add_task(db_session, test_user["user_id"], "Doomed")
        _add_task(db_session, other_user["user_id"], "Survivor")

        response = client.delete(f"/api/v1/admin/users/{test_user['user_id']}", headers=admin_user["headers"])
        assert response.status_code == 200

        assert db_session.query(Task).filter(Task.user_id == test_user["user_id"]).count() == 0
        assert db_session.query(Task).filter(Task.user_id == other_user["user_id"]).count() == 1
        assert client.get(f"/api/v1/admin/users/{test_user['user_id']}", headers=admin_user["headers"]).status_code == 404


class TestStats:
    """Admin dashboard statistics."""

    def test_stats(self, client: TestClient, admin_user: dict, test_user: dict, db_session: Session):
        _add_task(db_session, test_user["user_id"], "A", "pending")
        _add_task(db_session, test_user["user_id"], "B", "completed")
        _add_task(db_session, test_user["user_id"], "C", "completed")

        response = client.get("/api/v1/admin/stats", headers=admin_user["headers"])
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["users"] == {"total": 2, "active": 2, "admins": 1}
        assert data["tasks"] == {"total": 3, "byStatus": {"pending": 1, "completed": 2}}
        assert len(data["recentUsers"]) == 2
