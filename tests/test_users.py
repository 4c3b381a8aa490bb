"""Legajos - User Management Tests"""

from uuid import uuid4

import pytest
from httpx import AsyncClient

NEW_USER = {
    "firstName": "Ana",
    "lastName": "Gómez",
    "email": "Ana.Gomez@Example.com",
    "password": "password123",
    "role": "CONSULTANT",
}


@pytest.mark.asyncio
class TestUserAdministration:
    """Admin-only user management."""

    async def test_create_user(self, client: AsyncClient, admin_headers):
        response = await client.post("/api/users", json=NEW_USER, headers=admin_headers)
        assert response.status_code == 201
        user = response.json()["user"]
        assert user["email"] == "ana.gomez@example.com"
        assert user["role"] == "CONSULTANT"
        assert user["isActive"] is True
        assert "password" not in user and "passwordHash" not in user

    async def test_created_user_can_login(self, client: AsyncClient, admin_headers):
        await client.post("/api/users", json=NEW_USER, headers=admin_headers)
        response = await client.post(
            "/api/auth/login", json={"email": "ana.gomez@example.com", "password": "password123"}
        )
        assert response.status_code == 200

    async def test_duplicate_email_conflict(self, client: AsyncClient, admin_headers):
        first = await client.post("/api/users", json=NEW_USER, headers=admin_headers)
        assert first.status_code == 201
        second = await client.post("/api/users", json=NEW_USER, headers=admin_headers)
        assert second.status_code == 409
        assert second.json()["error"] == "Conflict"

    async def test_create_user_validation(self, client: AsyncClient, admin_headers):
        response = await client.post(
            "/api/users",
            json={**NEW_USER, "password": "corta", "email": "sin-arroba"},
            headers=admin_headers,
        )
        assert response.status_code == 400
        paths = {d["path"] for d in response.json()["details"]}
        assert "password" in paths
        assert "email" in paths

    async def test_list_users(self, client: AsyncClient, admin_headers, operator_user):
        response = await client.get("/api/users", headers=admin_headers)
        assert response.status_code == 200
        emails = {u["email"] for u in response.json()["users"]}
        assert {"admin@example.com", "operator@example.com"} <= emails

    async def test_update_user(self, client: AsyncClient, admin_headers, operator_user):
        response = await client.patch(
            f"/api/users/{operator_user.id}",
            json={"role": "ADMIN", "isActive": False},
            headers=admin_headers,
        )
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["role"] == "ADMIN"
        assert user["isActive"] is False

    async def test_reset_password(self, client: AsyncClient, admin_headers, operator_user):
        response = await client.post(
            f"/api/users/{operator_user.id}/reset-password",
            json={"newPassword": "reseteada123"},
            headers=admin_headers,
        )
        assert response.status_code == 204
        login = await client.post(
            "/api/auth/login", json={"email": "operator@example.com", "password": "reseteada123"}
        )
        assert login.status_code == 200

    async def test_delete_user(self, client: AsyncClient, admin_headers, operator_user):
        user_id = operator_user.id
        response = await client.delete(f"/api/users/{user_id}", headers=admin_headers)
        assert response.status_code == 204

        missing = await client.delete(f"/api/users/{user_id}", headers=admin_headers)
        assert missing.status_code == 404

    async def test_cannot_delete_self(self, client: AsyncClient, admin_user, admin_headers):
        response = await client.delete(f"/api/users/{admin_user.id}", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "No puedes eliminar tu propia cuenta"

    async def test_update_unknown_user(self, client: AsyncClient, admin_headers):
        response = await client.patch(f"/api/users/{uuid4()}", json={"role": "ADMIN"}, headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Usuario no encontrado"


@pytest.mark.asyncio
class TestUserAccessControl:
    """Only administrators manage accounts."""

    async def test_operator_forbidden(self, client: AsyncClient, operator_headers):
        response = await client.get("/api/users", headers=operator_headers)
        assert response.status_code == 403
        assert response.json() == {"error": "Forbidden", "message": "Acceso denegado"}

    async def test_consultant_forbidden(self, client: AsyncClient, consultant_headers):
        response = await client.post("/api/users", json=NEW_USER, headers=consultant_headers)
        assert response.status_code == 403

    async def test_me_available_to_every_role(self, client: AsyncClient, consultant_headers):
        response = await client.get("/api/users/me", headers=consultant_headers)
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "consultant@example.com"
