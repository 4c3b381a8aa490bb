"""Legajos - Authentication Tests"""

import pytest
from httpx import AsyncClient

from tests.factories import DEFAULT_PASSWORD as PASSWORD


@pytest.mark.asyncio
class TestLogin:
    """Test the login endpoint."""

    async def test_login_success(self, client: AsyncClient, operator_user):
        """Test successful login returns a token and the user summary."""
        response = await client.post(
            "/api/auth/login",
            json={"email": "OPERATOR@example.com ", "password": PASSWORD},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["accessToken"]
        assert data["user"]["email"] == "operator@example.com"
        assert data["user"]["role"] == "OPERATOR"
        assert "passwordHash" not in data["user"]

    async def test_login_sets_last_login(self, client: AsyncClient, operator_user, admin_headers):
        await client.post("/api/auth/login", json={"email": "operator@example.com", "password": PASSWORD})

        response = await client.get("/api/users", headers=admin_headers)
        operator = next(u for u in response.json()["users"] if u["email"] == "operator@example.com")
        assert operator["lastLoginAt"] is not None

    async def test_login_wrong_password(self, client: AsyncClient, operator_user):
        response = await client.post(
            "/api/auth/login",
            json={"email": "operator@example.com", "password": "wrongpassword"},
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized", "message": "Credenciales inválidas"}

    async def test_login_unknown_and_inactive_look_the_same(self, client: AsyncClient, inactive_user):
        """Unknown accounts and inactive accounts get the same answer."""
        unknown = await client.post(
            "/api/auth/login",
            json={"email": "nobody@example.com", "password": PASSWORD},
        )
        inactive = await client.post(
            "/api/auth/login",
            json={"email": "inactive@example.com", "password": PASSWORD},
        )
        assert unknown.status_code == inactive.status_code == 401
        assert unknown.json() == inactive.json()

    async def test_login_validation(self, client: AsyncClient):
        response = await client.post("/api/auth/login", json={"email": "not-an-email", "password": "short"})
        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "ValidationError"
        paths = {d["path"] for d in data["details"]}
        assert {"email", "password"} <= paths


@pytest.mark.asyncio
class TestBearerTokens:
    """Test token handling on protected routes."""

    async def test_me_authenticated(self, client: AsyncClient, consultant_headers):
        response = await client.get("/api/users/me", headers=consultant_headers)
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "CONSULTANT"

    async def test_missing_token(self, client: AsyncClient):
        response = await client.get("/api/users/me")
        assert response.status_code == 401
        assert response.json()["message"] == "No autorizado"

    async def test_malformed_token(self, client: AsyncClient):
        response = await client.get("/api/users/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["message"] == "Token inválido"

    async def test_expired_token(self, client: AsyncClient, operator_user):
        from datetime import timedelta

        from api.auth import create_access_token

        token = create_access_token({"sub": str(operator_user.id)}, expires_delta=timedelta(seconds=-1))
        response = await client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "Token inválido"

    async def test_inactive_user_token_rejected(self, client: AsyncClient, inactive_user):
        from api.auth import create_user_token

        headers = {"Authorization": f"Bearer {create_user_token(inactive_user)}"}
        response = await client.get("/api/users/me", headers=headers)
        assert response.status_code == 401
        assert response.json()["message"] == "Cuenta inactiva o inexistente"


@pytest.mark.asyncio
class TestChangePassword:
    async def test_change_password(self, client: AsyncClient, operator_user, operator_headers):
        response = await client.post(
            "/api/auth/change-password",
            json={"currentPassword": PASSWORD, "newPassword": "newpassword456"},
            headers=operator_headers,
        )
        assert response.status_code == 204

        old = await client.post("/api/auth/login", json={"email": "operator@example.com", "password": PASSWORD})
        assert old.status_code == 401
        new = await client.post(
            "/api/auth/login", json={"email": "operator@example.com", "password": "newpassword456"}
        )
        assert new.status_code == 200

    async def test_wrong_current_password(self, client: AsyncClient, operator_headers):
        response = await client.post(
            "/api/auth/change-password",
            json={"currentPassword": "incorrect1", "newPassword": "newpassword456"},
            headers=operator_headers,
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Contraseña actual incorrecta"

    async def test_new_password_must_differ(self, client: AsyncClient, operator_headers):
        response = await client.post(
            "/api/auth/change-password",
            json={"currentPassword": PASSWORD, "newPassword": PASSWORD},
            headers=operator_headers,
        )
        assert response.status_code == 400


class TestPasswordHashing:
    """Unit tests for password helpers."""

    def test_hash_and_verify(self):
        from api.auth import get_password_hash, verify_password

        hashed = get_password_hash("secreto123")
        assert hashed != "secreto123"
        assert verify_password("secreto123", hashed)
        assert not verify_password("otro12345", hashed)

    def test_token_round_trip(self):
        from api.auth import create_access_token, decode_access_token

        token = create_access_token({"sub": "abc", "email": "a@b.com", "role": "ADMIN"})
        data = decode_access_token(token)
        assert data.user_id == "abc"
        assert data.role == "ADMIN"
