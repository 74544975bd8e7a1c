import pytest
from httpx import AsyncClient

from app.utils.security import create_tokens

pytestmark = pytest.mark.asyncio


class TestLogin:
    """Tests for login endpoints."""

    async def test_login_success(self, client: AsyncClient, student_user):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "student@example.com", "password": "TestPass123"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["refresh_token"]

        me = await client.get(
            "/api/v1/users/me",
            headers={"Authorization": f"Bearer {data['access_token']}"},
        )
        assert me.json()["last_login_at"] is not None

    async def test_login_wrong_password(self, client: AsyncClient, student_user):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "student@example.com", "password": "nope"},
        )
        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    async def test_login_unknown_email(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "ghost@example.com", "password": "TestPass123"},
        )
        assert response.status_code == 401

    async def test_oauth2_token_form(self, client: AsyncClient, teacher_user):
        response = await client.post(
            "/api/v1/auth/token",
            data={"username": "teacher@example.com", "password": "TestPass123"},
        )
        assert response.status_code == 200
        assert response.json()["access_token"]


class TestRefresh:
    async def test_refresh_success(self, client: AsyncClient, student_user):
        _, refresh_token = create_tokens(student_user.id, student_user.role.value)
        response = await client.post(
            "/api/v1/auth/refresh", json={"refresh_token": refresh_token}
        )
        assert response.status_code == 200
        assert response.json()["access_token"]

    async def test_access_token_cannot_refresh(self, client: AsyncClient, student_user):
        access_token, _ = create_tokens(student_user.id, student_user.role.value)
        response = await client.post(
            "/api/v1/auth/refresh", json={"refresh_token": access_token}
        )
        assert response.status_code == 401

    async def test_garbage_token(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/users/me", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401


class TestHealth:
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["app_name"] == "seminar-scheduler"
