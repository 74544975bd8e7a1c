import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification, NotificationType
from app.models.profile import UserProfile
from app.models.user import Role
from app.schemas.profile import build_profile_details

pytestmark = pytest.mark.asyncio


class TestCurrentUser:
    async def test_get_me(self, client: AsyncClient, student_user, student_headers):
        response = await client.get("/api/v1/users/me", headers=student_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "student@example.com"
        assert data["display_name"] == "Sam Student"
        assert data["role"] == "student"

    async def test_get_me_unauthenticated(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me")
        assert response.status_code == 401

    async def test_update_me(self, client: AsyncClient, student_headers):
        response = await client.put(
            "/api/v1/users/me",
            headers=student_headers,
            json={"display_name": "Samantha"},
        )
        assert response.status_code == 200
        assert response.json()["display_name"] == "Samantha"

    async def test_profile_missing(self, client: AsyncClient, student_headers):
        response = await client.get("/api/v1/users/me/profile", headers=student_headers)
        assert response.status_code == 404

    async def test_profile(
        self, client: AsyncClient, db_session: AsyncSession, teacher_user, teacher_headers
    ):
        await UserProfile.create_profile(
            db_session,
            user_id=teacher_user.id,
            role=Role.TEACHER,
            details=build_profile_details(Role.TEACHER, {"employeeId": "E-7"}),
            department="Science",
        )
        response = await client.get("/api/v1/users/me/profile", headers=teacher_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["department"] == "Science"
        assert data["details"]["employee_id"] == "E-7"
        assert data["details"]["teaching_subjects"] == []


class TestListByRole:
    async def test_staff_lists_students_by_name(
        self, client: AsyncClient, teacher_headers, student_user, second_student
    ):
        response = await client.get(
            "/api/v1/users/", headers=teacher_headers, params={"role": "student"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert [u["display_name"] for u in data["items"]] == ["Alex Second", "Sam Student"]

    async def test_student_forbidden(self, client: AsyncClient, student_headers):
        response = await client.get(
            "/api/v1/users/", headers=student_headers, params={"role": "student"}
        )
        assert response.status_code == 403


class TestRoleChange:
    async def test_admin_changes_role(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        admin_headers,
        student_user,
    ):
        response = await client.put(
            f"/api/v1/users/{student_user.id}/role",
            headers=admin_headers,
            json={"role": "specialist"},
        )
        assert response.status_code == 200
        assert response.json()["role"] == "specialist"

        notifications = await Notification.get_for_user(db_session, student_user.id)
        assert [n.type for n in notifications] == ["role_change"]

    async def test_non_admin_forbidden(
        self, client: AsyncClient, teacher_headers, student_user
    ):
        response = await client.put(
            f"/api/v1/users/{student_user.id}/role",
            headers=teacher_headers,
            json={"role": "admin"},
        )
        assert response.status_code == 403

    async def test_invalid_role(self, client: AsyncClient, admin_headers, student_user):
        response = await client.put(
            f"/api/v1/users/{student_user.id}/role",
            headers=admin_headers,
            json={"role": "principal"},
        )
        assert response.status_code == 422


class TestNotifications:
    async def test_list_and_mark_read(
        self, client: AsyncClient, db_session: AsyncSession, student_user, student_headers
    ):
        notification = await Notification.create_notification(
            db_session,
            user_id=student_user.id,
            type=NotificationType.ENROLLMENT,
            title="Enrolled",
            message="You are in.",
        )

        listed = await client.get("/api/v1/notifications/", headers=student_headers)
        assert listed.json()["unread"] == 1

        marked = await client.post(
            f"/api/v1/notifications/{notification.id}/read", headers=student_headers
        )
        assert marked.status_code == 200
        assert marked.json()["read"] is True

        unread = await client.get(
            "/api/v1/notifications/",
            headers=student_headers,
            params={"unread_only": True},
        )
        assert unread.json() == {"items": [], "unread": 0}
