from datetime import date

import pytest
from httpx import AsyncClient

from app.models.user import Role

pytestmark = pytest.mark.asyncio


class TestDashboardStats:
    async def test_student(
        self, client: AsyncClient, teacher_headers, student_headers, test_seminar, roster, student_user
    ):
        await client.post(
            f"/api/v1/attendance/class/{test_seminar.id}",
            headers=teacher_headers,
            json={
                "date": date.today().isoformat(),
                "records": [{"student_id": student_user.id, "status": "present"}],
            },
        )

        response = await client.get("/api/v1/dashboard/stats", headers=student_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "student"
        assert data["stats"] == {
            "enrolled_classes": 1,
            "completed_classes": 0,
            "upcoming_classes": 1,
            "total_credits": 2.0,
        }

    async def test_teacher(self, client: AsyncClient, teacher_headers, test_seminar, roster):
        response = await client.get("/api/v1/dashboard/stats", headers=teacher_headers)
        stats = response.json()["stats"]
        assert stats["total_classes"] == 1
        assert stats["total_students"] == 2
        assert stats["active_classes"] == 1
        assert stats["average_rating"] == 0.0

    async def test_counselor(self, client: AsyncClient, counselor_headers, roster):
        response = await client.get("/api/v1/dashboard/stats", headers=counselor_headers)
        assert response.json()["stats"] == {"active_students": 2, "attendance_rate": 0}

    async def test_admin(self, client: AsyncClient, admin_headers, student_user, teacher_user):
        response = await client.get("/api/v1/dashboard/stats", headers=admin_headers)
        stats = response.json()["stats"]
        assert stats["total_users"] == 3
        assert stats["users_by_role"] == {"student": 1, "teacher": 1, "admin": 1}

    async def test_specialist(
        self, client: AsyncClient, test_seminar, roster, create_test_user, make_headers
    ):
        specialist = await create_test_user("spec@example.com", "Sky Specialist", Role.SPECIALIST)
        response = await client.get(
            "/api/v1/dashboard/stats", headers=make_headers(specialist)
        )
        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "specialist"
        assert data["stats"] == {"active_students": 2, "active_classes": 1}
