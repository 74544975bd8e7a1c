"""Tests for the admin bulk user import."""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit_log import AuditLog
from app.models.notification import Notification
from app.models.profile import UserProfile
from app.models.user import Role, User
from app.services.user_import_service import UserImportService
from app.utils.security import verify_password
from core.config import config
from core.exceptions.base import BadRequestException, ForbiddenException

pytestmark = pytest.mark.asyncio

IMPORT_URL = "/api/v1/users/bulk-import"


class TestBulkImportEndpoint:
    """Tests for POST /api/v1/users/bulk-import."""

    async def test_valid_row_and_missing_fields_row(
        self, client: AsyncClient, admin_headers: dict, db_session: AsyncSession
    ):
        response = await client.post(
            IMPORT_URL,
            headers=admin_headers,
            json={
                "users": [
                    {
                        "email": "a@x.com",
                        "role": "student",
                        "displayName": "A",
                        "studentId": "S-100",
                    },
                    {"role": "teacher"},
                ]
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success_count"] == 1
        assert data["error_count"] == 1
        assert data["errors"] == [
            {
                "row": 2,
                "email": "N/A",
                "error": "Missing required fields: email, role, displayName.",
            }
        ]

        user = await User.get_by_email(db_session, "a@x.com")
        assert user is not None
        assert user.role == Role.STUDENT
        assert verify_password(config.BULK_IMPORT_DEFAULT_PASSWORD, user.hashed_password)

        profile = await UserProfile.get_by_user_id(db_session, user.id)
        assert profile.details["role"] == "student"
        assert profile.details["student_id"] == "S-100"

    async def test_non_object_row_reported_and_skipped(
        self, client: AsyncClient, admin_headers: dict, db_session: AsyncSession
    ):
        response = await client.post(
            IMPORT_URL,
            headers=admin_headers,
            json={
                "users": [
                    {"email": "ok@x.com", "role": "student", "displayName": "Ok"},
                    "garbage",
                ]
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success_count"] == 1
        assert data["error_count"] == 1
        assert data["errors"] == [
            {
                "row": 2,
                "email": "N/A",
                "error": "Missing required fields: email, role, displayName.",
            }
        ]
        assert await User.get_by_email(db_session, "ok@x.com") is not None

    async def test_invalid_role_reported(
        self, client: AsyncClient, admin_headers: dict
    ):
        response = await client.post(
            IMPORT_URL,
            headers=admin_headers,
            json={
                "users": [
                    {"email": "p@x.com", "role": "principal", "display_name": "P"},
                ]
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success_count"] == 0
        assert data["errors"][0] == {
            "row": 1,
            "email": "p@x.com",
            "error": "Invalid role: principal",
        }

    async def test_non_admin_forbidden(
        self, client: AsyncClient, teacher_headers: dict
    ):
        response = await client.post(
            IMPORT_URL,
            headers=teacher_headers,
            json={"users": [{"email": "a@x.com", "role": "student", "displayName": "A"}]},
        )
        assert response.status_code == 403

    async def test_empty_payload_rejected(
        self, client: AsyncClient, admin_headers: dict
    ):
        response = await client.post(IMPORT_URL, headers=admin_headers, json={"users": []})
        assert response.status_code == 400
        assert response.json()["error_code"] == "BAD_REQUEST"

    async def test_unauthenticated(self, client: AsyncClient):
        response = await client.post(IMPORT_URL, json={"users": []})
        assert response.status_code == 401


class TestUserImportService:
    async def test_rows_processed_in_order(
        self, db_session: AsyncSession, admin_user: User
    ):
        rows = [
            {"email": "t@x.com", "role": "teacher", "displayName": "T", "employeeId": "E1"},
            {"email": "t@x.com", "role": "teacher", "displayName": "T again"},
            {"email": "c@x.com", "role": "counselor", "display_name": "C"},
        ]
        result = await UserImportService(db_session).import_users(admin_user, rows)

        assert result.success_count == 2
        assert result.error_count == 1
        assert result.errors[0].row == 2
        assert result.errors[0].error == "User already exists"

        teacher = await User.get_by_email(db_session, "t@x.com")
        assert teacher.display_name == "T"

    async def test_completes_account_left_without_profile(
        self, db_session: AsyncSession, admin_user: User, create_test_user
    ):
        orphan = await create_test_user("orphan@x.com", "Orphan", Role.SPECIALIST)

        result = await UserImportService(db_session).import_users(
            admin_user,
            [{"email": "orphan@x.com", "role": "specialist", "displayName": "Orphan"}],
        )

        assert result.success_count == 1
        profile = await UserProfile.get_by_user_id(db_session, orphan.id)
        assert profile is not None
        assert profile.role == Role.SPECIALIST

    async def test_invalid_profile_value_is_row_error(
        self, db_session: AsyncSession, admin_user: User
    ):
        result = await UserImportService(db_session).import_users(
            admin_user,
            [
                {"email": "g@x.com", "role": "student", "displayName": "G", "gradeLevel": "ten"},
                {"email": "h@x.com", "role": "student", "displayName": "H"},
            ],
        )
        assert result.success_count == 1
        assert result.errors[0].row == 1
        assert "grade_level" in result.errors[0].error or "gradeLevel" in result.errors[0].error
        assert await User.get_by_email(db_session, "g@x.com") is None

    async def test_side_records_written(
        self, db_session: AsyncSession, admin_user: User
    ):
        await UserImportService(db_session).import_users(
            admin_user,
            [{"email": "n@x.com", "role": "student", "displayName": "N"}],
        )
        user = await User.get_by_email(db_session, "n@x.com")

        notifications = await Notification.get_for_user(db_session, user.id)
        assert [n.type for n in notifications] == ["welcome"]

        result = await db_session.execute(
            select(AuditLog).where(AuditLog.action == "bulk_import")
        )
        entries = result.scalars().all()
        assert len(entries) == 1
        assert entries[0].details["success_count"] == 1

    async def test_guards(self, db_session: AsyncSession, admin_user: User, teacher_user: User):
        service = UserImportService(db_session)
        with pytest.raises(ForbiddenException):
            await service.import_users(teacher_user, [{"email": "a@x.com"}])
        with pytest.raises(BadRequestException):
            await service.import_users(admin_user, [])
        with pytest.raises(BadRequestException):
            await service.import_users(admin_user, "not a list")

    async def test_store_failure_is_row_error(
        self, db_session: AsyncSession, admin_user: User
    ):
        rows = [
            {"email": "f@x.com", "role": "student", "displayName": "F"},
            {"email": "g@x.com", "role": "student", "displayName": "G"},
        ]
        admin_id = admin_user.id
        failing = AsyncMock(side_effect=SQLAlchemyError("disk full"))
        with patch.object(UserProfile, "create_profile", failing):
            result = await UserImportService(db_session).import_users(admin_user, rows)

        assert result.success_count == 0
        assert [e.error for e in result.errors] == ["Failed to save user"] * 2

        audit = await db_session.execute(
            select(AuditLog).where(AuditLog.action == "bulk_import")
        )
        entry = audit.scalars().one()
        assert entry.user_id == admin_id
        assert entry.details["error_count"] == 2
