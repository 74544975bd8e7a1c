"""Bulk creation of accounts and profiles from already-parsed CSV rows."""

from typing import Any, Mapping, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit_log import AuditLog
from app.models.notification import Notification, NotificationType
from app.models.profile import UserProfile
from app.models.user import Role, User
from app.schemas.bulk_import import BulkImportResult, BulkImportRowError
from app.schemas.profile import build_profile_details
from app.services.auth_service import AuthService
from core.config import config
from core.exceptions import BadRequestException, CustomException, ForbiddenException
from core.logging import get_logger

logger = get_logger(__name__)

MISSING_FIELDS_ERROR = "Missing required fields: email, role, displayName."
USER_EXISTS_ERROR = "User already exists"

# Keys consumed by the account itself; everything else feeds the profile
ACCOUNT_KEYS = ("email", "role", "display_name", "displayName", "department")


class RowError(Exception):
    """A row that cannot be imported. The rest of the batch continues."""


def _text(row: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = row.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def _validation_message(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in error.errors()
    )


class UserImportService:
    """Service for the admin bulk user import."""

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session
        self.auth = AuthService(db_session)

    async def import_users(self, admin: User, rows: Any) -> BulkImportResult:
        """Create an account and profile per row, strictly in input order.

        Per-row failures are collected in the result. Only the caller's role
        or an empty payload abort the call.
        """
        if admin.role != Role.ADMIN:
            raise ForbiddenException(message="Admin access required")
        if not isinstance(rows, list) or not rows:
            raise BadRequestException(message="Invalid users data")

        # A rollback on a failed row expires every loaded instance
        admin_id = admin.id
        result = BulkImportResult()
        for index, row in enumerate(rows, start=1):
            email = "N/A"
            if isinstance(row, Mapping):
                email = _text(row, "email") or "N/A"
            try:
                await self._import_row(row)
                result.success_count += 1
            except RowError as e:
                self._add_error(result, index, email, str(e))
            except ValidationError as e:
                self._add_error(result, index, email, _validation_message(e))
            except CustomException as e:
                self._add_error(result, index, email, e.message)
            except SQLAlchemyError as e:
                await self.db_session.rollback()
                logger.error(f"Bulk import row {index} ({email}) failed: {e}")
                self._add_error(result, index, email, "Failed to save user")

        logger.info(
            f"Bulk import by {admin_id}: {result.success_count} created, "
            f"{result.error_count} failed"
        )
        await AuditLog.record(
            self.db_session,
            user_id=admin_id,
            action="bulk_import",
            resource_type="users",
            details={
                "total": len(rows),
                "success_count": result.success_count,
                "error_count": result.error_count,
            },
        )
        return result

    @staticmethod
    def _add_error(result: BulkImportResult, row: int, email: str, error: str) -> None:
        result.errors.append(BulkImportRowError(row=row, email=email, error=error))
        result.error_count += 1

    async def _import_row(self, row: Any) -> User:
        if not isinstance(row, Mapping):
            raise RowError(MISSING_FIELDS_ERROR)

        email = _text(row, "email")
        role_value = _text(row, "role")
        display_name = _text(row, "display_name", "displayName")
        if not (email and role_value and display_name):
            raise RowError(MISSING_FIELDS_ERROR)

        try:
            role = Role(role_value)
        except ValueError:
            raise RowError(f"Invalid role: {role_value}")

        profile_fields = {k: v for k, v in row.items() if k not in ACCOUNT_KEYS}
        details = build_profile_details(role, profile_fields)

        user = await self._get_or_create_account(email, display_name, role)
        await UserProfile.create_profile(
            self.db_session,
            user_id=user.id,
            role=role,
            details=details,
            department=_text(row, "department"),
        )

        await Notification.create_notification(
            self.db_session,
            user_id=user.id,
            type=NotificationType.WELCOME,
            title="Welcome",
            message=f"Your {role.value} account has been created.",
        )
        await AuditLog.record(
            self.db_session,
            user_id=user.id,
            action="user_created",
            resource_type="users",
            resource_id=user.id,
            details={"role": role.value, "source": "bulk_import"},
        )
        return user

    async def _get_or_create_account(
        self, email: str, display_name: str, role: Role
    ) -> User:
        """Reuse an account left without a profile by an earlier import."""
        existing: Optional[User] = await User.get_by_email(self.db_session, email)
        if existing:
            if await UserProfile.get_by_user_id(self.db_session, existing.id):
                raise RowError(USER_EXISTS_ERROR)
            logger.info(f"Completing profile for existing account {existing.id}")
            return existing

        return await self.auth.create_account(
            email=email,
            display_name=display_name,
            role=role,
            password=config.BULK_IMPORT_DEFAULT_PASSWORD,
        )
