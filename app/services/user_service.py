"""Account reads and administrative changes."""

from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit_log import AuditLog
from app.models.notification import Notification, NotificationType
from app.models.profile import UserProfile
from app.models.user import Role, User
from app.schemas.user import UserUpdate
from core.exceptions.base import BadRequestException, NotFoundException
from core.logging import get_logger

logger = get_logger(__name__)


class UserService:
    """Service for user operations."""

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def get_user(self, user_id: str) -> User:
        user = await User.get_by_id(self.db_session, user_id)
        if not user:
            raise NotFoundException(message="User not found")
        return user

    async def update_me(self, user: User, data: UserUpdate) -> User:
        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(user, field, value)
        await self.db_session.commit()
        await self.db_session.refresh(user)
        return user

    async def get_profile(self, user: User) -> UserProfile:
        profile = await UserProfile.get_by_user_id(self.db_session, user.id)
        if not profile:
            raise NotFoundException(message="Profile not found")
        return profile

    async def list_by_role(self, role: Role) -> Sequence[User]:
        return await User.get_active_by_role(self.db_session, role)

    async def change_role(self, admin: User, user_id: str, role: Role) -> User:
        """Give a user a new role, with an audit entry and a notice to them."""
        user = await self.get_user(user_id)
        if user.id == admin.id:
            raise BadRequestException(message="Admins cannot change their own role")

        previous = user.role
        if previous == role:
            return user

        user.role = role
        await self.db_session.commit()
        await self.db_session.refresh(user)
        logger.info(f"Role of {user.id} changed {previous.value} -> {role.value} by {admin.id}")

        await AuditLog.record(
            self.db_session,
            user_id=admin.id,
            action="role_changed",
            resource_type="users",
            resource_id=user.id,
            details={"from": previous.value, "to": role.value},
        )
        await Notification.create_notification(
            self.db_session,
            user_id=user.id,
            type=NotificationType.ROLE_CHANGE,
            title="Role updated",
            message=f"Your role is now {role.value}.",
        )
        return user
