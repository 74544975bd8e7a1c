"""In-app notifications."""

import enum
from datetime import datetime, timezone
from typing import Optional, Sequence
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from core.db import Base, TimestampMixin
from core.logging import get_logger

logger = get_logger(__name__)


class NotificationType(str, enum.Enum):
    WELCOME = "welcome"
    ROLE_CHANGE = "role_change"
    ENROLLMENT = "enrollment"
    WAITLIST = "waitlist"


class Notification(Base, TimestampMixin):
    """Message shown to a single user."""

    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(String(10), default="normal", nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    read_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    @classmethod
    async def create_notification(
        cls,
        db_session: AsyncSession,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        priority: str = "normal",
    ) -> Optional["Notification"]:
        """Create a notification. Failures are logged so the caller's flow continues."""
        notification = cls(
            user_id=user_id,
            type=type.value,
            title=title,
            message=message,
            priority=priority,
        )
        try:
            db_session.add(notification)
            await db_session.commit()
        except SQLAlchemyError as e:
            await db_session.rollback()
            logger.error(f"Failed to create {type.value} notification for {user_id}: {e}")
            return None
        return notification

    @classmethod
    async def get_by_id(
        cls, db_session: AsyncSession, id: str
    ) -> Optional["Notification"]:
        result = await db_session.execute(select(cls).where(cls.id == id))
        return result.scalars().first()

    @classmethod
    async def count_unread(cls, db_session: AsyncSession, user_id: str) -> int:
        result = await db_session.execute(
            select(func.count(cls.id)).where(cls.user_id == user_id, cls.read.is_(False))
        )
        return result.scalar() or 0

    @classmethod
    async def get_for_user(
        cls,
        db_session: AsyncSession,
        user_id: str,
        unread_only: bool = False,
        type: Optional[str] = None,
        limit: int = 50,
    ) -> Sequence["Notification"]:
        conditions = [cls.user_id == user_id]
        if unread_only:
            conditions.append(cls.read.is_(False))
        if type:
            conditions.append(cls.type == type)
        result = await db_session.execute(
            select(cls).where(*conditions).order_by(cls.created_at.desc()).limit(limit)
        )
        return result.scalars().all()

    def mark_read(self) -> None:
        self.read = True
        self.read_at = datetime.now(timezone.utc)
