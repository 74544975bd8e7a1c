"""Role-conditional profile documents attached to user accounts."""

from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlalchemy import JSON, Enum, ForeignKey, String, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.user import Role
from core.db import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.user import User


class UserProfile(Base, TimestampMixin):
    """Profile for a user account.

    ``details`` holds the role variant validated by
    ``app.schemas.profile.ProfileDetails`` before it is written.
    """

    __tablename__ = "user_profiles"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    department: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    phone_number: Mapped[str] = mapped_column(String(20), default="", nullable=False)
    photo_url: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    details: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="profile")

    @classmethod
    async def get_by_user_id(
        cls, db_session: AsyncSession, user_id: str
    ) -> Optional["UserProfile"]:
        result = await db_session.execute(select(cls).where(cls.user_id == user_id))
        return result.scalars().first()

    @classmethod
    async def create_profile(
        cls,
        db_session: AsyncSession,
        user_id: str,
        role: Role,
        details: Dict[str, Any],
        department: str = "",
        phone_number: str = "",
    ) -> "UserProfile":
        """Write the profile document for an existing account."""
        profile = cls(
            user_id=user_id,
            role=role,
            department=department,
            phone_number=phone_number,
            details=details,
        )
        db_session.add(profile)
        await db_session.commit()
        await db_session.refresh(profile)
        return profile
