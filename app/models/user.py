import enum
from datetime import datetime
from typing import TYPE_CHECKING, Dict, Optional, Sequence
from uuid import uuid4

from sqlalchemy import DateTime, Enum, String, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.db import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.profile import UserProfile


class Role(str, enum.Enum):
    """User roles in the system."""
    STUDENT = "student"
    TEACHER = "teacher"
    COUNSELOR = "counselor"
    ADMIN = "admin"
    SPECIALIST = "specialist"


class UserStatus(str, enum.Enum):
    """Account status."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class User(Base, TimestampMixin):
    """Sign-in account. Role-specific data lives on UserProfile."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    hashed_password: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        default=Role.STUDENT,
        nullable=False,
        index=True,
    )
    status: Mapped[UserStatus] = mapped_column(
        Enum(UserStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        default=UserStatus.ACTIVE,
        nullable=False,
    )
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    profile: Mapped[Optional["UserProfile"]] = relationship(
        "UserProfile", back_populates="user", uselist=False
    )

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    @staticmethod
    def normalize_email(email: str) -> str:
        """Normalize emails so uniqueness checks are case-insensitive."""
        return email.strip().lower()

    @classmethod
    async def get_by_id(
        cls, db_session: AsyncSession, id: str
    ) -> Optional["User"]:
        """Get user by ID."""
        result = await db_session.execute(select(cls).where(cls.id == id))
        return result.scalars().first()

    @classmethod
    async def get_by_email(
        cls, db_session: AsyncSession, email: str
    ) -> Optional["User"]:
        """Get user by email."""
        normalized_email = cls.normalize_email(email)
        result = await db_session.execute(
            select(cls).where(cls.email == normalized_email)
        )
        return result.scalars().first()

    @classmethod
    async def get_by_ids(
        cls, db_session: AsyncSession, ids: Sequence[str]
    ) -> Dict[str, "User"]:
        """Get users keyed by ID. Unknown IDs are simply missing."""
        if not ids:
            return {}
        result = await db_session.execute(select(cls).where(cls.id.in_(set(ids))))
        return {user.id: user for user in result.scalars().all()}

    @classmethod
    async def create_user(
        cls,
        db_session: AsyncSession,
        email: str,
        display_name: str,
        role: Role = Role.STUDENT,
        hashed_password: Optional[str] = None,
    ) -> "User":
        """Create a new account."""
        user = cls(
            email=cls.normalize_email(email),
            display_name=display_name,
            role=role,
            hashed_password=hashed_password,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    @classmethod
    async def get_active_by_role(
        cls, db_session: AsyncSession, role: Role
    ) -> Sequence["User"]:
        """Active users of one role, ordered by display name."""
        result = await db_session.execute(
            select(cls)
            .where(cls.role == role, cls.status == UserStatus.ACTIVE)
            .order_by(cls.display_name)
        )
        return result.scalars().all()

    @classmethod
    async def count_active(cls, db_session: AsyncSession) -> int:
        """Count active users."""
        result = await db_session.execute(
            select(func.count(cls.id)).where(cls.status == UserStatus.ACTIVE)
        )
        return result.scalar() or 0

    @classmethod
    async def count_active_by_role(cls, db_session: AsyncSession) -> Dict[str, int]:
        """Count active users grouped by role."""
        result = await db_session.execute(
            select(cls.role, func.count(cls.id))
            .where(cls.status == UserStatus.ACTIVE)
            .group_by(cls.role)
        )
        return {role.value: count for role, count in result.all()}
