"""Seminar (class) offerings taught by a teacher."""

import enum
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional, Sequence
from uuid import uuid4

from sqlalchemy import Enum, ForeignKey, Integer, Numeric, String, Text, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.config import config
from core.db import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.user import User


class SeminarStatus(str, enum.Enum):
    """Lifecycle of a seminar offering."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETED = "completed"


class Seminar(Base, TimestampMixin):
    """A seminar held in a fixed period of the school day."""

    __tablename__ = "seminars"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    room: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    capacity: Mapped[int] = mapped_column(
        Integer, default=lambda: config.DEFAULT_CLASS_CAPACITY, nullable=False
    )
    hour: Mapped[int] = mapped_column(Integer, default=1, nullable=False)  # Period 1-7
    community_partner: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Credit awarded per attended session
    credits: Mapped[Decimal] = mapped_column(
        Numeric(6, 2), default=Decimal("1.00"), nullable=False
    )
    credit_type: Mapped[str] = mapped_column(
        String(50), default="general", nullable=False
    )

    status: Mapped[SeminarStatus] = mapped_column(
        Enum(SeminarStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        default=SeminarStatus.ACTIVE,
        nullable=False,
        index=True,
    )
    rating: Mapped[Optional[Decimal]] = mapped_column(Numeric(3, 1), nullable=True)
    teacher_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )

    teacher: Mapped["User"] = relationship("User", lazy="selectin")

    @classmethod
    async def get_by_id(
        cls, db_session: AsyncSession, id: str
    ) -> Optional["Seminar"]:
        result = await db_session.execute(select(cls).where(cls.id == id))
        return result.scalars().first()

    @classmethod
    async def get_by_teacher(
        cls, db_session: AsyncSession, teacher_id: str
    ) -> Sequence["Seminar"]:
        """All seminars owned by a teacher, newest first."""
        result = await db_session.execute(
            select(cls)
            .where(cls.teacher_id == teacher_id)
            .order_by(cls.created_at.desc())
        )
        return result.scalars().all()

    @classmethod
    async def get_active(cls, db_session: AsyncSession) -> Sequence["Seminar"]:
        """Active seminars ordered by period and title."""
        result = await db_session.execute(
            select(cls)
            .where(cls.status == SeminarStatus.ACTIVE)
            .order_by(cls.hour, cls.title)
        )
        return result.scalars().all()

    @classmethod
    async def get_ids_by_teacher(
        cls, db_session: AsyncSession, teacher_id: str
    ) -> List[str]:
        result = await db_session.execute(
            select(cls.id).where(cls.teacher_id == teacher_id)
        )
        return list(result.scalars().all())
