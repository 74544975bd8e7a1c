"""Attendance tracking models."""

import enum
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional, Sequence
from uuid import uuid4

from sqlalchemy import (
    Date,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    select,
)
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column, relationship, selectinload

from core.db import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.seminar import Seminar
    from app.models.user import User


# Older clients send "tardy" for the third state
LEGACY_STATUS_ALIASES = {"tardy": "late"}


class AttendanceStatus(str, enum.Enum):
    """Status of attendance."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"

    @classmethod
    def parse(cls, value: Any) -> Optional["AttendanceStatus"]:
        """Map raw input to a status, or None when it matches no bucket."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        normalized = LEGACY_STATUS_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            return None


class Attendance(Base, TimestampMixin):
    """One student's status for one seminar on one date."""

    __tablename__ = "attendances"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    class_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("seminars.id"), nullable=False, index=True
    )
    date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[AttendanceStatus] = mapped_column(
        Enum(AttendanceStatus, native_enum=False), nullable=False
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    credit_awarded: Mapped[Decimal] = mapped_column(
        Numeric(6, 2), default=Decimal("0.00"), nullable=False
    )
    marked_by: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )

    # Relationships
    student: Mapped["User"] = relationship("User", foreign_keys=[student_id])
    seminar: Mapped["Seminar"] = relationship("Seminar")

    __table_args__ = (
        UniqueConstraint(
            "student_id",
            "class_id",
            "date",
            name="unique_student_class_date_attendance",
        ),
        Index("idx_attendance_class_date", "class_id", "date"),
    )

    @classmethod
    async def get_by_id(
        cls, db_session: AsyncSession, id: str
    ) -> Optional["Attendance"]:
        result = await db_session.execute(
            select(cls).options(selectinload(cls.seminar)).where(cls.id == id)
        )
        return result.scalars().first()

    @classmethod
    async def get_by_class(
        cls,
        db_session: AsyncSession,
        class_id: str,
        on_date: Optional[date] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence["Attendance"]:
        """Attendance for a seminar, filtered by exact date or an inclusive range."""
        conditions = [cls.class_id == class_id]
        if on_date:
            conditions.append(cls.date == on_date)
        if start_date:
            conditions.append(cls.date >= start_date)
        if end_date:
            conditions.append(cls.date <= end_date)

        stmt = (
            select(cls)
            .where(*conditions)
            .options(selectinload(cls.student))
            .order_by(cls.date.desc(), cls.created_at)
        )
        result = await db_session.execute(stmt)
        return result.scalars().all()

    @classmethod
    async def get_by_classes(
        cls, db_session: AsyncSession, class_ids: Sequence[str]
    ) -> Sequence["Attendance"]:
        """Attendance across several seminars, oldest first."""
        if not class_ids:
            return []
        result = await db_session.execute(
            select(cls)
            .where(cls.class_id.in_(class_ids))
            .order_by(cls.date, cls.created_at)
        )
        return result.scalars().all()

    @classmethod
    async def get_all(cls, db_session: AsyncSession) -> Sequence["Attendance"]:
        """Every attendance record, oldest first (school-wide reports)."""
        result = await db_session.execute(
            select(cls).order_by(cls.date, cls.created_at)
        )
        return result.scalars().all()

    @classmethod
    async def get_by_student(
        cls, db_session: AsyncSession, student_id: str
    ) -> Sequence["Attendance"]:
        """A student's attendance history, most recent first."""
        result = await db_session.execute(
            select(cls)
            .where(cls.student_id == student_id)
            .options(selectinload(cls.seminar))
            .order_by(cls.date.desc())
        )
        return result.scalars().all()
