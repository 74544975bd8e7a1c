"""Credit records earned by students."""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Sequence, Set
from uuid import uuid4

from sqlalchemy import Date, ForeignKey, Numeric, String, Text, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.db import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.user import User


DEFAULT_CREDIT_TYPE = "general"


class CreditRecord(Base, TimestampMixin):
    """Immutable credit entry, summed for reporting."""

    __tablename__ = "credit_records"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    credit_type: Mapped[str] = mapped_column(
        String(50), default=DEFAULT_CREDIT_TYPE, nullable=False
    )
    credit_amount: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    earned_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Source references
    class_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("seminars.id", ondelete="SET NULL"), nullable=True, index=True
    )
    attendance_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("attendances.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )  # At most one credit per attendance record

    student: Mapped["User"] = relationship("User")

    @classmethod
    async def get_for_student(
        cls,
        db_session: AsyncSession,
        student_id: str,
        class_ids: Optional[Sequence[str]] = None,
    ) -> Sequence["CreditRecord"]:
        """Credits of a student, optionally limited to some seminars."""
        conditions = [cls.student_id == student_id]
        if class_ids is not None:
            if not class_ids:
                return []
            conditions.append(cls.class_id.in_(class_ids))
        result = await db_session.execute(
            select(cls).where(*conditions).order_by(cls.earned_date.desc())
        )
        return result.scalars().all()

    @classmethod
    async def get_by_attendance(
        cls, db_session: AsyncSession, attendance_id: str
    ) -> Optional["CreditRecord"]:
        result = await db_session.execute(
            select(cls).where(cls.attendance_id == attendance_id)
        )
        return result.scalars().first()

    @classmethod
    async def get_credited_attendance_ids(
        cls, db_session: AsyncSession, attendance_ids: Sequence[str]
    ) -> Set[str]:
        """Attendance IDs that already produced a credit record."""
        if not attendance_ids:
            return set()
        result = await db_session.execute(
            select(cls.attendance_id).where(cls.attendance_id.in_(attendance_ids))
        )
        return set(result.scalars().all())
