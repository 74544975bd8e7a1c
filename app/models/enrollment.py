"""Enrollment of students into seminars, including the waitlist."""

import enum
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Sequence
from uuid import uuid4

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    String,
    UniqueConstraint,
    func,
    select,
)
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column, relationship, selectinload

from core.db import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.seminar import Seminar
    from app.models.user import User


class EnrollmentStatus(str, enum.Enum):
    """Status of an enrollment."""

    ENROLLED = "enrolled"  # On the roster
    WAITLISTED = "waitlisted"  # Awaiting teacher approval
    COMPLETED = "completed"  # Seminar finished
    DROPPED = "dropped"  # Left by the student


class Enrollment(Base, TimestampMixin):
    """Enrollment record linking a student to a seminar."""

    __tablename__ = "enrollments"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    class_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("seminars.id"), nullable=False, index=True
    )
    status: Mapped[EnrollmentStatus] = mapped_column(
        Enum(EnrollmentStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        default=EnrollmentStatus.ENROLLED,
        nullable=False,
        index=True,
    )
    enrolled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )  # Set when the student lands on the roster
    waitlisted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )  # Set each time the student joins the waitlist

    __table_args__ = (
        UniqueConstraint("student_id", "class_id", name="uq_enrollment_student_class"),
    )

    # Relationships
    student: Mapped["User"] = relationship("User", lazy="selectin")
    seminar: Mapped["Seminar"] = relationship("Seminar", lazy="selectin")

    @classmethod
    async def get_by_id(
        cls, db_session: AsyncSession, id: str
    ) -> Optional["Enrollment"]:
        """Get enrollment by ID."""
        result = await db_session.execute(
            select(cls)
            .options(selectinload(cls.student), selectinload(cls.seminar))
            .where(cls.id == id)
        )
        return result.scalars().first()

    @classmethod
    async def get_by_student_and_class(
        cls, db_session: AsyncSession, student_id: str, class_id: str
    ) -> Optional["Enrollment"]:
        result = await db_session.execute(
            select(cls).where(cls.student_id == student_id, cls.class_id == class_id)
        )
        return result.scalars().first()

    @classmethod
    async def get_by_student(
        cls, db_session: AsyncSession, student_id: str
    ) -> Sequence["Enrollment"]:
        """All enrollments of a student, most recent first."""
        result = await db_session.execute(
            select(cls)
            .options(selectinload(cls.seminar))
            .where(cls.student_id == student_id)
            .order_by(cls.created_at.desc())
        )
        return result.scalars().all()

    @classmethod
    async def get_roster(
        cls, db_session: AsyncSession, class_id: str
    ) -> Sequence["Enrollment"]:
        """Enrolled students of a seminar ordered by enrollment time."""
        result = await db_session.execute(
            select(cls)
            .options(selectinload(cls.student))
            .where(cls.class_id == class_id, cls.status == EnrollmentStatus.ENROLLED)
            .order_by(cls.enrolled_at, cls.created_at)
        )
        return result.scalars().all()

    @classmethod
    async def get_waitlist(
        cls, db_session: AsyncSession, class_id: str
    ) -> Sequence["Enrollment"]:
        """Waitlisted students of a seminar, oldest request first."""
        result = await db_session.execute(
            select(cls)
            .options(selectinload(cls.student))
            .where(cls.class_id == class_id, cls.status == EnrollmentStatus.WAITLISTED)
            .order_by(cls.waitlisted_at, cls.created_at)
        )
        return result.scalars().all()

    @classmethod
    async def count_enrolled(
        cls, db_session: AsyncSession, class_id: str
    ) -> int:
        result = await db_session.execute(
            select(func.count(cls.id)).where(
                cls.class_id == class_id, cls.status == EnrollmentStatus.ENROLLED
            )
        )
        return result.scalar() or 0

    @classmethod
    async def count_enrolled_in_classes(
        cls, db_session: AsyncSession, class_ids: Sequence[str]
    ) -> int:
        """Count roster seats across several seminars."""
        if not class_ids:
            return 0
        result = await db_session.execute(
            select(func.count(cls.id)).where(
                cls.class_id.in_(class_ids), cls.status == EnrollmentStatus.ENROLLED
            )
        )
        return result.scalar() or 0

    @classmethod
    async def count_distinct_enrolled_students(cls, db_session: AsyncSession) -> int:
        """Count students currently on at least one roster."""
        result = await db_session.execute(
            select(func.count(func.distinct(cls.student_id))).where(
                cls.status == EnrollmentStatus.ENROLLED
            )
        )
        return result.scalar() or 0
