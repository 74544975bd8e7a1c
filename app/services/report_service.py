"""Attendance and credit reports built from raw records."""

from dataclasses import replace
from typing import Any, Iterable, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.attendance import Attendance, AttendanceStatus
from app.models.credit import CreditRecord
from app.models.user import Role, User
from app.services.attendance_stats import (
    AttendanceStats,
    CreditReport,
    compute_attendance_stats,
    compute_credit_summary,
    normalize_attendance_record,
)
from app.services.seminar_service import SeminarService
from core.config import config
from core.exceptions.base import ForbiddenException, NotFoundException
from core.logging import get_logger

logger = get_logger(__name__)

STAFF_ROLES = (Role.ADMIN, Role.COUNSELOR)


class ReportService:
    """Service for aggregate reports. Nothing here is persisted."""

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session
        self.seminars = SeminarService(db_session)

    async def _build_stats(self, records: Iterable[Any]) -> AttendanceStats:
        rows = [normalize_attendance_record(r) for r in records]
        absent_ids = [
            row.student_id
            for row in rows
            if row.student_id and row.status == AttendanceStatus.ABSENT
        ]
        students = await User.get_by_ids(self.db_session, absent_ids)
        stats = compute_attendance_stats(rows, students)
        return replace(
            stats,
            absences_by_student=stats.absences_by_student[: config.ABSENCE_REPORT_LIMIT],
        )

    async def class_stats(self, user: User, class_id: str) -> AttendanceStats:
        """Stats for one seminar (its teacher, counselors, admins)."""
        await self.seminars.get_owned_seminar(user, class_id, also_allowed=STAFF_ROLES)
        records = await Attendance.get_by_class(self.db_session, class_id)
        return await self._build_stats(records)

    async def teacher_stats(self, teacher: User) -> AttendanceStats:
        """Stats across every seminar the teacher owns."""
        class_ids = await self.seminars.get_ids_by_teacher(teacher.id)
        records = await Attendance.get_by_classes(self.db_session, class_ids)
        logger.info(
            f"Teacher report for {teacher.id}: {len(class_ids)} seminars, "
            f"{len(records)} records"
        )
        return await self._build_stats(records)

    async def school_stats(self, user: User) -> AttendanceStats:
        """School-wide stats for counselors and admins."""
        if user.role not in STAFF_ROLES:
            raise ForbiddenException(message="Counselor or admin access required")
        records = await Attendance.get_all(self.db_session)
        return await self._build_stats(records)

    async def student_credits_for_teacher(
        self, teacher: User, student_id: str
    ) -> CreditReport:
        """Credits a student earned in the caller's seminars; admins see all."""
        student = await User.get_by_id(self.db_session, student_id)
        if not student or student.role != Role.STUDENT:
            raise NotFoundException(message="Student not found")

        class_ids: Optional[Sequence[str]] = None
        if teacher.role != Role.ADMIN:
            class_ids = await self.seminars.get_ids_by_teacher(teacher.id)
        records = await CreditRecord.get_for_student(
            self.db_session, student_id, class_ids=class_ids
        )
        return compute_credit_summary(records)

    async def own_credits(self, student: User) -> CreditReport:
        records = await CreditRecord.get_for_student(self.db_session, student.id)
        return compute_credit_summary(records)
