"""Recording, editing and reading attendance for seminars."""

import calendar
import enum
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.attendance import Attendance, AttendanceStatus
from app.models.audit_log import AuditLog
from app.models.credit import CreditRecord
from app.models.enrollment import Enrollment
from app.models.user import Role, User
from app.schemas.attendance import AttendanceMarkRecord, AttendanceUpdate
from app.services.attendance_stats import (
    apply_mark_all_present,
    compute_daily_roster_defaults,
    total_credits_awarded,
)
from app.services.seminar_service import SeminarService
from core.exceptions.base import BadRequestException, ForbiddenException, NotFoundException
from core.logging import get_logger

logger = get_logger(__name__)

# Statuses that earn the seminar's per-session credit
CREDITED_STATUSES = (AttendanceStatus.PRESENT, AttendanceStatus.LATE)


class DateRange(str, enum.Enum):
    """Look-back windows offered by the attendance tab."""

    WEEK = "week"
    MONTH = "month"
    SEMESTER = "semester"


def _months_back(day: date, months: int) -> date:
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def resolve_date_range(range_name: DateRange, today: Optional[date] = None) -> Tuple[date, date]:
    """Inclusive (start, end) window ending today."""
    today = today or date.today()
    if range_name == DateRange.MONTH:
        return _months_back(today, 1), today
    if range_name == DateRange.SEMESTER:
        return _months_back(today, 4), today
    return today - timedelta(days=7), today


@dataclass
class RecordAttendanceResult:
    created: int
    updated: int


class AttendanceService:
    """Service for attendance operations on one store session."""

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session
        self.seminars = SeminarService(db_session)

    async def _roster(self, class_id: str) -> Sequence[Enrollment]:
        return await Enrollment.get_roster(self.db_session, class_id)

    async def record_attendance(
        self,
        teacher: User,
        class_id: str,
        on_date: date,
        records: List[AttendanceMarkRecord],
    ) -> RecordAttendanceResult:
        """Upsert one record per student for a date and award credit."""
        seminar = await self.seminars.get_owned_seminar(teacher, class_id)

        roster_ids = {e.student_id for e in await self._roster(class_id)}
        not_enrolled = sorted({r.student_id for r in records} - roster_ids)
        if not_enrolled:
            raise BadRequestException(
                message="Some students are not on the seminar roster",
                data={"student_ids": not_enrolled},
            )

        existing = {
            a.student_id: a
            for a in await Attendance.get_by_class(self.db_session, class_id, on_date=on_date)
        }

        created = updated = 0
        touched: List[Attendance] = []
        for record in records:
            credit = seminar.credits if record.status in CREDITED_STATUSES else Decimal("0.00")
            attendance = existing.get(record.student_id)
            if attendance:
                attendance.status = record.status
                attendance.notes = record.notes
                attendance.credit_awarded = credit
                updated += 1
            else:
                attendance = Attendance(
                    student_id=record.student_id,
                    class_id=class_id,
                    date=on_date,
                    status=record.status,
                    notes=record.notes,
                    credit_awarded=credit,
                    marked_by=teacher.id,
                )
                self.db_session.add(attendance)
                existing[record.student_id] = attendance
                created += 1
            touched.append(attendance)

        await self.db_session.flush()

        # Credits are immutable: one per attendance record, never revoked
        credited = await CreditRecord.get_credited_attendance_ids(
            self.db_session, [a.id for a in touched]
        )
        for attendance in touched:
            if attendance.credit_awarded > 0 and attendance.id not in credited:
                self.db_session.add(
                    CreditRecord(
                        student_id=attendance.student_id,
                        credit_type=seminar.credit_type,
                        credit_amount=attendance.credit_awarded,
                        earned_date=on_date,
                        description=seminar.title,
                        class_id=class_id,
                        attendance_id=attendance.id,
                    )
                )
                credited.add(attendance.id)

        await self.db_session.commit()
        logger.info(
            f"Attendance for seminar {class_id} on {on_date}: "
            f"{created} created, {updated} updated"
        )
        return RecordAttendanceResult(created=created, updated=updated)

    async def update_attendance_record(
        self, user: User, record_id: str, data: AttendanceUpdate
    ) -> Attendance:
        """Edit status, notes or credit of one record."""
        attendance = await Attendance.get_by_id(self.db_session, record_id)
        if not attendance:
            raise NotFoundException(message="Attendance record not found")
        await self.seminars.get_owned_seminar(user, attendance.class_id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if not changes:
            raise BadRequestException(message="No changes supplied")
        for field, value in changes.items():
            setattr(attendance, field, value)

        await self.db_session.commit()
        await self.db_session.refresh(attendance)
        logger.info(f"Attendance record {record_id} updated by {user.id}")

        await AuditLog.record(
            self.db_session,
            user_id=user.id,
            action="attendance_updated",
            resource_type="attendances",
            resource_id=record_id,
            details={k: str(v.value if isinstance(v, enum.Enum) else v) for k, v in changes.items()},
        )
        return attendance

    async def get_class_attendance(
        self,
        user: User,
        class_id: str,
        on_date: Optional[date] = None,
        date_range: Optional[DateRange] = None,
    ) -> Sequence[Attendance]:
        """Records for a seminar by exact date, look-back window, or all."""
        await self.seminars.get_owned_seminar(
            user, class_id, also_allowed=(Role.ADMIN, Role.COUNSELOR)
        )
        start_date = end_date = None
        if on_date is None and date_range is not None:
            start_date, end_date = resolve_date_range(date_range)
        return await Attendance.get_by_class(
            self.db_session,
            class_id,
            on_date=on_date,
            start_date=start_date,
            end_date=end_date,
        )

    async def get_draft(
        self, teacher: User, class_id: str, on_date: date
    ) -> Dict[str, Dict[str, Any]]:
        """Entry form defaults for a date."""
        await self.seminars.get_owned_seminar(teacher, class_id)
        roster = await self._roster(class_id)
        existing = await Attendance.get_by_class(self.db_session, class_id, on_date=on_date)
        return compute_daily_roster_defaults(roster, existing)

    async def mark_all_present(
        self,
        teacher: User,
        class_id: str,
        draft: Mapping[str, Mapping[str, Any]],
    ) -> Dict[str, Dict[str, Any]]:
        await self.seminars.get_owned_seminar(teacher, class_id)
        roster = await self._roster(class_id)
        return apply_mark_all_present(draft, roster)

    async def get_student_history(
        self, user: User, student_id: str
    ) -> Tuple[Sequence[Attendance], Decimal]:
        """A student's records and the credit they carry."""
        if user.id != student_id and user.role not in (Role.ADMIN, Role.COUNSELOR):
            raise ForbiddenException(message="Not authorized")
        records = await Attendance.get_by_student(self.db_session, student_id)
        return records, total_credits_awarded(records)
