"""Attendance API endpoints for recording and reviewing seminar attendance."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_staff, get_current_teacher, get_current_user
from app.models.attendance import Attendance
from app.models.user import User
from app.schemas.attendance import (
    AttendanceDraftResponse,
    AttendanceRecordRequest,
    AttendanceRecordResult,
    AttendanceResponse,
    AttendanceUpdate,
    ClassAttendanceResponse,
    MarkAllPresentRequest,
    StudentAttendanceHistoryResponse,
    StudentAttendanceRecord,
)
from app.services.attendance_service import AttendanceService, DateRange
from app.services.attendance_stats import summarize_status_counts
from core.db import get_db
from core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/attendance", tags=["Attendance"])


def _history_record(attendance: Attendance) -> StudentAttendanceRecord:
    record = StudentAttendanceRecord.model_validate(attendance)
    record.class_title = attendance.seminar.title if attendance.seminar else None
    return record


@router.post("/class/{class_id}", response_model=AttendanceRecordResult)
async def record_attendance(
    class_id: str,
    data: AttendanceRecordRequest,
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_teacher),
) -> AttendanceRecordResult:
    """
    Record attendance for a date, one entry per student.

    Re-submitting a date updates the existing entries. Present and late
    students are credited with the seminar's credits.
    """
    logger.info(
        f"Recording attendance for {len(data.records)} students "
        f"in seminar {class_id} on {data.date}"
    )
    result = await AttendanceService(db_session).record_attendance(
        current_user, class_id, data.date, data.records
    )
    return AttendanceRecordResult(
        class_id=class_id,
        date=data.date,
        created=result.created,
        updated=result.updated,
    )


@router.put("/{record_id}", response_model=AttendanceResponse)
async def update_attendance(
    record_id: str,
    data: AttendanceUpdate,
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_teacher),
) -> AttendanceResponse:
    attendance = await AttendanceService(db_session).update_attendance_record(
        current_user, record_id, data
    )
    return AttendanceResponse.model_validate(attendance)


@router.get("/class/{class_id}", response_model=ClassAttendanceResponse)
async def get_class_attendance(
    class_id: str,
    on_date: Optional[date] = Query(None, alias="date"),
    date_range: Optional[DateRange] = Query(None, alias="range"),
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_staff),
) -> ClassAttendanceResponse:
    """Attendance for a seminar on one date, over a look-back range, or all time."""
    records = await AttendanceService(db_session).get_class_attendance(
        current_user, class_id, on_date=on_date, date_range=date_range
    )
    return ClassAttendanceResponse(
        class_id=class_id,
        records=[AttendanceResponse.model_validate(r) for r in records],
        summary=summarize_status_counts(records),
    )


@router.get("/class/{class_id}/draft", response_model=AttendanceDraftResponse)
async def get_attendance_draft(
    class_id: str,
    on_date: date = Query(..., alias="date"),
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_teacher),
) -> AttendanceDraftResponse:
    """Entry form for a date: saved entries reused, everyone else absent."""
    entries = await AttendanceService(db_session).get_draft(current_user, class_id, on_date)
    return AttendanceDraftResponse(class_id=class_id, date=on_date, entries=entries)


@router.post("/class/{class_id}/draft/mark-all-present", response_model=AttendanceDraftResponse)
async def mark_all_present(
    class_id: str,
    data: MarkAllPresentRequest,
    on_date: date = Query(..., alias="date"),
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_teacher),
) -> AttendanceDraftResponse:
    entries = await AttendanceService(db_session).mark_all_present(
        current_user, class_id, data.draft
    )
    return AttendanceDraftResponse(class_id=class_id, date=on_date, entries=entries)


@router.get("/student/{student_id}", response_model=StudentAttendanceHistoryResponse)
async def get_student_history(
    student_id: str,
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> StudentAttendanceHistoryResponse:
    """A student's attendance history; students may only read their own."""
    records, total_credits = await AttendanceService(db_session).get_student_history(
        current_user, student_id
    )
    return StudentAttendanceHistoryResponse(
        student_id=student_id,
        records=[_history_record(r) for r in records],
        total_credits=total_credits,
    )
