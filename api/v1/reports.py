"""Aggregate attendance and credit reports."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_staff, get_current_student, get_current_teacher
from app.models.user import User
from app.schemas.report import AttendanceStatsResponse, CreditReportResponse
from app.services.report_service import ReportService
from core.db import get_db

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/attendance/class/{class_id}", response_model=AttendanceStatsResponse)
async def class_attendance_report(
    class_id: str,
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_staff),
) -> AttendanceStatsResponse:
    stats = await ReportService(db_session).class_stats(current_user, class_id)
    return AttendanceStatsResponse.model_validate(stats)


@router.get("/attendance/teacher", response_model=AttendanceStatsResponse)
async def teacher_attendance_report(
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_teacher),
) -> AttendanceStatsResponse:
    """Stats across all seminars the caller teaches."""
    stats = await ReportService(db_session).teacher_stats(current_user)
    return AttendanceStatsResponse.model_validate(stats)


@router.get("/attendance/school", response_model=AttendanceStatsResponse)
async def school_attendance_report(
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_staff),
) -> AttendanceStatsResponse:
    stats = await ReportService(db_session).school_stats(current_user)
    return AttendanceStatsResponse.model_validate(stats)


@router.get("/credits/student/{student_id}", response_model=CreditReportResponse)
async def student_credit_report(
    student_id: str,
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_teacher),
) -> CreditReportResponse:
    """Credits a student earned in the caller's seminars."""
    report = await ReportService(db_session).student_credits_for_teacher(
        current_user, student_id
    )
    return CreditReportResponse.model_validate(report)


@router.get("/credits/me", response_model=CreditReportResponse)
async def my_credit_report(
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_student),
) -> CreditReportResponse:
    report = await ReportService(db_session).own_credits(current_user)
    return CreditReportResponse.model_validate(report)
