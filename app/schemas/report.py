"""Aggregate report schemas.

These read the engine's dataclasses directly (``from_attributes``).
"""

from datetime import date
from typing import Dict, List, Optional

from app.schemas.base import BaseSchema
from app.schemas.enrollment import StudentSummary


class StudentAbsencesResponse(BaseSchema):
    student: StudentSummary
    count: int


class DailyAttendanceResponse(BaseSchema):
    date: date
    present: int
    absent: int
    late: int
    excused: int


class AttendanceStatsResponse(BaseSchema):
    """Aggregated attendance statistics for a seminar or set of seminars."""

    total_records: int
    stats_by_status: Dict[str, int]
    overall_attendance_rate: int  # 0-100
    absences_by_student: List[StudentAbsencesResponse]
    attendance_over_time: List[DailyAttendanceResponse]


class CreditTypeTotalResponse(BaseSchema):
    earned: float
    count: int


class CreditSummaryResponse(BaseSchema):
    total_earned: float
    types: Dict[str, CreditTypeTotalResponse]


class CreditRecordResponse(BaseSchema):
    id: Optional[str]
    student_id: Optional[str]
    credit_type: str
    credit_amount: float
    earned_date: Optional[date]
    description: Optional[str]
    class_id: Optional[str] = None


class CreditReportResponse(BaseSchema):
    summary: CreditSummaryResponse
    details: List[CreditRecordResponse]
