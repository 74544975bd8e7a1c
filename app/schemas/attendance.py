"""Attendance schemas for request/response validation."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from app.models.attendance import AttendanceStatus
from app.schemas.base import BaseSchema


def _parse_status(value: Any) -> Any:
    """Accept legacy spellings such as "tardy"; unknown values fail enum validation."""
    parsed = AttendanceStatus.parse(value)
    return parsed if parsed is not None else value


class AttendanceMarkRecord(BaseSchema):
    """Schema for marking a single student."""

    student_id: str
    status: AttendanceStatus
    notes: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        return _parse_status(v)


class AttendanceRecordRequest(BaseSchema):
    """Schema for recording a seminar's attendance on one date."""

    date: date
    records: List[AttendanceMarkRecord] = Field(..., min_length=1)


class AttendanceUpdate(BaseSchema):
    """Schema for editing an existing record."""

    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None
    credit_awarded: Optional[Decimal] = Field(None, ge=0)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        if v is None:
            return v
        return _parse_status(v)


class AttendanceResponse(BaseSchema):
    """Schema for attendance response."""

    id: str
    student_id: str
    class_id: str
    date: date
    status: AttendanceStatus
    notes: Optional[str]
    credit_awarded: float
    created_at: datetime


class AttendanceRecordResult(BaseSchema):
    class_id: str
    date: date
    created: int
    updated: int


class ClassAttendanceResponse(BaseSchema):
    class_id: str
    records: List[AttendanceResponse]
    summary: Dict[str, int]


class AttendanceDraftEntry(BaseSchema):
    """Draft row for one student, as shown in the entry form."""

    id: Optional[str] = None
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None
    credit_awarded: Optional[float] = None


class AttendanceDraftResponse(BaseSchema):
    class_id: str
    date: date
    entries: Dict[str, AttendanceDraftEntry]


class MarkAllPresentRequest(BaseSchema):
    draft: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


class StudentAttendanceRecord(AttendanceResponse):
    class_title: Optional[str] = None


class StudentAttendanceHistoryResponse(BaseSchema):
    student_id: str
    records: List[StudentAttendanceRecord]
    total_credits: float
