"""Enrollment schemas for request/response validation."""

from datetime import datetime
from typing import List, Optional

from app.models.enrollment import EnrollmentStatus
from app.schemas.base import BaseSchema


class EnrollmentCreate(BaseSchema):
    class_id: str


class EnrollmentResponse(BaseSchema):
    id: str
    student_id: str
    class_id: str
    status: EnrollmentStatus
    enrolled_at: Optional[datetime]
    created_at: datetime


class StudentSummary(BaseSchema):
    """Student fields shown on rosters and reports."""

    id: str
    display_name: str
    email: str


class RosterEntryResponse(BaseSchema):
    """One roster or waitlist row."""

    enrollment_id: str
    student_id: str
    status: EnrollmentStatus
    enrolled_at: Optional[datetime]
    requested_at: datetime
    student: StudentSummary


class RosterResponse(BaseSchema):
    class_id: str
    capacity: int
    items: List[RosterEntryResponse]
    total: int
