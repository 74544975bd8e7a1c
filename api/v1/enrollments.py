"""Enrollment API endpoints: joining seminars, rosters and the waitlist."""

from typing import List, Sequence

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_student, get_current_teacher, get_current_user
from app.models.enrollment import Enrollment
from app.models.user import User
from app.schemas.enrollment import (
    EnrollmentCreate,
    EnrollmentResponse,
    RosterEntryResponse,
    RosterResponse,
    StudentSummary,
)
from app.services.enrollment_service import EnrollmentService
from core.db import get_db
from core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/enrollments", tags=["Enrollments"])


def _roster_entries(enrollments: Sequence[Enrollment]) -> List[RosterEntryResponse]:
    return [
        RosterEntryResponse(
            enrollment_id=e.id,
            student_id=e.student_id,
            status=e.status,
            enrolled_at=e.enrolled_at,
            requested_at=e.waitlisted_at or e.created_at,
            student=StudentSummary.model_validate(e.student),
        )
        for e in enrollments
    ]


@router.post("/", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
async def enroll(
    data: EnrollmentCreate,
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_student),
) -> EnrollmentResponse:
    """Enroll in a seminar; a full seminar puts the student on its waitlist."""
    enrollment = await EnrollmentService(db_session).enroll(current_user, data.class_id)
    return EnrollmentResponse.model_validate(enrollment)


@router.get("/my", response_model=List[EnrollmentResponse])
async def my_enrollments(
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_student),
) -> List[EnrollmentResponse]:
    enrollments = await EnrollmentService(db_session).get_student_enrollments(current_user.id)
    return [EnrollmentResponse.model_validate(e) for e in enrollments]


@router.post("/{enrollment_id}/drop", response_model=EnrollmentResponse)
async def drop_enrollment(
    enrollment_id: str,
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> EnrollmentResponse:
    enrollment = await EnrollmentService(db_session).drop(current_user, enrollment_id)
    return EnrollmentResponse.model_validate(enrollment)


@router.get("/class/{class_id}/roster", response_model=RosterResponse)
async def get_roster(
    class_id: str,
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_teacher),
) -> RosterResponse:
    service = EnrollmentService(db_session)
    enrollments = await service.get_roster(current_user, class_id)
    seminar = await service.seminars.get_seminar(class_id)
    return RosterResponse(
        class_id=class_id,
        capacity=seminar.capacity,
        items=_roster_entries(enrollments),
        total=len(enrollments),
    )


@router.get("/class/{class_id}/waitlist", response_model=RosterResponse)
async def get_waitlist(
    class_id: str,
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_teacher),
) -> RosterResponse:
    service = EnrollmentService(db_session)
    enrollments = await service.get_waitlist(current_user, class_id)
    seminar = await service.seminars.get_seminar(class_id)
    return RosterResponse(
        class_id=class_id,
        capacity=seminar.capacity,
        items=_roster_entries(enrollments),
        total=len(enrollments),
    )


@router.post(
    "/class/{class_id}/waitlist/{enrollment_id}/approve",
    response_model=EnrollmentResponse,
)
async def approve_waitlisted(
    class_id: str,
    enrollment_id: str,
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_teacher),
) -> EnrollmentResponse:
    """Move a waitlisted student onto the roster. 409 when the seminar is full."""
    enrollment = await EnrollmentService(db_session).approve_waitlisted(
        current_user, class_id, enrollment_id
    )
    return EnrollmentResponse.model_validate(enrollment)
