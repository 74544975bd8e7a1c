"""Enrollment, waitlist and roster operations."""

from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enrollment import Enrollment, EnrollmentStatus
from app.models.notification import Notification, NotificationType
from app.models.seminar import SeminarStatus
from app.models.user import User
from app.services.seminar_service import SeminarService
from core.exceptions.base import (
    BadRequestException,
    ConflictException,
    NotFoundException,
)
from core.logging import get_logger

logger = get_logger(__name__)


class EnrollmentService:
    """Service for enrolling students and managing waitlists."""

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session
        self.seminars = SeminarService(db_session)

    async def enroll(self, student: User, class_id: str) -> Enrollment:
        """Enroll a student, or waitlist them when the seminar is full."""
        seminar = await self.seminars.get_seminar(class_id)
        if seminar.status != SeminarStatus.ACTIVE:
            raise BadRequestException(message="Seminar is not open for enrollment")

        enrollment = await Enrollment.get_by_student_and_class(
            self.db_session, student.id, class_id
        )
        if enrollment and enrollment.status in (
            EnrollmentStatus.ENROLLED,
            EnrollmentStatus.WAITLISTED,
        ):
            raise BadRequestException(
                message="Student is already enrolled or waitlisted for this seminar"
            )

        enrolled_count = await Enrollment.count_enrolled(self.db_session, class_id)
        is_full = enrolled_count >= seminar.capacity

        if enrollment is None:
            enrollment = Enrollment(student_id=student.id, class_id=class_id)
            self.db_session.add(enrollment)

        if is_full:
            enrollment.status = EnrollmentStatus.WAITLISTED
            enrollment.enrolled_at = None
            enrollment.waitlisted_at = datetime.now(timezone.utc)
        else:
            enrollment.status = EnrollmentStatus.ENROLLED
            enrollment.enrolled_at = datetime.now(timezone.utc)

        await self.db_session.commit()
        await self.db_session.refresh(enrollment)

        logger.info(
            f"Student {student.id} {enrollment.status.value} in seminar {class_id} "
            f"({enrolled_count}/{seminar.capacity} seats taken)"
        )
        return enrollment

    async def drop(self, user: User, enrollment_id: str) -> Enrollment:
        """Drop an enrollment. Students may only drop their own."""
        enrollment = await Enrollment.get_by_id(self.db_session, enrollment_id)
        if not enrollment:
            raise NotFoundException(message="Enrollment not found")
        if enrollment.student_id != user.id:
            await self.seminars.get_owned_seminar(user, enrollment.class_id)
        if enrollment.status == EnrollmentStatus.DROPPED:
            raise BadRequestException(message="Enrollment already dropped")

        enrollment.status = EnrollmentStatus.DROPPED
        await self.db_session.commit()
        await self.db_session.refresh(enrollment)
        logger.info(f"Enrollment {enrollment_id} dropped by {user.id}")
        return enrollment

    async def get_student_enrollments(self, student_id: str) -> Sequence[Enrollment]:
        return await Enrollment.get_by_student(self.db_session, student_id)

    async def get_roster(self, user: User, class_id: str) -> Sequence[Enrollment]:
        await self.seminars.get_owned_seminar(user, class_id)
        return await Enrollment.get_roster(self.db_session, class_id)

    async def get_waitlist(self, user: User, class_id: str) -> Sequence[Enrollment]:
        await self.seminars.get_owned_seminar(user, class_id)
        return await Enrollment.get_waitlist(self.db_session, class_id)

    async def approve_waitlisted(
        self, teacher: User, class_id: str, enrollment_id: str
    ) -> Enrollment:
        """Move a waitlisted student onto the roster if a seat is free."""
        seminar = await self.seminars.get_owned_seminar(teacher, class_id)

        enrollment = await Enrollment.get_by_id(self.db_session, enrollment_id)
        if not enrollment or enrollment.class_id != class_id:
            raise NotFoundException(message="Enrollment not found")
        if enrollment.status != EnrollmentStatus.WAITLISTED:
            raise BadRequestException(message="Enrollment is not waitlisted")

        enrolled_count = await Enrollment.count_enrolled(self.db_session, class_id)
        if enrolled_count >= seminar.capacity:
            raise ConflictException(message="Seminar is at capacity")

        enrollment.status = EnrollmentStatus.ENROLLED
        enrollment.enrolled_at = datetime.now(timezone.utc)
        await self.db_session.commit()
        await self.db_session.refresh(enrollment)

        logger.info(
            f"Teacher {teacher.id} approved waitlisted enrollment {enrollment_id}"
        )
        await Notification.create_notification(
            self.db_session,
            user_id=enrollment.student_id,
            type=NotificationType.WAITLIST,
            title="Waitlist approved",
            message=f"You have been moved from the waitlist into {seminar.title}.",
        )
        return enrollment

