"""Role-dependent summary cards for the dashboard."""

from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.attendance import Attendance
from app.models.credit import CreditRecord
from app.models.enrollment import Enrollment, EnrollmentStatus
from app.models.seminar import Seminar, SeminarStatus
from app.models.user import Role, User
from app.services.attendance_stats import compute_attendance_stats, compute_credit_summary


class DashboardService:
    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def get_stats(self, user: User) -> Dict[str, Any]:
        if user.role == Role.STUDENT:
            return await self._student_stats(user)
        if user.role == Role.TEACHER:
            return await self._teacher_stats(user)
        if user.role == Role.ADMIN:
            return await self._admin_stats()
        if user.role == Role.COUNSELOR:
            return await self._counselor_stats()
        return await self._specialist_stats()

    async def _student_stats(self, student: User) -> Dict[str, Any]:
        enrollments = await Enrollment.get_by_student(self.db_session, student.id)
        enrolled = [e for e in enrollments if e.status == EnrollmentStatus.ENROLLED]
        credits = await CreditRecord.get_for_student(self.db_session, student.id)
        return {
            "enrolled_classes": len(enrolled),
            "completed_classes": sum(
                1 for e in enrollments if e.status == EnrollmentStatus.COMPLETED
            ),
            "upcoming_classes": sum(
                1 for e in enrolled if e.seminar.status == SeminarStatus.ACTIVE
            ),
            "total_credits": float(compute_credit_summary(credits).summary.total_earned),
        }

    async def _teacher_stats(self, teacher: User) -> Dict[str, Any]:
        seminars = await Seminar.get_by_teacher(self.db_session, teacher.id)
        ratings = [s.rating for s in seminars if s.rating is not None]
        average_rating = float(sum(ratings) / len(ratings)) if ratings else 0.0
        return {
            "total_classes": len(seminars),
            "total_students": await Enrollment.count_enrolled_in_classes(
                self.db_session, [s.id for s in seminars]
            ),
            "active_classes": sum(1 for s in seminars if s.status == SeminarStatus.ACTIVE),
            "average_rating": round(average_rating, 1),
        }

    async def _counselor_stats(self) -> Dict[str, Any]:
        records = await Attendance.get_all(self.db_session)
        return {
            "active_students": await Enrollment.count_distinct_enrolled_students(
                self.db_session
            ),
            "attendance_rate": compute_attendance_stats(records).overall_attendance_rate,
        }

    async def _admin_stats(self) -> Dict[str, Any]:
        return {
            "total_users": await User.count_active(self.db_session),
            "users_by_role": await User.count_active_by_role(self.db_session),
        }

    async def _specialist_stats(self) -> Dict[str, Any]:
        """Specialists see caseload size only, not school attendance."""
        return {
            "active_students": await Enrollment.count_distinct_enrolled_students(
                self.db_session
            ),
            "active_classes": len(await Seminar.get_active(self.db_session)),
        }
