from app.models.attendance import Attendance, AttendanceStatus
from app.models.audit_log import AuditLog
from app.models.credit import CreditRecord
from app.models.enrollment import Enrollment, EnrollmentStatus
from app.models.notification import Notification, NotificationType
from app.models.profile import UserProfile
from app.models.seminar import Seminar, SeminarStatus
from app.models.user import Role, User, UserStatus

__all__ = [
    # User
    "User",
    "Role",
    "UserStatus",
    "UserProfile",
    # Seminar
    "Seminar",
    "SeminarStatus",
    # Enrollment
    "Enrollment",
    "EnrollmentStatus",
    # Attendance
    "Attendance",
    "AttendanceStatus",
    # Credit
    "CreditRecord",
    # Audit / notifications
    "AuditLog",
    "Notification",
    "NotificationType",
]
