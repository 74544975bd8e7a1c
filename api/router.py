from fastapi import APIRouter

from api.v1.attendance import router as attendance_router
from api.v1.auth import router as auth_router
from api.v1.dashboard import router as dashboard_router
from api.v1.enrollments import router as enrollments_router
from api.v1.notifications import router as notifications_router
from api.v1.reports import router as reports_router
from api.v1.seminars import router as seminars_router
from api.v1.users import router as users_router

router = APIRouter()

# Include v1 routers
router.include_router(auth_router, prefix="/v1")
router.include_router(users_router, prefix="/v1")
router.include_router(seminars_router, prefix="/v1")
router.include_router(enrollments_router, prefix="/v1")
router.include_router(attendance_router, prefix="/v1")

# Reporting
router.include_router(reports_router, prefix="/v1")
router.include_router(dashboard_router, prefix="/v1")
router.include_router(notifications_router, prefix="/v1")
