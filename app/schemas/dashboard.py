from typing import Any, Dict

from app.models.user import Role
from app.schemas.base import BaseSchema


class DashboardStatsResponse(BaseSchema):
    """Role-dependent summary cards."""

    role: Role
    stats: Dict[str, Any]
