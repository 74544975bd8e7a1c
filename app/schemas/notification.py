from datetime import datetime
from typing import List, Optional

from app.schemas.base import BaseSchema


class NotificationResponse(BaseSchema):
    id: str
    type: str
    title: str
    message: str
    priority: str
    read: bool
    read_at: Optional[datetime]
    created_at: datetime


class NotificationListResponse(BaseSchema):
    items: List[NotificationResponse]
    unread: int
