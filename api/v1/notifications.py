from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user
from app.models.notification import Notification
from app.models.user import User
from app.schemas.notification import NotificationListResponse, NotificationResponse
from core.db import get_db
from core.exceptions.base import NotFoundException

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/", response_model=NotificationListResponse)
async def list_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=100),
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationListResponse:
    notifications = await Notification.get_for_user(
        db_session, current_user.id, unread_only=unread_only, limit=limit
    )
    return NotificationListResponse(
        items=[NotificationResponse.model_validate(n) for n in notifications],
        unread=await Notification.count_unread(db_session, current_user.id),
    )


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    db_session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationResponse:
    notification = await Notification.get_by_id(db_session, notification_id)
    if not notification or notification.user_id != current_user.id:
        raise NotFoundException(message="Notification not found")

    notification.mark_read()
    await db_session.commit()
    await db_session.refresh(notification)
    return NotificationResponse.model_validate(notification)
