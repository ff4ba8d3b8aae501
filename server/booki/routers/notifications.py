"""In-app notifications router."""

import logging

from fastapi import APIRouter, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DB_DEPENDENCY, CurrentUser
from ..models.user import User
from ..schemas.common import MessageResponse
from ..schemas.notification import NotificationList, NotificationOut, UnreadCount
from ..services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/notifications", tags=["notifications"])


@router.get("", response_model=NotificationList)
async def list_notifications(
    unread_only: bool = False,
    limit: int = Query(50, ge=1, le=200),
    user: User = CurrentUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> NotificationList:
    """
    Notifications of the caller.

    Employees see their agency owner's notifications; administrators also
    see those addressed to the whole admin team.
    """
    service = NotificationService(db)
    notifications = await service.list_for_user(user, limit, unread_only)
    return NotificationList(
        notifications=[NotificationOut.model_validate(n) for n in notifications],
        unread=await service.unread_count(user),
    )


@router.get("/unread-count", response_model=UnreadCount)
async def unread_count(user: User = CurrentUser, db: AsyncSession = DB_DEPENDENCY) -> UnreadCount:
    return UnreadCount(count=await NotificationService(db).unread_count(user))


@router.post("/{notification_id}/read", response_model=NotificationOut)
async def mark_read(
    notification_id: int,
    user: User = CurrentUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> NotificationOut:
    notification = await NotificationService(db).mark_read(user, notification_id)
    return NotificationOut.model_validate(notification)


@router.post("/read-all", response_model=MessageResponse)
async def mark_all_read(user: User = CurrentUser, db: AsyncSession = DB_DEPENDENCY) -> MessageResponse:
    count = await NotificationService(db).mark_all_read(user)
    return MessageResponse(message=f"{count} notification(s) marked as read")
