"""Notification service for in-app notifications."""

import logging
from typing import Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError
from ..models.agency import Agency, AgencyEmployee
from ..models.notification import Notification, NotificationType
from ..models.user import User, UserRole

logger = logging.getLogger(__name__)


class NotificationService:
    """Creates and reads notifications for users and for the admin team."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def notify_user(
        self,
        user_id: int,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        related_item_type: Optional[str] = None,
        related_item_id: Optional[int] = None,
    ) -> Notification:
        """Queue a notification for one user. The caller commits."""
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            related_item_type=related_item_type,
            related_item_id=related_item_id,
        )
        self.db.add(notification)
        return notification

    async def notify_admins(
        self,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        related_item_type: Optional[str] = None,
        related_item_id: Optional[int] = None,
    ) -> Notification:
        """Queue a notification shared by every administrator. The caller commits."""
        notification = Notification(
            role=UserRole.ADMIN,
            title=title,
            message=message,
            type=type,
            related_item_type=related_item_type,
            related_item_id=related_item_id,
        )
        self.db.add(notification)
        return notification

    async def notify_agency(self, agency_id: int, title: str, message: str, **kwargs) -> Optional[Notification]:
        """Queue a notification for the owner of ``agency_id``."""
        owner_id = await self.db.scalar(select(Agency.owner_id).where(Agency.id == agency_id))
        if owner_id is None:
            logger.warning("Notification dropped, agency not found", extra={"agency_id": agency_id})
            return None
        return await self.notify_user(owner_id, title, message, **kwargs)

    async def resolve_recipient(self, user: User) -> int:
        """
        Employees share their agency owner's inbox.

        Returns:
            The user id whose notifications ``user`` reads
        """
        if user.role != UserRole.AGENCY_EMPLOYEE:
            return user.id
        owner_id = await self.db.scalar(
            select(Agency.owner_id)
            .join(AgencyEmployee, AgencyEmployee.agency_id == Agency.id)
            .where(AgencyEmployee.employee_id == user.id)
        )
        return owner_id or user.id

    def _audience(self, user: User, recipient_id: int):
        if user.role == UserRole.ADMIN:
            return or_(Notification.user_id == recipient_id, Notification.role == UserRole.ADMIN)
        return Notification.user_id == recipient_id

    async def list_for_user(self, user: User, limit: int = 50, unread_only: bool = False) -> list[Notification]:
        recipient_id = await self.resolve_recipient(user)
        query = select(Notification).where(self._audience(user, recipient_id))
        if unread_only:
            query = query.where(Notification.is_read.is_(False))
        query = query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def unread_count(self, user: User) -> int:
        recipient_id = await self.resolve_recipient(user)
        count = await self.db.scalar(
            select(func.count(Notification.id)).where(
                self._audience(user, recipient_id),
                Notification.is_read.is_(False),
            )
        )
        return count or 0

    async def mark_read(self, user: User, notification_id: int) -> Notification:
        """
        Mark one notification as read.

        Raises:
            NotFoundError: If the notification does not exist or belongs to someone else
        """
        recipient_id = await self.resolve_recipient(user)
        result = await self.db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                self._audience(user, recipient_id),
            )
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise NotFoundError("notification", notification_id)

        notification.is_read = True
        await self.db.commit()
        return notification

    async def mark_all_read(self, user: User) -> int:
        recipient_id = await self.resolve_recipient(user)
        result = await self.db.execute(
            update(Notification)
            .where(self._audience(user, recipient_id), Notification.is_read.is_(False))
            .values(is_read=True)
        )
        await self.db.commit()
        logger.info(
            "Notifications marked read",
            extra={"user_id": user.id, "count": result.rowcount},
        )
        return result.rowcount or 0
