"""Administrator moderation of trips, hotels, cars and blogs."""

import logging
from typing import Literal, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import utcnow
from ..core.exceptions import NotFoundError
from ..core.observability import metrics_collector
from ..models.agency import Agency, ApprovalStatus
from ..models.blog import Blog
from ..models.car import Car
from ..models.hotel import Hotel
from ..models.notification import NotificationType
from ..models.trip import Trip
from .email_service import EmailService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

ApprovalItemType = Literal["trip", "hotel", "car", "blog"]

APPROVAL_MODELS = {"trip": Trip, "hotel": Hotel, "car": Car, "blog": Blog}


def item_name(item_type: str, item) -> str:
    if item_type == "car":
        return f"{item.brand} {item.model}"
    if item_type == "blog":
        return item.title
    return item.name


class ApprovalService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationService(db)

    async def get_item_or_raise(self, item_type: ApprovalItemType, item_id: int):
        item = await self.db.get(APPROVAL_MODELS[item_type], item_id)
        if item is None:
            raise NotFoundError(item_type, item_id)
        return item

    async def list_pending(self, item_type: ApprovalItemType) -> list:
        model = APPROVAL_MODELS[item_type]
        result = await self.db.execute(
            select(model).where(model.status == ApprovalStatus.PENDING).order_by(model.created_at, model.id)
        )
        return list(result.scalars().all())

    async def decide(
        self,
        item_type: ApprovalItemType,
        item_id: int,
        approved: bool,
        email_service: EmailService,
        reason: Optional[str] = None,
    ):
        """
        Approve or reject an item and tell its agency.

        Rejected trips stop being bookable. Approved blogs are published.

        Returns:
            The updated trip, hotel, car or blog
        """
        item = await self.get_item_or_raise(item_type, item_id)
        item.status = ApprovalStatus.APPROVED if approved else ApprovalStatus.REJECTED

        if item_type == "trip" and not approved:
            item.is_available = False
        if item_type == "blog":
            item.published = approved
            if approved and item.published_at is None:
                item.published_at = utcnow()

        name = item_name(item_type, item)
        decision = "approved" if approved else "rejected"
        message = f"Your {item_type} \"{name}\" was {decision}"
        if reason:
            message = f"{message}: {reason}"
        await self.notifications.notify_agency(
            item.agency_id,
            title=f"{item_type.capitalize()} {decision}",
            message=message,
            type=NotificationType.SUCCESS if approved else NotificationType.WARNING,
            related_item_type=item_type,
            related_item_id=item.id,
        )
        await self.db.commit()
        await self.db.refresh(item)
        metrics_collector.record_approval(item_type, decision)

        logger.info(
            "Approval decision recorded",
            extra={"item_type": item_type, "item_id": item_id, "decision": decision},
        )

        contact_email = await self.db.scalar(select(Agency.contact_email).where(Agency.id == item.agency_id))
        if contact_email:
            await email_service.send_approval_decision(contact_email, item_type, name, approved, reason)
        return item
