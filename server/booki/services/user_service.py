"""Administrator management of user accounts."""

import logging
from typing import Optional

from sqlalchemy import case, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..models.agency import Agency, AgencyEmployee
from ..models.blog import Blog
from ..models.booking import INACTIVE_BOOKING_STATUSES, BookingStatus, PaymentStatus
from ..models.car import CarBooking
from ..models.chat import ChatMessage
from ..models.favorite import Favorite
from ..models.hotel import RoomBooking
from ..models.notification import Notification
from ..models.trip import Trip, TripBooking
from ..models.user import User, UserRole, UserSession
from ..models.wallet import WithdrawalRequest

logger = logging.getLogger(__name__)

DEFAULT_BAN_REASON = "Banned by admin"


class UserService:
    """Service for admin user operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_or_raise(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("user", user_id)
        return user

    async def list_users(
        self,
        search: Optional[str] = None,
        role: Optional[UserRole] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[User], int]:
        """Users matching ``search`` (name or email) and ``role``, newest first, with the total count."""
        conditions = []
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern)))
        if role is not None:
            conditions.append(User.role == role)

        total = await self.db.scalar(select(func.count(User.id)).where(*conditions))
        result = await self.db.execute(
            select(User).where(*conditions).order_by(User.created_at.desc(), User.id.desc()).limit(limit).offset(offset)
        )
        return list(result.scalars().all()), total or 0

    def _ensure_not_self(self, admin: User, user: User, action: str) -> None:
        if admin.id == user.id:
            raise ValidationError(f"Administrators cannot {action} their own account")

    async def ban_user(self, admin: User, user_id: int, reason: Optional[str] = None) -> User:
        """
        Ban a user in one transaction.

        Their login sessions are revoked and their active car rentals canceled.
        Unpaid rentals end up with a failed payment, as after a customer cancellation.
        """
        user = await self.get_user_or_raise(user_id)
        self._ensure_not_self(admin, user, "ban")

        await self.db.execute(delete(UserSession).where(UserSession.user_id == user.id))
        canceled = await self.db.execute(
            update(CarBooking)
            .where(
                CarBooking.user_id == user.id,
                CarBooking.status.not_in([s.value for s in INACTIVE_BOOKING_STATUSES]),
            )
            .values(
                status=BookingStatus.CANCELED,
                payment_status=case(
                    (CarBooking.payment_status == PaymentStatus.COMPLETED.value, CarBooking.payment_status),
                    else_=PaymentStatus.FAILED.value,
                ),
            )
        )
        user.banned = True
        user.ban_reason = reason or DEFAULT_BAN_REASON
        await self.db.commit()
        await self.db.refresh(user)

        logger.info(
            "User banned",
            extra={"user_id": user.id, "by_admin_id": admin.id, "car_bookings_canceled": canceled.rowcount},
        )
        return user

    async def unban_user(self, user_id: int) -> User:
        user = await self.get_user_or_raise(user_id)
        user.banned = False
        user.ban_reason = None
        await self.db.commit()
        await self.db.refresh(user)
        logger.info("User unbanned", extra={"user_id": user.id})
        return user

    async def set_role(self, admin: User, user_id: int, role: UserRole) -> User:
        user = await self.get_user_or_raise(user_id)
        self._ensure_not_self(admin, user, "change the role of")
        user.role = role
        # Existing tokens carry the old role
        await self.db.execute(delete(UserSession).where(UserSession.user_id == user.id))
        await self.db.commit()
        await self.db.refresh(user)
        logger.info("User role changed", extra={"user_id": user.id, "role": role})
        return user

    async def _restore_trip_seats(self, user_id: int) -> None:
        result = await self.db.execute(
            select(TripBooking.trip_id, func.sum(TripBooking.seats_booked))
            .where(
                TripBooking.user_id == user_id,
                TripBooking.status.not_in([s.value for s in INACTIVE_BOOKING_STATUSES]),
            )
            .group_by(TripBooking.trip_id)
        )
        for trip_id, seats in result.all():
            await self.db.execute(update(Trip).where(Trip.id == trip_id).values(capacity=Trip.capacity + seats))

    async def delete_user(self, admin: User, user_id: int) -> None:
        """
        Delete a user and everything personal to them in one transaction.

        Blogs they wrote stay with their agency with no author.

        Raises:
            ConflictError: If the user still owns an agency
        """
        user = await self.get_user_or_raise(user_id)
        self._ensure_not_self(admin, user, "delete")
        owned_agency = await self.db.scalar(select(Agency.id).where(Agency.owner_id == user.id))
        if owned_agency is not None:
            raise ConflictError(
                detail="This user owns an agency; delete or transfer the agency first",
                conflicting_resource={"type": "agency", "id": str(owned_agency)},
            )

        await self._restore_trip_seats(user.id)
        for model in (TripBooking, RoomBooking, CarBooking, Favorite, Notification, UserSession):
            await self.db.execute(delete(model).where(model.user_id == user.id))
        await self.db.execute(
            delete(ChatMessage).where(or_(ChatMessage.sender_id == user.id, ChatMessage.receiver_id == user.id))
        )
        await self.db.execute(update(Blog).where(Blog.author_id == user.id).values(author_id=None))
        await self.db.execute(
            update(WithdrawalRequest).where(WithdrawalRequest.processed_by_id == user.id).values(processed_by_id=None)
        )
        await self.db.execute(delete(AgencyEmployee).where(AgencyEmployee.employee_id == user.id))
        await self.db.execute(delete(User).where(User.id == user.id))
        await self.db.commit()

        logger.info("User deleted", extra={"user_id": user_id, "by_admin_id": admin.id})
