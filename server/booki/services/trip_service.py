"""Trip service for catalog operations."""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, ValidationError
from ..models.agency import ApprovalStatus
from ..models.notification import NotificationType
from ..models.trip import Trip, TripActivity, TripImage
from ..models.user import User
from ..schemas.trip import CreateTripRequest, UpdateTripRequest
from .agency_service import AgencyService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


class TripService:
    """Service for trip-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.agencies = AgencyService(db)
        self.notifications = NotificationService(db)

    async def get_trip_by_id(self, trip_id: int) -> Optional[Trip]:
        return await self.db.get(Trip, trip_id)

    async def get_trip_by_id_or_raise(self, trip_id: int) -> Trip:
        """
        Get trip by ID or raise NotFoundError.

        Raises:
            NotFoundError: If trip not found
        """
        trip = await self.get_trip_by_id(trip_id)
        if trip is None:
            raise NotFoundError("trip", trip_id)
        return trip

    async def get_managed_trip(self, user: User, trip_id: int) -> Trip:
        """A trip the caller's agency owns (any trip for admins)."""
        trip = await self.get_trip_by_id_or_raise(trip_id)
        await self.agencies.ensure_staff_of(user, trip.agency_id)
        return trip

    async def create_trip(self, user: User, request: CreateTripRequest) -> Trip:
        """
        Create a trip for the caller's agency. It awaits admin approval.

        Args:
            user: Agency owner or employee
            request: Trip details with images and itinerary

        Returns:
            The created trip, status ``pending``
        """
        agency = await self.agencies.get_agency_for_user(user)

        trip = Trip(
            agency_id=agency.id,
            name=request.name,
            description=request.description,
            destination=request.destination,
            start_date=request.start_date,
            end_date=request.end_date,
            price=request.price,
            currency=request.currency,
            capacity=request.capacity,
            advance_payment_enabled=request.advance_payment_enabled,
            advance_payment_percentage=request.advance_payment_percentage,
            status=ApprovalStatus.PENDING,
            images=[TripImage(image_url=url) for url in request.images],
            activities=[TripActivity(**activity.model_dump()) for activity in request.activities],
        )
        self.db.add(trip)
        await self.db.flush()

        await self.notifications.notify_admins(
            title="Trip awaiting approval",
            message=f"{agency.agency_name} submitted the trip \"{trip.name}\"",
            type=NotificationType.INFO,
            related_item_type="trip",
            related_item_id=trip.id,
        )
        await self.db.commit()
        await self.db.refresh(trip)

        logger.info(
            "Trip created",
            extra={"trip_id": trip.id, "agency_id": agency.id, "capacity": trip.capacity},
        )
        return trip

    async def update_trip(self, user: User, trip_id: int, request: UpdateTripRequest) -> Trip:
        """Apply a partial update; the trip goes back to review."""
        trip = await self.get_managed_trip(user, trip_id)
        data = request.model_dump(exclude_unset=True)

        images = data.pop("images", None)
        activities = data.pop("activities", None)
        for field, value in data.items():
            setattr(trip, field, value)
        if images is not None:
            trip.images = [TripImage(image_url=url) for url in images]
        if activities is not None:
            trip.activities = [TripActivity(**activity) for activity in activities]

        if trip.end_date < trip.start_date:
            raise ValidationError("end_date must not be before start_date")

        trip.status = ApprovalStatus.PENDING
        await self.notifications.notify_admins(
            title="Trip updated",
            message=f"The trip \"{trip.name}\" was edited and awaits approval",
            related_item_type="trip",
            related_item_id=trip.id,
        )
        await self.db.commit()
        await self.db.refresh(trip)
        logger.info("Trip updated", extra={"trip_id": trip.id, "fields": sorted(data)})
        return trip

    async def set_availability(self, user: User, trip_id: int, is_available: bool) -> Trip:
        trip = await self.get_managed_trip(user, trip_id)
        trip.is_available = is_available
        await self.db.commit()
        await self.db.refresh(trip)
        return trip

    async def delete_trip(self, user: User, trip_id: int) -> None:
        trip = await self.get_managed_trip(user, trip_id)
        await self.db.delete(trip)
        await self.db.commit()
        logger.info("Trip deleted", extra={"trip_id": trip_id})

    async def list_agency_trips(self, user: User) -> list[Trip]:
        agency = await self.agencies.get_agency_for_user(user)
        result = await self.db.execute(
            select(Trip).where(Trip.agency_id == agency.id).order_by(Trip.created_at.desc())
        )
        return list(result.scalars().all())

    async def search_trips(
        self,
        destination: Optional[str] = None,
        start_date: Optional[date] = None,
        max_price: Optional[float] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Trip]:
        """Public search over approved, bookable trips."""
        query = select(Trip).where(
            Trip.status == ApprovalStatus.APPROVED,
            Trip.is_available.is_(True),
            Trip.capacity > 0,
        )
        if destination:
            query = query.where(func.lower(Trip.destination).like(f"%{destination.lower()}%"))
        if start_date:
            query = query.where(Trip.start_date >= start_date)
        if max_price is not None:
            query = query.where(Trip.price <= max_price)

        query = query.order_by(Trip.start_date, Trip.id).limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all())
