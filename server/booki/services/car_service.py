"""Rental car catalog service."""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import as_utc
from ..core.exceptions import ConflictError, NotFoundError
from ..models.agency import ApprovalStatus
from ..models.booking import INACTIVE_BOOKING_STATUSES
from ..models.car import Car, CarBooking
from ..models.user import User
from ..schemas.car import BookedRange, CarAvailability, CreateCarRequest, UpdateCarRequest
from .agency_service import AgencyService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


def to_utc(value: datetime) -> datetime:
    """Normalize to UTC so stored ranges compare consistently across backends."""
    return as_utc(value).astimezone(timezone.utc)


def car_overlap_clause(start: datetime, end: datetime):
    """Active car bookings intersecting [start, end)."""
    return and_(
        CarBooking.start_date < to_utc(end),
        CarBooking.end_date > to_utc(start),
        CarBooking.status.not_in([s.value for s in INACTIVE_BOOKING_STATUSES]),
    )


class CarService:
    """Service for car-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.agencies = AgencyService(db)
        self.notifications = NotificationService(db)

    async def get_car_by_id_or_raise(self, car_id: int) -> Car:
        car = await self.db.get(Car, car_id)
        if car is None:
            raise NotFoundError("car", car_id)
        return car

    async def get_managed_car(self, user: User, car_id: int) -> Car:
        car = await self.get_car_by_id_or_raise(car_id)
        await self.agencies.ensure_staff_of(user, car.agency_id)
        return car

    async def _ensure_plate_free(self, plate_number: str, car_id: Optional[int] = None) -> None:
        query = select(Car.id).where(func.upper(Car.plate_number) == plate_number.upper())
        if car_id is not None:
            query = query.where(Car.id != car_id)
        if await self.db.scalar(query) is not None:
            raise ConflictError(
                detail=f"A car with plate number {plate_number} already exists",
                conflicting_resource={"plate_number": plate_number},
            )

    async def create_car(self, user: User, request: CreateCarRequest) -> Car:
        """
        Register a car for the caller's agency, pending admin approval.

        Raises:
            ConflictError: If the plate number is already registered
        """
        agency = await self.agencies.get_agency_for_user(user)
        await self._ensure_plate_free(request.plate_number)

        car = Car(agency_id=agency.id, status=ApprovalStatus.PENDING, **request.model_dump())
        self.db.add(car)
        await self.db.flush()

        await self.notifications.notify_admins(
            title="Car awaiting approval",
            message=f"{agency.agency_name} submitted the car {car.brand} {car.model} ({car.plate_number})",
            related_item_type="car",
            related_item_id=car.id,
        )
        await self.db.commit()
        await self.db.refresh(car)

        logger.info("Car created", extra={"car_id": car.id, "agency_id": agency.id})
        return car

    async def update_car(self, user: User, car_id: int, request: UpdateCarRequest) -> Car:
        car = await self.get_managed_car(user, car_id)
        data = request.model_dump(exclude_unset=True)
        if "plate_number" in data:
            await self._ensure_plate_free(data["plate_number"], car_id=car.id)

        for field, value in data.items():
            setattr(car, field, value)

        # Toggling availability alone does not need a new review
        if set(data) - {"is_available"}:
            car.status = ApprovalStatus.PENDING
            await self.notifications.notify_admins(
                title="Car updated",
                message=f"The car {car.brand} {car.model} was edited and awaits approval",
                related_item_type="car",
                related_item_id=car.id,
            )

        await self.db.commit()
        await self.db.refresh(car)
        return car

    async def delete_car(self, user: User, car_id: int) -> None:
        car = await self.get_managed_car(user, car_id)
        await self.db.delete(car)
        await self.db.commit()
        logger.info("Car deleted", extra={"car_id": car_id})

    async def list_agency_cars(self, user: User) -> list[Car]:
        agency = await self.agencies.get_agency_for_user(user)
        result = await self.db.execute(
            select(Car).where(Car.agency_id == agency.id).order_by(Car.created_at.desc())
        )
        return list(result.scalars().all())

    async def search_cars(
        self,
        query_text: Optional[str] = None,
        location: Optional[str] = None,
        max_price: Optional[Decimal] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Car]:
        """Public search over approved, available cars, optionally free for a period."""
        query = select(Car).where(
            Car.status == ApprovalStatus.APPROVED,
            Car.is_available.is_(True),
        )
        if query_text:
            pattern = f"%{query_text.lower()}%"
            query = query.where(
                or_(func.lower(Car.brand).like(pattern), func.lower(Car.model).like(pattern))
            )
        if location:
            query = query.where(func.lower(Car.location).like(f"%{location.lower()}%"))
        if max_price is not None:
            query = query.where(Car.price_per_day <= max_price)
        if start_date and end_date:
            busy = select(CarBooking.car_id).where(car_overlap_clause(start_date, end_date))
            query = query.where(Car.id.not_in(busy))

        query = query.order_by(Car.price_per_day, Car.id).limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_availability(self, car_id: int) -> CarAvailability:
        """Booked periods of a car that are still active and not yet over."""
        car = await self.get_car_by_id_or_raise(car_id)
        result = await self.db.execute(
            select(CarBooking.start_date, CarBooking.end_date)
            .where(
                CarBooking.car_id == car_id,
                CarBooking.end_date > datetime.now(timezone.utc),
                CarBooking.status.not_in([s.value for s in INACTIVE_BOOKING_STATUSES]),
            )
            .order_by(CarBooking.start_date)
        )
        return CarAvailability(
            car_id=car.id,
            is_available=car.is_available,
            booked_ranges=[
                BookedRange(start_date=as_utc(start), end_date=as_utc(end)) for start, end in result.all()
            ],
        )

    async def is_car_free(self, car_id: int, start: datetime, end: datetime) -> bool:
        overlapping = await self.db.scalar(
            select(func.count(CarBooking.id)).where(
                CarBooking.car_id == car_id,
                car_overlap_clause(start, end),
            )
        )
        return not overlapping
