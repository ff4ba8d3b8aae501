"""Booking rules and queries shared by trip, room and car bookings."""

import logging
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, PaymentProviderError, ValidationError
from ..core.observability import metrics_collector
from ..models.booking import BookingKind, BookingStatus, PaymentStatus, PaymentType
from ..models.car import Car, CarBooking
from ..models.hotel import Hotel, Room, RoomBooking
from ..models.trip import Trip, TripBooking
from ..models.user import User, UserRole
from ..payments import CheckoutRequest, PaymentGateway
from ..payments.currency import quantize
from ..schemas.booking import BookingSummary, CheckoutResponse
from .agency_service import AgencyService

logger = logging.getLogger(__name__)

AnyBooking = Union[TripBooking, RoomBooking, CarBooking]

BOOKING_MODELS = {
    BookingKind.TRIP: TripBooking,
    BookingKind.HOTEL: RoomBooking,
    BookingKind.CAR: CarBooking,
}


def compute_payment_amount(full_amount: Decimal, payment_type: str, percentage: Optional[int]) -> Decimal:
    """
    Amount due now: the full amount, or ``percentage`` percent of it for advances.

    Raises:
        ValidationError: If an advance has no percentage in 1..100
    """
    full_amount = Decimal(full_amount)
    if payment_type != PaymentType.ADVANCE:
        return quantize(full_amount)
    if percentage is None or not 1 <= percentage <= 100:
        raise ValidationError("Advance payment percentage must be between 1 and 100")
    return quantize(full_amount * Decimal(percentage) / Decimal(100))


def advance_percentage_for(offer, payment_type: str) -> Optional[int]:
    """
    The advance percentage to apply for ``offer``.

    Raises:
        ValidationError: If an advance is requested on an offer that does not allow it
    """
    if payment_type != PaymentType.ADVANCE:
        return None
    if not offer.advance_payment_enabled or not offer.advance_payment_percentage:
        raise ValidationError("This offer does not accept advance payments")
    return offer.advance_payment_percentage


class BookingService:
    """Lookup, access control and checkout plumbing common to all booking kinds."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.agencies = AgencyService(db)

    async def get_booking(self, kind: BookingKind, booking_id: int) -> Optional[AnyBooking]:
        return await self.db.get(BOOKING_MODELS[BookingKind(kind)], booking_id)

    async def get_booking_or_raise(self, kind: BookingKind, booking_id: int) -> AnyBooking:
        booking = await self.get_booking(kind, booking_id)
        if booking is None:
            raise NotFoundError(f"{BookingKind(kind).value} booking", booking_id)
        return booking

    async def get_booking_for_update(self, kind: BookingKind, booking_id: int) -> AnyBooking:
        """Load a booking with a row lock where the backend supports one."""
        model = BOOKING_MODELS[BookingKind(kind)]
        query = select(model).where(model.id == booking_id)
        if self.db.bind.dialect.name == "postgresql":
            query = query.with_for_update()
        result = await self.db.execute(query)
        booking = result.scalar_one_or_none()
        if booking is None:
            raise NotFoundError(f"{BookingKind(kind).value} booking", booking_id)
        return booking

    async def get_offer(self, kind: BookingKind, booking: AnyBooking):
        """The trip, room or car a booking is for."""
        if kind == BookingKind.TRIP:
            return await self.db.get(Trip, booking.trip_id)
        if kind == BookingKind.HOTEL:
            return await self.db.get(Room, booking.room_id)
        return await self.db.get(Car, booking.car_id)

    async def get_agency_id(self, kind: BookingKind, booking: AnyBooking) -> Optional[int]:
        offer = await self.get_offer(kind, booking)
        if offer is None:
            return None
        if kind == BookingKind.HOTEL:
            return await self.db.scalar(select(Hotel.agency_id).where(Hotel.id == offer.hotel_id))
        return offer.agency_id

    async def offer_title(self, kind: BookingKind, booking: AnyBooking) -> str:
        offer = await self.get_offer(kind, booking)
        if offer is None:
            return f"{BookingKind(kind).value} #{booking.id}"
        if kind == BookingKind.TRIP:
            return offer.name
        if kind == BookingKind.HOTEL:
            hotel_name = await self.db.scalar(select(Hotel.name).where(Hotel.id == offer.hotel_id))
            return f"{hotel_name} - {offer.name}"
        return f"{offer.brand} {offer.model}"

    async def ensure_can_view(self, user: User, kind: BookingKind, booking: AnyBooking) -> None:
        """Customers see their own bookings, agency staff those of their offers, admins all."""
        if user.role == UserRole.ADMIN or booking.user_id == user.id:
            return
        if user.is_agency_staff:
            agency = await self.agencies.find_agency_for_user(user)
            if agency is not None and agency.id == await self.get_agency_id(kind, booking):
                return
        raise AuthorizationError("You cannot access this booking")

    async def release_resources(self, kind: BookingKind, booking: AnyBooking) -> None:
        """Give back what an abandoned booking was holding; only trips hold stock."""
        if kind != BookingKind.TRIP:
            return
        trip = await self.db.get(Trip, booking.trip_id)
        if trip is not None:
            trip.capacity += booking.seats_booked
            logger.info(
                "Trip seats restored",
                extra={"trip_id": trip.id, "booking_id": booking.id, "seats": booking.seats_booked},
            )

    async def begin_checkout(
        self,
        kind: BookingKind,
        booking: AnyBooking,
        gateway: PaymentGateway,
        description: str,
        customer_email: Optional[str],
        locale: str,
    ) -> CheckoutResponse:
        """
        Open the provider checkout for a freshly flushed booking and commit.

        If the provider fails the booking is stored as failed, its resources are
        released and the provider error propagates.
        """
        request = CheckoutRequest(
            kind=BookingKind(kind).value,
            booking_id=booking.id,
            amount=Decimal(booking.total_price),
            currency=booking.payment_currency,
            description=description,
            original_currency=booking.original_currency,
            payment_type=booking.payment_type,
            advance_percentage=booking.advance_payment_percentage,
            customer_email=customer_email,
            locale=locale,
        )
        booking.payment_method = gateway.payment_method

        try:
            session = await gateway.create_checkout(request)
        except PaymentProviderError:
            booking.status = BookingStatus.FAILED
            booking.payment_status = PaymentStatus.FAILED
            await self.release_resources(kind, booking)
            await self.db.commit()
            logger.warning(
                "Checkout could not be started, booking failed",
                extra={"kind": request.kind, "booking_id": booking.id, "provider": gateway.provider},
            )
            raise

        booking.payment_id = session.payment_id
        await self.db.commit()
        metrics_collector.record_booking_created(request.kind, gateway.provider)

        logger.info(
            "Booking created, awaiting payment",
            extra={
                "kind": request.kind,
                "booking_id": booking.id,
                "provider": gateway.provider,
                "amount": str(request.amount),
                "currency": request.currency,
            },
        )
        return CheckoutResponse(
            kind=kind,
            booking_id=booking.id,
            status=booking.status,
            payment_status=booking.payment_status,
            amount=float(booking.total_price),
            currency=booking.payment_currency,
            payment_id=session.payment_id,
            checkout_url=session.url,
        )

    async def cancel_booking(self, user: User, kind: BookingKind, booking_id: int) -> AnyBooking:
        """
        Cancel an unpaid booking of the caller.

        Raises:
            ConflictError: If the booking is already paid or no longer active
        """
        booking = await self.get_booking_for_update(kind, booking_id)
        if booking.user_id != user.id and user.role != UserRole.ADMIN:
            raise AuthorizationError("You cannot cancel this booking")
        if booking.is_paid:
            raise ConflictError(detail="Paid bookings cannot be canceled online")
        if not booking.is_active:
            raise ConflictError(detail=f"Booking is already {booking.status}")

        booking.status = BookingStatus.CANCELED
        booking.payment_status = PaymentStatus.FAILED
        await self.release_resources(kind, booking)
        await self.db.commit()
        await self.db.refresh(booking)
        logger.info("Booking canceled", extra={"kind": BookingKind(kind).value, "booking_id": booking_id})
        return booking

    # History

    async def _summaries(self, kind: BookingKind, rows) -> list[BookingSummary]:
        summaries = []
        for booking in rows:
            if kind == BookingKind.TRIP:
                trip = await self.db.get(Trip, booking.trip_id)
                offer_id, starts, ends = booking.trip_id, trip.start_date if trip else None, trip.end_date if trip else None
            elif kind == BookingKind.HOTEL:
                offer_id, starts, ends = booking.room_id, booking.check_in, booking.check_out
            else:
                offer_id, starts, ends = booking.car_id, booking.start_date.date(), booking.end_date.date()
            summaries.append(
                BookingSummary(
                    kind=kind,
                    id=booking.id,
                    offer_id=offer_id,
                    title=await self.offer_title(kind, booking),
                    status=booking.status,
                    payment_status=booking.payment_status,
                    total_price=float(booking.total_price),
                    payment_currency=booking.payment_currency,
                    starts_on=starts,
                    ends_on=ends,
                    customer_id=booking.user_id,
                    created_at=booking.created_at,
                )
            )
        return summaries

    async def list_user_bookings(self, user: User) -> list[BookingSummary]:
        """Every booking of the caller across kinds, newest first."""
        summaries: list[BookingSummary] = []
        for kind, model in BOOKING_MODELS.items():
            result = await self.db.execute(select(model).where(model.user_id == user.id))
            summaries.extend(await self._summaries(kind, result.scalars().all()))
        summaries.sort(key=lambda s: (s.created_at, s.id), reverse=True)
        return summaries

    async def list_agency_bookings(self, user: User, kind: BookingKind) -> list[BookingSummary]:
        agency = await self.agencies.get_agency_for_user(user)
        if kind == BookingKind.TRIP:
            query = select(TripBooking).join(Trip, Trip.id == TripBooking.trip_id).where(Trip.agency_id == agency.id)
        elif kind == BookingKind.HOTEL:
            query = (
                select(RoomBooking)
                .join(Room, Room.id == RoomBooking.room_id)
                .join(Hotel, Hotel.id == Room.hotel_id)
                .where(Hotel.agency_id == agency.id)
            )
        else:
            query = select(CarBooking).join(Car, Car.id == CarBooking.car_id).where(Car.agency_id == agency.id)

        model = BOOKING_MODELS[kind]
        result = await self.db.execute(query.order_by(model.created_at.desc(), model.id.desc()))
        return await self._summaries(kind, result.scalars().all())
