"""Trip seat bookings."""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import utcnow
from ..core.exceptions import InsufficientCapacityError, NotFoundError, UnavailableError
from ..models.agency import ApprovalStatus
from ..models.booking import BookingKind, BookingStatus, PaymentStatus
from ..models.trip import Trip, TripBooking
from ..models.user import User
from ..payments import PaymentGateways, convert_currency
from ..schemas.booking import CheckoutResponse, CreateTripBookingRequest
from .booking_service import BookingService, advance_percentage_for, compute_payment_amount

logger = logging.getLogger(__name__)


class TripBookingService:
    """Service for booking seats on trips."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.bookings = BookingService(db)

    async def _get_trip_for_update(self, trip_id: int) -> Trip:
        query = select(Trip).where(Trip.id == trip_id)
        if self.db.bind.dialect.name == "postgresql":
            query = query.with_for_update()
        trip = (await self.db.execute(query)).scalar_one_or_none()
        if trip is None:
            raise NotFoundError("trip", trip_id)
        return trip

    async def create_booking(
        self,
        user: User,
        request: CreateTripBookingRequest,
        gateways: PaymentGateways,
    ) -> CheckoutResponse:
        """
        Hold seats on a trip and open the payment checkout.

        Seats are taken immediately and given back if the payment fails,
        expires or the booking is canceled.

        Args:
            user: Booking customer
            request: Trip, seats and payment options
            gateways: Configured payment providers

        Returns:
            CheckoutResponse with the provider checkout URL

        Raises:
            NotFoundError: If the trip does not exist
            UnavailableError: If the trip is not approved or not bookable
            InsufficientCapacityError: If fewer seats are left than requested
            PaymentProviderError: If the checkout could not be started
        """
        gateway = gateways.get(request.payment_provider)
        trip = await self._get_trip_for_update(request.trip_id)

        if trip.status != ApprovalStatus.APPROVED or not trip.is_available:
            raise UnavailableError(
                detail="This trip is not open for booking",
                resource_type="trip",
                resource_id=trip.id,
            )
        if request.seats > trip.capacity:
            raise InsufficientCapacityError(trip.id, request.seats, trip.capacity)

        percentage = advance_percentage_for(trip, request.payment_type)
        charge_currency = gateway.charge_currency(trip.currency)
        full_price = convert_currency(Decimal(trip.price) * request.seats, trip.currency, charge_currency)
        total_price = compute_payment_amount(full_price, request.payment_type, percentage)

        trip.capacity -= request.seats
        booking = TripBooking(
            trip_id=trip.id,
            user_id=user.id,
            seats_booked=request.seats,
            original_price_per_seat=trip.price,
            booking_date=utcnow(),
            total_price=total_price,
            full_price=full_price,
            payment_currency=charge_currency,
            original_currency=trip.currency,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            payment_type=request.payment_type,
            advance_payment_percentage=percentage,
        )
        self.db.add(booking)
        await self.db.flush()

        logger.info(
            "Trip seats held",
            extra={
                "trip_id": trip.id,
                "booking_id": booking.id,
                "seats": request.seats,
                "seats_left": trip.capacity,
            },
        )
        return await self.bookings.begin_checkout(
            BookingKind.TRIP,
            booking,
            gateway,
            description=f"{trip.name} - {request.seats} seat(s)",
            customer_email=user.email,
            locale=request.locale,
        )
