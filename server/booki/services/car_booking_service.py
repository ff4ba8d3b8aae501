"""Car rental bookings."""

import logging
import math
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import UnavailableError, ValidationError
from ..models.agency import ApprovalStatus
from ..models.booking import BookingKind, BookingStatus, PaymentStatus
from ..models.car import CarBooking
from ..models.user import User
from ..payments import PaymentGateways, convert_currency
from ..schemas.booking import CheckoutResponse, CreateCarBookingRequest
from .booking_service import BookingService, advance_percentage_for, compute_payment_amount
from .car_service import CarService, to_utc

logger = logging.getLogger(__name__)


def rental_days(start: datetime, end: datetime) -> int:
    """Started days are charged in full, with a one day minimum."""
    return max(1, math.ceil((to_utc(end) - to_utc(start)) / timedelta(days=1)))


class CarBookingService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.bookings = BookingService(db)
        self.cars = CarService(db)

    async def create_booking(
        self,
        user: User,
        request: CreateCarBookingRequest,
        gateways: PaymentGateways,
    ) -> CheckoutResponse:
        """
        Rent a car for ``[start_date, end_date)`` and open the payment checkout.

        Raises:
            ValidationError: If the period is empty
            NotFoundError: If the car does not exist
            UnavailableError: If the car is not bookable or already rented then
            PaymentProviderError: If the checkout could not be started
        """
        start, end = to_utc(request.start_date), to_utc(request.end_date)
        if end <= start:
            raise ValidationError("end_date must be after start_date")

        gateway = gateways.get(request.payment_provider)
        car = await self.cars.get_car_by_id_or_raise(request.car_id)
        if car.status != ApprovalStatus.APPROVED or not car.is_available:
            raise UnavailableError(
                detail="This car is not open for booking",
                resource_type="car",
                resource_id=car.id,
            )
        if not await self.cars.is_car_free(car.id, start, end):
            raise UnavailableError(
                detail="The car is already booked for this period",
                resource_type="car",
                resource_id=car.id,
            )

        percentage = advance_percentage_for(car, request.payment_type)
        days = rental_days(start, end)
        charge_currency = gateway.charge_currency(car.currency)
        full_price = convert_currency(Decimal(car.price_per_day) * days, car.currency, charge_currency)
        total_price = compute_payment_amount(full_price, request.payment_type, percentage)

        booking = CarBooking(
            car_id=car.id,
            user_id=user.id,
            start_date=start,
            end_date=end,
            full_name=request.full_name,
            email=request.email,
            phone=request.phone,
            address=request.address,
            driving_license=request.driving_license,
            total_price=total_price,
            full_price=full_price,
            payment_currency=charge_currency,
            original_currency=car.currency,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            payment_type=request.payment_type,
            advance_payment_percentage=percentage,
        )
        self.db.add(booking)
        await self.db.flush()

        logger.info("Car booked", extra={"car_id": car.id, "booking_id": booking.id, "days": days})
        return await self.bookings.begin_checkout(
            BookingKind.CAR,
            booking,
            gateway,
            description=f"{car.brand} {car.model} - {days} day(s)",
            customer_email=request.email,
            locale=request.locale,
        )
