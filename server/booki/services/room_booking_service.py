"""Hotel room bookings."""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import UnavailableError, ValidationError
from ..models.agency import ApprovalStatus
from ..models.booking import BookingKind, BookingStatus, PaymentStatus
from ..models.hotel import RoomBooking
from ..models.user import User
from ..payments import PaymentGateways, convert_currency
from ..schemas.booking import CheckoutResponse, CreateRoomBookingRequest
from .booking_service import BookingService, advance_percentage_for, compute_payment_amount
from .hotel_service import HotelService

logger = logging.getLogger(__name__)


def room_stay_price(room, adults: int, children: int, nights: int) -> Decimal:
    """Nightly adult and child rates times the number of nights."""
    nightly = Decimal(room.price_per_night_adult) * adults + Decimal(room.price_per_night_child or 0) * children
    return nightly * nights


class RoomBookingService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.bookings = BookingService(db)
        self.hotels = HotelService(db)

    async def create_booking(
        self,
        user: User,
        request: CreateRoomBookingRequest,
        gateways: PaymentGateways,
    ) -> CheckoutResponse:
        """
        Book a room for ``[check_in, check_out)`` and open the payment checkout.

        Raises:
            ValidationError: If the dates are not ordered or guests exceed the room capacity
            NotFoundError: If the room does not exist
            UnavailableError: If the hotel is not bookable or the room is taken
            PaymentProviderError: If the checkout could not be started
        """
        if request.check_out <= request.check_in:
            raise ValidationError("check_out must be after check_in")

        gateway = gateways.get(request.payment_provider)
        room = await self.hotels.get_room_by_id_or_raise(request.room_id)
        hotel = await self.hotels.get_hotel_by_id_or_raise(room.hotel_id)

        if hotel.status != ApprovalStatus.APPROVED or not hotel.is_published:
            raise UnavailableError(
                detail="This hotel is not open for booking",
                resource_type="hotel",
                resource_id=hotel.id,
            )
        guests = request.adult_count + request.child_count
        if guests > room.capacity:
            raise ValidationError(
                f"The room holds {room.capacity} guest(s), {guests} requested",
                errors={"guests": guests, "capacity": room.capacity},
            )
        if not await self.hotels.is_room_available(room.id, request.check_in, request.check_out):
            raise UnavailableError(
                detail="The room is already booked for these dates",
                resource_type="room",
                resource_id=room.id,
            )

        percentage = advance_percentage_for(hotel, request.payment_type)
        nights = (request.check_out - request.check_in).days
        charge_currency = gateway.charge_currency(room.currency)
        full_price = convert_currency(
            room_stay_price(room, request.adult_count, request.child_count, nights),
            room.currency,
            charge_currency,
        )
        total_price = compute_payment_amount(full_price, request.payment_type, percentage)

        booking = RoomBooking(
            room_id=room.id,
            user_id=user.id,
            check_in=request.check_in,
            check_out=request.check_out,
            adult_count=request.adult_count,
            child_count=request.child_count,
            total_price=total_price,
            full_price=full_price,
            payment_currency=charge_currency,
            original_currency=room.currency,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            payment_type=request.payment_type,
            advance_payment_percentage=percentage,
        )
        self.db.add(booking)
        await self.db.flush()

        logger.info(
            "Room booked",
            extra={"room_id": room.id, "booking_id": booking.id, "nights": nights, "guests": guests},
        )
        return await self.bookings.begin_checkout(
            BookingKind.HOTEL,
            booking,
            gateway,
            description=f"{hotel.name} - {room.name}, {nights} night(s)",
            customer_email=user.email,
            locale=request.locale,
        )
