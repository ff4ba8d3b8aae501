"""Booking router: create trip, room and car bookings and query them."""

import logging
from typing import Union

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DB_DEPENDENCY, AgencyStaff, CurrentUser, PaymentStaff
from ..models.booking import BookingKind
from ..models.user import User
from ..payments import PaymentGateways, get_payment_gateways
from ..schemas.booking import (
    BookingHistory,
    CarBookingOut,
    CheckoutResponse,
    CompletePaymentRequest,
    CompletePaymentResponse,
    CreateCarBookingRequest,
    CreateRoomBookingRequest,
    CreateTripBookingRequest,
    RoomBookingOut,
    TripBookingOut,
)
from ..services.booking_service import AnyBooking, BookingService
from ..services.car_booking_service import CarBookingService
from ..services.invoice_service import InvoiceService
from ..services.payment_service import PaymentService
from ..services.room_booking_service import RoomBookingService
from ..services.trip_booking_service import TripBookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/bookings", tags=["bookings"])

GATEWAYS_DEPENDENCY = Depends(get_payment_gateways)

BookingOut = Union[TripBookingOut, RoomBookingOut, CarBookingOut]

_OUT_SCHEMAS = {
    BookingKind.TRIP: TripBookingOut,
    BookingKind.HOTEL: RoomBookingOut,
    BookingKind.CAR: CarBookingOut,
}


def booking_out(kind: BookingKind, booking: AnyBooking) -> BookingOut:
    return _OUT_SCHEMAS[kind].model_validate(booking)


@router.post("/trips", response_model=CheckoutResponse, status_code=201)
async def book_trip(
    request: CreateTripBookingRequest,
    user: User = CurrentUser,
    db: AsyncSession = DB_DEPENDENCY,
    gateways: PaymentGateways = GATEWAYS_DEPENDENCY,
) -> CheckoutResponse:
    """
    Book seats on a trip.

    The seats are held while the customer pays at ``checkout_url``; the
    booking is confirmed when the provider reports the payment.
    """
    return await TripBookingService(db).create_booking(user, request, gateways)


@router.post("/rooms", response_model=CheckoutResponse, status_code=201)
async def book_room(
    request: CreateRoomBookingRequest,
    user: User = CurrentUser,
    db: AsyncSession = DB_DEPENDENCY,
    gateways: PaymentGateways = GATEWAYS_DEPENDENCY,
) -> CheckoutResponse:
    return await RoomBookingService(db).create_booking(user, request, gateways)


@router.post("/cars", response_model=CheckoutResponse, status_code=201)
async def book_car(
    request: CreateCarBookingRequest,
    user: User = CurrentUser,
    db: AsyncSession = DB_DEPENDENCY,
    gateways: PaymentGateways = GATEWAYS_DEPENDENCY,
) -> CheckoutResponse:
    return await CarBookingService(db).create_booking(user, request, gateways)


@router.get("", response_model=BookingHistory)
async def my_bookings(user: User = CurrentUser, db: AsyncSession = DB_DEPENDENCY) -> BookingHistory:
    """Every booking of the caller, newest first."""
    return BookingHistory(bookings=await BookingService(db).list_user_bookings(user))


@router.get("/agency/{kind}", response_model=BookingHistory)
async def agency_bookings(
    kind: BookingKind,
    user: User = AgencyStaff,
    db: AsyncSession = DB_DEPENDENCY,
) -> BookingHistory:
    return BookingHistory(bookings=await BookingService(db).list_agency_bookings(user, kind))


@router.post("/complete-payment", response_model=CompletePaymentResponse)
async def complete_payment(
    request: CompletePaymentRequest,
    user: User = PaymentStaff,
    db: AsyncSession = DB_DEPENDENCY,
) -> CompletePaymentResponse:
    """Mark a booking paid and completed outside the online providers."""
    return await PaymentService(db).complete_payment_manually(user, request.type, request.id)


@router.get("/{kind}/{booking_id}", response_model=BookingOut)
async def get_booking(
    kind: BookingKind,
    booking_id: int,
    user: User = CurrentUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> BookingOut:
    service = BookingService(db)
    booking = await service.get_booking_or_raise(kind, booking_id)
    await service.ensure_can_view(user, kind, booking)
    return booking_out(kind, booking)


@router.post("/{kind}/{booking_id}/cancel", response_model=BookingOut)
async def cancel_booking(
    kind: BookingKind,
    booking_id: int,
    user: User = CurrentUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> BookingOut:
    """Cancel an unpaid booking; held trip seats are released."""
    booking = await BookingService(db).cancel_booking(user, kind, booking_id)
    return booking_out(kind, booking)


@router.get("/{kind}/{booking_id}/invoice", response_class=Response)
async def get_invoice(
    kind: BookingKind,
    booking_id: int,
    user: User = CurrentUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> Response:
    pdf = await InvoiceService(db).render_invoice(user, kind, booking_id)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="invoice-{kind.value}-{booking_id}.pdf"'},
    )
