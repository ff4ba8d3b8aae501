"""Booking request/response schemas for trips, rooms and cars."""

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..models.booking import BookingKind, BookingStatus, PaymentStatus, PaymentType

PaymentProvider = Literal["stripe", "flouci", "mock"]


class PaymentOptions(BaseModel):
    """How the customer wants to pay."""

    payment_provider: PaymentProvider = Field("stripe", description="Checkout provider")
    payment_type: PaymentType = Field(PaymentType.FULL, description="Full amount or advance")
    locale: str = Field("en", min_length=2, max_length=5, description="Frontend locale for redirects")


class CreateTripBookingRequest(PaymentOptions):
    trip_id: int = Field(..., gt=0)
    seats: int = Field(..., gt=0, le=50, description="Number of seats")


class CreateRoomBookingRequest(PaymentOptions):
    room_id: int = Field(..., gt=0)
    check_in: date
    check_out: date
    adult_count: int = Field(1, ge=1, le=20)
    child_count: int = Field(0, ge=0, le=20)


class CreateCarBookingRequest(PaymentOptions):
    car_id: int = Field(..., gt=0)
    start_date: datetime
    end_date: datetime
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=3, max_length=32)
    address: Optional[str] = None
    driving_license: Optional[str] = Field(None, max_length=64)


class BookingPaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    total_price: float = Field(..., description="Amount charged, in payment_currency")
    full_price: float
    payment_currency: str
    original_currency: str
    status: BookingStatus
    payment_status: PaymentStatus
    payment_method: Optional[str] = None
    payment_id: Optional[str] = None
    payment_type: PaymentType
    advance_payment_percentage: Optional[int] = None
    payment_date: Optional[datetime] = None
    created_at: datetime


class TripBookingOut(BookingPaymentOut):
    trip_id: int
    seats_booked: int
    original_price_per_seat: float


class RoomBookingOut(BookingPaymentOut):
    room_id: int
    check_in: date
    check_out: date
    adult_count: int
    child_count: int


class CarBookingOut(BookingPaymentOut):
    car_id: int
    start_date: datetime
    end_date: datetime
    full_name: str
    email: str
    phone: str
    address: Optional[str] = None
    driving_license: Optional[str] = None


class CheckoutResponse(BaseModel):
    """A created booking and where to send the customer to pay."""

    kind: BookingKind
    booking_id: int
    status: BookingStatus
    payment_status: PaymentStatus
    amount: float
    currency: str
    payment_id: Optional[str] = None
    checkout_url: str


class BookingSummary(BaseModel):
    """One row of a booking history, whatever the booking kind."""

    kind: BookingKind
    id: int
    offer_id: int
    title: str
    status: BookingStatus
    payment_status: PaymentStatus
    total_price: float
    payment_currency: str
    starts_on: Optional[date] = None
    ends_on: Optional[date] = None
    customer_id: int
    created_at: datetime


class BookingHistory(BaseModel):
    bookings: List[BookingSummary]


class CompletePaymentRequest(BaseModel):
    type: BookingKind
    id: int = Field(..., gt=0)


class CompletePaymentResponse(BaseModel):
    success: bool = True
    kind: BookingKind
    booking_id: int
    status: BookingStatus
    payment_status: PaymentStatus
    wallet_credited: bool
