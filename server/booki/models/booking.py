"""Booking status vocabularies and the payment columns shared by every booking table."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column


class BookingKind(str, Enum):
    """The three bookable offer types."""
    TRIP = "trip"
    HOTEL = "hotel"
    CAR = "car"


class BookingStatus(str, Enum):
    """Lifecycle of a booking."""
    PENDING = "pending"
    PARTIALLY_PAID = "partially_paid"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"


# Bookings in these states no longer hold seats or dates
INACTIVE_BOOKING_STATUSES = (BookingStatus.FAILED, BookingStatus.CANCELED)


class PaymentStatus(str, Enum):
    """Outcome of the payment attached to a booking."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentType(str, Enum):
    FULL = "full"
    ADVANCE = "advance"


class PaymentMethod(str, Enum):
    """Provider and charge currency used for a booking."""
    STRIPE_USD = "STRIPE_USD"
    FLOUCI_TND = "FLOUCI_TND"
    MOCK = "MOCK"
    MANUAL = "MANUAL"


class BookingPaymentMixin:
    """
    Payment columns of trip, room and car bookings.

    ``total_price`` is the amount actually charged, in ``payment_currency``.
    For advance payments it is a percentage of ``full_price``.
    """

    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    full_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="TND")
    original_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="TND")

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )
    payment_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )
    payment_method: Mapped[str | None] = mapped_column(String(20))
    payment_id: Mapped[str | None] = mapped_column(String(255), index=True)
    payment_type: Mapped[str] = mapped_column(String(10), nullable=False, default=PaymentType.FULL)
    advance_payment_percentage: Mapped[int | None] = mapped_column(Integer)
    payment_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    @property
    def is_active(self) -> bool:
        return self.status not in INACTIVE_BOOKING_STATUSES

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.COMPLETED


class AdvancePaymentMixin:
    """Offer-side switch allowing customers to pay a percentage up front."""

    advance_payment_enabled: Mapped[bool] = mapped_column(nullable=False, default=False)
    advance_payment_percentage: Mapped[int | None] = mapped_column(Integer)
