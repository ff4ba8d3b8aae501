"""Rental car and car booking models."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base, TimestampMixin
from .agency import ApprovalStatus
from .booking import AdvancePaymentMixin, BookingPaymentMixin


class Car(TimestampMixin, AdvancePaymentMixin, Base):
    __tablename__ = "cars"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    agency_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("agencies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    brand: Mapped[str] = mapped_column(String(100), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    plate_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    color: Mapped[str | None] = mapped_column(String(50))
    location: Mapped[str | None] = mapped_column(String(255))
    price_per_day: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="TND")
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ApprovalStatus.PENDING,
        index=True,
    )

    __table_args__ = (
        CheckConstraint("price_per_day >= 0", name="ck_car_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Car(id={self.id}, {self.brand} {self.model}, plate={self.plate_number})>"


class CarBooking(TimestampMixin, BookingPaymentMixin, Base):
    """A rental over [start_date, end_date), with the renter's contact details."""

    __tablename__ = "car_bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    car_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("cars.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    address: Mapped[str | None] = mapped_column(Text)
    driving_license: Mapped[str | None] = mapped_column(String(64))

    __table_args__ = (
        CheckConstraint("end_date > start_date", name="ck_car_booking_dates_ordered"),
    )

    def __repr__(self) -> str:
        return f"<CarBooking(id={self.id}, car_id={self.car_id}, status={self.status})>"
