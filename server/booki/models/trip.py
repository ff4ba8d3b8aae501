"""Trip, trip media/itinerary and trip booking models."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base, TimestampMixin
from .agency import ApprovalStatus
from .booking import AdvancePaymentMixin, BookingPaymentMixin


class Trip(TimestampMixin, AdvancePaymentMixin, Base):
    """A seat-limited organized trip sold by an agency."""

    __tablename__ = "trips"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    agency_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("agencies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    destination: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="TND")
    # Seats still available; decremented as bookings are made
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ApprovalStatus.PENDING,
        index=True,
    )

    images: Mapped[list["TripImage"]] = relationship(
        "TripImage",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="TripImage.id",
    )
    activities: Mapped[list["TripActivity"]] = relationship(
        "TripActivity",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="TripActivity.id",
    )

    __table_args__ = (
        CheckConstraint("capacity >= 0", name="ck_trip_capacity_non_negative"),
        CheckConstraint("price >= 0", name="ck_trip_price_non_negative"),
        CheckConstraint("end_date >= start_date", name="ck_trip_dates_ordered"),
    )

    def __repr__(self) -> str:
        return f"<Trip(id={self.id}, name={self.name}, capacity={self.capacity}, status={self.status})>"


class TripImage(Base):
    __tablename__ = "trip_images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    trip_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("trips.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    image_url: Mapped[str] = mapped_column(Text, nullable=False)


class TripActivity(Base):
    __tablename__ = "trip_activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    trip_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("trips.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    activity_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    scheduled_date: Mapped[date | None] = mapped_column(Date)


class TripBooking(TimestampMixin, BookingPaymentMixin, Base):
    """Seats booked on a trip by a customer."""

    __tablename__ = "trip_bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    trip_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("trips.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    seats_booked: Mapped[int] = mapped_column(Integer, nullable=False)
    original_price_per_seat: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    booking_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        CheckConstraint("seats_booked > 0", name="ck_trip_booking_seats_positive"),
    )

    def __repr__(self) -> str:
        return (
            f"<TripBooking(id={self.id}, trip_id={self.trip_id}, seats={self.seats_booked}, "
            f"status={self.status}, payment_status={self.payment_status})>"
        )
