"""Hotel, room and room booking models."""

from datetime import date
from decimal import Decimal

from sqlalchemy import JSON, Boolean, CheckConstraint, Date, Float, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base, TimestampMixin
from .agency import ApprovalStatus
from .booking import AdvancePaymentMixin, BookingPaymentMixin


class Hotel(TimestampMixin, AdvancePaymentMixin, Base):
    __tablename__ = "hotels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    agency_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("agencies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    rating: Mapped[int | None] = mapped_column(Integer)
    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)
    amenities: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ApprovalStatus.PENDING,
        index=True,
    )

    rooms: Mapped[list["Room"]] = relationship(
        "Room",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Room.id",
    )

    __table_args__ = (
        CheckConstraint("rating IS NULL OR (rating BETWEEN 1 AND 5)", name="ck_hotel_rating_range"),
    )

    def __repr__(self) -> str:
        return f"<Hotel(id={self.id}, name={self.name}, city={self.city}, status={self.status})>"


class Room(TimestampMixin, Base):
    """A bookable room type of a hotel, priced per night and per guest."""

    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    hotel_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("hotels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    room_type: Mapped[str] = mapped_column(String(50), nullable=False, default="double")
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    price_per_night_adult: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    price_per_night_child: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="TND")
    amenities: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_room_capacity_positive"),
    )

    def __repr__(self) -> str:
        return f"<Room(id={self.id}, hotel_id={self.hotel_id}, name={self.name}, capacity={self.capacity})>"


class RoomBooking(TimestampMixin, BookingPaymentMixin, Base):
    """A stay in a room over the half-open date range [check_in, check_out)."""

    __tablename__ = "room_bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    room_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("rooms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    adult_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    child_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_room_booking_dates_ordered"),
        CheckConstraint("adult_count >= 1", name="ck_room_booking_adults_positive"),
    )

    def __repr__(self) -> str:
        return (
            f"<RoomBooking(id={self.id}, room_id={self.room_id}, {self.check_in}..{self.check_out}, "
            f"status={self.status})>"
        )
