"""Hotel and room catalog service."""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, ValidationError
from ..models.agency import ApprovalStatus
from ..models.booking import INACTIVE_BOOKING_STATUSES
from ..models.hotel import Hotel, Room, RoomBooking
from ..models.user import User
from ..schemas.hotel import CreateHotelRequest, RoomIn, UpdateHotelRequest, UpdateRoomRequest
from .agency_service import AgencyService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


def room_overlap_clause(check_in: date, check_out: date):
    """Active room bookings intersecting the half-open stay [check_in, check_out)."""
    return and_(
        RoomBooking.check_in < check_out,
        RoomBooking.check_out > check_in,
        RoomBooking.status.not_in([s.value for s in INACTIVE_BOOKING_STATUSES]),
    )


class HotelService:
    """Service for hotel and room operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.agencies = AgencyService(db)
        self.notifications = NotificationService(db)

    async def get_hotel_by_id_or_raise(self, hotel_id: int) -> Hotel:
        hotel = await self.db.get(Hotel, hotel_id)
        if hotel is None:
            raise NotFoundError("hotel", hotel_id)
        return hotel

    async def get_room_by_id_or_raise(self, room_id: int) -> Room:
        room = await self.db.get(Room, room_id)
        if room is None:
            raise NotFoundError("room", room_id)
        return room

    async def get_managed_hotel(self, user: User, hotel_id: int) -> Hotel:
        hotel = await self.get_hotel_by_id_or_raise(hotel_id)
        await self.agencies.ensure_staff_of(user, hotel.agency_id)
        return hotel

    async def create_hotel(self, user: User, request: CreateHotelRequest) -> Hotel:
        """Create a hotel (with its initial rooms) pending admin approval."""
        agency = await self.agencies.get_agency_for_user(user)
        data = request.model_dump(exclude={"rooms"})

        hotel = Hotel(
            agency_id=agency.id,
            status=ApprovalStatus.PENDING,
            rooms=[Room(**room.model_dump()) for room in request.rooms],
            **data,
        )
        self.db.add(hotel)
        await self.db.flush()

        await self.notifications.notify_admins(
            title="Hotel awaiting approval",
            message=f"{agency.agency_name} submitted the hotel \"{hotel.name}\"",
            related_item_type="hotel",
            related_item_id=hotel.id,
        )
        await self.db.commit()
        await self.db.refresh(hotel)

        logger.info(
            "Hotel created",
            extra={"hotel_id": hotel.id, "agency_id": agency.id, "rooms": len(hotel.rooms)},
        )
        return hotel

    async def update_hotel(self, user: User, hotel_id: int, request: UpdateHotelRequest) -> Hotel:
        hotel = await self.get_managed_hotel(user, hotel_id)
        data = request.model_dump(exclude_unset=True)
        for field, value in data.items():
            setattr(hotel, field, value)

        if hotel.advance_payment_enabled and hotel.advance_payment_percentage is None:
            raise ValidationError("advance_payment_percentage is required when advance payment is enabled")

        hotel.status = ApprovalStatus.PENDING
        await self.notifications.notify_admins(
            title="Hotel updated",
            message=f"The hotel \"{hotel.name}\" was edited and awaits approval",
            related_item_type="hotel",
            related_item_id=hotel.id,
        )
        await self.db.commit()
        await self.db.refresh(hotel)
        return hotel

    async def set_published(self, user: User, hotel_id: int, is_published: bool) -> Hotel:
        """Publish or archive a hotel without deleting it."""
        hotel = await self.get_managed_hotel(user, hotel_id)
        hotel.is_published = is_published
        await self.db.commit()
        await self.db.refresh(hotel)
        logger.info("Hotel visibility changed", extra={"hotel_id": hotel_id, "is_published": is_published})
        return hotel

    async def delete_hotel(self, user: User, hotel_id: int) -> None:
        hotel = await self.get_managed_hotel(user, hotel_id)
        await self.db.delete(hotel)
        await self.db.commit()
        logger.info("Hotel deleted", extra={"hotel_id": hotel_id})

    async def list_agency_hotels(self, user: User) -> list[Hotel]:
        agency = await self.agencies.get_agency_for_user(user)
        result = await self.db.execute(
            select(Hotel).where(Hotel.agency_id == agency.id).order_by(Hotel.created_at.desc())
        )
        return list(result.scalars().all())

    # Rooms

    async def add_room(self, user: User, hotel_id: int, request: RoomIn) -> Room:
        hotel = await self.get_managed_hotel(user, hotel_id)
        room = Room(hotel_id=hotel.id, **request.model_dump())
        hotel.rooms.append(room)
        await self.db.commit()
        await self.db.refresh(room)
        return room

    async def _get_managed_room(self, user: User, room_id: int) -> Room:
        room = await self.get_room_by_id_or_raise(room_id)
        await self.get_managed_hotel(user, room.hotel_id)
        return room

    async def update_room(self, user: User, room_id: int, request: UpdateRoomRequest) -> Room:
        room = await self._get_managed_room(user, room_id)
        for field, value in request.model_dump(exclude_unset=True).items():
            setattr(room, field, value)
        await self.db.commit()
        await self.db.refresh(room)
        return room

    async def delete_room(self, user: User, room_id: int) -> None:
        room = await self._get_managed_room(user, room_id)
        hotel = await self.get_hotel_by_id_or_raise(room.hotel_id)
        hotel.rooms.remove(room)
        await self.db.commit()
        logger.info("Room deleted", extra={"room_id": room_id, "hotel_id": hotel.id})

    # Search

    async def search_hotels(
        self,
        query_text: Optional[str] = None,
        guests: Optional[int] = None,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Hotel]:
        """
        Public search over approved, published hotels.

        With ``guests`` only hotels having a room that large are returned. With
        both dates only hotels with at least one such room free for the whole
        stay are returned.
        """
        query = select(Hotel).where(
            Hotel.status == ApprovalStatus.APPROVED,
            Hotel.is_published.is_(True),
        )
        if query_text:
            pattern = f"%{query_text.lower()}%"
            query = query.where(
                or_(
                    func.lower(Hotel.name).like(pattern),
                    func.lower(Hotel.city).like(pattern),
                    func.lower(Hotel.country).like(pattern),
                )
            )

        if guests or (check_in and check_out):
            if check_in and check_out and check_out <= check_in:
                raise ValidationError("check_out must be after check_in")

            room_query = select(Room.hotel_id)
            if guests:
                room_query = room_query.where(Room.capacity >= guests)
            if check_in and check_out:
                busy_rooms = select(RoomBooking.room_id).where(room_overlap_clause(check_in, check_out))
                room_query = room_query.where(Room.id.not_in(busy_rooms))
            query = query.where(Hotel.id.in_(room_query))

        query = query.order_by(Hotel.rating.desc().nulls_last(), Hotel.id).limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def is_room_available(
        self,
        room_id: int,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[int] = None,
    ) -> bool:
        query = select(func.count(RoomBooking.id)).where(
            RoomBooking.room_id == room_id,
            room_overlap_clause(check_in, check_out),
        )
        if exclude_booking_id is not None:
            query = query.where(RoomBooking.id != exclude_booking_id)
        overlapping = await self.db.scalar(query)
        return not overlapping
