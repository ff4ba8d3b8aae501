"""Hotel and room catalog router."""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DB_DEPENDENCY, AgencyStaff
from ..core.exceptions import NotFoundError
from ..models.agency import ApprovalStatus
from ..models.user import User
from ..schemas.common import MessageResponse, PublishRequest
from ..schemas.hotel import CreateHotelRequest, HotelOut, RoomIn, RoomOut, UpdateHotelRequest, UpdateRoomRequest
from ..services.hotel_service import HotelService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/hotels", tags=["hotels"])


@router.get("", response_model=List[HotelOut])
async def search_hotels(
    q: Optional[str] = Query(None, max_length=255, description="Name, city or country"),
    guests: Optional[int] = Query(None, ge=1),
    check_in: Optional[date] = None,
    check_out: Optional[date] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = DB_DEPENDENCY,
) -> List[HotelOut]:
    """
    Approved, published hotels.

    With both dates only hotels with a room free for the whole stay are listed.
    """
    hotels = await HotelService(db).search_hotels(q, guests, check_in, check_out, limit, offset)
    return [HotelOut.model_validate(h) for h in hotels]


@router.get("/mine", response_model=List[HotelOut])
async def list_my_hotels(user: User = AgencyStaff, db: AsyncSession = DB_DEPENDENCY) -> List[HotelOut]:
    hotels = await HotelService(db).list_agency_hotels(user)
    return [HotelOut.model_validate(h) for h in hotels]


@router.get("/{hotel_id}", response_model=HotelOut)
async def get_hotel(hotel_id: int, db: AsyncSession = DB_DEPENDENCY) -> HotelOut:
    hotel = await HotelService(db).get_hotel_by_id_or_raise(hotel_id)
    if hotel.status != ApprovalStatus.APPROVED or not hotel.is_published:
        raise NotFoundError("hotel", hotel_id)
    return HotelOut.model_validate(hotel)


@router.post("", response_model=HotelOut, status_code=201)
async def create_hotel(
    request: CreateHotelRequest,
    user: User = AgencyStaff,
    db: AsyncSession = DB_DEPENDENCY,
) -> HotelOut:
    hotel = await HotelService(db).create_hotel(user, request)
    return HotelOut.model_validate(hotel)


@router.patch("/{hotel_id}", response_model=HotelOut)
async def update_hotel(
    hotel_id: int,
    request: UpdateHotelRequest,
    user: User = AgencyStaff,
    db: AsyncSession = DB_DEPENDENCY,
) -> HotelOut:
    hotel = await HotelService(db).update_hotel(user, hotel_id, request)
    return HotelOut.model_validate(hotel)


@router.put("/{hotel_id}/publish", response_model=HotelOut)
async def set_hotel_published(
    hotel_id: int,
    request: PublishRequest,
    user: User = AgencyStaff,
    db: AsyncSession = DB_DEPENDENCY,
) -> HotelOut:
    hotel = await HotelService(db).set_published(user, hotel_id, request.is_published)
    return HotelOut.model_validate(hotel)


@router.delete("/{hotel_id}", response_model=MessageResponse)
async def delete_hotel(hotel_id: int, user: User = AgencyStaff, db: AsyncSession = DB_DEPENDENCY) -> MessageResponse:
    await HotelService(db).delete_hotel(user, hotel_id)
    return MessageResponse(message=f"Hotel {hotel_id} deleted")


@router.post("/{hotel_id}/rooms", response_model=RoomOut, status_code=201)
async def add_room(
    hotel_id: int,
    request: RoomIn,
    user: User = AgencyStaff,
    db: AsyncSession = DB_DEPENDENCY,
) -> RoomOut:
    room = await HotelService(db).add_room(user, hotel_id, request)
    return RoomOut.model_validate(room)


@router.patch("/rooms/{room_id}", response_model=RoomOut)
async def update_room(
    room_id: int,
    request: UpdateRoomRequest,
    user: User = AgencyStaff,
    db: AsyncSession = DB_DEPENDENCY,
) -> RoomOut:
    room = await HotelService(db).update_room(user, room_id, request)
    return RoomOut.model_validate(room)


@router.delete("/rooms/{room_id}", response_model=MessageResponse)
async def delete_room(room_id: int, user: User = AgencyStaff, db: AsyncSession = DB_DEPENDENCY) -> MessageResponse:
    await HotelService(db).delete_room(user, room_id)
    return MessageResponse(message=f"Room {room_id} deleted")
