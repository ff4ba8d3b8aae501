"""Trip catalog router."""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DB_DEPENDENCY, AgencyStaff
from ..core.exceptions import NotFoundError
from ..models.agency import ApprovalStatus
from ..models.user import User
from ..schemas.common import AvailabilityRequest, MessageResponse
from ..schemas.trip import CreateTripRequest, TripOut, UpdateTripRequest
from ..services.trip_service import TripService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/trips", tags=["trips"])


@router.get("", response_model=List[TripOut])
async def search_trips(
    destination: Optional[str] = Query(None, max_length=255),
    start_date: Optional[date] = Query(None, description="Earliest departure date"),
    max_price: Optional[Decimal] = Query(None, ge=0),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = DB_DEPENDENCY,
) -> List[TripOut]:
    """Approved trips open for booking."""
    trips = await TripService(db).search_trips(destination, start_date, max_price, limit, offset)
    return [TripOut.model_validate(t) for t in trips]


@router.get("/mine", response_model=List[TripOut])
async def list_my_trips(user: User = AgencyStaff, db: AsyncSession = DB_DEPENDENCY) -> List[TripOut]:
    trips = await TripService(db).list_agency_trips(user)
    return [TripOut.model_validate(t) for t in trips]


@router.get("/{trip_id}", response_model=TripOut)
async def get_trip(trip_id: int, db: AsyncSession = DB_DEPENDENCY) -> TripOut:
    trip = await TripService(db).get_trip_by_id_or_raise(trip_id)
    if trip.status != ApprovalStatus.APPROVED:
        raise NotFoundError("trip", trip_id)
    return TripOut.model_validate(trip)


@router.post("", response_model=TripOut, status_code=201)
async def create_trip(
    request: CreateTripRequest,
    user: User = AgencyStaff,
    db: AsyncSession = DB_DEPENDENCY,
) -> TripOut:
    trip = await TripService(db).create_trip(user, request)
    return TripOut.model_validate(trip)


@router.patch("/{trip_id}", response_model=TripOut)
async def update_trip(
    trip_id: int,
    request: UpdateTripRequest,
    user: User = AgencyStaff,
    db: AsyncSession = DB_DEPENDENCY,
) -> TripOut:
    trip = await TripService(db).update_trip(user, trip_id, request)
    return TripOut.model_validate(trip)


@router.put("/{trip_id}/availability", response_model=TripOut)
async def set_trip_availability(
    trip_id: int,
    request: AvailabilityRequest,
    user: User = AgencyStaff,
    db: AsyncSession = DB_DEPENDENCY,
) -> TripOut:
    trip = await TripService(db).set_availability(user, trip_id, request.is_available)
    return TripOut.model_validate(trip)


@router.delete("/{trip_id}", response_model=MessageResponse)
async def delete_trip(trip_id: int, user: User = AgencyStaff, db: AsyncSession = DB_DEPENDENCY) -> MessageResponse:
    await TripService(db).delete_trip(user, trip_id)
    return MessageResponse(message=f"Trip {trip_id} deleted")
