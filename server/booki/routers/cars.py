"""Rental car catalog router."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DB_DEPENDENCY, AgencyStaff
from ..core.exceptions import NotFoundError, ValidationError
from ..models.agency import ApprovalStatus
from ..models.user import User
from ..schemas.car import CarAvailability, CarOut, CreateCarRequest, UpdateCarRequest
from ..schemas.common import MessageResponse
from ..services.car_service import CarService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/cars", tags=["cars"])


@router.get("", response_model=List[CarOut])
async def search_cars(
    q: Optional[str] = Query(None, max_length=100, description="Brand or model"),
    location: Optional[str] = Query(None, max_length=255),
    max_price: Optional[Decimal] = Query(None, ge=0),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = DB_DEPENDENCY,
) -> List[CarOut]:
    if start_date and end_date and end_date <= start_date:
        raise ValidationError("end_date must be after start_date")
    cars = await CarService(db).search_cars(q, location, max_price, start_date, end_date, limit, offset)
    return [CarOut.model_validate(c) for c in cars]


@router.get("/mine", response_model=List[CarOut])
async def list_my_cars(user: User = AgencyStaff, db: AsyncSession = DB_DEPENDENCY) -> List[CarOut]:
    cars = await CarService(db).list_agency_cars(user)
    return [CarOut.model_validate(c) for c in cars]


@router.get("/{car_id}", response_model=CarOut)
async def get_car(car_id: int, db: AsyncSession = DB_DEPENDENCY) -> CarOut:
    car = await CarService(db).get_car_by_id_or_raise(car_id)
    if car.status != ApprovalStatus.APPROVED:
        raise NotFoundError("car", car_id)
    return CarOut.model_validate(car)


@router.get("/{car_id}/availability", response_model=CarAvailability)
async def get_car_availability(car_id: int, db: AsyncSession = DB_DEPENDENCY) -> CarAvailability:
    """Upcoming booked periods of the car."""
    return await CarService(db).get_availability(car_id)


@router.post("", response_model=CarOut, status_code=201)
async def create_car(
    request: CreateCarRequest,
    user: User = AgencyStaff,
    db: AsyncSession = DB_DEPENDENCY,
) -> CarOut:
    car = await CarService(db).create_car(user, request)
    return CarOut.model_validate(car)


@router.patch("/{car_id}", response_model=CarOut)
async def update_car(
    car_id: int,
    request: UpdateCarRequest,
    user: User = AgencyStaff,
    db: AsyncSession = DB_DEPENDENCY,
) -> CarOut:
    car = await CarService(db).update_car(user, car_id, request)
    return CarOut.model_validate(car)


@router.delete("/{car_id}", response_model=MessageResponse)
async def delete_car(car_id: int, user: User = AgencyStaff, db: AsyncSession = DB_DEPENDENCY) -> MessageResponse:
    await CarService(db).delete_car(user, car_id)
    return MessageResponse(message=f"Car {car_id} deleted")
