"""Hotel and room schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.agency import ApprovalStatus
from .trip import AdvancePaymentFields


class RoomIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    room_type: str = Field("double", max_length=50)
    capacity: int = Field(..., gt=0)
    price_per_night_adult: Decimal = Field(..., ge=0)
    price_per_night_child: Decimal = Field(Decimal("0"), ge=0)
    currency: str = Field("TND", min_length=3, max_length=3, pattern=r"^[A-Z]{3}$")
    amenities: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)


class UpdateRoomRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    room_type: Optional[str] = Field(None, max_length=50)
    capacity: Optional[int] = Field(None, gt=0)
    price_per_night_adult: Optional[Decimal] = Field(None, ge=0)
    price_per_night_child: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3, pattern=r"^[A-Z]{3}$")
    amenities: Optional[List[str]] = None
    images: Optional[List[str]] = None


class RoomOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    hotel_id: int
    name: str
    description: Optional[str] = None
    room_type: str
    capacity: int
    price_per_night_adult: float
    price_per_night_child: float
    currency: str
    amenities: List[str] = []
    images: List[str] = []


class CreateHotelRequest(AdvancePaymentFields):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1, max_length=100)
    country: str = Field(..., min_length=1, max_length=100)
    rating: Optional[int] = Field(None, ge=1, le=5)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    amenities: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    rooms: List[RoomIn] = Field(default_factory=list)


class UpdateHotelRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    address: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    country: Optional[str] = Field(None, min_length=1, max_length=100)
    rating: Optional[int] = Field(None, ge=1, le=5)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    amenities: Optional[List[str]] = None
    images: Optional[List[str]] = None
    advance_payment_enabled: Optional[bool] = None
    advance_payment_percentage: Optional[int] = Field(None, ge=1, le=100)


class HotelOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    agency_id: int
    name: str
    description: Optional[str] = None
    address: str
    city: str
    country: str
    rating: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    amenities: List[str] = []
    images: List[str] = []
    is_published: bool
    status: ApprovalStatus
    advance_payment_enabled: bool
    advance_payment_percentage: Optional[int] = None
    rooms: List[RoomOut] = []
    created_at: datetime
