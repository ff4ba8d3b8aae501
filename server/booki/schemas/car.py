"""Rental car schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.agency import ApprovalStatus
from .trip import AdvancePaymentFields


class CreateCarRequest(AdvancePaymentFields):
    brand: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    year: int = Field(..., ge=1950, le=2100)
    plate_number: str = Field(..., min_length=1, max_length=32)
    color: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=255)
    price_per_day: Decimal = Field(..., ge=0)
    currency: str = Field("TND", min_length=3, max_length=3, pattern=r"^[A-Z]{3}$")
    images: List[str] = Field(default_factory=list)


class UpdateCarRequest(BaseModel):
    brand: Optional[str] = Field(None, min_length=1, max_length=100)
    model: Optional[str] = Field(None, min_length=1, max_length=100)
    year: Optional[int] = Field(None, ge=1950, le=2100)
    plate_number: Optional[str] = Field(None, min_length=1, max_length=32)
    color: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=255)
    price_per_day: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3, pattern=r"^[A-Z]{3}$")
    images: Optional[List[str]] = None
    is_available: Optional[bool] = None
    advance_payment_enabled: Optional[bool] = None
    advance_payment_percentage: Optional[int] = Field(None, ge=1, le=100)


class CarOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    agency_id: int
    brand: str
    model: str
    year: int
    plate_number: str
    color: Optional[str] = None
    location: Optional[str] = None
    price_per_day: float
    currency: str
    images: List[str] = []
    is_available: bool
    status: ApprovalStatus
    advance_payment_enabled: bool
    advance_payment_percentage: Optional[int] = None
    created_at: datetime


class BookedRange(BaseModel):
    start_date: datetime
    end_date: datetime


class CarAvailability(BaseModel):
    car_id: int
    is_available: bool
    booked_ranges: List[BookedRange]
