"""Trip-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models.agency import ApprovalStatus


class TripActivityIn(BaseModel):
    activity_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    scheduled_date: Optional[date] = None


class TripActivityOut(TripActivityIn):
    model_config = ConfigDict(from_attributes=True)

    id: int


class TripImageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    image_url: str


class AdvancePaymentFields(BaseModel):
    advance_payment_enabled: bool = False
    advance_payment_percentage: Optional[int] = Field(None, ge=1, le=100)

    @model_validator(mode="after")
    def percentage_when_enabled(self):
        if self.advance_payment_enabled and self.advance_payment_percentage is None:
            raise ValueError("advance_payment_percentage is required when advance payment is enabled")
        return self


class CreateTripRequest(AdvancePaymentFields):
    """Request schema for creating a trip."""

    name: str = Field(..., min_length=1, max_length=255, description="Trip name")
    description: Optional[str] = Field(None, max_length=10000)
    destination: str = Field(..., min_length=1, max_length=255)
    start_date: date
    end_date: date
    price: Decimal = Field(..., ge=0, description="Price per seat")
    currency: str = Field("TND", min_length=3, max_length=3, pattern=r"^[A-Z]{3}$")
    capacity: int = Field(..., gt=0, description="Seats offered")
    images: List[str] = Field(default_factory=list, description="Image URLs")
    activities: List[TripActivityIn] = Field(default_factory=list)

    @model_validator(mode="after")
    def dates_ordered(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class UpdateTripRequest(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=10000)
    destination: Optional[str] = Field(None, min_length=1, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    price: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3, pattern=r"^[A-Z]{3}$")
    capacity: Optional[int] = Field(None, ge=0)
    advance_payment_enabled: Optional[bool] = None
    advance_payment_percentage: Optional[int] = Field(None, ge=1, le=100)
    images: Optional[List[str]] = None
    activities: Optional[List[TripActivityIn]] = None


class TripOut(BaseModel):
    """Trip response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    agency_id: int
    name: str
    description: Optional[str] = None
    destination: str
    start_date: date
    end_date: date
    price: float
    currency: str
    capacity: int = Field(..., description="Seats still available")
    is_available: bool
    status: ApprovalStatus
    advance_payment_enabled: bool
    advance_payment_percentage: Optional[int] = None
    images: List[TripImageOut] = []
    activities: List[TripActivityOut] = []
    created_at: datetime
