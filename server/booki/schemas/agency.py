"""Agency profile and staff schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AgencyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    agency_name: str
    agency_unique_id: str
    contact_email: str
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None
    is_verified: bool
    created_at: datetime


class AgencyDetail(AgencyOut):
    """Admin view of an agency with activity counts."""

    owner_name: str
    owner_email: str
    trip_count: int = 0
    hotel_count: int = 0
    car_count: int = 0
    blog_count: int = 0
    employee_count: int = 0
    booking_count: int = 0


class UpdateAgencyRequest(BaseModel):
    agency_name: Optional[str] = Field(None, min_length=2, max_length=255)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=32)
    address: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = Field(None, max_length=255)
    logo: Optional[str] = None


class CreateEmployeeRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    phone_number: Optional[str] = Field(None, max_length=32)
    position: Optional[str] = Field(None, max_length=100)


class UpdateEmployeeRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone_number: Optional[str] = Field(None, max_length=32)
    position: Optional[str] = Field(None, max_length=100)


class EmployeeOut(BaseModel):
    user_id: int
    name: str
    email: str
    phone_number: Optional[str] = None
    position: Optional[str] = None
    joined_at: datetime
