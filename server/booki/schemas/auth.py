"""Authentication and account schemas."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from ..models.user import UserRole


class AgencyRegistration(BaseModel):
    agency_name: str = Field(..., min_length=2, max_length=255)
    contact_email: Optional[EmailStr] = Field(None, description="Defaults to the owner's email")
    contact_phone: Optional[str] = Field(None, max_length=32)
    address: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = Field(None, max_length=255)


class RegisterRequest(BaseModel):
    """Self-service sign-up as a customer or as the owner of a new agency."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    phone_number: Optional[str] = Field(None, max_length=32)
    role: Literal["customer", "agency_owner"] = "customer"
    agency: Optional[AgencyRegistration] = None

    @model_validator(mode="after")
    def agency_details_for_owners(self) -> "RegisterRequest":
        if self.role == UserRole.AGENCY_OWNER and self.agency is None:
            raise ValueError("Agency details are required to register an agency")
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: UserRole
    phone_number: Optional[str] = None
    image: Optional[str] = None
    address: Optional[str] = None
    email_verified: bool
    banned: bool
    ban_reason: Optional[str] = None
    created_at: datetime


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserOut


class UpdateProfileRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone_number: Optional[str] = Field(None, max_length=32)
    image: Optional[str] = None
    address: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)
