"""Common Pydantic schemas."""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class Money(BaseModel):
    """An amount with its ISO 4217 currency."""

    amount: float = Field(..., description="Amount in major units")
    currency: str = Field(..., min_length=3, max_length=3, pattern=r"^[A-Z]{3}$", description="ISO 4217 currency code")


class Violation(BaseModel):
    field: str = Field(..., description="Dotted path to the invalid field")
    message: str = Field(..., description="Validation error message")


class Problem(BaseModel):
    """RFC 9457 Problem Details response."""

    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="Request path of this occurrence")
    code: Optional[str] = Field(None, description="Application-specific error code")
    violations: Optional[List[Violation]] = Field(None, description="Validation errors")


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class DecisionRequest(BaseModel):
    """Optional explanation attached to an approve/reject decision."""

    reason: Optional[str] = Field(None, max_length=2000, description="Shown to the agency")


class CurrencyConversion(BaseModel):
    amount: Decimal
    from_currency: str
    to_currency: str
    converted: float


class AvailabilityRequest(BaseModel):
    is_available: bool


class PublishRequest(BaseModel):
    is_published: bool


class UploadOut(BaseModel):
    """An image stored on the CDN."""

    url: str
    public_id: str
    width: Optional[int] = None
    height: Optional[int] = None
    bytes: Optional[int] = None
