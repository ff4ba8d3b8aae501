"""Wallet and withdrawal schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.wallet import WithdrawalStatus


class WalletOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    agency_id: int
    balance: float
    updated_at: datetime


class WalletTransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: float
    type: str
    status: str
    description: Optional[str] = None
    booking_kind: Optional[str] = None
    booking_id: Optional[int] = None
    withdrawal_request_id: Optional[int] = None
    created_at: datetime


class BalanceBreakdown(BaseModel):
    trip_earnings: float
    hotel_earnings: float
    car_earnings: float
    total_earnings: float
    total_withdrawn: float
    balance: float


class IncomeLine(BaseModel):
    kind: str
    bookings: int
    amount: float


class IncomeSummary(BaseModel):
    lines: List[IncomeLine]
    total: float


class CreateWithdrawalRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    bank_name: str = Field(..., min_length=1, max_length=255)
    account_holder_name: str = Field(..., min_length=1, max_length=255)
    bank_account_number: str = Field(..., min_length=4, max_length=64)
    notes: Optional[str] = Field(None, max_length=2000)


class WithdrawalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    agency_id: int
    amount: float
    bank_name: str
    account_holder_name: str
    bank_account_number: str
    notes: Optional[str] = None
    status: WithdrawalStatus
    admin_notes: Optional[str] = None
    receipt_url: Optional[str] = None
    processed_at: Optional[datetime] = None
    processed_by_id: Optional[int] = None
    created_at: datetime


class ApproveWithdrawalRequest(BaseModel):
    admin_notes: Optional[str] = Field(None, max_length=2000)


class RejectWithdrawalRequest(BaseModel):
    admin_notes: str = Field(..., min_length=1, max_length=2000)


class WithdrawalReceiptRequest(BaseModel):
    receipt_url: str = Field(..., min_length=1)
