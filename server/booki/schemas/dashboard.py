"""Admin and agency dashboard schemas."""

from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel

from .booking import BookingSummary


class AdminStats(BaseModel):
    users_by_role: Dict[str, int]
    total_users: int
    banned_users: int
    agencies: int
    content: Dict[str, int]
    pending_approvals: Dict[str, int]
    bookings: Dict[str, int]
    revenue: Dict[str, float]
    total_revenue: float
    pending_withdrawals: int


class RecentTransaction(BaseModel):
    kind: str
    booking_id: int
    customer_name: str
    amount: float
    currency: str
    payment_method: str | None = None
    paid_at: datetime | None = None


class MonthlyRevenue(BaseModel):
    month: int
    revenue: float


class RevenueByMonth(BaseModel):
    year: int
    months: List[MonthlyRevenue]


class AgencyStats(BaseModel):
    offers: Dict[str, int]
    bookings: Dict[str, int]
    revenue: Dict[str, float]
    total_revenue: float
    wallet_balance: float
    unread_notifications: int
    recent_bookings: List[BookingSummary]
