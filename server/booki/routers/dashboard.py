"""Admin and agency dashboards."""

import logging
from typing import List

from fastapi import APIRouter, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import utcnow
from ..core.dependencies import DB_DEPENDENCY, AdminUser, AgencyStaff
from ..models.user import User
from ..schemas.dashboard import AdminStats, AgencyStats, RecentTransaction, RevenueByMonth
from ..services.dashboard_service import DashboardService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/dashboard", tags=["dashboard"])


@router.get("/admin", response_model=AdminStats)
async def admin_stats(admin: User = AdminUser, db: AsyncSession = DB_DEPENDENCY) -> AdminStats:
    """Platform-wide counts and revenue from paid bookings."""
    return await DashboardService(db).admin_stats()


@router.get("/admin/transactions", response_model=List[RecentTransaction])
async def recent_transactions(
    limit: int = Query(10, ge=1, le=100),
    admin: User = AdminUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> List[RecentTransaction]:
    return await DashboardService(db).recent_transactions(limit)


@router.get("/admin/revenue", response_model=RevenueByMonth)
async def revenue_by_month(
    year: int | None = Query(None, ge=2000, le=2100),
    admin: User = AdminUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> RevenueByMonth:
    return await DashboardService(db).revenue_by_month(year or utcnow().year)


@router.get("/agency", response_model=AgencyStats)
async def agency_stats(user: User = AgencyStaff, db: AsyncSession = DB_DEPENDENCY) -> AgencyStats:
    return await DashboardService(db).agency_stats(user)
