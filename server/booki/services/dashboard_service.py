"""Admin and agency dashboard statistics."""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import as_utc
from ..models.agency import Agency, ApprovalStatus
from ..models.blog import Blog
from ..models.booking import BookingKind, PaymentStatus
from ..models.car import Car
from ..models.hotel import Hotel
from ..models.trip import Trip
from ..models.user import User
from ..models.wallet import WithdrawalRequest, WithdrawalStatus
from ..payments.currency import quantize
from ..schemas.dashboard import AdminStats, AgencyStats, MonthlyRevenue, RecentTransaction, RevenueByMonth
from .agency_service import AgencyService
from .booking_service import BOOKING_MODELS, BookingService
from .notification_service import NotificationService
from .wallet_service import WalletService

logger = logging.getLogger(__name__)

CONTENT_MODELS = {"trips": Trip, "hotels": Hotel, "cars": Car, "blogs": Blog}


class DashboardService:
    """
    Aggregates for the dashboards.

    Revenue figures add up ``total_price`` of completed payments as charged,
    without converting between currencies.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, query) -> int:
        return (await self.db.scalar(query)) or 0

    async def admin_stats(self) -> AdminStats:
        result = await self.db.execute(select(User.role, func.count(User.id)).group_by(User.role))
        users_by_role = {role: count for role, count in result.all()}

        content = {}
        pending = {}
        for name, model in CONTENT_MODELS.items():
            content[name] = await self._count(select(func.count(model.id)))
            pending[name] = await self._count(
                select(func.count(model.id)).where(model.status == ApprovalStatus.PENDING)
            )

        bookings = {}
        revenue = {}
        for kind, model in BOOKING_MODELS.items():
            bookings[kind.value] = await self._count(select(func.count(model.id)))
            paid = await self.db.scalar(
                select(func.sum(model.total_price)).where(model.payment_status == PaymentStatus.COMPLETED)
            )
            revenue[kind.value] = float(quantize(Decimal(paid or 0)))

        return AdminStats(
            users_by_role=users_by_role,
            total_users=sum(users_by_role.values()),
            banned_users=await self._count(select(func.count(User.id)).where(User.banned.is_(True))),
            agencies=await self._count(select(func.count(Agency.id))),
            content=content,
            pending_approvals=pending,
            bookings=bookings,
            revenue=revenue,
            total_revenue=round(sum(revenue.values()), 2),
            pending_withdrawals=await self._count(
                select(func.count(WithdrawalRequest.id)).where(WithdrawalRequest.status == WithdrawalStatus.PENDING)
            ),
        )

    async def recent_transactions(self, limit: int = 10) -> list[RecentTransaction]:
        """Latest completed payments across all booking kinds."""
        transactions = []
        for kind, model in BOOKING_MODELS.items():
            result = await self.db.execute(
                select(model, User.name)
                .join(User, User.id == model.user_id)
                .where(model.payment_status == PaymentStatus.COMPLETED)
                .order_by(model.payment_date.desc(), model.id.desc())
                .limit(limit)
            )
            for booking, customer_name in result.all():
                transactions.append(
                    RecentTransaction(
                        kind=kind.value,
                        booking_id=booking.id,
                        customer_name=customer_name,
                        amount=float(booking.total_price),
                        currency=booking.payment_currency,
                        payment_method=booking.payment_method,
                        paid_at=as_utc(booking.payment_date) if booking.payment_date else None,
                    )
                )

        epoch = datetime.min.replace(tzinfo=timezone.utc)
        transactions.sort(key=lambda t: t.paid_at or epoch, reverse=True)
        return transactions[:limit]

    async def revenue_by_month(self, year: int) -> RevenueByMonth:
        start = datetime(year, 1, 1, tzinfo=timezone.utc)
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
        totals = {month: Decimal("0") for month in range(1, 13)}

        for model in BOOKING_MODELS.values():
            result = await self.db.execute(
                select(model.payment_date, model.total_price).where(
                    model.payment_status == PaymentStatus.COMPLETED,
                    model.payment_date >= start,
                    model.payment_date < end,
                )
            )
            for paid_at, amount in result.all():
                totals[as_utc(paid_at).month] += Decimal(amount)

        return RevenueByMonth(
            year=year,
            months=[MonthlyRevenue(month=month, revenue=float(quantize(total))) for month, total in totals.items()],
        )

    async def agency_stats(self, user: User) -> AgencyStats:
        agency = await AgencyService(self.db).get_agency_for_user(user)
        offers = {
            "trips": await self._count(select(func.count(Trip.id)).where(Trip.agency_id == agency.id)),
            "hotels": await self._count(select(func.count(Hotel.id)).where(Hotel.agency_id == agency.id)),
            "cars": await self._count(select(func.count(Car.id)).where(Car.agency_id == agency.id)),
            "blogs": await self._count(select(func.count(Blog.id)).where(Blog.agency_id == agency.id)),
        }

        bookings_service = BookingService(self.db)
        recent = []
        bookings = {}
        for kind in BookingKind:
            summaries = await bookings_service.list_agency_bookings(user, kind)
            bookings[kind.value] = len(summaries)
            recent.extend(summaries[:5])
        recent.sort(key=lambda s: (s.created_at, s.id), reverse=True)

        wallets = WalletService(self.db)
        earnings = await wallets.earnings_by_kind(agency.id)
        revenue = {kind: float(amount) for kind, (_, amount) in earnings.items()}
        wallet = await wallets.get_or_create_wallet(agency.id)
        await self.db.commit()

        return AgencyStats(
            offers=offers,
            bookings=bookings,
            revenue=revenue,
            total_revenue=round(sum(revenue.values()), 2),
            wallet_balance=float(wallet.balance),
            unread_notifications=await NotificationService(self.db).unread_count(user),
            recent_bookings=recent[:5],
        )
