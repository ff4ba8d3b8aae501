"""Agency wallet, earnings and withdrawal requests."""

import logging
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import InsufficientBalanceError, ValidationError
from ..core.observability import metrics_collector
from ..models.booking import BookingKind, PaymentStatus
from ..models.car import Car, CarBooking
from ..models.hotel import Hotel, Room, RoomBooking
from ..models.notification import NotificationType
from ..models.trip import Trip, TripBooking
from ..models.user import User
from ..models.wallet import (
    TransactionStatus,
    TransactionType,
    Wallet,
    WalletTransaction,
    WithdrawalRequest,
)
from ..payments.currency import quantize
from ..schemas.wallet import BalanceBreakdown, CreateWithdrawalRequest, IncomeLine, IncomeSummary
from .agency_service import AgencyService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class WalletService:
    """Service for agency wallet operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.agencies = AgencyService(db)
        self.notifications = NotificationService(db)

    async def get_or_create_wallet(self, agency_id: int) -> Wallet:
        """The agency's wallet, created empty on first use (flushed, not committed)."""
        result = await self.db.execute(select(Wallet).where(Wallet.agency_id == agency_id))
        wallet = result.scalar_one_or_none()
        if wallet is None:
            wallet = Wallet(agency_id=agency_id, balance=ZERO)
            self.db.add(wallet)
            await self.db.flush()
            logger.info("Wallet created", extra={"agency_id": agency_id, "wallet_id": wallet.id})
        return wallet

    async def credit_booking(self, agency_id: int, kind: BookingKind, booking) -> WalletTransaction:
        """
        Credit the agency with the amount charged for ``booking``.

        Callers guarantee this runs once per booking, on its transition to a
        completed payment. The caller commits.
        """
        wallet = await self.get_or_create_wallet(agency_id)
        amount = quantize(Decimal(booking.total_price))
        wallet.balance = quantize(Decimal(wallet.balance) + amount)

        transaction = WalletTransaction(
            wallet_id=wallet.id,
            amount=amount,
            type=TransactionType.CREDIT,
            status=TransactionStatus.COMPLETED,
            description=f"Payment for {BookingKind(kind).value} booking #{booking.id}",
            booking_kind=BookingKind(kind).value,
            booking_id=booking.id,
        )
        self.db.add(transaction)
        metrics_collector.record_wallet_credit(BookingKind(kind).value)

        logger.info(
            "Wallet credited",
            extra={
                "agency_id": agency_id,
                "kind": BookingKind(kind).value,
                "booking_id": booking.id,
                "amount": str(amount),
            },
        )
        return transaction

    async def get_wallet_for_user(self, user: User) -> Wallet:
        agency = await self.agencies.get_agency_for_user(user)
        wallet = await self.get_or_create_wallet(agency.id)
        await self.db.commit()
        return wallet

    async def list_transactions(self, user: User, limit: int = 50) -> list[WalletTransaction]:
        agency = await self.agencies.get_agency_for_user(user)
        wallet = await self.get_or_create_wallet(agency.id)
        result = await self.db.execute(
            select(WalletTransaction)
            .where(WalletTransaction.wallet_id == wallet.id)
            .order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def earnings_by_kind(self, agency_id: int) -> dict[str, tuple[int, Decimal]]:
        """Completed-payment bookings per kind: (count, amount)."""
        paid = PaymentStatus.COMPLETED
        queries = {
            BookingKind.TRIP.value: select(func.count(TripBooking.id), func.sum(TripBooking.total_price))
            .join(Trip, Trip.id == TripBooking.trip_id)
            .where(Trip.agency_id == agency_id, TripBooking.payment_status == paid),
            BookingKind.HOTEL.value: select(func.count(RoomBooking.id), func.sum(RoomBooking.total_price))
            .join(Room, Room.id == RoomBooking.room_id)
            .join(Hotel, Hotel.id == Room.hotel_id)
            .where(Hotel.agency_id == agency_id, RoomBooking.payment_status == paid),
            BookingKind.CAR.value: select(func.count(CarBooking.id), func.sum(CarBooking.total_price))
            .join(Car, Car.id == CarBooking.car_id)
            .where(Car.agency_id == agency_id, CarBooking.payment_status == paid),
        }
        earnings = {}
        for kind, query in queries.items():
            count, amount = (await self.db.execute(query)).one()
            earnings[kind] = (count or 0, quantize(Decimal(amount or 0)))
        return earnings

    async def calculate_balance(self, user: User) -> BalanceBreakdown:
        """
        Recompute the balance from paid bookings and completed withdrawals.

        The result is stored on the wallet so it also repairs drift.
        """
        agency = await self.agencies.get_agency_for_user(user)
        wallet = await self.get_or_create_wallet(agency.id)
        earnings = await self.earnings_by_kind(agency.id)

        withdrawn = await self.db.scalar(
            select(func.sum(WalletTransaction.amount)).where(
                WalletTransaction.wallet_id == wallet.id,
                WalletTransaction.type == TransactionType.WITHDRAWAL,
                WalletTransaction.status == TransactionStatus.COMPLETED,
            )
        )
        withdrawn = quantize(Decimal(withdrawn or 0))
        total = sum((amount for _, amount in earnings.values()), ZERO)
        balance = quantize(total - withdrawn)

        if Decimal(wallet.balance) != balance:
            logger.info(
                "Wallet balance recalculated",
                extra={"agency_id": agency.id, "stored": str(wallet.balance), "computed": str(balance)},
            )
        wallet.balance = balance
        await self.db.commit()

        return BalanceBreakdown(
            trip_earnings=float(earnings["trip"][1]),
            hotel_earnings=float(earnings["hotel"][1]),
            car_earnings=float(earnings["car"][1]),
            total_earnings=float(total),
            total_withdrawn=float(withdrawn),
            balance=float(balance),
        )

    async def income_summary(self, user: User) -> IncomeSummary:
        agency = await self.agencies.get_agency_for_user(user)
        earnings = await self.earnings_by_kind(agency.id)
        lines = [
            IncomeLine(kind=kind, bookings=count, amount=float(amount))
            for kind, (count, amount) in earnings.items()
        ]
        total = sum((amount for _, amount in earnings.values()), ZERO)
        return IncomeSummary(lines=lines, total=float(total))

    async def create_withdrawal_request(self, user: User, request: CreateWithdrawalRequest) -> WithdrawalRequest:
        """
        Ask for a payout of part of the balance.

        Raises:
            ValidationError: If the amount is not positive
            InsufficientBalanceError: If the amount exceeds the balance
        """
        agency = await self.agencies.get_agency_for_user(user)
        amount = quantize(Decimal(request.amount))
        if amount <= ZERO:
            raise ValidationError("Withdrawal amount must be positive")

        wallet = await self.get_or_create_wallet(agency.id)
        if amount > Decimal(wallet.balance):
            raise InsufficientBalanceError(amount, wallet.balance)

        withdrawal = WithdrawalRequest(
            agency_id=agency.id,
            amount=amount,
            bank_name=request.bank_name,
            account_holder_name=request.account_holder_name,
            bank_account_number=request.bank_account_number,
            notes=request.notes,
        )
        self.db.add(withdrawal)
        await self.db.flush()

        await self.notifications.notify_admins(
            title="New withdrawal request",
            message=f"{agency.agency_name} requested a withdrawal of {amount}",
            type=NotificationType.INFO,
            related_item_type="withdrawal",
            related_item_id=withdrawal.id,
        )
        await self.db.commit()
        await self.db.refresh(withdrawal)

        logger.info(
            "Withdrawal requested",
            extra={"agency_id": agency.id, "withdrawal_id": withdrawal.id, "amount": str(amount)},
        )
        return withdrawal

    async def list_agency_withdrawals(self, user: User) -> list[WithdrawalRequest]:
        agency = await self.agencies.get_agency_for_user(user)
        result = await self.db.execute(
            select(WithdrawalRequest)
            .where(WithdrawalRequest.agency_id == agency.id)
            .order_by(WithdrawalRequest.created_at.desc(), WithdrawalRequest.id.desc())
        )
        return list(result.scalars().all())
