"""Administrator processing of agency withdrawal requests."""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import utcnow
from ..core.exceptions import ConflictError, InsufficientBalanceError, NotFoundError
from ..core.observability import metrics_collector
from ..models.agency import Agency
from ..models.notification import NotificationType
from ..models.user import User
from ..models.wallet import TransactionStatus, TransactionType, WalletTransaction, WithdrawalRequest, WithdrawalStatus
from ..payments.currency import quantize
from .email_service import EmailService
from .notification_service import NotificationService
from .wallet_service import WalletService

logger = logging.getLogger(__name__)


class WithdrawalService:
    """Service for the admin side of withdrawals."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.wallets = WalletService(db)
        self.notifications = NotificationService(db)

    async def get_withdrawal_or_raise(self, withdrawal_id: int) -> WithdrawalRequest:
        withdrawal = await self.db.get(WithdrawalRequest, withdrawal_id)
        if withdrawal is None:
            raise NotFoundError("withdrawal request", withdrawal_id)
        return withdrawal

    async def list_requests(self, status: Optional[WithdrawalStatus] = None) -> list[WithdrawalRequest]:
        """Pending requests first, then newest first."""
        pending_first = case((WithdrawalRequest.status == WithdrawalStatus.PENDING, 0), else_=1)
        query = select(WithdrawalRequest)
        if status is not None:
            query = query.where(WithdrawalRequest.status == status)
        query = query.order_by(pending_first, WithdrawalRequest.created_at.desc(), WithdrawalRequest.id.desc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def _contact_email(self, agency_id: int) -> Optional[str]:
        return await self.db.scalar(select(Agency.contact_email).where(Agency.id == agency_id))

    def _ensure_pending(self, withdrawal: WithdrawalRequest) -> None:
        if withdrawal.status != WithdrawalStatus.PENDING:
            raise ConflictError(
                detail=f"Withdrawal request is already {withdrawal.status}",
                conflicting_resource={"type": "withdrawal", "id": str(withdrawal.id)},
            )

    async def approve(
        self,
        admin: User,
        withdrawal_id: int,
        admin_notes: Optional[str],
        email_service: EmailService,
    ) -> WithdrawalRequest:
        """
        Pay out a pending request: debit the wallet and record the withdrawal.

        Raises:
            ConflictError: If the request is not pending
            InsufficientBalanceError: If the wallet no longer covers the amount
        """
        withdrawal = await self.get_withdrawal_or_raise(withdrawal_id)
        self._ensure_pending(withdrawal)

        wallet = await self.wallets.get_or_create_wallet(withdrawal.agency_id)
        amount = quantize(Decimal(withdrawal.amount))
        if Decimal(wallet.balance) < amount:
            raise InsufficientBalanceError(amount, wallet.balance)

        wallet.balance = quantize(Decimal(wallet.balance) - amount)
        self.db.add(
            WalletTransaction(
                wallet_id=wallet.id,
                amount=amount,
                type=TransactionType.WITHDRAWAL,
                status=TransactionStatus.COMPLETED,
                description=f"Withdrawal to {withdrawal.bank_name}",
                withdrawal_request_id=withdrawal.id,
            )
        )

        withdrawal.status = WithdrawalStatus.APPROVED
        withdrawal.admin_notes = admin_notes
        withdrawal.processed_at = utcnow()
        withdrawal.processed_by_id = admin.id

        await self.notifications.notify_agency(
            withdrawal.agency_id,
            title="Withdrawal approved",
            message=f"Your withdrawal of {amount} was approved",
            type=NotificationType.SUCCESS,
            related_item_type="withdrawal",
            related_item_id=withdrawal.id,
        )
        await self.db.commit()
        await self.db.refresh(withdrawal)
        metrics_collector.record_withdrawal_processed("approved")

        logger.info(
            "Withdrawal approved",
            extra={"withdrawal_id": withdrawal.id, "agency_id": withdrawal.agency_id, "amount": str(amount)},
        )

        to = await self._contact_email(withdrawal.agency_id)
        if to:
            await email_service.send_withdrawal_decision(to, str(amount), True, admin_notes)
        return withdrawal

    async def reject(
        self,
        admin: User,
        withdrawal_id: int,
        admin_notes: str,
        email_service: EmailService,
    ) -> WithdrawalRequest:
        withdrawal = await self.get_withdrawal_or_raise(withdrawal_id)
        self._ensure_pending(withdrawal)

        withdrawal.status = WithdrawalStatus.REJECTED
        withdrawal.admin_notes = admin_notes
        withdrawal.processed_at = utcnow()
        withdrawal.processed_by_id = admin.id

        await self.notifications.notify_agency(
            withdrawal.agency_id,
            title="Withdrawal rejected",
            message=f"Your withdrawal of {withdrawal.amount} was rejected: {admin_notes}",
            type=NotificationType.WARNING,
            related_item_type="withdrawal",
            related_item_id=withdrawal.id,
        )
        await self.db.commit()
        await self.db.refresh(withdrawal)
        metrics_collector.record_withdrawal_processed("rejected")
        logger.info("Withdrawal rejected", extra={"withdrawal_id": withdrawal.id})

        to = await self._contact_email(withdrawal.agency_id)
        if to:
            await email_service.send_withdrawal_decision(to, str(withdrawal.amount), False, admin_notes)
        return withdrawal

    async def attach_receipt(self, withdrawal_id: int, receipt_url: str) -> WithdrawalRequest:
        withdrawal = await self.get_withdrawal_or_raise(withdrawal_id)
        withdrawal.receipt_url = receipt_url
        await self.db.commit()
        await self.db.refresh(withdrawal)
        return withdrawal
