"""Agency wallet router and admin withdrawal processing."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import DB_DEPENDENCY, AdminUser, AgencyOwner, AgencyStaff
from ..models.user import User
from ..models.wallet import WithdrawalStatus
from ..schemas.wallet import (
    ApproveWithdrawalRequest,
    BalanceBreakdown,
    CreateWithdrawalRequest,
    IncomeSummary,
    RejectWithdrawalRequest,
    WalletOut,
    WalletTransactionOut,
    WithdrawalOut,
    WithdrawalReceiptRequest,
)
from ..services.email_service import EmailService, get_email_service
from ..services.wallet_service import WalletService
from ..services.withdrawal_service import WithdrawalService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/wallet", tags=["wallet"])
admin_router = APIRouter(prefix="/v1/admin/withdrawals", tags=["admin"])

EMAIL_DEPENDENCY = Depends(get_email_service)


@router.get("", response_model=WalletOut)
async def get_wallet(user: User = AgencyStaff, db: AsyncSession = DB_DEPENDENCY) -> WalletOut:
    wallet = await WalletService(db).get_wallet_for_user(user)
    return WalletOut.model_validate(wallet)


@router.get("/transactions", response_model=List[WalletTransactionOut])
async def list_transactions(
    limit: int = Query(50, ge=1, le=200),
    user: User = AgencyStaff,
    db: AsyncSession = DB_DEPENDENCY,
) -> List[WalletTransactionOut]:
    transactions = await WalletService(db).list_transactions(user, limit)
    return [WalletTransactionOut.model_validate(t) for t in transactions]


@router.get("/balance", response_model=BalanceBreakdown)
async def calculate_balance(user: User = AgencyStaff, db: AsyncSession = DB_DEPENDENCY) -> BalanceBreakdown:
    """Recompute the balance from paid bookings and completed withdrawals."""
    return await WalletService(db).calculate_balance(user)


@router.get("/income", response_model=IncomeSummary)
async def income_summary(user: User = AgencyStaff, db: AsyncSession = DB_DEPENDENCY) -> IncomeSummary:
    return await WalletService(db).income_summary(user)


@router.get("/withdrawals", response_model=List[WithdrawalOut])
async def list_my_withdrawals(user: User = AgencyStaff, db: AsyncSession = DB_DEPENDENCY) -> List[WithdrawalOut]:
    withdrawals = await WalletService(db).list_agency_withdrawals(user)
    return [WithdrawalOut.model_validate(w) for w in withdrawals]


@router.post("/withdrawals", response_model=WithdrawalOut, status_code=201)
async def request_withdrawal(
    request: CreateWithdrawalRequest,
    owner: User = AgencyOwner,
    db: AsyncSession = DB_DEPENDENCY,
) -> WithdrawalOut:
    withdrawal = await WalletService(db).create_withdrawal_request(owner, request)
    return WithdrawalOut.model_validate(withdrawal)


@admin_router.get("", response_model=List[WithdrawalOut])
async def list_withdrawals(
    status: Optional[WithdrawalStatus] = None,
    admin: User = AdminUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> List[WithdrawalOut]:
    """Pending requests first, then newest."""
    withdrawals = await WithdrawalService(db).list_requests(status)
    return [WithdrawalOut.model_validate(w) for w in withdrawals]


@admin_router.post("/{withdrawal_id}/approve", response_model=WithdrawalOut)
async def approve_withdrawal(
    withdrawal_id: int,
    request: ApproveWithdrawalRequest,
    admin: User = AdminUser,
    db: AsyncSession = DB_DEPENDENCY,
    email_service: EmailService = EMAIL_DEPENDENCY,
) -> WithdrawalOut:
    withdrawal = await WithdrawalService(db).approve(admin, withdrawal_id, request.admin_notes, email_service)
    return WithdrawalOut.model_validate(withdrawal)


@admin_router.post("/{withdrawal_id}/reject", response_model=WithdrawalOut)
async def reject_withdrawal(
    withdrawal_id: int,
    request: RejectWithdrawalRequest,
    admin: User = AdminUser,
    db: AsyncSession = DB_DEPENDENCY,
    email_service: EmailService = EMAIL_DEPENDENCY,
) -> WithdrawalOut:
    withdrawal = await WithdrawalService(db).reject(admin, withdrawal_id, request.admin_notes, email_service)
    return WithdrawalOut.model_validate(withdrawal)


@admin_router.put("/{withdrawal_id}/receipt", response_model=WithdrawalOut)
async def attach_receipt(
    withdrawal_id: int,
    request: WithdrawalReceiptRequest,
    admin: User = AdminUser,
    db: AsyncSession = DB_DEPENDENCY,
) -> WithdrawalOut:
    withdrawal = await WithdrawalService(db).attach_receipt(withdrawal_id, request.receipt_url)
    return WithdrawalOut.model_validate(withdrawal)
