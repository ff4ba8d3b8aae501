"""Unit tests for agency wallets and withdrawals."""

from decimal import Decimal

import pytest

from booki.core.exceptions import ConflictError, InsufficientBalanceError
from booki.models import BookingKind, TransactionType, WithdrawalStatus
from booki.schemas.booking import CreateTripBookingRequest
from booki.schemas.wallet import CreateWithdrawalRequest
from booki.services.payment_service import PaymentService
from booki.services.trip_booking_service import TripBookingService
from booki.services.wallet_service import WalletService
from booki.services.withdrawal_service import WithdrawalService


async def _paid_trip_booking(session, user, trip, gateways, seats: int) -> int:
    checkout = await TripBookingService(session).create_booking(
        user,
        CreateTripBookingRequest(trip_id=trip.id, seats=seats, payment_provider="mock"),
        gateways,
    )
    await PaymentService(session).mark_paid(BookingKind.TRIP, checkout.booking_id, "mock")
    return checkout.booking_id


def _withdrawal(amount: str) -> CreateWithdrawalRequest:
    return CreateWithdrawalRequest(
        amount=Decimal(amount),
        bank_name="Banque de Tunisie",
        account_holder_name="Sahara Tours SARL",
        bank_account_number="TN5910006035183598478831",
    )


@pytest.mark.asyncio
async def test_wallet_is_created_on_first_access(test_session, agency_owner, agency):
    wallet = await WalletService(test_session).get_wallet_for_user(agency_owner)

    assert wallet.agency_id == agency.id
    assert wallet.balance == Decimal("0")


@pytest.mark.asyncio
async def test_employee_sees_the_agency_wallet(test_session, agency, agency_employee):
    wallet = await WalletService(test_session).get_wallet_for_user(agency_employee)
    assert wallet.agency_id == agency.id


@pytest.mark.asyncio
async def test_credit_transactions_are_listed(test_session, customer, agency_owner, trip, gateways):
    booking_id = await _paid_trip_booking(test_session, customer, trip, gateways, seats=2)

    transactions = await WalletService(test_session).list_transactions(agency_owner)

    assert len(transactions) == 1
    assert transactions[0].type == TransactionType.CREDIT
    assert transactions[0].booking_id == booking_id
    assert transactions[0].amount == Decimal("200.00")


@pytest.mark.asyncio
async def test_calculate_balance_repairs_drift(test_session, customer, agency_owner, agency, trip, gateways):
    await _paid_trip_booking(test_session, customer, trip, gateways, seats=3)
    service = WalletService(test_session)
    wallet = await service.get_or_create_wallet(agency.id)
    wallet.balance = Decimal("999.00")
    await test_session.commit()

    breakdown = await service.calculate_balance(agency_owner)

    assert breakdown.trip_earnings == 300.0
    assert breakdown.total_withdrawn == 0.0
    assert breakdown.balance == 300.0
    await test_session.refresh(wallet)
    assert wallet.balance == Decimal("300.00")


@pytest.mark.asyncio
async def test_income_summary_counts_paid_bookings(test_session, customer, agency_owner, trip, gateways):
    await _paid_trip_booking(test_session, customer, trip, gateways, seats=1)
    await _paid_trip_booking(test_session, customer, trip, gateways, seats=2)

    summary = await WalletService(test_session).income_summary(agency_owner)

    lines = {line.kind: line for line in summary.lines}
    assert lines["trip"].bookings == 2
    assert lines["trip"].amount == 300.0
    assert lines["car"].bookings == 0
    assert summary.total == 300.0


@pytest.mark.asyncio
async def test_withdrawal_over_balance_is_refused(test_session, agency_owner, agency):
    with pytest.raises(InsufficientBalanceError):
        await WalletService(test_session).create_withdrawal_request(agency_owner, _withdrawal("10.00"))


@pytest.mark.asyncio
async def test_approved_withdrawal_debits_wallet(
    test_session, customer, admin, agency_owner, agency, trip, gateways, email_service
):
    await _paid_trip_booking(test_session, customer, trip, gateways, seats=3)
    wallets = WalletService(test_session)
    request = await wallets.create_withdrawal_request(agency_owner, _withdrawal("120.00"))
    assert request.status == WithdrawalStatus.PENDING

    approved = await WithdrawalService(test_session).approve(admin, request.id, "Sent by wire", email_service)

    assert approved.status == WithdrawalStatus.APPROVED
    assert approved.processed_by_id == admin.id
    wallet = await wallets.get_or_create_wallet(agency.id)
    assert wallet.balance == Decimal("180.00")
    assert email_service.sent[0]["to"] == agency.contact_email

    breakdown = await wallets.calculate_balance(agency_owner)
    assert breakdown.total_withdrawn == 120.0
    assert breakdown.balance == 180.0


@pytest.mark.asyncio
async def test_rejected_withdrawal_keeps_balance(
    test_session, customer, admin, agency_owner, agency, trip, gateways, email_service
):
    await _paid_trip_booking(test_session, customer, trip, gateways, seats=1)
    wallets = WalletService(test_session)
    request = await wallets.create_withdrawal_request(agency_owner, _withdrawal("50.00"))
    service = WithdrawalService(test_session)

    rejected = await service.reject(admin, request.id, "Account number mismatch", email_service)

    assert rejected.status == WithdrawalStatus.REJECTED
    assert rejected.admin_notes == "Account number mismatch"
    wallet = await wallets.get_or_create_wallet(agency.id)
    assert wallet.balance == Decimal("100.00")

    with pytest.raises(ConflictError):
        await service.approve(admin, request.id, None, email_service)


@pytest.mark.asyncio
async def test_approval_rechecks_balance(
    test_session, customer, admin, agency_owner, agency, trip, gateways, email_service
):
    await _paid_trip_booking(test_session, customer, trip, gateways, seats=1)
    wallets = WalletService(test_session)
    first = await wallets.create_withdrawal_request(agency_owner, _withdrawal("80.00"))
    second = await wallets.create_withdrawal_request(agency_owner, _withdrawal("80.00"))
    service = WithdrawalService(test_session)

    await service.approve(admin, first.id, None, email_service)
    with pytest.raises(InsufficientBalanceError):
        await service.approve(admin, second.id, None, email_service)


@pytest.mark.asyncio
async def test_pending_withdrawals_listed_first(
    test_session, customer, admin, agency_owner, trip, gateways, email_service
):
    await _paid_trip_booking(test_session, customer, trip, gateways, seats=2)
    wallets = WalletService(test_session)
    first = await wallets.create_withdrawal_request(agency_owner, _withdrawal("10.00"))
    second = await wallets.create_withdrawal_request(agency_owner, _withdrawal("20.00"))
    await WithdrawalService(test_session).reject(admin, first.id, "Duplicate", email_service)

    listed = await WithdrawalService(test_session).list_requests()

    assert [w.id for w in listed] == [second.id, first.id]
    pending = await WithdrawalService(test_session).list_requests(WithdrawalStatus.PENDING)
    assert [w.id for w in pending] == [second.id]


@pytest.mark.asyncio
async def test_withdrawal_api_requires_agency_staff(test_client, customer, login_headers):
    response = await test_client.post(
        "/v1/wallet/withdrawals",
        json={
            "amount": "10.00",
            "bank_name": "BIAT",
            "account_holder_name": "Someone",
            "bank_account_number": "12345678",
        },
        headers=await login_headers(customer),
    )

    assert response.status_code == 403
