"""Unit tests for payment reconciliation across providers."""

import hashlib
import hmac
import json
import time
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from booki.core.exceptions import AuthorizationError, ConflictError, UnavailableError, ValidationError
from booki.models import (
    BookingKind,
    BookingStatus,
    Notification,
    PaymentStatus,
    TripBooking,
    UserRole,
    Wallet,
    WalletTransaction,
)
from booki.schemas.booking import CreateTripBookingRequest
from booki.services.booking_service import BookingService
from booki.services.payment_service import PaymentService
from booki.services.trip_booking_service import TripBookingService


async def _book_trip(session, user, trip, gateways, seats=2, provider="mock", payment_type="full"):
    checkout = await TripBookingService(session).create_booking(
        user,
        CreateTripBookingRequest(
            trip_id=trip.id, seats=seats, payment_provider=provider, payment_type=payment_type
        ),
        gateways,
    )
    return checkout.booking_id


async def _wallet(session, agency):
    return await session.scalar(select(Wallet).where(Wallet.agency_id == agency.id))


async def _credit_count(session) -> int:
    return await session.scalar(select(func.count()).select_from(WalletTransaction))


def _stripe_signature(payload: bytes, secret: str = "whsec_test_secret") -> str:
    timestamp = int(time.time())
    signed = f"{timestamp}.{payload.decode()}".encode()
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def _stripe_event(event_type: str, booking_id: int, booking_type: str = "trip") -> bytes:
    return json.dumps(
        {
            "id": "evt_test",
            "type": event_type,
            "data": {
                "object": {
                    "id": f"cs_test_{booking_id}",
                    "metadata": {"booking_id": str(booking_id), "booking_type": booking_type},
                }
            },
        }
    ).encode()


@pytest.mark.asyncio
async def test_mark_paid_confirms_and_credits_once(test_session, customer, agency, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways)
    service = PaymentService(test_session)

    booking, outcome = await service.mark_paid(BookingKind.TRIP, booking_id, "mock")
    assert outcome == "completed"
    assert booking.status == BookingStatus.CONFIRMED
    assert booking.payment_status == PaymentStatus.COMPLETED
    assert booking.payment_date is not None

    _, again = await service.mark_paid(BookingKind.TRIP, booking_id, "mock")
    assert again == "unchanged"

    wallet = await _wallet(test_session, agency)
    assert wallet.balance == Decimal("200.00")
    assert await _credit_count(test_session) == 1


@pytest.mark.asyncio
async def test_advance_payment_is_partially_paid(test_session, customer, agency, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways, payment_type="advance")

    booking, _ = await PaymentService(test_session).mark_paid(BookingKind.TRIP, booking_id, "mock")

    assert booking.status == BookingStatus.PARTIALLY_PAID
    wallet = await _wallet(test_session, agency)
    assert wallet.balance == Decimal("60.00")


@pytest.mark.asyncio
async def test_mark_failed_releases_seats(test_session, customer, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways, seats=4)

    booking, outcome = await PaymentService(test_session).mark_failed(BookingKind.TRIP, booking_id, "stripe")

    assert outcome == "failed"
    assert booking.status == BookingStatus.FAILED
    await test_session.refresh(trip)
    assert trip.capacity == 10

    _, again = await PaymentService(test_session).mark_failed(BookingKind.TRIP, booking_id, "stripe")
    assert again == "unchanged"
    await test_session.refresh(trip)
    assert trip.capacity == 10


@pytest.mark.asyncio
async def test_failure_never_downgrades_a_paid_booking(test_session, customer, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways)
    service = PaymentService(test_session)
    await service.mark_paid(BookingKind.TRIP, booking_id, "mock")

    booking, outcome = await service.mark_failed(BookingKind.TRIP, booking_id, "stripe")

    assert outcome == "unchanged"
    assert booking.payment_status == PaymentStatus.COMPLETED


@pytest.mark.asyncio
async def test_late_payment_reclaims_seats(test_session, customer, trip, gateways):
    """Paying an expired booking takes its seats back."""
    booking_id = await _book_trip(test_session, customer, trip, gateways, seats=3)
    service = PaymentService(test_session)
    await service.mark_failed(BookingKind.TRIP, booking_id, "stripe")
    await test_session.refresh(trip)
    assert trip.capacity == 10

    booking, outcome = await service.mark_paid(BookingKind.TRIP, booking_id, "stripe")

    assert outcome == "completed"
    assert booking.status == BookingStatus.CONFIRMED
    await test_session.refresh(trip)
    assert trip.capacity == 7


@pytest.mark.asyncio
async def test_late_payment_without_seats_left_requires_refund(test_session, customer, agency, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways, seats=3)
    service = PaymentService(test_session)
    await service.mark_failed(BookingKind.TRIP, booking_id, "stripe")
    trip.capacity = 1
    await test_session.commit()

    booking, outcome = await service.mark_paid(BookingKind.TRIP, booking_id, "stripe", payment_id="cs_late")

    assert outcome == "refund_required"
    assert booking.status == BookingStatus.FAILED
    assert booking.payment_status == PaymentStatus.FAILED
    assert booking.payment_id
    await test_session.refresh(trip)
    assert trip.capacity == 1
    assert await _credit_count(test_session) == 0
    titles = (await test_session.execute(select(Notification.title))).scalars().all()
    assert "Refund required" in titles


@pytest.mark.asyncio
async def test_resold_seats_are_not_sold_twice(test_session, customer, make_user, agency, trip, gateways):
    trip.capacity = 3
    await test_session.commit()
    service = PaymentService(test_session)
    expired_id = await _book_trip(test_session, customer, trip, gateways, seats=3, provider="stripe")
    await service.mark_failed(BookingKind.TRIP, expired_id, "stripe")

    second = await make_user(email="second@example.com")
    resold_id = await _book_trip(test_session, second, trip, gateways, seats=3)
    await service.mark_paid(BookingKind.TRIP, resold_id, "mock")
    _, outcome = await service.mark_paid(BookingKind.TRIP, expired_id, "stripe")

    assert outcome == "refund_required"
    await test_session.refresh(trip)
    assert trip.capacity == 0
    booked = await test_session.scalar(
        select(func.sum(TripBooking.seats_booked)).where(TripBooking.status == BookingStatus.CONFIRMED)
    )
    assert booked == 3
    assert (await _wallet(test_session, agency)).balance == Decimal("300.00")


@pytest.mark.asyncio
async def test_payment_after_cancellation_takes_seats_back(test_session, customer, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways, seats=4)
    await BookingService(test_session).cancel_booking(customer, BookingKind.TRIP, booking_id)
    await test_session.refresh(trip)
    assert trip.capacity == 10

    booking, _ = await PaymentService(test_session).mark_paid(BookingKind.TRIP, booking_id, "mock")

    assert booking.status == BookingStatus.CONFIRMED
    await test_session.refresh(trip)
    assert trip.capacity == 6


@pytest.mark.asyncio
async def test_payment_notifies_customer_and_agency(test_session, customer, agency_owner, agency, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways)

    await PaymentService(test_session).mark_paid(BookingKind.TRIP, booking_id, "mock")

    recipients = set((await test_session.execute(select(Notification.user_id))).scalars().all())
    assert {customer.id, agency_owner.id} <= recipients


# Stripe


@pytest.mark.asyncio
async def test_stripe_non_checkout_events_are_ignored(test_session):
    ack = await PaymentService(test_session).handle_stripe_event({"type": "charge.refunded", "id": "evt_1"})
    assert ack.outcome == "ignored"
    assert ack.booking_id is None


@pytest.mark.asyncio
async def test_stripe_event_without_booking_id(test_session):
    event = {"type": "checkout.session.completed", "data": {"object": {"metadata": {}}}}
    with pytest.raises(ValidationError):
        await PaymentService(test_session).handle_stripe_event(event)


@pytest.mark.asyncio
async def test_stripe_booking_type_defaults_to_trip(test_session, customer, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways, provider="stripe")
    event = {
        "type": "checkout.session.completed",
        "data": {"object": {"id": "cs_test", "metadata": {"booking_id": str(booking_id)}}},
    }

    ack = await PaymentService(test_session).handle_stripe_event(event)

    assert ack.kind == BookingKind.TRIP
    assert ack.outcome == "completed"


@pytest.mark.asyncio
async def test_stripe_webhook_endpoint(test_client, test_session, customer, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways, provider="stripe")
    payload = _stripe_event("checkout.session.completed", booking_id)

    response = await test_client.post(
        "/v1/webhooks/stripe",
        content=payload,
        headers={"Stripe-Signature": _stripe_signature(payload), "Content-Type": "application/json"},
    )

    assert response.status_code == 200
    assert response.json()["outcome"] == "completed"
    booking = await test_session.get(TripBooking, booking_id)
    await test_session.refresh(booking)
    assert booking.payment_status == PaymentStatus.COMPLETED


@pytest.mark.asyncio
async def test_stripe_webhook_rejects_bad_signature(test_client, test_session, customer, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways, provider="stripe")
    payload = _stripe_event("checkout.session.completed", booking_id)

    response = await test_client.post(
        "/v1/webhooks/stripe",
        content=payload,
        headers={"Stripe-Signature": _stripe_signature(payload, secret="whsec_wrong")},
    )

    assert response.status_code == 400
    booking = await test_session.get(TripBooking, booking_id)
    await test_session.refresh(booking)
    assert booking.payment_status == PaymentStatus.PENDING


@pytest.mark.asyncio
async def test_stripe_expired_session_fails_booking(test_client, test_session, customer, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways, provider="stripe", seats=5)
    payload = _stripe_event("checkout.session.expired", booking_id)

    response = await test_client.post(
        "/v1/webhooks/stripe", content=payload, headers={"Stripe-Signature": _stripe_signature(payload)}
    )

    assert response.json()["outcome"] == "failed"
    await test_session.refresh(trip)
    assert trip.capacity == 10


@pytest.mark.asyncio
async def test_stripe_webhook_requires_signature_header(test_client):
    payload = _stripe_event("checkout.session.completed", 1)

    response = await test_client.post("/v1/webhooks/stripe", content=payload)

    assert response.status_code == 400
    assert "Stripe-Signature" in response.json()["detail"]


@pytest.mark.asyncio
async def test_stripe_webhook_for_unknown_booking(test_client, test_session):
    payload = _stripe_event("checkout.session.completed", 9999)

    response = await test_client.post(
        "/v1/webhooks/stripe", content=payload, headers={"Stripe-Signature": _stripe_signature(payload)}
    )

    assert response.status_code == 404
    assert await _credit_count(test_session) == 0


# Flouci


@pytest.mark.asyncio
async def test_flouci_webhook_completes_booking(test_session, customer, trip, gateways, flouci_stub):
    booking_id = await _book_trip(test_session, customer, trip, gateways, provider="flouci")
    body = {"payment_id": "flouci_1", "developer_tracking_id": f"trip_booking_{booking_id}"}

    ack = await PaymentService(test_session).handle_flouci_webhook(BookingKind.TRIP, body, gateways.flouci)

    assert ack.outcome == "completed"
    assert flouci_stub.verified == ["flouci_1"]


@pytest.mark.asyncio
async def test_flouci_webhook_failure(test_session, customer, trip, gateways, flouci_stub):
    flouci_stub.status = "FAILURE"
    booking_id = await _book_trip(test_session, customer, trip, gateways, provider="flouci", seats=2)
    body = {"payment_id": "flouci_1", "developer_tracking_id": f"trip_booking_{booking_id}"}

    ack = await PaymentService(test_session).handle_flouci_webhook(BookingKind.TRIP, body, gateways.flouci)

    assert ack.outcome == "failed"
    await test_session.refresh(trip)
    assert trip.capacity == 10


@pytest.mark.asyncio
async def test_flouci_pending_status_leaves_booking(test_session, customer, trip, gateways, flouci_stub):
    flouci_stub.status = "PENDING"
    booking_id = await _book_trip(test_session, customer, trip, gateways, provider="flouci")
    body = {"payment_id": "flouci_1", "developer_tracking_id": f"booking_{booking_id}"}

    ack = await PaymentService(test_session).handle_flouci_webhook(BookingKind.TRIP, body, gateways.flouci)

    assert ack.outcome == "unchanged"


@pytest.mark.asyncio
async def test_flouci_webhook_for_unknown_booking(test_client, test_session):
    response = await test_client.post(
        "/v1/webhooks/flouci/trip",
        json={"payment_id": "flouci_1", "developer_tracking_id": "trip_booking_9999"},
    )

    assert response.status_code == 404
    assert await _credit_count(test_session) == 0


@pytest.mark.asyncio
async def test_flouci_verification_outage_is_a_bad_gateway(
    test_client, test_session, customer, trip, gateways, flouci_stub
):
    booking_id = await _book_trip(test_session, customer, trip, gateways, provider="flouci")
    flouci_stub.verify_error = 503

    response = await test_client.post(
        "/v1/webhooks/flouci/trip",
        json={"payment_id": "flouci_1", "developer_tracking_id": f"trip_booking_{booking_id}"},
    )

    assert response.status_code == 502
    assert response.json()["code"] == "PAYMENT_PROVIDER_ERROR"
    booking = await test_session.get(TripBooking, booking_id)
    await test_session.refresh(booking)
    assert booking.payment_status == PaymentStatus.PENDING
    await test_session.refresh(trip)
    assert trip.capacity == 8


@pytest.mark.asyncio
async def test_flouci_webhook_kind_mismatch(test_session, gateways):
    body = {"payment_id": "flouci_1", "developer_tracking_id": "room_booking_4"}
    with pytest.raises(ValidationError):
        await PaymentService(test_session).handle_flouci_webhook(BookingKind.TRIP, body, gateways.flouci)


@pytest.mark.asyncio
async def test_flouci_webhook_requires_ids(test_session, gateways):
    with pytest.raises(ValidationError):
        await PaymentService(test_session).handle_flouci_webhook(BookingKind.CAR, {}, gateways.flouci)


@pytest.mark.asyncio
async def test_flouci_return_verification(test_client, test_session, customer, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways, provider="flouci")

    response = await test_client.get(
        "/v1/payments/flouci/verify",
        params={"kind": "trip", "booking_id": booking_id, "payment_id": "flouci_1"},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "status": "completed", "booking_id": booking_id, "kind": "trip"}


@pytest.mark.asyncio
async def test_flouci_return_rejects_foreign_payment_id(test_session, customer, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways, provider="flouci")
    with pytest.raises(ValidationError):
        await PaymentService(test_session).verify_flouci_return(
            BookingKind.TRIP, booking_id, "flouci_999", gateways.flouci
        )


# Mock and manual completion


@pytest.mark.asyncio
async def test_mock_payment_only_by_the_customer(test_session, customer, make_user, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways)
    stranger = await make_user(email="stranger@example.com")

    with pytest.raises(AuthorizationError):
        await PaymentService(test_session).complete_mock_payment(stranger, BookingKind.TRIP, booking_id, True)

    booking = await PaymentService(test_session).complete_mock_payment(customer, BookingKind.TRIP, booking_id, True)
    assert booking.is_paid


@pytest.mark.asyncio
async def test_mock_completion_requires_mock_provider(test_session, customer, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways, provider="stripe")
    with pytest.raises(ConflictError):
        await PaymentService(test_session).complete_mock_payment(customer, BookingKind.TRIP, booking_id, True)


@pytest.mark.asyncio
async def test_manual_completion_credits_only_unpaid(test_session, customer, agency_owner, agency, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways)
    service = PaymentService(test_session)

    first = await service.complete_payment_manually(agency_owner, BookingKind.TRIP, booking_id)
    second = await service.complete_payment_manually(agency_owner, BookingKind.TRIP, booking_id)

    assert first.wallet_credited is True
    assert first.status == BookingStatus.COMPLETED
    assert second.wallet_credited is False
    wallet = await _wallet(test_session, agency)
    assert wallet.balance == Decimal("200.00")


@pytest.mark.asyncio
async def test_manual_completion_reclaims_released_seats(test_session, customer, agency_owner, agency, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways, seats=3)
    service = PaymentService(test_session)
    await service.mark_failed(BookingKind.TRIP, booking_id, "stripe")

    await service.complete_payment_manually(agency_owner, BookingKind.TRIP, booking_id)
    await test_session.refresh(trip)
    assert trip.capacity == 7


@pytest.mark.asyncio
async def test_manual_completion_of_resold_seats_is_refused(test_session, customer, agency_owner, agency, trip, gateways):
    booking_id = await _book_trip(test_session, customer, trip, gateways, seats=3)
    service = PaymentService(test_session)
    await service.mark_failed(BookingKind.TRIP, booking_id, "stripe")
    trip.capacity = 2
    await test_session.commit()

    with pytest.raises(UnavailableError):
        await service.complete_payment_manually(agency_owner, BookingKind.TRIP, booking_id)
    assert await _credit_count(test_session) == 0


@pytest.mark.asyncio
async def test_manual_completion_of_another_agencys_booking(
    test_session, customer, make_user, make_agency, trip, gateways
):
    booking_id = await _book_trip(test_session, customer, trip, gateways)
    rival_owner = await make_user(email="rival@agency.example.com", role=UserRole.AGENCY_OWNER)
    await make_agency(rival_owner)

    with pytest.raises(AuthorizationError):
        await PaymentService(test_session).complete_payment_manually(rival_owner, BookingKind.TRIP, booking_id)


@pytest.mark.asyncio
async def test_customers_cannot_complete_payments(test_client, test_session, customer, trip, gateways, login_headers):
    booking_id = await _book_trip(test_session, customer, trip, gateways)

    response = await test_client.post(
        "/v1/bookings/complete-payment",
        json={"type": "trip", "id": booking_id},
        headers=await login_headers(customer),
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_agency_employees_complete_payments(
    test_client, test_session, customer, agency_employee, trip, gateways, login_headers
):
    booking_id = await _book_trip(test_session, customer, trip, gateways)

    response = await test_client.post(
        "/v1/bookings/complete-payment",
        json={"type": "trip", "id": booking_id},
        headers=await login_headers(agency_employee),
    )

    assert response.status_code == 200
    assert response.json()["payment_status"] == "completed"
    assert response.json()["wallet_credited"] is True
