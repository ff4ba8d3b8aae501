"""Unit tests for admin user management."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from booki.core.exceptions import ConflictError, ValidationError
from booki.models import BookingKind, BookingStatus, CarBooking, PaymentStatus, TripBooking, User, UserRole, UserSession
from booki.schemas.booking import CreateCarBookingRequest, CreateTripBookingRequest
from booki.services.car_booking_service import CarBookingService
from booki.services.payment_service import PaymentService
from booki.services.trip_booking_service import TripBookingService
from booki.services.user_service import UserService


async def _count(session, model, **filters) -> int:
    query = select(func.count()).select_from(model)
    for column, value in filters.items():
        query = query.where(getattr(model, column) == value)
    return await session.scalar(query)


@pytest.mark.asyncio
async def test_list_users_filters_and_counts(test_session, admin, customer, agency_owner):
    service = UserService(test_session)

    users, total = await service.list_users(role=UserRole.CUSTOMER)
    assert total == 1
    assert [u.id for u in users] == [customer.id]

    users, total = await service.list_users(search="TRAVELER")
    assert total == 1
    assert users[0].email == "traveler@example.com"


@pytest.mark.asyncio
async def test_ban_revokes_sessions_and_cancels_rentals(
    test_session, admin, customer, car, gateways, login_headers
):
    await login_headers(customer)
    start = datetime.now(timezone.utc).replace(microsecond=0) + timedelta(days=3)
    checkout = await CarBookingService(test_session).create_booking(
        customer,
        CreateCarBookingRequest(
            car_id=car.id,
            start_date=start,
            end_date=start + timedelta(days=2),
            full_name="Amira Traveler",
            email="traveler@example.com",
            phone="+21620000000",
            payment_provider="mock",
        ),
        gateways,
    )

    banned = await UserService(test_session).ban_user(admin, customer.id)

    assert banned.banned is True
    assert banned.ban_reason
    assert await _count(test_session, UserSession, user_id=customer.id) == 0
    booking = await test_session.get(CarBooking, checkout.booking_id)
    await test_session.refresh(booking)
    assert booking.status == BookingStatus.CANCELED
    assert booking.payment_status == PaymentStatus.FAILED


@pytest.mark.asyncio
async def test_ban_keeps_paid_rentals_paid(test_session, admin, customer, car, gateways):
    start = datetime.now(timezone.utc).replace(microsecond=0) + timedelta(days=3)
    checkout = await CarBookingService(test_session).create_booking(
        customer,
        CreateCarBookingRequest(
            car_id=car.id,
            start_date=start,
            end_date=start + timedelta(days=2),
            full_name="Amira Traveler",
            email="traveler@example.com",
            phone="+21620000000",
            payment_provider="mock",
        ),
        gateways,
    )
    await PaymentService(test_session).mark_paid(BookingKind.CAR, checkout.booking_id, "mock")

    await UserService(test_session).ban_user(admin, customer.id)

    booking = await test_session.get(CarBooking, checkout.booking_id)
    await test_session.refresh(booking)
    assert booking.status == BookingStatus.CANCELED
    assert booking.payment_status == PaymentStatus.COMPLETED


@pytest.mark.asyncio
async def test_banned_user_tokens_stop_working(test_client, test_session, admin, customer, login_headers):
    headers = await login_headers(customer)
    assert (await test_client.get("/v1/auth/me", headers=headers)).status_code == 200

    await UserService(test_session).ban_user(admin, customer.id, reason="Chargeback fraud")

    assert (await test_client.get("/v1/auth/me", headers=headers)).status_code == 401


@pytest.mark.asyncio
async def test_unban_clears_reason(test_session, admin, customer):
    service = UserService(test_session)
    await service.ban_user(admin, customer.id, reason="Spam")

    user = await service.unban_user(customer.id)

    assert user.banned is False
    assert user.ban_reason is None


@pytest.mark.asyncio
@pytest.mark.parametrize("action", ["ban", "delete", "role"])
async def test_admin_cannot_act_on_own_account(test_session, admin, action):
    service = UserService(test_session)
    with pytest.raises(ValidationError):
        if action == "ban":
            await service.ban_user(admin, admin.id)
        elif action == "delete":
            await service.delete_user(admin, admin.id)
        else:
            await service.set_role(admin, admin.id, UserRole.CUSTOMER)


@pytest.mark.asyncio
async def test_set_role_revokes_sessions(test_session, admin, customer, login_headers):
    await login_headers(customer)

    user = await UserService(test_session).set_role(admin, customer.id, UserRole.AGENCY_OWNER)

    assert user.role == UserRole.AGENCY_OWNER
    assert await _count(test_session, UserSession, user_id=customer.id) == 0


@pytest.mark.asyncio
async def test_agency_owner_cannot_be_deleted(test_session, admin, agency_owner, agency):
    with pytest.raises(ConflictError):
        await UserService(test_session).delete_user(admin, agency_owner.id)


@pytest.mark.asyncio
async def test_delete_user_restores_seats_and_removes_bookings(test_session, admin, customer, trip, gateways):
    await TripBookingService(test_session).create_booking(
        customer,
        CreateTripBookingRequest(trip_id=trip.id, seats=4, payment_provider="mock"),
        gateways,
    )
    customer_id = customer.id

    await UserService(test_session).delete_user(admin, customer_id)

    await test_session.refresh(trip)
    assert trip.capacity == 10
    assert await _count(test_session, TripBooking, user_id=customer_id) == 0
    assert await _count(test_session, User, id=customer_id) == 0


@pytest.mark.asyncio
async def test_admin_users_api_is_admin_only(test_client, customer, admin, login_headers):
    response = await test_client.get("/v1/admin/users", headers=await login_headers(customer))
    assert response.status_code == 403

    response = await test_client.get("/v1/admin/users", headers=await login_headers(admin))
    assert response.status_code == 200
