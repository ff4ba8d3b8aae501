"""Unit tests for agency management and the dashboards."""

from datetime import datetime, timezone

import pytest

from booki.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from booki.models import BookingKind, UserRole
from booki.schemas.agency import CreateEmployeeRequest, UpdateAgencyRequest, UpdateEmployeeRequest
from booki.schemas.booking import CreateTripBookingRequest
from booki.services.agency_service import AgencyService
from booki.services.dashboard_service import DashboardService
from booki.services.payment_service import PaymentService
from booki.services.trip_booking_service import TripBookingService


def _employee_request(email="guide@agency.example.com"):
    return CreateEmployeeRequest(name="Youssef Guide", email=email, password="guide-passw0rd", position="Guide")


async def _paid_trip_booking(session, customer, trip, gateways, seats=2):
    checkout = await TripBookingService(session).create_booking(
        customer,
        CreateTripBookingRequest(trip_id=trip.id, seats=seats, payment_provider="mock"),
        gateways,
    )
    await PaymentService(session).mark_paid(BookingKind.TRIP, checkout.booking_id, "mock")
    return checkout.booking_id


# Agency


@pytest.mark.asyncio
async def test_owner_manages_employees(test_session, agency_owner, agency):
    service = AgencyService(test_session)

    added = await service.add_employee(agency_owner, _employee_request())
    assert added.position == "Guide"

    updated = await service.update_employee(agency_owner, added.user_id, UpdateEmployeeRequest(position="Lead guide"))
    assert updated.position == "Lead guide"
    assert [e.email for e in await service.list_employees(agency_owner)] == ["guide@agency.example.com"]

    await service.delete_employee(agency_owner, added.user_id)
    assert await service.list_employees(agency_owner) == []


@pytest.mark.asyncio
async def test_employee_email_must_be_free(test_session, agency_owner, agency, customer):
    with pytest.raises(ConflictError):
        await AgencyService(test_session).add_employee(agency_owner, _employee_request(email=customer.email))


@pytest.mark.asyncio
async def test_employees_of_other_agencies_are_not_found(test_session, agency_owner, agency, make_user, make_agency):
    rival = await make_user(UserRole.AGENCY_OWNER, email="rival@agency.example.com")
    await make_agency(rival, "Rival Voyages")
    service = AgencyService(test_session)
    employee = await service.add_employee(agency_owner, _employee_request())

    with pytest.raises(NotFoundError):
        await service.delete_employee(rival, employee.user_id)


@pytest.mark.asyncio
async def test_only_the_owner_updates_the_profile(test_session, agency_owner, agency_employee, agency):
    service = AgencyService(test_session)

    with pytest.raises(AuthorizationError):
        await service.update_profile(agency_employee, UpdateAgencyRequest(description="Hijacked"))

    updated = await service.update_profile(agency_owner, UpdateAgencyRequest(description="Desert specialists"))
    assert updated.description == "Desert specialists"


@pytest.mark.asyncio
async def test_customers_have_no_agency(test_session, customer):
    with pytest.raises(AuthorizationError):
        await AgencyService(test_session).get_agency_for_user(customer)


@pytest.mark.asyncio
async def test_admin_agency_search_and_detail(test_session, agency, agency_employee, customer, trip, gateways):
    await _paid_trip_booking(test_session, customer, trip, gateways)
    service = AgencyService(test_session)

    assert [a.id for a in await service.list_agencies(search="SAHARA")] == [agency.id]
    assert await service.list_agencies(search="nowhere") == []

    detail = await service.get_agency_detail(agency.id)
    assert detail.trip_count == 1
    assert detail.employee_count == 1
    assert detail.booking_count == 1


@pytest.mark.asyncio
async def test_verify_agency_sends_email(test_session, agency, email_service):
    verified = await AgencyService(test_session).verify_agency(agency.id, email_service)

    assert verified.is_verified is True
    assert email_service.sent[-1]["to"] == agency.contact_email


@pytest.mark.asyncio
async def test_agency_api_employees(test_client, agency_owner, agency_employee, agency, login_headers):
    response = await test_client.post(
        "/v1/agency/employees",
        json={"name": "New Hire", "email": "hire@agency.example.com", "password": "new-hire-passw0rd"},
        headers=await login_headers(agency_owner),
    )
    assert response.status_code == 201

    response = await test_client.get("/v1/agency", headers=await login_headers(agency_employee))
    assert response.json()["id"] == agency.id


# Dashboards


@pytest.mark.asyncio
async def test_admin_stats(test_session, admin, customer, agency, trip, gateways):
    await _paid_trip_booking(test_session, customer, trip, gateways)

    stats = await DashboardService(test_session).admin_stats()

    assert stats.total_users == 3
    assert stats.agencies == 1
    assert stats.bookings["trip"] == 1
    assert stats.revenue["trip"] == 200.0
    assert stats.total_revenue == 200.0
    assert stats.pending_approvals["trips"] == 0


@pytest.mark.asyncio
async def test_recent_transactions_and_monthly_revenue(test_session, customer, agency, trip, gateways):
    booking_id = await _paid_trip_booking(test_session, customer, trip, gateways)
    service = DashboardService(test_session)

    [transaction] = await service.recent_transactions()
    assert transaction.booking_id == booking_id
    assert transaction.customer_name == "Amira Traveler"

    now = datetime.now(timezone.utc)
    revenue = await service.revenue_by_month(now.year)
    assert len(revenue.months) == 12
    assert revenue.months[now.month - 1].revenue == 200.0


@pytest.mark.asyncio
async def test_agency_stats(test_session, agency_owner, customer, agency, trip, gateways):
    await _paid_trip_booking(test_session, customer, trip, gateways, seats=3)

    stats = await DashboardService(test_session).agency_stats(agency_owner)

    assert stats.offers["trips"] == 1
    assert stats.bookings["trip"] == 1
    assert stats.total_revenue == 300.0
    assert stats.wallet_balance == 300.0
    assert len(stats.recent_bookings) == 1


@pytest.mark.asyncio
async def test_admin_dashboard_is_admin_only(test_client, admin, customer, login_headers):
    response = await test_client.get("/v1/dashboard/admin", headers=await login_headers(customer))
    assert response.status_code == 403

    response = await test_client.get("/v1/dashboard/admin", headers=await login_headers(admin))
    assert response.status_code == 200
