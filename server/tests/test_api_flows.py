"""End-to-end API flows through the HTTP layer."""

from datetime import date, timedelta

import pytest

from booki.core.security import decode_access_token


async def _register(client, email, password="s3cure-passw0rd", **extra):
    payload = {"name": extra.pop("name", "New User"), "email": email, "password": password, **extra}
    response = await client.post("/v1/auth/register", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def _login(client, email, password="s3cure-passw0rd"):
    response = await client.post("/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.mark.asyncio
async def test_register_login_and_logout(test_client):
    user = await _register(test_client, "Nadia@Example.com", name="Nadia")
    assert user["email"] == "nadia@example.com"
    assert user["role"] == "customer"

    headers = await _login(test_client, "nadia@example.com")
    claims = decode_access_token(headers["Authorization"].split()[1])
    assert claims.user_id == user["id"]

    me = await test_client.get("/v1/auth/me", headers=headers)
    assert me.json()["name"] == "Nadia"

    response = await test_client.post("/v1/auth/logout", headers=headers)
    assert response.status_code == 200
    assert (await test_client.get("/v1/auth/me", headers=headers)).status_code == 401


@pytest.mark.asyncio
async def test_duplicate_email_conflicts(test_client):
    await _register(test_client, "dup@example.com")

    response = await test_client.post(
        "/v1/auth/register",
        json={"name": "Again", "email": "DUP@example.com", "password": "another-passw0rd"},
    )

    assert response.status_code == 409
    assert response.json()["status"] == 409


@pytest.mark.asyncio
async def test_wrong_password(test_client):
    await _register(test_client, "someone@example.com")

    response = await test_client.post(
        "/v1/auth/login", json={"email": "someone@example.com", "password": "not-the-password"}
    )

    assert response.status_code == 401
    assert response.headers["content-type"].startswith("application/problem+json")


@pytest.mark.asyncio
async def test_invalid_payload_is_a_problem_document(test_client):
    response = await test_client.post("/v1/auth/register", json={"email": "not-an-email", "password": "x"})

    assert response.status_code == 422
    body = response.json()
    assert body["title"] == "Unprocessable Request"
    fields = {violation["field"] for violation in body["violations"]}
    assert {"body.name", "body.email", "body.password"} <= fields


@pytest.mark.asyncio
async def test_agency_owner_needs_agency_details(test_client):
    response = await test_client.post(
        "/v1/auth/register",
        json={"name": "Owner", "email": "o@example.com", "password": "s3cure-passw0rd", "role": "agency_owner"},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_trip_from_listing_to_paid_booking(test_client, admin, login_headers, email_service):
    """Agency publishes a trip, admin approves it, a traveler books and pays."""
    await _register(
        test_client,
        "owner@dunes.example.com",
        name="Karim",
        role="agency_owner",
        agency={"agency_name": "Dunes Travel"},
    )
    owner_headers = await _login(test_client, "owner@dunes.example.com")
    assert email_service.sent[0]["subject"]

    start = date.today() + timedelta(days=20)
    response = await test_client.post(
        "/v1/trips",
        json={
            "name": "Ksar Ghilane Overnight",
            "destination": "Ksar Ghilane",
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=1)).isoformat(),
            "price": "150.00",
            "capacity": 8,
            "activities": [{"activity_name": "Camel ride"}],
        },
        headers=owner_headers,
    )
    assert response.status_code == 201, response.text
    trip = response.json()
    assert trip["status"] == "pending"
    assert trip["activities"][0]["activity_name"] == "Camel ride"

    await _register(test_client, "guest@example.com", name="Guest")
    guest_headers = await _login(test_client, "guest@example.com")

    response = await test_client.post(
        "/v1/bookings/trips",
        json={"trip_id": trip["id"], "seats": 2, "payment_provider": "mock"},
        headers=guest_headers,
    )
    assert response.status_code == 409

    response = await test_client.post(
        f"/v1/admin/approvals/trip/{trip['id']}/approve", json={}, headers=await login_headers(admin)
    )
    assert response.json()["status"] == "approved"

    response = await test_client.post(
        "/v1/bookings/trips",
        json={"trip_id": trip["id"], "seats": 2, "payment_provider": "mock"},
        headers=guest_headers,
    )
    assert response.status_code == 201, response.text
    checkout = response.json()
    assert checkout["amount"] == 300.0
    assert checkout["status"] == "pending"

    response = await test_client.get(f"/v1/trips/{trip['id']}")
    assert response.json()["capacity"] == 6

    response = await test_client.post(
        f"/v1/payments/mock/trip/{checkout['booking_id']}", json={"success": True}, headers=guest_headers
    )
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "confirmed"
    assert response.json()["payment_status"] == "completed"

    history = (await test_client.get("/v1/bookings", headers=guest_headers)).json()["bookings"]
    assert [(b["kind"], b["title"], b["status"]) for b in history] == [
        ("trip", "Ksar Ghilane Overnight", "confirmed")
    ]

    agency_view = (await test_client.get("/v1/bookings/agency/trip", headers=owner_headers)).json()
    assert agency_view["bookings"][0]["id"] == checkout["booking_id"]

    wallet = (await test_client.get("/v1/wallet", headers=owner_headers)).json()
    assert wallet["balance"] == 300.0


@pytest.mark.asyncio
async def test_other_customers_cannot_see_a_booking(test_client, test_session, customer, trip, login_headers, make_user):
    response = await test_client.post(
        "/v1/bookings/trips",
        json={"trip_id": trip.id, "seats": 1, "payment_provider": "mock"},
        headers=await login_headers(customer),
    )
    booking_id = response.json()["booking_id"]
    stranger = await make_user(email="nosy@example.com")

    response = await test_client.get(f"/v1/bookings/trip/{booking_id}", headers=await login_headers(stranger))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_cancel_through_the_api(test_client, customer, trip, login_headers):
    headers = await login_headers(customer)
    response = await test_client.post(
        "/v1/bookings/trips",
        json={"trip_id": trip.id, "seats": 3, "payment_provider": "mock"},
        headers=headers,
    )
    booking_id = response.json()["booking_id"]

    response = await test_client.post(f"/v1/bookings/trip/{booking_id}/cancel", headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "canceled"

    response = await test_client.post(f"/v1/bookings/trip/{booking_id}/cancel", headers=headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_currency_conversion_endpoint(test_client):
    response = await test_client.get("/v1/currency/convert", params={"amount": "100", "from": "tnd", "to": "usd"})

    assert response.status_code == 200
    assert response.json()["converted"] == 32.0

    response = await test_client.get("/v1/currency/convert", params={"amount": "1", "from": "XXX", "to": "USD"})
    assert response.status_code == 400
