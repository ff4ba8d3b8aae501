"""Unit tests for PDF invoices and CDN image uploads."""

import hashlib
from datetime import date, datetime

import httpx
import pytest

from booki.core.config import settings
from booki.core.exceptions import AuthorizationError, UpstreamServiceError, ValidationError
from booki.models import BookingKind, UserRole
from booki.schemas.booking import CreateTripBookingRequest
from booki.services.invoice_service import InvoiceService, format_date, pdf_text
from booki.services.trip_booking_service import TripBookingService
from booki.services.upload_service import UploadService, get_upload_service, sign_params


async def _booking_id(session, customer, trip, gateways) -> int:
    checkout = await TripBookingService(session).create_booking(
        customer,
        CreateTripBookingRequest(trip_id=trip.id, seats=2, payment_provider="mock"),
        gateways,
    )
    return checkout.booking_id


# Invoices


def test_pdf_text_replaces_unencodable_characters():
    assert pdf_text("Sidi Bou Saïd") == "Sidi Bou Saïd"
    assert pdf_text("Tunis → Djerba") == "Tunis ? Djerba"
    assert pdf_text(None) == ""


def test_format_date():
    assert format_date(date(2026, 5, 1)) == "2026-05-01"
    assert format_date(datetime(2026, 5, 1, 9, 30)) == "2026-05-01 09:30"
    assert format_date(None) == "-"


@pytest.mark.asyncio
async def test_customer_invoice_is_a_pdf(test_session, customer, agency, trip, gateways):
    booking_id = await _booking_id(test_session, customer, trip, gateways)

    pdf = await InvoiceService(test_session).render_invoice(customer, BookingKind.TRIP, booking_id)

    assert pdf.startswith(b"%PDF")


@pytest.mark.asyncio
async def test_agency_staff_can_render_their_bookings(test_session, customer, agency_employee, trip, gateways):
    booking_id = await _booking_id(test_session, customer, trip, gateways)

    pdf = await InvoiceService(test_session).render_invoice(agency_employee, BookingKind.TRIP, booking_id)

    assert pdf.startswith(b"%PDF")


@pytest.mark.asyncio
async def test_other_customers_cannot_get_the_invoice(test_session, customer, make_user, trip, gateways):
    booking_id = await _booking_id(test_session, customer, trip, gateways)
    stranger = await make_user(UserRole.CUSTOMER, email="stranger@example.com")

    with pytest.raises(AuthorizationError):
        await InvoiceService(test_session).render_invoice(stranger, BookingKind.TRIP, booking_id)


@pytest.mark.asyncio
async def test_invoice_endpoint(test_client, test_session, customer, trip, gateways, login_headers):
    booking_id = await _booking_id(test_session, customer, trip, gateways)

    response = await test_client.get(
        f"/v1/bookings/trip/{booking_id}/invoice", headers=await login_headers(customer)
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert f"invoice-trip-{booking_id}.pdf" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


# Uploads


def test_sign_params_sorts_and_skips_empty_values():
    params = {"timestamp": "1700000000", "folder": "booki", "public_id": ""}
    expected = hashlib.sha1(b"folder=booki&timestamp=1700000000secret").hexdigest()

    assert sign_params(params, "secret") == expected


@pytest.mark.parametrize(
    "content_type,size",
    [(None, 10), ("application/pdf", 10), ("image/png", 0)],
)
def test_validate_rejects(content_type, size):
    with pytest.raises(ValidationError):
        UploadService.validate(content_type, size)


def test_validate_rejects_oversized(monkeypatch):
    monkeypatch.setattr(settings, "upload_max_bytes", 100)
    with pytest.raises(ValidationError):
        UploadService.validate("image/jpeg", 101)
    UploadService.validate("image/jpeg", 100)


@pytest.fixture
def cdn_settings(monkeypatch):
    monkeypatch.setattr(settings, "cloudinary_cloud_name", "booki-test")
    monkeypatch.setattr(settings, "cloudinary_api_key", "key-123")
    monkeypatch.setattr(settings, "cloudinary_api_secret", "secret-456")


@pytest.mark.asyncio
async def test_upload_image_posts_a_signed_request(cdn_settings):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "secure_url": "https://res.cloudinary.test/booki/abc.png",
                "public_id": "booki/abc",
                "width": 640,
                "height": 480,
                "bytes": 4,
            },
        )

    service = UploadService(transport=httpx.MockTransport(handler))
    image = await service.upload_image("photo.png", b"\x89PNG", "image/png")

    assert image.url == "https://res.cloudinary.test/booki/abc.png"
    assert image.public_id == "booki/abc"
    request = seen[0]
    assert request.url.path == "/v1_1/booki-test/image/upload"
    body = request.content
    assert b"key-123" in body
    assert b"signature" in body
    assert b"secret-456" not in body


@pytest.mark.asyncio
async def test_upload_rejected_by_cdn(cdn_settings):
    service = UploadService(transport=httpx.MockTransport(lambda request: httpx.Response(400, json={"error": "bad"})))

    with pytest.raises(UpstreamServiceError):
        await service.upload_image("photo.png", b"\x89PNG", "image/png")


@pytest.mark.asyncio
async def test_upload_without_cdn_configuration(monkeypatch):
    monkeypatch.setattr(settings, "cloudinary_cloud_name", "")

    with pytest.raises(UpstreamServiceError):
        await UploadService().upload_image("photo.png", b"\x89PNG", "image/png")


@pytest.mark.asyncio
async def test_upload_endpoint(test_app, test_client, customer, login_headers, cdn_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"secure_url": "https://cdn.test/a.jpg", "public_id": "booki/a"})

    test_app.dependency_overrides[get_upload_service] = lambda: UploadService(transport=httpx.MockTransport(handler))

    response = await test_client.post(
        "/v1/uploads/images",
        files={"file": ("a.jpg", b"\xff\xd8\xff", "image/jpeg")},
        headers=await login_headers(customer),
    )

    assert response.status_code == 201
    assert response.json()["url"] == "https://cdn.test/a.jpg"


@pytest.mark.asyncio
async def test_upload_endpoint_requires_login(test_client):
    response = await test_client.post(
        "/v1/uploads/images", files={"file": ("a.jpg", b"\xff\xd8\xff", "image/jpeg")}
    )
    assert response.status_code == 401
