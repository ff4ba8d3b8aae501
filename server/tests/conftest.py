"""Test configuration and fixtures."""

import json
import os

# Settings and the module-level engine read the environment at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-booki-tests")

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from booki.core.database import Base, get_db, utcnow
from booki.core.exceptions import PaymentProviderError
from booki.core.security import create_access_token, generate_agency_unique_id, hash_password, session_expiry
from booki.models import (
    Agency,
    AgencyEmployee,
    ApprovalStatus,
    Car,
    Hotel,
    Room,
    Trip,
    User,
    UserRole,
    UserSession,
)
from booki.payments import CheckoutSession, FlouciGateway, MockGateway, PaymentGateways, StripeGateway
from booki.payments import get_payment_gateways
from booki.services.email_service import EmailService, get_email_service

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

STRIPE_WEBHOOK_SECRET = "whsec_test_secret"
FLOUCI_API_URL = "https://flouci.test/api"
DEFAULT_PASSWORD = "correct-horse-battery"


class RecordingStripeGateway(StripeGateway):
    """Stripe gateway that opens no real session but verifies real signatures."""

    def __init__(self):
        super().__init__(secret_key="sk_test_booki", webhook_secret=STRIPE_WEBHOOK_SECRET)
        self.requests = []
        self.fail = False

    async def create_checkout(self, request):
        self.requests.append(request)
        if self.fail:
            raise PaymentProviderError("stripe", "Stripe is down")
        return CheckoutSession(
            payment_id=f"cs_test_{request.kind}_{request.booking_id}",
            url=f"https://checkout.stripe.test/{request.booking_id}",
        )


class FlouciStub:
    """httpx handler standing in for the Flouci API."""

    def __init__(self):
        self.status = "SUCCESS"
        self.verify_error: Optional[int] = None
        self.generated = []
        self.verified = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/generate_payment"):
            payload = json.loads(request.content)
            self.generated.append(payload)
            return httpx.Response(
                200,
                json={
                    "result": {
                        "success": True,
                        "payment_id": f"flouci_{len(self.generated)}",
                        "link": f"https://flouci.test/pay/{len(self.generated)}",
                    }
                },
            )
        if "/payment_intent/" in request.url.path:
            payment_id = request.url.path.rsplit("/", 1)[-1]
            self.verified.append(payment_id)
            if self.verify_error:
                return httpx.Response(self.verify_error, json={"error": "verification unavailable"})
            return httpx.Response(200, json={"result": {"status": self.status, "id": payment_id}})
        return httpx.Response(404, json={"error": "not found"})


class RecordingEmailService(EmailService):
    """Collects outgoing mail instead of sending it."""

    def __init__(self):
        super().__init__()
        self.sent = []

    async def send(self, to, subject, html_body, text_body=None) -> bool:
        self.sent.append({"to": to, "subject": subject, "html": html_body})
        return True


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def stripe_gateway():
    return RecordingStripeGateway()


@pytest.fixture
def flouci_stub():
    return FlouciStub()


@pytest.fixture
def flouci_gateway(flouci_stub):
    return FlouciGateway(
        api_url=FLOUCI_API_URL,
        app_token="flouci-token",
        app_secret="flouci-secret",
        transport=httpx.MockTransport(flouci_stub),
    )


@pytest.fixture
def gateways(stripe_gateway, flouci_gateway):
    return PaymentGateways(stripe=stripe_gateway, flouci=flouci_gateway, mock=MockGateway())


@pytest.fixture
def email_service():
    return RecordingEmailService()


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session, gateways, email_service):
    """The application with the database, payment providers and mail replaced."""
    from booki.main import create_app

    app = create_app()

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateways] = lambda: gateways
    app.dependency_overrides[get_email_service] = lambda: email_service

    yield app

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# Factories


async def create_user(
    session: AsyncSession,
    role: UserRole = UserRole.CUSTOMER,
    email: Optional[str] = None,
    name: str = "Test User",
    password: str = DEFAULT_PASSWORD,
) -> User:
    user = User(
        name=name,
        email=email or f"{role.value}-{generate_agency_unique_id().lower()}@example.com",
        password_hash=hash_password(password),
        role=role,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def create_agency(session: AsyncSession, owner: User, name: str = "Sahara Tours") -> Agency:
    agency = Agency(
        owner_id=owner.id,
        agency_name=name,
        agency_unique_id=generate_agency_unique_id(),
        contact_email=f"contact-{owner.id}@agency.example.com",
    )
    session.add(agency)
    await session.commit()
    await session.refresh(agency)
    return agency


async def auth_headers(session: AsyncSession, user: User) -> dict[str, str]:
    """Open a login session for ``user`` and return its Authorization header."""
    expires_at = session_expiry(utcnow())
    login = UserSession(user_id=user.id, expires_at=expires_at, created_at=utcnow())
    session.add(login)
    await session.commit()
    token = create_access_token(user.id, login.id, user.role, expires_at)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def customer(test_session):
    return await create_user(test_session, UserRole.CUSTOMER, email="traveler@example.com", name="Amira Traveler")


@pytest_asyncio.fixture
async def admin(test_session):
    return await create_user(test_session, UserRole.ADMIN, email="admin@example.com", name="Platform Admin")


@pytest_asyncio.fixture
async def agency_owner(test_session):
    return await create_user(test_session, UserRole.AGENCY_OWNER, email="owner@agency.example.com", name="Agency Owner")


@pytest_asyncio.fixture
async def agency(test_session, agency_owner):
    return await create_agency(test_session, agency_owner)


@pytest_asyncio.fixture
async def agency_employee(test_session, agency):
    employee = await create_user(test_session, UserRole.AGENCY_EMPLOYEE, email="staff@agency.example.com")
    test_session.add(AgencyEmployee(agency_id=agency.id, employee_id=employee.id, position="Sales"))
    await test_session.commit()
    return employee


@pytest_asyncio.fixture
async def trip(test_session, agency):
    """An approved 10-seat trip at 100 TND per seat, accepting 30% advances."""
    trip = Trip(
        agency_id=agency.id,
        name="Djerba Island Escape",
        destination="Djerba",
        start_date=date.today() + timedelta(days=30),
        end_date=date.today() + timedelta(days=35),
        price=Decimal("100.00"),
        currency="TND",
        capacity=10,
        is_available=True,
        status=ApprovalStatus.APPROVED,
        advance_payment_enabled=True,
        advance_payment_percentage=30,
    )
    test_session.add(trip)
    await test_session.commit()
    await test_session.refresh(trip)
    return trip


@pytest_asyncio.fixture
async def room(test_session, agency):
    """A 3-guest room of an approved, published hotel."""
    hotel = Hotel(
        agency_id=agency.id,
        name="Hotel Medina",
        address="1 Rue de la Kasbah",
        city="Tunis",
        country="Tunisia",
        amenities=["wifi"],
        images=[],
        is_published=True,
        status=ApprovalStatus.APPROVED,
    )
    test_session.add(hotel)
    await test_session.flush()
    room = Room(
        hotel_id=hotel.id,
        name="Deluxe Double",
        capacity=3,
        price_per_night_adult=Decimal("50.00"),
        price_per_night_child=Decimal("20.00"),
        currency="TND",
        amenities=[],
        images=[],
    )
    test_session.add(room)
    await test_session.commit()
    await test_session.refresh(room)
    return room


@pytest_asyncio.fixture
async def car(test_session, agency):
    car = Car(
        agency_id=agency.id,
        brand="Peugeot",
        model="208",
        year=2024,
        plate_number="123 TU 4567",
        location="Tunis-Carthage Airport",
        price_per_day=Decimal("80.00"),
        currency="TND",
        images=[],
        is_available=True,
        status=ApprovalStatus.APPROVED,
    )
    test_session.add(car)
    await test_session.commit()
    await test_session.refresh(car)
    return car


@pytest.fixture
def make_user(test_session):
    async def _make(role: UserRole = UserRole.CUSTOMER, **kwargs) -> User:
        return await create_user(test_session, role, **kwargs)
    return _make


@pytest.fixture
def make_agency(test_session):
    async def _make(owner: User, name: str = "Atlas Voyages") -> Agency:
        return await create_agency(test_session, owner, name)
    return _make


@pytest.fixture
def login_headers(test_session):
    async def _headers(user: User) -> dict[str, str]:
        return await auth_headers(test_session, user)
    return _headers
