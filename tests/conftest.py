"""Shared fixtures: in-memory database, fake identity provider and HTTP client."""

import os

os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

from collections.abc import AsyncGenerator
from datetime import date
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.api.deps import (
    get_current_user_id,
    get_db,
    get_identity_provider,
    get_notification_service,
    get_optional_user_id,
    get_payment_gateway,
)
from app.core.exceptions import AuthenticationError, NotFoundError
from app.core.identity import IdentityProvider, IdentityUser, Role
from app.database import Base
from app.domain.pricing import compute_price
from app.gateways.base import CheckoutResult, GatewayType, PaymentGateway
from app.main import create_application
from app.models.booking import Booking
from app.models.listing import Listing
from app.models.profile import Profile
from app.services.notification_service import NotificationService

GUEST_ID = "user_guest"
HOST_ID = "user_host"
ADMIN_ID = "user_admin"
OTHER_ID = "user_other"


class FakeIdentityProvider(IdentityProvider):
    """In-memory identity provider."""

    def __init__(self) -> None:
        self.users: dict[str, IdentityUser] = {
            GUEST_ID: IdentityUser(id=GUEST_ID, email="guest@example.cm", first_name="Awa"),
            HOST_ID: IdentityUser(
                id=HOST_ID, email="host@example.cm", first_name="Paul", role=Role.HOST,
                created_at=1700000000000,
            ),
            ADMIN_ID: IdentityUser(id=ADMIN_ID, email="admin@example.cm", role=Role.ADMIN),
            OTHER_ID: IdentityUser(id=OTHER_ID, email="other@example.cm"),
        }

    async def get_role(self, user_id: str) -> Role:
        user = self.users.get(user_id)
        return user.role if user else Role.GUEST

    async def get_user(self, user_id: str) -> IdentityUser | None:
        return self.users.get(user_id)

    async def list_users(self, limit: int = 500) -> list[IdentityUser]:
        return list(self.users.values())[:limit]

    def _require(self, user_id: str) -> IdentityUser:
        if user_id not in self.users:
            raise NotFoundError("User", user_id)
        return self.users[user_id]

    async def set_role(self, user_id: str, role: Role) -> None:
        self._require(user_id).role = role

    async def ban_user(self, user_id: str) -> None:
        self._require(user_id).banned = True

    async def unban_user(self, user_id: str) -> None:
        self._require(user_id).banned = False


class FakeGateway(PaymentGateway):
    """Payment gateway that records checkout requests."""

    def __init__(self, succeed: bool = True, event: dict | None = None) -> None:
        self.succeed = succeed
        self.event = event
        self.sessions: list[dict] = []

    @property
    def gateway_type(self) -> GatewayType:
        return GatewayType.STRIPE

    @property
    def webhook_configured(self) -> bool:
        return True

    async def create_checkout_session(self, **kwargs) -> CheckoutResult:
        self.sessions.append(kwargs)
        if not self.succeed:
            return CheckoutResult(success=False, error_message="card network down")
        return CheckoutResult(
            success=True, session_id="cs_test_123", url="https://checkout.stripe.test/cs_test_123"
        )

    def verify_webhook(self, payload: bytes, signature: str) -> dict | None:
        if signature != "valid":
            return None
        return self.event


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; let SQLAlchemy emit BEGIN
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db(engine) -> AsyncGenerator[AsyncSession, None]:
    session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    async with session_maker() as session:
        yield session


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def notifier() -> AsyncMock:
    return AsyncMock(spec=NotificationService)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def make_listing(db: AsyncSession):
    async def _make(
        host_id: str = HOST_ID,
        status: str = "approved",
        price_per_night: int = 25000,
        max_guests: int = 4,
        **overrides,
    ) -> Listing:
        fields = {
            "title": "Appartement Bonapriso",
            "description": "Bright two-bedroom flat close to the Wouri river.",
            "category": "apartment",
            "address": "Rue Njo-Njo",
            "city": "Douala",
            "region": "LT",
            "amenities": ["wifi", "parking"],
            "images": ["https://img.example.cm/1.jpg"],
        }
        fields.update(overrides)
        listing = Listing(
            host_id=host_id,
            status=status,
            price_per_night=price_per_night,
            max_guests=max_guests,
            **fields,
        )
        db.add(listing)
        await db.flush()
        await db.refresh(listing)
        return listing

    return _make


@pytest.fixture
def make_booking(db: AsyncSession):
    async def _make(
        listing: Listing,
        check_in: date = date(2030, 3, 10),
        check_out: date = date(2030, 3, 13),
        guest_id: str = GUEST_ID,
        status: str = "pending",
        payment_status: str = "pending",
    ) -> Booking:
        price = compute_price(listing.price_per_night, check_in, check_out)
        booking = Booking(
            listing_id=listing.id,
            guest_id=guest_id,
            host_id=listing.host_id,
            check_in=check_in,
            check_out=check_out,
            num_guests=2,
            nights=price.nights,
            nightly_rate=price.nightly_rate,
            subtotal=price.subtotal,
            service_fee=price.service_fee,
            total_price=price.total,
            status=status,
            payment_status=payment_status,
        )
        db.add(booking)
        await db.flush()
        await db.refresh(booking)
        return booking

    return _make


@pytest.fixture
async def profiles(db: AsyncSession) -> None:
    db.add_all(
        [
            Profile(id=GUEST_ID, email="guest@example.cm", first_name="Awa"),
            Profile(id=HOST_ID, email="host@example.cm", first_name="Paul"),
        ]
    )
    await db.flush()


class ActingUser:
    """Mutable current user for HTTP tests."""

    def __init__(self) -> None:
        self.id: str | None = GUEST_ID


@pytest.fixture
def acting_user() -> ActingUser:
    return ActingUser()


@pytest.fixture
def app(db, identity, notifier, gateway, acting_user):
    application = create_application()

    async def override_db():
        yield db

    async def override_user() -> str:
        if acting_user.id is None:
            raise AuthenticationError("Not authenticated")
        return acting_user.id

    async def override_optional_user() -> str | None:
        return acting_user.id

    application.dependency_overrides[get_db] = override_db
    application.dependency_overrides[get_current_user_id] = override_user
    application.dependency_overrides[get_optional_user_id] = override_optional_user
    application.dependency_overrides[get_identity_provider] = lambda: identity
    application.dependency_overrides[get_notification_service] = lambda: notifier
    application.dependency_overrides[get_payment_gateway] = lambda: gateway
    return application


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
