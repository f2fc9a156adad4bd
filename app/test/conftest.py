import os

os.environ["TEST"] = "true"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.auth.auth import IdentityVerificationError, get_identity_verifier
from app.database.database import Base, get_db
from app.main import app
from app.models.models import Parcel, Rider, User
from app.utils.checkout_service import (
    CheckoutSession,
    CheckoutSessionStatus,
    get_checkout_gateway,
)
from app.test.factories import ParcelFactory, RiderFactory, UserFactory
from app.test.helpers import ADMIN_EMAIL, RIDER_EMAIL, SENDER_EMAIL


class FakeIdentityVerifier:
    """Accepts `token:<email>` bearer tokens."""

    async def verify(self, token: str) -> str:
        scheme, _, email = token.partition(":")
        if scheme != "token" or not email:
            raise IdentityVerificationError("invalid token")
        return email


class FakeCheckoutGateway:
    """Records created sessions and replays scripted session states."""

    def __init__(self):
        self.created: list[dict] = []
        self.sessions: dict[str, CheckoutSessionStatus] = {}
        self.retrievals = 0

    async def create_session(
        self, *, amount, product_name, customer_email, metadata, currency=None
    ) -> CheckoutSession:
        session_id = f"cs_test_{len(self.created) + 1}"
        self.created.append(
            {
                "id": session_id,
                "amount": amount,
                "product_name": product_name,
                "customer_email": customer_email,
                "metadata": metadata,
            }
        )
        return CheckoutSession(
            id=session_id, url=f"https://checkout.stripe.com/c/pay/{session_id}"
        )

    def script_session(
        self,
        session_id: str,
        parcel_id,
        payment_status: str = "paid",
        payment_intent: str | None = "pi_test_001",
        amount_total: int = 5000,
        customer_email: str = SENDER_EMAIL,
    ) -> None:
        self.sessions[session_id] = CheckoutSessionStatus(
            id=session_id,
            payment_status=payment_status,
            amount_total=amount_total,
            currency="usd",
            customer_email=customer_email,
            payment_intent=payment_intent,
            metadata={"parcelId": str(parcel_id), "parcelName": "Documents"},
        )

    async def retrieve_session(self, session_id: str) -> CheckoutSessionStatus:
        self.retrievals += 1
        return self.sessions[session_id]


@pytest_asyncio.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """A fresh in-memory database per test."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
def checkout_gateway() -> FakeCheckoutGateway:
    return FakeCheckoutGateway()


@pytest_asyncio.fixture(scope="function")
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    checkout_gateway: FakeCheckoutGateway,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Test client wired to the test database, a token-to-email identity
    verifier and the scripted checkout gateway.
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_verifier] = lambda: FakeIdentityVerifier()
    app.dependency_overrides[get_checkout_gateway] = lambda: checkout_gateway

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def save(session_factory: async_sessionmaker[AsyncSession]):
    """Persist model instances built by the factories."""

    async def _save(*instances):
        async with session_factory() as session:
            session.add_all(instances)
            await session.commit()
        return instances[0] if len(instances) == 1 else instances

    return _save


@pytest.fixture(scope="function")
def fetch(session_factory: async_sessionmaker[AsyncSession]):
    """Load a fresh copy of a row by primary key."""

    async def _fetch(model, pk):
        async with session_factory() as session:
            return await session.get(model, pk)

    return _fetch


@pytest_asyncio.fixture(scope="function")
async def admin_user(save) -> User:
    return await save(UserFactory(email=ADMIN_EMAIL, role="admin"))


@pytest_asyncio.fixture(scope="function")
async def sender_user(save) -> User:
    return await save(UserFactory(email=SENDER_EMAIL))


@pytest_asyncio.fixture(scope="function")
async def approved_rider(save) -> Rider:
    user = UserFactory(email=RIDER_EMAIL, role="rider")
    rider = RiderFactory(email=RIDER_EMAIL, status="approved", work_status="Available")
    await save(user, rider)
    return rider


@pytest_asyncio.fixture(scope="function")
async def paid_parcel(save) -> Parcel:
    return await save(
        ParcelFactory(
            sender_email=SENDER_EMAIL,
            payment_status="paid",
            delivery_status="pending-pickup",
        )
    )
