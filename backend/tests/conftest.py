"""
ANGAGU Backend — Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the whole suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite, one
       shared connection through StaticPool, foreign keys enforced). HTTP
       tests drive a fresh app through httpx's ASGITransport with
       `get_db_session` overridden to use that database. The SMS provider
       call is patched out; codes are read back from the database.

Fixture Hierarchy:
    db_engine ─┬─ session_factory ─┬─ db_session      (service-level tests)
               │                   └─ test_client     (HTTP-level tests)
               └─ seed                                 (insert rows, commit)

    sms_provider: AsyncMock standing in for SmsGateway._post_message
"""

import os

# Settings are read when angagu.config is first imported: set them first
os.environ["JWT_SECRET_KEY"] = "test-secret-key-not-real"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SMS_SERVICE_ID"] = "ncp:sms:kr:000000000000:angagu"
os.environ["SMS_ACCESS_KEY"] = "test-access-key"
os.environ["SMS_SECRET_KEY"] = "test-secret-key"
os.environ["SMS_SENDER_NUMBER"] = "01000000000"

from typing import Any, AsyncGenerator, Dict
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from angagu.database import Base, get_db_session
from angagu.models import Address, Admin, Company, Customer, Order, OrderDetail, Product, ProductImage
from angagu.security import create_access_token, hash_password
from angagu.services.sms_gateway import sms_gateway

PASSWORD = "secret12!@"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A session for calling services directly; the test decides when to commit."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    An AsyncMock standing in for AsyncSession, for forcing database failures.

    Usage:
        mock_db_session.execute = AsyncMock(side_effect=OperationalError(...))
        result = await customer_service.get_address(mock_db_session, 1)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Seed data
# ══════════════════════════════════════════════════════════════════════════

class Seeder:
    """
    Inserts rows in their own committed session and returns their ids.

    Usage:
        customer_id = await seed.customer(email="a@b.com")
        product_id = await seed.product(company_id, approved=True)
    """

    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def _add(self, obj) -> int:
        async with self._session_factory() as session:
            session.add(obj)
            await session.commit()
            return obj.id

    async def customer(self, email="buyer@angagu.kr", phone_number="01012345678",
                       password=PASSWORD, name="Buyer") -> int:
        return await self._add(Customer(
            email=email,
            password=hash_password(password),
            name=name,
            phone_number=phone_number,
        ))

    async def company(self, email="seller@angagu.kr", business_number="1234567890",
                      password=PASSWORD, name="Seller Co", phone_number="01087654321") -> int:
        return await self._add(Company(
            email=email,
            name=name,
            password=hash_password(password),
            phone_number=phone_number,
            business_number=business_number,
            account_number="110-123-456789",
            account_holder="Seller Co",
            account_bank="Shinhan",
        ))

    async def admin(self, email="admin@angagu.kr", password=PASSWORD) -> int:
        return await self._add(Admin(email=email, password=hash_password(password)))

    async def product(self, company_id: int, name="Oak Chair", price=120000,
                      approved=False, images=("front.jpg", "side.jpg"),
                      model_url="https://cdn.angagu.kr/models/chair.glb") -> int:
        return await self._add(Product(
            company_id=company_id,
            name=name,
            price=price,
            description="Solid oak",
            category="chair",
            model_url=model_url,
            approved=approved,
            images=[ProductImage(url=url, position=i) for i, url in enumerate(images)],
        ))

    async def address(self, customer_id: int, road="12 Teheran-ro", land=None,
                      is_default=False) -> int:
        return await self._add(Address(
            customer_id=customer_id,
            road=road,
            land=land,
            recipient="Kim",
            detail="Apt 101",
            zip_code="06234",
            phone_number="01012345678",
            is_default=is_default,
        ))

    async def order(self, customer_id: int, product_id: int, count=1, price=120000) -> int:
        return await self._add(Order(
            customer_id=customer_id,
            details=[OrderDetail(product_id=product_id, count=count, price=price)],
        ))


@pytest.fixture
def seed(session_factory) -> Seeder:
    return Seeder(session_factory)


# ══════════════════════════════════════════════════════════════════════════
# Auth helpers
# ══════════════════════════════════════════════════════════════════════════

def bearer(principal_id: int, principal_type: str) -> Dict[str, str]:
    token = create_access_token({"id": principal_id, "type": principal_type})
    return {"Authorization": f"Bearer {token}"}


def error_code(response) -> Any:
    return response.json()["data"]["errCode"]


# ══════════════════════════════════════════════════════════════════════════
# SMS provider & HTTP client
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def sms_provider():
    """Replaces the provider call; returns "202" (accepted) unless reconfigured."""
    with patch.object(sms_gateway, "_post_message", new=AsyncMock(return_value="202")) as mock:
        yield mock


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient bound to a fresh app whose sessions hit the test database.

    The override keeps the production dependency's commit/rollback behaviour.
    """
    from angagu.main import create_app

    app = create_app()

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
