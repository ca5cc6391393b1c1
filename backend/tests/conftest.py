"""Shared test configuration and fixtures.

Each test gets a fresh in-memory SQLite database (via aiosqlite) and a
session wrapped in a transaction that rolls back after the test, so no
PostgreSQL server is needed.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import uuid  # noqa: E402
from collections.abc import AsyncGenerator  # noqa: E402
from datetime import date  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from staydesk.database import Base, get_db  # noqa: E402
from staydesk.main import app  # noqa: E402
from staydesk.models import Guest  # noqa: E402
from staydesk.repositories.guest_store import GuestStore  # noqa: E402
from staydesk.services.guest_service import register_guest  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ---------------------------------------------------------------------------
# Per-test database: fresh schema, transactional rollback
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """Create an engine over a private in-memory database with all tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def store(db_session: AsyncSession) -> GuestStore:
    return GuestStore(db_session)


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: hotel, guests
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def hotel_id() -> uuid.UUID:
    return uuid.uuid4()


async def make_guest(
    store: GuestStore,
    hotel_id: uuid.UUID,
    first_name: str = "Test",
    last_name: str = "Guest",
    email: str | None = None,
    room_number: str = "101",
    check_in_date: date = date(2025, 1, 1),
    check_out_date: date = date(2025, 1, 5),
) -> Guest:
    """Register a guest directly through the service layer."""
    return await register_guest(
        store,
        hotel_id=hotel_id,
        first_name=first_name,
        last_name=last_name,
        email=email or f"guest-{uuid.uuid4().hex[:8]}@test.com",
        phone="+61400000000",
        room_number=room_number,
        check_in_date=check_in_date,
        check_out_date=check_out_date,
    )


@pytest_asyncio.fixture
async def active_guest(store: GuestStore, hotel_id: uuid.UUID) -> Guest:
    """An active guest in room 12A, 2025-03-01 to 2025-03-04."""
    return await make_guest(
        store,
        hotel_id,
        room_number="12A",
        check_in_date=date(2025, 3, 1),
        check_out_date=date(2025, 3, 4),
    )


@pytest_asyncio.fixture
async def test_guest(client: AsyncClient, hotel_id: uuid.UUID) -> dict:
    """Register and return a test guest via the API."""
    unique = uuid.uuid4().hex[:8]
    response = await client.post(
        "/api/v1/guests",
        json={
            "hotel_id": str(hotel_id),
            "first_name": "Test",
            "last_name": "Guest",
            "email": f"guest-{unique}@test.com",
            "phone": "+61400000000",
            "room_number": "101",
            "check_in_date": "2025-01-01",
            "check_out_date": "2025-01-05",
        },
    )
    assert response.status_code == 201, f"Failed to create test guest: {response.text}"
    return response.json()


@pytest_asyncio.fixture
async def guest_factory(store: GuestStore, hotel_id: uuid.UUID):
    """Return an async callable registering guests in the test hotel."""

    async def _factory(**overrides) -> Guest:
        return await make_guest(store, overrides.pop("hotel_id", hotel_id), **overrides)

    return _factory
