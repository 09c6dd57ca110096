"""
Top-level pytest configuration.

Provides:
  - A test SQLite database (aiosqlite) with all tables created fresh per test.
  - A db_session fixture that rolls back each test in a transaction.
  - An async_client fixture wired to the FastAPI app.
  - Caller identity fixtures (the X-User-ID header the gateway would set).
  - Seeded company / job / resume / stage template fixtures.
"""

from __future__ import annotations

import os
import uuid
from typing import AsyncGenerator

# ---------------------------------------------------------------------------
# Environment must be set BEFORE any jobtrack module is imported so that
# pydantic-settings picks up the test values.
# ---------------------------------------------------------------------------
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_USER", "test")
os.environ.setdefault("POSTGRES_PASSWORD", "test")
os.environ.setdefault("POSTGRES_DB", "test")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from tests.factories import CompanyFactory, JobFactory, ResumeFactory, StageTemplateFactory

# ---------------------------------------------------------------------------
# SQLite in-memory URL for testing.
# ---------------------------------------------------------------------------
TEST_DATABASE_URL = os.getenv(
    "TEST_DATABASE_URL",
    "sqlite+aiosqlite:///:memory:",
)


# ---------------------------------------------------------------------------
# Test engine (SQLite in-memory, shared via StaticPool so all connections see
# the same data). Function-scoped so the engine lives on the test's event loop.
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine():
    """Create the SQLite test engine and all tables for one test."""
    # Import Base here (after env vars are set) to ensure models register.
    from jobtrack.core.database import Base
    import jobtrack.models  # noqa: F401

    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


# ---------------------------------------------------------------------------
# Per-test DB session that rolls back after each test for isolation.
#
# Strategy: wrap each test in a single outer transaction that is rolled back.
# - The outer connection begins a real transaction.
# - A custom NonCommittingSession is used: commit() is overridden to only
#   flush, so service code that calls session.commit() never actually
#   commits to the database; all writes stay within the outer transaction.
# - At teardown the outer transaction is rolled back, erasing all writes.
# ---------------------------------------------------------------------------
class _NonCommittingSession(AsyncSession):
    """AsyncSession subclass where commit() becomes flush().

    Services call ``await db.commit()`` after writes. In the test suite we
    want those writes to be visible to later requests of the same test, but
    we do NOT want them persisted across tests.
    """

    async def commit(self) -> None:  # type: ignore[override]
        await self.flush()


@pytest_asyncio.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a per-test database session that is fully rolled back on teardown."""
    async with engine.connect() as conn:
        await conn.begin()  # outer real transaction

        session = _NonCommittingSession(
            bind=conn,
            expire_on_commit=False,
        )

        try:
            yield session
        finally:
            await session.close()
            await conn.rollback()  # roll back the outer transaction, erasing all writes


# ---------------------------------------------------------------------------
# Override FastAPI database dependency to use the test session.
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Provide an httpx AsyncClient backed by the FastAPI app.

    The app's get_db dependency is overridden to yield the test session so all
    requests in a test share the same transactional session and thus see any
    data seeded in that test.
    """
    from jobtrack.core.database import get_db
    from jobtrack.main import app

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as client:
        yield client

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Caller identity
# ---------------------------------------------------------------------------
@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def other_user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def auth_headers(user_id: uuid.UUID) -> dict:
    """Headers the gateway adds for the authenticated test user."""
    return {"X-User-ID": str(user_id)}


@pytest.fixture
def other_auth_headers(other_user_id: uuid.UUID) -> dict:
    return {"X-User-ID": str(other_user_id)}


# ---------------------------------------------------------------------------
# Seeded fixtures
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def test_company(db_session: AsyncSession, user_id: uuid.UUID):
    """Persisted company owned by the test user."""
    return await CompanyFactory.create_async(db_session, user_id=user_id, name="Acme Corp")


@pytest_asyncio.fixture
async def test_job(db_session: AsyncSession, user_id: uuid.UUID, test_company):
    """Persisted job at test_company."""
    return await JobFactory.create_async(
        db_session, user_id=user_id, company_id=test_company.id, title="Backend Engineer"
    )


@pytest_asyncio.fixture
async def test_resume(db_session: AsyncSession, user_id: uuid.UUID):
    """Persisted resume owned by the test user."""
    return await ResumeFactory.create_async(db_session, user_id=user_id, title="Backend CV")


@pytest_asyncio.fixture
async def stage_templates(db_session: AsyncSession, user_id: uuid.UUID) -> dict:
    """The test user's Applied / Screening / Interview templates, keyed by lowercase name."""
    templates = {}
    for order, name in enumerate(["Applied", "Screening", "Interview"]):
        templates[name.lower()] = await StageTemplateFactory.create_async(
            db_session, user_id=user_id, name=name, order=order
        )
    return templates
