"""
HR Desk Backend - Test Configuration (conftest.py)
===================================================

Shared fixtures for the attendance and recruitment test suites.

Fixture Hierarchy:
    Attendance
    ├── db_engine: in-memory aiosqlite engine with the tables created
    ├── db_session: AsyncSession on that engine (service tests)
    └── attendance_client: httpx AsyncClient, get_db_session overridden
    Recruitment
    ├── store: small RecruitmentStore seeded at FIXED_NOW
    └── recruitment_client: httpx AsyncClient with app.state.store = store

ASGITransport does not run lifespans, so the fixtures provide the state the
lifespans would normally create.
"""

import os
from datetime import datetime, timezone
from typing import AsyncGenerator

# Must be set before hrdesk.config is imported anywhere.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from hrdesk.database import Base, get_db_session
from hrdesk.models import attendance as attendance_models  # noqa: F401
from hrdesk.services.recruitment_store import RecruitmentStore

FIXED_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
SEED_CANDIDATES = 60
INITIAL_PASSWORD = "rec12345"


# ══════════════════════════════════════════════════════════════════════════
# Attendance
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """One in-memory database per test; StaticPool keeps the single connection alive."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def attendance_client(db_engine) -> AsyncGenerator[AsyncClient, None]:
    """
    Client for the attendance app backed by the per-test database.

    The override mirrors get_db_session: commit on success, rollback on error.
    """
    from hrdesk.main import attendance_app

    factory = async_sessionmaker(db_engine, expire_on_commit=False)

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    attendance_app.dependency_overrides[get_db_session] = override_session
    transport = ASGITransport(app=attendance_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    attendance_app.dependency_overrides.clear()


# ══════════════════════════════════════════════════════════════════════════
# Recruitment
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def store() -> RecruitmentStore:
    """A fresh, deterministic store; tests may mutate it freely."""
    return RecruitmentStore.seeded(
        candidate_count=SEED_CANDIDATES,
        initial_password=INITIAL_PASSWORD,
        fiscal_year_start_month=4,
        now=FIXED_NOW,
    )


@pytest_asyncio.fixture
async def recruitment_client(store) -> AsyncGenerator[AsyncClient, None]:
    from hrdesk.main import recruitment_app

    recruitment_app.state.store = store
    transport = ASGITransport(app=recruitment_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
