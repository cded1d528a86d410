"""
Pytest configuration and fixtures for testing.

Provides:
- In-memory SQLite database (aiosqlite) with the full schema
- A pinned clock for deterministic timestamps
- Tenant and actor ids

Usage:
    pytest tests/ -v
"""

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from maintrack_backend.database import init_db
from tests.factories import FixedClock

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def test_engine():
    """Fresh in-memory database per test.

    StaticPool keeps the single connection alive so every session sees the
    same in-memory database.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Let SQLAlchemy issue BEGIN itself so SAVEPOINTs nest inside it
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    await init_db(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Database session with expire_on_commit disabled, like the app factory."""
    session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session


# ============================================================================
# Clock and identity fixtures
# ============================================================================


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))


@pytest.fixture
def tenant_id() -> UUID:
    return uuid4()


@pytest.fixture
def other_tenant_id() -> UUID:
    return uuid4()


@pytest.fixture
def actor_id() -> UUID:
    return uuid4()
