"""
Database configuration for the Maintrack maintenance engine.

Every maintenance entity is partitioned by tenant_organization_id.
"""

import logging
import uuid
from collections.abc import AsyncIterator
from datetime import datetime

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column
from sqlalchemy.sql import func

from .config import settings
from .core.database_types import UUID as UUID_DB
from .core.database_types import UTCDateTime

logger = logging.getLogger(__name__)

# Base class
Base = declarative_base()

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def build_connect_args(database_url: str) -> dict:
    """SSL options for MySQL; other drivers need none."""
    if database_url.startswith("mysql+asyncmy"):
        return {
            "ssl": {
                "ssl_check_hostname": settings.database_ssl_check_hostname,
                "ssl_verify_cert": settings.database_ssl_verify_cert,
                "ssl_verify_identity": settings.database_ssl_verify_identity,
            },
        }
    return {}


def get_engine() -> AsyncEngine:
    """Create the async engine on first use."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            settings.database_url,
            echo=settings.app_debug,
            future=True,
            connect_args=build_connect_args(settings.database_url),
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        logger.info("Database engine created for %s", _engine.url.get_backend_name())
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the shared engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(), class_=AsyncSession, expire_on_commit=False
        )
    return _session_factory


class TimestampMixin:
    """Mixin to add created and updated timestamps to models.

    The lifecycle managers stamp both columns from their Clock; the server
    default only covers rows inserted outside the engine.
    """

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, server_default=func.now()
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, server_default=func.now()
    )


class TenantScoped:
    """Mixin for models partitioned by tenant organization.

    Models using this mixin have:
    - A UUID primary key, opaque to callers
    - tenant_organization_id, which every query and mutation filters on
    """

    id: Mapped[uuid.UUID] = mapped_column(
        UUID_DB(), primary_key=True, default=uuid.uuid4
    )

    tenant_organization_id: Mapped[uuid.UUID] = mapped_column(
        UUID_DB(), nullable=False, index=True
    )


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield a database session and close it afterwards."""
    async with get_session_factory()() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Initialize database tables."""
    from .modules.maintenance_requests import models as request_models  # noqa: F401
    from .modules.maintenance_schedules import models as schedule_models  # noqa: F401

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Dispose the shared engine, if one was created."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
