"""
Migration environment for the Maintrack schema.

The database URL always comes from maintrack settings (CONFIG YAML or
environment), never from alembic.ini.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context
from maintrack_backend.config import settings
from maintrack_backend.database import Base, build_connect_args

# Registers both tables on Base.metadata
from maintrack_backend.modules.maintenance_requests import models as _requests  # noqa: F401
from maintrack_backend.modules.maintenance_schedules import models as _schedules  # noqa: F401

alembic_config = context.config
alembic_config.set_main_option("sqlalchemy.url", settings.database_url)

if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata

# Shared by offline and online runs so autogenerate sees enum and length changes
CONFIGURE_OPTIONS = {
    "target_metadata": target_metadata,
    "compare_type": True,
    "compare_server_default": True,
}


def _configure_connection(connection: Connection) -> None:
    context.configure(
        connection=connection,
        render_as_batch=connection.dialect.name == "sqlite",
        **CONFIGURE_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


async def _migrate_online() -> None:
    engine = async_engine_from_config(
        alembic_config.get_section(alembic_config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
        connect_args=build_connect_args(settings.database_url),
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_configure_connection)
    finally:
        await engine.dispose()


def migrate_offline() -> None:
    """Write the migration SQL to stdout instead of executing it."""
    context.configure(
        url=alembic_config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **CONFIGURE_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    migrate_offline()
else:
    asyncio.run(_migrate_online())
