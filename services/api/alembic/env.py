"""Alembic migration environment configuration.

Configured for async SQLAlchemy with PostgreSQL.
The database URL comes from application settings (DATABASE_URL / .env).
"""

import asyncio
import os
import sys
from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

# Add app to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Load environment variables
load_dotenv()

# Import Base and all models for autogenerate support
from tourism_api.settings import get_settings  # noqa: E402
from tourism_api.stores.postgres import Base  # noqa: E402
from tourism_api.models import (  # noqa: E402,F401
    AuditLog,
    Contribution,
    MonthLock,
    MonthlyGuideScore,
    Payout,
    PayoutSetting,
    SponsorStore,
    StoreFounder,
    TourismGuide,
)

# this is the Alembic Config object
config = context.config

# Interpret the config file for Python logging
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Set target metadata for autogenerate
target_metadata = Base.metadata

# Owned by the marketplace app; mapped here for joins only.
MARKETPLACE_TABLES = {"tourism_guides", "sponsor_stores"}


def include_object(obj, name, type_, reflected, compare_to) -> bool:
    """Keep marketplace tables out of autogenerate."""
    if type_ == "table" and name in MARKETPLACE_TABLES:
        return False
    return True


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (emit SQL without a DBAPI)."""
    context.configure(
        url=get_settings().async_database_url,
        target_metadata=target_metadata,
        include_object=include_object,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """Run migrations with connection."""
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        include_object=include_object,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Run migrations in 'online' mode with async engine."""
    settings = get_settings()
    connectable = create_async_engine(
        settings.async_database_url,
        poolclass=pool.NullPool,
        connect_args=settings.asyncpg_connect_args,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
