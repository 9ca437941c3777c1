"""PostgreSQL store with async SQLAlchemy.

Handles:
- Engine / connection pool lifecycle
- Transactional session scope (commit on success, rollback on error)
- Schema helpers for development and tests

The `Database` object is created once at startup and handed to services;
nothing here is module-global.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from tourism_api.settings import Settings


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


class Database:
    """Async engine plus session factory."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build the connection pool from application settings."""
        engine = create_async_engine(
            settings.async_database_url,
            echo=settings.debug,
            connect_args=settings.asyncpg_connect_args,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=True,
        )
        return cls(engine)

    @classmethod
    def from_url(cls, url: str, **engine_kwargs: object) -> "Database":
        """Build a database from a bare URL (scripts, tests)."""
        return cls(create_async_engine(url, **engine_kwargs))

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def dialect_name(self) -> str:
        return self._engine.dialect.name

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Transactional session scope.

        Usage:
            async with db.session() as session:
                result = await session.execute(query)

        Everything done inside the block is committed together, or rolled back
        together if the block raises.
        """
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> None:
        """Round-trip a trivial query to validate connectivity."""
        async with self._engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """Close the connection pool."""
        await self._engine.dispose()

    async def create_tables(self) -> None:
        """Create all tables (for development/testing only)."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        """Drop all tables (for testing only)."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
