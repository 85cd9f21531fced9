"""Database connection management for Taskboard.

Provides factory functions for async SQLAlchemy engines and session
factories, plus :class:`Database`, an explicitly constructed handle that owns
one engine and its session factory. The web app builds one in its lifespan
and disposes it on shutdown; tests build isolated in-memory instances.

Example usage:
    >>> from taskboard.config import DatabaseConfig
    >>> from taskboard.database.connection import Database
    >>>
    >>> db = Database(DatabaseConfig(url="sqlite+aiosqlite:///:memory:"))
    >>> await db.create_all()
    >>> async with db.session_factory() as session:
    ...     ...
    >>> await db.dispose()
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from taskboard.config import DatabaseConfig
from taskboard.database.models.base import Base
from taskboard.logging import get_logger

logger = get_logger(__name__)


def get_engine(config: DatabaseConfig) -> AsyncEngine:
    """Create an async SQLAlchemy engine from database configuration.

    PostgreSQL engines get a sized connection pool. SQLite engines ignore the
    pool settings; in-memory SQLite uses a StaticPool so every session sees
    the same database.

    Args:
        config: Database configuration containing URL, pool settings,
                and SQL echo preference.

    Returns:
        Configured AsyncEngine instance.
    """
    kwargs: dict[str, Any] = {"echo": config.echo}
    if config.url.startswith("sqlite"):
        if ":memory:" in config.url or config.url.endswith("://"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_size"] = config.pool_size
        kwargs["max_overflow"] = config.max_overflow
    return create_async_engine(config.url, **kwargs)


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the given engine.

    Sessions use expire_on_commit=False so entities stay readable after the
    committing query returns them.
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


class Database:
    """Owns one engine and its session factory.

    Attributes:
        config: Configuration the engine was built from
        engine: The AsyncEngine
        session_factory: async_sessionmaker bound to engine
    """

    def __init__(self, config: DatabaseConfig) -> None:
        self.config = config
        self.engine = get_engine(config)
        self.session_factory = get_session_factory(self.engine)
        logger.info("database_engine_created", dialect=self.engine.dialect.name)

    async def create_all(self) -> None:
        """Create every table known to the model metadata."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_schema_created")

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()
        logger.info("database_engine_disposed")
