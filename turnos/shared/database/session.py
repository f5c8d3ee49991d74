"""
Database Session Factory
Creates async SQLAlchemy sessions with proper configuration
"""
from __future__ import annotations

from typing import Any, Dict

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from turnos.shared.database.base import Base
from turnos.shared.logging import get_logger

logger = get_logger(__name__)


class DatabaseSessionFactory:
    """
    Owns the async engine and the session maker.

    One instance per application (stored on ``app.state.db``); each request
    gets its own session from ``session_factory``.
    """

    def __init__(self, database_url: str, echo: bool = False, pool_size: int = 20, max_overflow: int = 10) -> None:
        """
        Args:
            database_url: postgresql+asyncpg://... or sqlite+aiosqlite:///...
            echo: Whether to log SQL statements (debug mode)
            pool_size: Connection pool size (ignored for SQLite)
            max_overflow: Max overflow connections beyond pool_size (ignored for SQLite)
        """
        self.database_url = database_url
        url = make_url(database_url)
        engine_kwargs: Dict[str, Any] = {"echo": echo}
        if url.get_backend_name() != "sqlite":
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=True,
                pool_recycle=3600,
            )

        self.engine: AsyncEngine = create_async_engine(database_url, **engine_kwargs)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        logger.info("Database session factory initialized", backend=url.get_backend_name())

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def create_schema(self) -> None:
        """Create every mapped table that does not exist yet."""
        # Import models so they register on Base.metadata
        import turnos.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured", tables=len(Base.metadata.tables))

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")
