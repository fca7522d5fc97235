"""Database connection and session management for the primary store."""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from articlesync.adapters.base.adapter import AdapterHealth
from articlesync.config.settings import DatabaseSettings
from articlesync.errors import StoreError
from articlesync.store.tables import Base

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Owns the async engine and session factory for the primary store.

    Server databases get a sized connection pool. In-memory SQLite gets a
    single shared connection so every session sees the same database.

    Args:
        settings: Database configuration.
    """

    def __init__(self, settings: DatabaseSettings) -> None:
        self.settings = settings
        self.engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    async def initialize(self) -> None:
        """Create the engine, optionally create tables, and verify connectivity."""
        url = self.settings.url
        engine_kwargs: dict[str, Any] = {"echo": self.settings.echo}
        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in url or url.endswith("://"):
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs.update(
                pool_size=self.settings.pool_size,
                max_overflow=self.settings.max_overflow,
                pool_pre_ping=True,
                pool_recycle=3600,
            )

        try:
            self.engine = create_async_engine(url, **engine_kwargs)
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            if self.settings.create_tables:
                async with self.engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to connect to primary store: {e}") from e

        logger.info("Connected to primary store (%s)", self.engine.url.get_backend_name())

    async def shutdown(self) -> None:
        """Dispose of pooled connections."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self._session_factory = None

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session, rolling back on error.

        Usage::

            async with db.session() as session:
                ...
        """
        if self._session_factory is None:
            raise StoreError("Primary store not initialized. Call initialize() first.")

        async with self._session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def health_check(self) -> AdapterHealth:
        """Run ``SELECT 1`` and report latency."""
        if self.engine is None:
            return AdapterHealth(status="unhealthy", message="Engine not initialized")

        try:
            start = time.monotonic()
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            latency_ms = int((time.monotonic() - start) * 1000)
            return AdapterHealth(
                status="healthy",
                latency_ms=latency_ms,
                last_check=datetime.now(UTC).isoformat(),
                message=f"Backend: {self.engine.url.get_backend_name()}",
            )
        except Exception as e:
            return AdapterHealth(status="unhealthy", message=str(e))
