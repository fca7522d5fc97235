"""Tests for engine wiring and lifecycle."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from articlesync.adapters.base.exceptions import ConnectionError
from articlesync.adapters.memory.adapter import MemoryIndexAdapter
from articlesync.config.settings import Settings
from articlesync.core.engine import ArticleSyncEngine


class TestEngineWiring:
    def test_builds_adapter_from_settings(self, settings: Settings) -> None:
        engine = ArticleSyncEngine(settings)
        assert isinstance(engine.index, MemoryIndexAdapter)
        assert engine.sync is not None
        assert engine.queries is not None

    def test_uses_injected_index(self, settings: Settings) -> None:
        index = MemoryIndexAdapter(index="custom")
        engine = ArticleSyncEngine(settings, index=index)
        assert engine.index is index


class TestEngineLifecycle:
    async def test_index_outage_does_not_block_startup(self, settings: Settings) -> None:
        index = MagicMock()
        index.name = "broken"
        index.initialize = AsyncMock(side_effect=ConnectionError("connection refused"))
        index.shutdown = AsyncMock()
        engine = ArticleSyncEngine(settings, index=index)

        await engine.initialize()
        try:
            assert await engine.articles.count() == 0
        finally:
            await engine.shutdown()
        index.shutdown.assert_awaited_once()

    async def test_health_reports_both_backends(self, engine: ArticleSyncEngine) -> None:
        health = await engine.health()
        assert set(health) == {"primary_store", "search_index"}
        assert health["primary_store"].status == "healthy"
        assert health["search_index"].status == "healthy"

    async def test_health_after_shutdown(self, settings: Settings) -> None:
        engine = ArticleSyncEngine(settings)
        await engine.initialize()
        await engine.shutdown()
        health = await engine.health()
        assert health["primary_store"].status == "unhealthy"
