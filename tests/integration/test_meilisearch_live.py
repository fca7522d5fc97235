"""Integration tests for MeiliSearchIndexAdapter against a real MeiliSearch instance."""

from __future__ import annotations

import pytest

from articlesync.adapters.meilisearch.adapter import MeiliSearchIndexAdapter
from articlesync.models.document import SearchDocument

TEST_INDEX = "articlesync-test"
MEILI_MASTER_KEY = "test-master-key"

pytestmark = [pytest.mark.integration, pytest.mark.meilisearch]


@pytest.fixture
async def adapter(meilisearch_ready):
    a = MeiliSearchIndexAdapter(base_url=meilisearch_ready, index=TEST_INDEX, api_key=MEILI_MASTER_KEY)
    await a.initialize()
    await a.delete_many(await a.document_ids())
    yield a
    await a.shutdown()


async def _batches(*batches: list[SearchDocument]):
    for batch in batches:
        yield batch


class TestMeiliSearchHealth:
    async def test_health_check_returns_healthy(self, adapter):
        health = await adapter.health_check()
        assert health.status in ("healthy", "degraded")
        assert health.latency_ms >= 0

    async def test_name_property(self, adapter):
        assert adapter.name == "meilisearch"


class TestMeiliSearchWrites:
    async def test_upsert_is_visible_immediately(self, adapter, documents):
        await adapter.upsert(documents[1])
        hits = await adapter.query("ownership")
        assert [h.document.id for h in hits] == ["2"]

    async def test_upsert_replaces(self, adapter, documents):
        await adapter.upsert(documents[0])
        await adapter.upsert(documents[0].model_copy(update={"title": "Go generics"}))
        hits = await adapter.query("generics")
        assert hits[0].document.title == "Go generics"
        assert await adapter.document_ids() == {"1"}

    async def test_delete_absent_is_not_an_error(self, adapter):
        await adapter.delete("999")

    async def test_delete(self, adapter, documents):
        await adapter.upsert(documents[2])
        await adapter.delete("3")
        assert await adapter.query("chlorophyll") == []


class TestMeiliSearchQuery:
    async def test_category_name_is_searchable(self, adapter, documents):
        await adapter.index_batch(documents)
        hits = await adapter.query("science")
        assert [h.document.id for h in hits] == ["3"]

    async def test_limit(self, adapter, documents):
        await adapter.index_batch(documents)
        assert len(await adapter.query("tech", limit=1)) == 1


class TestMeiliSearchBulkReplace:
    async def test_replace_removes_stale(self, adapter, documents):
        stale = documents[0].model_copy(update={"id": "42"})
        await adapter.upsert(stale)

        result = await adapter.bulk_replace(_batches(documents[:2], documents[2:]))

        assert result.indexed == 3
        assert result.removed == 1
        assert await adapter.document_ids() == {"1", "2", "3"}


class TestMeiliSearchTypos:
    async def test_typo_tolerance(self, adapter, documents):
        await adapter.index_batch(documents)
        hits = await adapter.query("photosynthsis")
        assert hits and hits[0].document.id == "3"
