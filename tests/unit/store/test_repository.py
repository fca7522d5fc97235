"""Tests for the primary store repositories."""

from __future__ import annotations

import pytest

from articlesync.config.settings import DatabaseSettings
from articlesync.core.engine import ArticleSyncEngine
from articlesync.errors import NotFoundError, StoreError, ValidationError
from articlesync.models.article import ArticleCreate, CategoryCreate
from articlesync.store.database import DatabaseManager


def _payload(title: str = "Title", category_id: int = 1) -> ArticleCreate:
    return ArticleCreate(title=title, content="Body", category_id=category_id)


# ── Articles ─────────────────────────────────────────────────────────────────


class TestArticleStore:
    async def test_create_assigns_id_and_timestamp(self, engine: ArticleSyncEngine) -> None:
        article = await engine.articles.create(_payload(), author_id=1)
        assert article.id >= 1
        assert article.created_at is not None
        assert article.category is not None
        assert article.category.name == "Tech"

    async def test_get_missing_returns_none(self, engine: ArticleSyncEngine) -> None:
        assert await engine.articles.get(999) is None

    async def test_update_rejects_unknown_fields(self, engine: ArticleSyncEngine) -> None:
        article = await engine.articles.create(_payload(), author_id=1)
        with pytest.raises(ValidationError, match="author_id"):
            await engine.articles.update(article.id, {"author_id": 2})

    async def test_update_missing_returns_none(self, engine: ArticleSyncEngine) -> None:
        assert await engine.articles.update(999, {"title": "x"}) is None

    async def test_delete_reports_existence(self, engine: ArticleSyncEngine) -> None:
        article = await engine.articles.create(_payload(), author_id=1)
        assert await engine.articles.delete(article.id) is True
        assert await engine.articles.delete(article.id) is False

    async def test_iter_batches_walks_in_id_order(self, engine: ArticleSyncEngine) -> None:
        created = [(await engine.articles.create(_payload(f"A{i}"), author_id=1)).id for i in range(7)]

        batches = [batch async for batch in engine.articles.iter_batches(3)]

        assert [len(b) for b in batches] == [3, 3, 1]
        assert [a.id for b in batches for a in b] == created

    async def test_iter_batches_skips_deleted_rows(self, engine: ArticleSyncEngine) -> None:
        ids = [(await engine.articles.create(_payload(f"A{i}"), author_id=1)).id for i in range(4)]
        await engine.articles.delete(ids[1])

        seen = [a.id for batch in [b async for b in engine.articles.iter_batches(2)] for a in batch]

        assert seen == [ids[0], ids[2], ids[3]]

    async def test_existing_ids(self, engine: ArticleSyncEngine) -> None:
        a = await engine.articles.create(_payload("A"), author_id=1)
        b = await engine.articles.create(_payload("B"), author_id=1)
        await engine.articles.delete(b.id)

        assert await engine.articles.existing_ids({a.id, b.id, 999}) == {a.id}
        assert await engine.articles.existing_ids(set()) == set()


# ── Categories ───────────────────────────────────────────────────────────────


class TestCategoryStore:
    async def test_get_name(self, engine: ArticleSyncEngine) -> None:
        assert await engine.categories.get_name(2) == "Science"

    async def test_get_missing_raises(self, engine: ArticleSyncEngine) -> None:
        with pytest.raises(NotFoundError):
            await engine.categories.get(99)

    async def test_create_and_list(self, engine: ArticleSyncEngine) -> None:
        created = await engine.categories.create(CategoryCreate(name="Art"))
        names = [c.name for c in await engine.categories.list_all()]
        assert names == ["Tech", "Science", "Art"]
        assert created.id == 3

    async def test_duplicate_name_raises(self, engine: ArticleSyncEngine) -> None:
        with pytest.raises(ValidationError, match="already exists"):
            await engine.categories.create(CategoryCreate(name="Tech"))


# ── Database manager ─────────────────────────────────────────────────────────


class TestDatabaseManager:
    async def test_session_before_initialize_raises(self) -> None:
        db = DatabaseManager(DatabaseSettings(url="sqlite+aiosqlite:///:memory:"))
        with pytest.raises(StoreError, match="not initialized"):
            async with db.session():
                pass

    async def test_health_check(self) -> None:
        db = DatabaseManager(DatabaseSettings(url="sqlite+aiosqlite:///:memory:"))
        assert (await db.health_check()).status == "unhealthy"
        await db.initialize()
        try:
            health = await db.health_check()
            assert health.status == "healthy"
            assert "sqlite" in (health.message or "")
        finally:
            await db.shutdown()

    async def test_unreachable_database_raises_store_error(self, tmp_path) -> None:
        db = DatabaseManager(DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path}/missing/dir/db.sqlite"))
        with pytest.raises(StoreError):
            await db.initialize()
