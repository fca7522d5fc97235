"""Synchronization controller — Keeps the search mirror following the primary store.

Every mutation runs in two steps:

  1. Canonical write to the primary store. Failures here abort the request.
  2. Mirror write to the search index. Failures here are logged and
     reported as a degraded mirror; the canonical change stands.

The mirror is therefore never ahead of the primary store. A crash or
backend error between the two steps leaves the mirror missing a change,
which :meth:`SyncController.reindex` repairs.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, Collection, Mapping
from typing import Any, TypeVar

import pydantic
import structlog

from articlesync.adapters.base.adapter import IndexAdapter
from articlesync.core.projection import build_search_document
from articlesync.errors import ArticleSyncError, NotFoundError, ValidationError
from articlesync.models.article import ArticleCreate, ArticleRead, ArticleUpdate
from articlesync.models.document import SearchDocument
from articlesync.models.sync import MirrorStatus, MutationResult, ReindexResult
from articlesync.store.repository import ArticleStore, CategoryStore

logger = logging.getLogger(__name__)

_M = TypeVar("_M", bound=pydantic.BaseModel)


def coerce_payload(model: type[_M], fields: _M | Mapping[str, Any]) -> _M:
    """Validate *fields* into *model*, raising the domain ValidationError on failure."""
    if isinstance(fields, model):
        return fields
    try:
        return model.model_validate(fields)
    except pydantic.ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(problems) from e


class SyncController:
    """Orchestrates article mutations across the primary store and the search index.

    Args:
        articles: Canonical article store.
        categories: Category lookup used to denormalize category names.
        index: Search index adapter holding the mirror.
        batch_size: Articles read per round trip during reindex.
    """

    def __init__(
        self,
        articles: ArticleStore,
        categories: CategoryStore,
        index: IndexAdapter,
        batch_size: int = 500,
    ) -> None:
        self._articles = articles
        self._categories = categories
        self._index = index
        self._batch_size = batch_size

    # ──────────────────────────────────────────────────────────────────────
    # Mutations
    # ──────────────────────────────────────────────────────────────────────

    async def create(self, fields: ArticleCreate | Mapping[str, Any], author_id: int) -> MutationResult:
        """Create an article and mirror it.

        Raises:
            ValidationError: If a required field is missing or the category does not exist.
            StoreError: If the primary store fails.
        """
        payload = coerce_payload(ArticleCreate, fields)
        article = await self._articles.create(payload, author_id)
        warning = await self._mirror_upsert(article, "create")
        return _mutation(article.id, article, warning)

    async def update(self, article_id: int, fields: ArticleUpdate | Mapping[str, Any]) -> MutationResult:
        """Apply a partial update and mirror the new state.

        An update with no fields leaves the record unchanged and re-mirrors it.

        Raises:
            NotFoundError: If the article does not exist.
            ValidationError: If a field is malformed or the new category does not exist.
            StoreError: If the primary store fails.
        """
        payload = coerce_payload(ArticleUpdate, fields)
        changes = payload.changes()
        if changes:
            article = await self._articles.update(article_id, changes)
        else:
            article = await self._articles.get(article_id)
        if article is None:
            raise NotFoundError(f"Article {article_id} not found")

        warning = await self._mirror_upsert(article, "update")
        return _mutation(article_id, article, warning)

    async def delete(self, article_id: int) -> MutationResult:
        """Delete an article, then its mirror document.

        Raises:
            NotFoundError: If the article does not exist.
            StoreError: If the primary store fails.
        """
        if not await self._articles.delete(article_id):
            raise NotFoundError(f"Article {article_id} not found")

        warning: str | None = None
        with structlog.contextvars.bound_contextvars(article_id=article_id, operation="delete"):
            try:
                await self._index.delete(str(article_id))
            except ArticleSyncError as e:
                warning = self._degraded("delete", article_id, e)
        return _mutation(article_id, None, warning)

    # ──────────────────────────────────────────────────────────────────────
    # Repair
    # ──────────────────────────────────────────────────────────────────────

    async def reindex(self) -> ReindexResult:
        """Rebuild the mirror from the primary store.

        Articles are read in id order, ``batch_size`` at a time, projected
        and streamed into the index's bulk replace. Documents for articles
        that no longer exist are removed. Live mutations may run meanwhile;
        their own mirror writes converge the index afterwards.

        Returns:
            Counts of rebuilt, expected, failed and removed documents. A
            result with ``complete == False`` is also logged at error level.

        Raises:
            StoreError: If reading the primary store fails.
            IndexError: If the index cannot list or remove stale documents.
        """
        start = time.monotonic()
        expected = 0
        unprojectable: list[str] = []

        async def batches() -> AsyncIterator[list[SearchDocument]]:
            nonlocal expected
            async for articles in self._articles.iter_batches(self._batch_size):
                expected += len(articles)
                documents: list[SearchDocument] = []
                for article in articles:
                    category_name = article.category.name if article.category else None
                    try:
                        documents.append(build_search_document(article, category_name))
                    except ValidationError as e:
                        logger.error("Cannot project article %d: %s", article.id, e)
                        unprojectable.append(str(article.id))
                yield documents

        logger.info("Reindex started (batch size %d)", self._batch_size)
        bulk = await self._index.bulk_replace(batches(), still_live=self._still_live)

        result = ReindexResult(
            count=bulk.indexed,
            expected=expected,
            failed_ids=unprojectable + bulk.failed_ids,
            removed=bulk.removed,
            took_ms=int((time.monotonic() - start) * 1000),
        )
        if result.complete:
            logger.info(
                "Reindex complete: %d documents, %d stale removed in %d ms",
                result.count,
                result.removed,
                result.took_ms,
            )
        else:
            logger.error(
                "Reindex incomplete: %d of %d documents rebuilt, failed ids: %s",
                result.count,
                result.expected,
                ", ".join(result.failed_ids[:20]),
            )
        return result

    # ──────────────────────────────────────────────────────────────────────
    # Helpers
    # ──────────────────────────────────────────────────────────────────────

    async def _mirror_upsert(self, article: ArticleRead, operation: str) -> str | None:
        """Project and upsert *article*. Returns a warning instead of raising."""
        with structlog.contextvars.bound_contextvars(article_id=article.id, operation=operation):
            try:
                if article.category is not None:
                    category_name = article.category.name
                else:
                    category_name = await self._categories.get_name(article.category_id)
                await self._index.upsert(build_search_document(article, category_name))
            except ArticleSyncError as e:
                return self._degraded(operation, article.id, e)
        return None

    @staticmethod
    def _degraded(operation: str, article_id: int, error: Exception) -> str:
        logger.warning(
            "Search mirror degraded: %s of article %d committed but not mirrored: %s",
            operation,
            article_id,
            error,
        )
        return f"Search index not updated after {operation}; changes appear in search after the next reindex"

    async def _still_live(self, doc_ids: Collection[str]) -> set[str]:
        """Return the ids among *doc_ids* that still exist in the primary store."""
        numeric = {int(doc_id) for doc_id in doc_ids if doc_id.isdigit()}
        if not numeric:
            return set()
        existing = await self._articles.existing_ids(numeric)
        return {str(article_id) for article_id in existing}


def _mutation(article_id: int, article: ArticleRead | None, warning: str | None) -> MutationResult:
    return MutationResult(
        article=article,
        article_id=article_id,
        mirror_status=MirrorStatus.DEGRADED if warning else MirrorStatus.SYNCED,
        warning=warning,
    )
