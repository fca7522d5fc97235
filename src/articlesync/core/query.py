"""Query router — Sends each read to the store that owns it.

Listing and single-article reads are answered by the primary store, which
is authoritative. Full-text search is answered by the search index only,
so search results can lag behind the canonical state while the mirror is
degraded.
"""

from __future__ import annotations

import logging
import math

from articlesync.adapters.base.adapter import IndexAdapter
from articlesync.config.settings import PaginationSettings
from articlesync.errors import NotFoundError, ValidationError
from articlesync.models.article import ArticlePage, ArticleRead
from articlesync.models.document import SEARCH_FIELDS, SearchHit
from articlesync.store.repository import ArticleStore

logger = logging.getLogger(__name__)


class QueryRouter:
    """Read side of the service.

    Args:
        articles: Canonical article store.
        index: Search index adapter.
        pagination: Page size defaults and limits.
    """

    def __init__(
        self,
        articles: ArticleStore,
        index: IndexAdapter,
        pagination: PaginationSettings | None = None,
    ) -> None:
        self._articles = articles
        self._index = index
        self._pagination = pagination or PaginationSettings()

    async def list_articles(self, page: int | None = None, limit: int | None = None) -> ArticlePage:
        """Return one page of articles, newest first.

        Pages past the end are empty rather than an error.

        Raises:
            ValidationError: If *page* or *limit* is not positive, or *limit*
                exceeds the configured maximum.
        """
        page = 1 if page is None else page
        limit = self._pagination.default_limit if limit is None else limit
        if page < 1:
            raise ValidationError(f"page must be a positive integer, got {page}")
        if limit < 1:
            raise ValidationError(f"limit must be a positive integer, got {limit}")
        if limit > self._pagination.max_limit:
            raise ValidationError(f"limit must not exceed {self._pagination.max_limit}, got {limit}")

        total = await self._articles.count()
        offset = (page - 1) * limit
        articles = await self._articles.list_newest(offset, limit) if offset < total else []
        return ArticlePage(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit),
            articles=articles,
        )

    async def get_article(self, article_id: int) -> ArticleRead:
        """Fetch one article from the primary store.

        Raises:
            NotFoundError: If the article does not exist.
        """
        article = await self._articles.get(article_id)
        if article is None:
            raise NotFoundError(f"Article {article_id} not found")
        return article

    async def search(self, text: str, limit: int | None = None) -> list[SearchHit]:
        """Full-text search over title, content and category name.

        Raises:
            ValidationError: If *text* is empty or *limit* is not positive.
            QueryError: If the index fails the query.
        """
        text = (text or "").strip()
        if not text:
            raise ValidationError("Search query must not be empty")
        if limit is None:
            limit = self._pagination.search_limit
        elif limit < 1:
            raise ValidationError(f"limit must be a positive integer, got {limit}")
        limit = min(limit, self._pagination.max_limit)

        hits = await self._index.query(text, SEARCH_FIELDS, limit)
        logger.debug("Search %r returned %d hits", text, len(hits))
        return hits
