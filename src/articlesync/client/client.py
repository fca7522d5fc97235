"""ArticleSync Python SDK — Async and sync clients for the ArticleSync REST API.

Usage::

    # Async
    async with AsyncArticleSyncClient("http://localhost:3000", token="...") as client:
        article = await client.create_article("Rust ownership", "Borrowing...", category_id=1)
        hits = await client.search("ownership")

    # Sync (wraps async client internally)
    client = ArticleSyncClient("http://localhost:3000", token="...")
    page = client.list_articles(page=2)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar, cast

import httpx

_T = TypeVar("_T")

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Response types (plain dicts, not the server models)
# ═══════════════════════════════════════════════════════════════════════════════

Article = dict[str, Any]
"""Article dict (mirrors ``ArticleRead`` JSON)."""

ArticlePage = dict[str, Any]
"""Listing dict with ``page``, ``limit``, ``total``, ``totalPages`` and ``articles``."""

SearchResult = dict[str, Any]
"""Search response dict with ``query``, ``total`` and ``hits``."""

ReindexResult = dict[str, Any]
"""Reindex summary dict with ``count``, ``expected``, ``failed_ids``, ``removed`` and ``complete``."""


# ═══════════════════════════════════════════════════════════════════════════════
# Async client
# ═══════════════════════════════════════════════════════════════════════════════


class AsyncArticleSyncClient:
    """Async Python client for the ArticleSync API.

    Non-2xx responses raise ``httpx.HTTPStatusError``. A write the search
    index did not follow still succeeds; the degraded status is logged at
    warning level from the response's ``Warning`` header.

    Args:
        base_url: ArticleSync server URL, e.g. ``"http://localhost:3000"``.
        token: Bearer token sent with every request (required for writes).
        timeout: Request timeout in seconds.
        **httpx_kwargs: Additional keyword arguments passed to ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        *,
        token: str | None = None,
        timeout: float = 30.0,
        **httpx_kwargs: Any,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        headers = dict(httpx_kwargs.pop("headers", None) or {})
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers=headers,
            **httpx_kwargs,
        )

    async def __aenter__(self) -> AsyncArticleSyncClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        resp = await self._client.request(method, url, **kwargs)
        resp.raise_for_status()
        if resp.headers.get("X-Mirror-Status") == "degraded":
            logger.warning("%s %s: %s", method, url, resp.headers.get("Warning", "search index not updated"))
        return resp.json()

    # ── Health ──

    async def health(self) -> dict[str, Any]:
        """Check server health."""
        return cast(dict[str, Any], await self._request("GET", "/v1/health"))

    async def backend_health(self) -> dict[str, Any]:
        """Check primary store and search index health."""
        return cast(dict[str, Any], await self._request("GET", "/v1/health/backends"))

    # ── Articles ──

    async def create_article(self, title: str, content: str, category_id: int) -> Article:
        """Create an article authored by the token's user."""
        payload = {"title": title, "content": content, "categoryId": category_id}
        return cast(Article, await self._request("POST", "/v1/articles", json=payload))

    async def list_articles(self, page: int | None = None, limit: int | None = None) -> ArticlePage:
        """List articles newest first."""
        params: dict[str, int] = {}
        if page is not None:
            params["page"] = page
        if limit is not None:
            params["limit"] = limit
        return cast(ArticlePage, await self._request("GET", "/v1/articles", params=params))

    async def get_article(self, article_id: int) -> Article:
        return cast(Article, await self._request("GET", f"/v1/articles/{article_id}"))

    async def update_article(self, article_id: int, **fields: Any) -> Article:
        """Partially update an article (``title``, ``content``, ``categoryId``)."""
        return cast(Article, await self._request("PUT", f"/v1/articles/{article_id}", json=fields))

    async def delete_article(self, article_id: int) -> dict[str, Any]:
        return cast(dict[str, Any], await self._request("DELETE", f"/v1/articles/{article_id}"))

    async def search(self, query: str, *, limit: int | None = None) -> SearchResult:
        """Full-text search, best match first."""
        params: dict[str, Any] = {"q": query}
        if limit is not None:
            params["limit"] = limit
        return cast(SearchResult, await self._request("GET", "/v1/articles/search", params=params))

    # ── Categories ──

    async def create_category(self, name: str) -> dict[str, Any]:
        return cast(dict[str, Any], await self._request("POST", "/v1/categories", json={"name": name}))

    async def list_categories(self) -> list[dict[str, Any]]:
        return cast(list[dict[str, Any]], await self._request("GET", "/v1/categories"))

    async def get_category(self, category_id: int) -> dict[str, Any]:
        return cast(dict[str, Any], await self._request("GET", f"/v1/categories/{category_id}"))

    # ── Admin ──

    async def reindex(self) -> ReindexResult:
        """Rebuild the search index from the primary store."""
        return cast(ReindexResult, await self._request("POST", "/v1/admin/reindex"))


# ═══════════════════════════════════════════════════════════════════════════════
# Sync client (wraps AsyncArticleSyncClient)
# ═══════════════════════════════════════════════════════════════════════════════


class ArticleSyncClient:
    """Synchronous Python client for the ArticleSync API.

    Wraps :class:`AsyncArticleSyncClient` using ``asyncio.run``. Each call
    opens and closes its own connection.

    Args:
        base_url: ArticleSync server URL.
        token: Bearer token sent with every request.
        timeout: Request timeout in seconds.
        **httpx_kwargs: Additional keyword arguments passed to ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        *,
        token: str | None = None,
        timeout: float = 30.0,
        **httpx_kwargs: Any,
    ) -> None:
        self._base_url = base_url
        self._token = token
        self._timeout = timeout
        self._httpx_kwargs = httpx_kwargs

    def _run(self, coro: Coroutine[Any, Any, _T]) -> _T:
        """Run an async coroutine synchronously."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop and loop.is_running():
            # Already inside an event loop (e.g. Jupyter); run in a worker thread
            import concurrent.futures

            with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
                return pool.submit(asyncio.run, coro).result()
        return asyncio.run(coro)

    def _make_client(self) -> AsyncArticleSyncClient:
        return AsyncArticleSyncClient(
            self._base_url,
            token=self._token,
            timeout=self._timeout,
            **self._httpx_kwargs,
        )

    def _call(self, method: str, *args: Any, **kwargs: Any) -> Any:
        async def _invoke() -> Any:
            async with self._make_client() as c:
                return await getattr(c, method)(*args, **kwargs)

        return self._run(_invoke())

    def health(self) -> dict[str, Any]:
        """Check server health."""
        return cast(dict[str, Any], self._call("health"))

    def backend_health(self) -> dict[str, Any]:
        return cast(dict[str, Any], self._call("backend_health"))

    def create_article(self, title: str, content: str, category_id: int) -> Article:
        return cast(Article, self._call("create_article", title, content, category_id))

    def list_articles(self, page: int | None = None, limit: int | None = None) -> ArticlePage:
        return cast(ArticlePage, self._call("list_articles", page, limit))

    def get_article(self, article_id: int) -> Article:
        return cast(Article, self._call("get_article", article_id))

    def update_article(self, article_id: int, **fields: Any) -> Article:
        return cast(Article, self._call("update_article", article_id, **fields))

    def delete_article(self, article_id: int) -> dict[str, Any]:
        return cast(dict[str, Any], self._call("delete_article", article_id))

    def search(self, query: str, *, limit: int | None = None) -> SearchResult:
        """Full-text search, best match first."""
        return cast(SearchResult, self._call("search", query, limit=limit))

    def create_category(self, name: str) -> dict[str, Any]:
        return cast(dict[str, Any], self._call("create_category", name))

    def list_categories(self) -> list[dict[str, Any]]:
        return cast(list[dict[str, Any]], self._call("list_categories"))

    def get_category(self, category_id: int) -> dict[str, Any]:
        return cast(dict[str, Any], self._call("get_category", category_id))

    def reindex(self) -> ReindexResult:
        """Rebuild the search index from the primary store."""
        return cast(ReindexResult, self._call("reindex"))
