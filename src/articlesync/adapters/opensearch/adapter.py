"""OpenSearch adapter — Article mirror on OpenSearch (v2+).

OpenSearch is an AWS-maintained fork of Elasticsearch with a compatible
query DSL and API surface. This adapter uses ``opensearch-py`` (async) for
document writes, bulk replacement, multi-field search and health
monitoring through the standard adapter interface.

Install the optional dependency::

    pip install articlesync[opensearch]
    # or: pip install opensearch-py
"""

from __future__ import annotations

import logging
import time
from collections.abc import Collection, Sequence
from datetime import UTC, datetime
from typing import Any

from articlesync.adapters.base.adapter import AdapterHealth, IndexAdapter
from articlesync.adapters.base.exceptions import (
    ConfigurationError,
    ConnectionError,
    IndexWriteError,
    QueryError,
)
from articlesync.models.document import SEARCH_FIELDS, SearchDocument, SearchHit

logger = logging.getLogger(__name__)

INDEX_BODY: dict[str, Any] = {
    "settings": {"number_of_shards": 1},
    "mappings": {
        "properties": {
            "id": {"type": "keyword"},
            "title": {"type": "text"},
            "content": {"type": "text"},
            "category_id": {"type": "integer"},
            "category_name": {"type": "text", "fields": {"raw": {"type": "keyword"}}},
            "author_id": {"type": "integer"},
        }
    },
}

_SCROLL_KEEPALIVE = "1m"
_SCROLL_SIZE = 1000


class OpenSearchIndexAdapter(IndexAdapter):
    """Index adapter for OpenSearch (v2+).

    Supports:
      - Single-document index/delete with a uniform refresh policy
      - Bulk writes and deletes through the ``_bulk`` API
      - Multi-field BM25 search with the title boosted

    Args:
        hosts: List of OpenSearch node URLs.
        index: Name of the article index.
        username: Optional HTTP basic-auth username.
        password: Optional HTTP basic-auth password.
        verify_certs: Whether to verify TLS certificates.
        wait_for_visibility: Pass ``refresh="wait_for"`` on every write.
        timeout: Request timeout in seconds.
        **kwargs: Additional keyword arguments forwarded to ``AsyncOpenSearch``.
    """

    def __init__(
        self,
        hosts: list[str] | None = None,
        index: str = "articles",
        username: str | None = None,
        password: str | None = None,
        verify_certs: bool = True,
        wait_for_visibility: bool = True,
        timeout: float = 30.0,
        **kwargs: Any,
    ) -> None:
        self._hosts = hosts or ["https://localhost:9200"]
        self._index = index
        self._username = username
        self._password = password
        self._verify_certs = verify_certs
        self._refresh: dict[str, Any] = {"refresh": "wait_for"} if wait_for_visibility else {}
        self._timeout = timeout
        self._extra_kwargs = kwargs
        self._client: Any = None

    @property
    def name(self) -> str:
        return "opensearch"

    async def initialize(self) -> None:
        """Create the ``AsyncOpenSearch`` client and ensure the index exists."""
        try:
            from opensearchpy import AsyncOpenSearch
        except ImportError as e:
            raise ConfigurationError(
                "opensearch-py package is required.  Install with: pip install articlesync[opensearch]"
            ) from e

        client_kwargs: dict[str, Any] = {
            "hosts": self._hosts,
            "verify_certs": self._verify_certs,
            "ssl_show_warn": False,
            "timeout": self._timeout,
        }
        if self._username and self._password:
            client_kwargs["http_auth"] = (self._username, self._password)

        client_kwargs.update(self._extra_kwargs)

        try:
            self._client = AsyncOpenSearch(**client_kwargs)
            info = await self._client.info()
            version = info.get("version", {}).get("number", "unknown")
            cluster = info.get("cluster_name", "unknown")
            logger.info("Connected to OpenSearch cluster: %s (v%s)", cluster, version)
        except Exception as e:
            raise ConnectionError(f"Failed to connect to OpenSearch: {e}") from e

        await self.ensure_index()

    async def ensure_index(self) -> None:
        """Create the article index with its mapping if it does not exist."""
        client = self._require_client()
        try:
            if not await client.indices.exists(index=self._index):
                await client.indices.create(index=self._index, body=INDEX_BODY)
                logger.info("Created OpenSearch index: %s", self._index)
        except Exception as e:
            raise ConfigurationError(f"Failed to create OpenSearch index '{self._index}': {e}") from e

    async def shutdown(self) -> None:
        """Close the OpenSearch client."""
        if self._client:
            await self._client.close()
            self._client = None

    # ── Writes ───────────────────────────────────────────────────────────

    async def upsert(self, document: SearchDocument) -> None:
        client = self._require_client()
        try:
            await client.index(
                index=self._index,
                id=document.id,
                body=document.model_dump(),
                **self._refresh,
            )
        except Exception as e:
            raise IndexWriteError(f"OpenSearch upsert of '{document.id}' failed: {e}") from e

    async def delete(self, doc_id: str) -> None:
        client = self._require_client()
        try:
            await client.delete(index=self._index, id=doc_id, **self._refresh)
        except Exception as e:
            if "NotFoundError" in type(e).__name__:
                return
            raise IndexWriteError(f"OpenSearch delete of '{doc_id}' failed: {e}") from e

    async def index_batch(self, documents: Sequence[SearchDocument]) -> list[str]:
        body: list[dict[str, Any]] = []
        for document in documents:
            body.append({"index": {"_index": self._index, "_id": document.id}})
            body.append(document.model_dump())

        response = await self._bulk(body)
        failed: list[str] = []
        for item in response.get("items", []):
            action = item.get("index", {})
            if action.get("error"):
                failed.append(str(action.get("_id")))
                logger.warning("OpenSearch rejected document %s: %s", action.get("_id"), action["error"])
        return failed

    async def document_ids(self) -> set[str]:
        """Scroll through the index collecting ``_id`` values only."""
        client = self._require_client()
        ids: set[str] = set()
        scroll_id: str | None = None
        try:
            response = await client.search(
                index=self._index,
                body={"query": {"match_all": {}}, "_source": False},
                scroll=_SCROLL_KEEPALIVE,
                size=_SCROLL_SIZE,
            )
            while True:
                scroll_id = response.get("_scroll_id")
                hits = response.get("hits", {}).get("hits", [])
                if not hits:
                    break
                ids.update(str(hit["_id"]) for hit in hits)
                response = await client.scroll(scroll_id=scroll_id, scroll=_SCROLL_KEEPALIVE)
        except Exception as e:
            raise QueryError(f"Failed to list OpenSearch document ids: {e}") from e
        finally:
            if scroll_id:
                try:
                    await client.clear_scroll(scroll_id=scroll_id)
                except Exception:
                    logger.debug("Failed to clear scroll context", exc_info=True)
        return ids

    async def delete_many(self, doc_ids: Collection[str]) -> int:
        body = [{"delete": {"_index": self._index, "_id": doc_id}} for doc_id in doc_ids]
        if not body:
            return 0
        response = await self._bulk(body)
        return sum(1 for item in response.get("items", []) if item.get("delete", {}).get("result") == "deleted")

    async def _bulk(self, body: list[dict[str, Any]]) -> dict[str, Any]:
        client = self._require_client()
        try:
            return dict(await client.bulk(body=body, **self._refresh))
        except Exception as e:
            raise IndexWriteError(f"OpenSearch bulk request failed: {e}") from e

    # ── Search ───────────────────────────────────────────────────────────

    async def query(
        self,
        text: str,
        fields: Sequence[str] = SEARCH_FIELDS,
        limit: int = 20,
    ) -> list[SearchHit]:
        """Execute a multi-field relevance query against OpenSearch."""
        client = self._require_client()

        body: dict[str, Any] = {
            "query": {
                "multi_match": {
                    "query": text,
                    "fields": [f"{f}^2" if f == "title" else f for f in fields],
                    "type": "best_fields",
                    "fuzziness": "AUTO",
                }
            },
            "size": limit,
            "_source": True,
        }

        try:
            start = time.monotonic()
            response = await client.search(index=self._index, body=body)
            took_ms = int((time.monotonic() - start) * 1000)
        except Exception as e:
            raise QueryError(f"OpenSearch query failed: {e}") from e

        hits = [self._to_hit(hit) for hit in response.get("hits", {}).get("hits", [])]
        logger.debug("OpenSearch query %r returned %d hits in %d ms", text, len(hits), took_ms)
        return hits

    @staticmethod
    def _to_hit(raw_hit: dict[str, Any]) -> SearchHit:
        source = dict(raw_hit.get("_source", {}))
        source["id"] = str(raw_hit.get("_id", source.get("id", "")))
        return SearchHit(
            document=SearchDocument.model_validate(source),
            score=raw_hit.get("_score") or 0.0,
        )

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> AdapterHealth:
        """Check OpenSearch cluster health."""
        if not self._client:
            return AdapterHealth(status="unhealthy", message="Client not initialized")

        try:
            start = time.monotonic()
            health = await self._client.cluster.health()
            latency_ms = int((time.monotonic() - start) * 1000)

            status_map = {"green": "healthy", "yellow": "degraded", "red": "unhealthy"}

            return AdapterHealth(
                status=status_map.get(health.get("status", "red"), "unhealthy"),
                latency_ms=latency_ms,
                last_check=datetime.now(UTC).isoformat(),
                message=f"Cluster: {health.get('cluster_name')}, Index: {self._index}",
            )
        except Exception as e:
            return AdapterHealth(status="unhealthy", message=str(e))

    # ── Helpers ──────────────────────────────────────────────────────────

    def _require_client(self) -> Any:
        if not self._client:
            raise ConnectionError("OpenSearch client not initialized.")
        return self._client
