"""MeiliSearch adapter — Article mirror on MeiliSearch.

MeiliSearch provides instant, typo-tolerant search out of the box.
This adapter communicates via the official REST API using ``httpx``.
No extra dependencies beyond ``httpx`` (already a core dependency) are
required.

MeiliSearch applies writes asynchronously through tasks. With
``wait_for_visibility`` enabled every write polls its task until it
finishes, so a returned call means the change is searchable.

Usage::

    adapter = MeiliSearchIndexAdapter(
        base_url="http://localhost:7700",
        index="articles",
        api_key="your-master-key",
    )
    await adapter.initialize()
    hits = await adapter.query("ownership")
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Collection, Sequence
from datetime import UTC, datetime
from typing import Any

import httpx

from articlesync.adapters.base.adapter import AdapterHealth, IndexAdapter
from articlesync.adapters.base.exceptions import (
    ConfigurationError,
    ConnectionError,
    IndexWriteError,
    QueryError,
)
from articlesync.models.document import SEARCH_FIELDS, SearchDocument, SearchHit

logger = logging.getLogger(__name__)

INDEX_SETTINGS: dict[str, Any] = {
    "searchableAttributes": ["title", "content", "category_name"],
    "filterableAttributes": ["category_id", "author_id"],
}

_PAGE_SIZE = 1000
_TASK_POLL_INTERVAL = 0.05
_FINISHED_TASK_STATUSES = frozenset({"succeeded", "failed", "canceled"})


class MeiliSearchIndexAdapter(IndexAdapter):
    """Index adapter for MeiliSearch.

    Communicates with MeiliSearch via its `REST API`_ over HTTP.

    .. _REST API: https://www.meilisearch.com/docs/reference/api/overview

    Args:
        base_url: MeiliSearch instance URL, e.g. ``"http://localhost:7700"``.
        index: MeiliSearch index UID holding article documents.
        api_key: Master key or API key for authentication.
        wait_for_visibility: Poll each write task until it finishes.
        timeout: HTTP request timeout in seconds; also bounds task polling.
        **kwargs: Extra keyword arguments stored for future use.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:7700",
        index: str = "articles",
        api_key: str | None = None,
        wait_for_visibility: bool = True,
        timeout: float = 30.0,
        **kwargs: Any,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._index = index
        self._api_key = api_key
        self._wait = wait_for_visibility
        self._timeout = timeout
        self._extra_kwargs = kwargs
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "meilisearch"

    async def initialize(self) -> None:
        """Create an ``httpx.AsyncClient``, verify the connection and ensure the index exists."""
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            headers=headers,
            **self._extra_kwargs,
        )

        try:
            resp = await self._client.get("/health")
            resp.raise_for_status()
            data = resp.json()
            if data.get("status") != "available":
                raise ConnectionError(f"MeiliSearch not available: {data}")
            logger.info(
                "Connected to MeiliSearch at %s (index: %s)",
                self._base_url,
                self._index,
            )
        except (httpx.HTTPError, ValueError) as e:
            raise ConnectionError(f"Failed to connect to MeiliSearch: {e}") from e

        await self.ensure_index()

    async def ensure_index(self) -> None:
        """Create the index with ``id`` as primary key and apply searchable attributes."""
        client = self._require_client()
        try:
            resp = await client.get(f"/indexes/{self._index}")
            if resp.status_code == 404:
                resp = await client.post("/indexes", json={"uid": self._index, "primaryKey": "id"})
                resp.raise_for_status()
                await self._wait_for_task(resp.json(), force=True)
                logger.info("Created MeiliSearch index: %s", self._index)
            else:
                resp.raise_for_status()

            resp = await client.patch(f"/indexes/{self._index}/settings", json=INDEX_SETTINGS)
            resp.raise_for_status()
            await self._wait_for_task(resp.json(), force=True)
        except (httpx.HTTPError, ValueError, IndexWriteError) as e:
            raise ConfigurationError(f"Failed to prepare MeiliSearch index '{self._index}': {e}") from e

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # ── Writes ───────────────────────────────────────────────────────────

    async def upsert(self, document: SearchDocument) -> None:
        await self._write("POST", f"/indexes/{self._index}/documents", json=[document.model_dump()])

    async def delete(self, doc_id: str) -> None:
        # MeiliSearch accepts deletes of unknown ids as successful tasks
        await self._write("DELETE", f"/indexes/{self._index}/documents/{doc_id}")

    async def index_batch(self, documents: Sequence[SearchDocument]) -> list[str]:
        # A MeiliSearch task succeeds or fails as a whole; failures raise
        await self._write(
            "POST",
            f"/indexes/{self._index}/documents",
            json=[document.model_dump() for document in documents],
        )
        return []

    async def document_ids(self) -> set[str]:
        """Page through ``/documents`` fetching the ``id`` field only."""
        client = self._require_client()
        ids: set[str] = set()
        offset = 0
        try:
            while True:
                resp = await client.get(
                    f"/indexes/{self._index}/documents",
                    params={"fields": "id", "limit": _PAGE_SIZE, "offset": offset},
                )
                resp.raise_for_status()
                data = resp.json()
                results = data.get("results", [])
                ids.update(str(doc["id"]) for doc in results)
                offset += len(results)
                if not results or offset >= data.get("total", 0):
                    break
        except (httpx.HTTPError, ValueError) as e:
            raise QueryError(f"Failed to list MeiliSearch document ids: {e}") from e
        return ids

    async def delete_many(self, doc_ids: Collection[str]) -> int:
        if not doc_ids:
            return 0
        task = await self._write(
            "POST",
            f"/indexes/{self._index}/documents/delete-batch",
            json=list(doc_ids),
        )
        details = task.get("details") or {}
        return int(details.get("deletedDocuments", len(doc_ids)))

    async def _write(self, method: str, url: str, json: Any = None) -> dict[str, Any]:
        client = self._require_client()
        try:
            resp = await client.request(method, url, json=json)
            resp.raise_for_status()
            task = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise IndexWriteError(f"MeiliSearch {method} {url} failed: {e}") from e
        if not isinstance(task, dict):
            raise IndexWriteError(f"MeiliSearch {method} {url} returned an unexpected body")
        return await self._wait_for_task(task)

    async def _wait_for_task(self, task: dict[str, Any], force: bool = False) -> dict[str, Any]:
        """Poll ``/tasks/{uid}`` until the task finishes.

        Returns the finished task, or the enqueued task when waiting is disabled.

        Raises:
            IndexWriteError: If the task fails or does not finish within the timeout.
        """
        task_uid = task.get("taskUid", task.get("uid"))
        if task_uid is None or not (self._wait or force):
            return task

        client = self._require_client()
        deadline = time.monotonic() + self._timeout
        while True:
            try:
                resp = await client.get(f"/tasks/{task_uid}")
                resp.raise_for_status()
                current = resp.json()
                status = current.get("status")
            except (httpx.HTTPError, ValueError, AttributeError) as e:
                raise IndexWriteError(f"Failed to poll MeiliSearch task {task_uid}: {e}") from e
            if status in _FINISHED_TASK_STATUSES:
                if status != "succeeded":
                    error = (current.get("error") or {}).get("message", status)
                    raise IndexWriteError(f"MeiliSearch task {task_uid} {status}: {error}")
                return current
            if time.monotonic() >= deadline:
                raise IndexWriteError(f"MeiliSearch task {task_uid} did not finish in {self._timeout}s")
            await asyncio.sleep(_TASK_POLL_INTERVAL)

    # ── Search ───────────────────────────────────────────────────────────

    async def query(
        self,
        text: str,
        fields: Sequence[str] = SEARCH_FIELDS,
        limit: int = 20,
    ) -> list[SearchHit]:
        """Execute a search query against MeiliSearch.

        Uses the ``/indexes/{index}/search`` endpoint.
        """
        client = self._require_client()

        payload: dict[str, Any] = {
            "q": text,
            "limit": limit,
            "attributesToSearchOn": list(fields),
            "showRankingScore": True,
        }

        try:
            resp = await client.post(f"/indexes/{self._index}/search", json=payload)
            resp.raise_for_status()
            hits = [self._to_hit(raw) for raw in resp.json().get("hits", [])]
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            raise QueryError(f"MeiliSearch query failed: {e}") from e

        hits.sort(key=lambda h: h.score, reverse=True)
        return hits

    @staticmethod
    def _to_hit(raw_hit: dict[str, Any]) -> SearchHit:
        source = {k: v for k, v in raw_hit.items() if not k.startswith("_")}
        source["id"] = str(source.get("id", ""))
        return SearchHit(
            document=SearchDocument.model_validate(source),
            score=raw_hit.get("_rankingScore", 0.0),
        )

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> AdapterHealth:
        """Check MeiliSearch health."""
        if not self._client:
            return AdapterHealth(status="unhealthy", message="Client not initialized")

        try:
            start = time.monotonic()
            resp = await self._client.get("/health")
            latency_ms = int((time.monotonic() - start) * 1000)

            if resp.status_code == 200:
                data = resp.json()
                status = data.get("status", "unknown")
                return AdapterHealth(
                    status="healthy" if status == "available" else "degraded",
                    latency_ms=latency_ms,
                    last_check=datetime.now(UTC).isoformat(),
                    message=f"Index: {self._index}, status: {status}",
                )
            return AdapterHealth(
                status="degraded",
                latency_ms=latency_ms,
                last_check=datetime.now(UTC).isoformat(),
                message=f"MeiliSearch returned HTTP {resp.status_code}",
            )
        except Exception as e:
            return AdapterHealth(status="unhealthy", message=str(e))

    # ── Helpers ──────────────────────────────────────────────────────────

    def _require_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise ConnectionError("MeiliSearch client not initialized.")
        return self._client
