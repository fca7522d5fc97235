"""Base index adapter — Abstract interface for all search index connectors.

Every search backend must implement this interface to hold the article
mirror. The adapter is responsible for:
  1. Writing and deleting single documents by identifier
  2. Batch primitives used to replace the whole document set during a reindex
  3. Running multi-field relevance queries
  4. Reporting health status

Every write call honours one visibility policy, chosen at construction:
when ``wait_for_visibility`` is true the call returns only once the change
is searchable.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable, Collection, Sequence

from pydantic import BaseModel, Field

from articlesync.adapters.base.exceptions import AdapterError
from articlesync.models.document import SEARCH_FIELDS, SearchDocument, SearchHit
from articlesync.models.sync import BulkReplaceResult

logger = logging.getLogger(__name__)

DocumentBatches = AsyncIterator[list[SearchDocument]]
"""Stream of document batches fed to :meth:`IndexAdapter.bulk_replace`."""

LivenessCheck = Callable[[set[str]], Awaitable[set[str]]]
"""Given candidate stale ids, returns those whose source record still exists."""


class AdapterHealth(BaseModel):
    """Health status of a backend."""

    status: str = Field(description="Health status: healthy, degraded, unhealthy")
    latency_ms: int = Field(default=0, description="Latency of last health check in ms")
    last_check: str | None = Field(default=None, description="ISO timestamp of last health check")
    message: str | None = Field(default=None, description="Additional health message")


class IndexAdapter(ABC):
    """Abstract base class for search index adapters.

    All adapters must implement:
      - upsert() / delete(): Single-document writes keyed by id
      - index_batch() / document_ids() / delete_many(): Batch primitives
      - query(): Multi-field relevance search, best match first
      - health_check(): Report backend health

    ``bulk_replace()`` is built on the batch primitives and shared by all
    backends. Adapters are shared across concurrent requests; connection
    pooling and configuration are handled during initialization.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique adapter name (e.g., 'opensearch', 'meilisearch')."""

    @abstractmethod
    async def initialize(self) -> None:
        """Connect to the backend and make sure the index exists.

        Called once during application startup.
        """

    @abstractmethod
    async def shutdown(self) -> None:
        """Close connections and release resources."""

    @abstractmethod
    async def upsert(self, document: SearchDocument) -> None:
        """Write *document*, replacing any existing document with the same id.

        Raises:
            IndexWriteError: If the backend rejects the write.
        """

    @abstractmethod
    async def delete(self, doc_id: str) -> None:
        """Delete the document with *doc_id*. Deleting an absent id is not an error.

        Raises:
            IndexWriteError: If the backend rejects the delete.
        """

    @abstractmethod
    async def index_batch(self, documents: Sequence[SearchDocument]) -> list[str]:
        """Upsert *documents* in one round trip.

        Returns:
            Ids of the documents the backend rejected.

        Raises:
            IndexWriteError: If the whole batch failed.
        """

    @abstractmethod
    async def document_ids(self) -> set[str]:
        """Return the id of every document currently in the index."""

    @abstractmethod
    async def delete_many(self, doc_ids: Collection[str]) -> int:
        """Delete every document in *doc_ids*. Returns how many were removed."""

    @abstractmethod
    async def query(
        self,
        text: str,
        fields: Sequence[str] = SEARCH_FIELDS,
        limit: int = 20,
    ) -> list[SearchHit]:
        """Run a relevance query over *fields*.

        Returns:
            Hits ordered by descending score. Tie order is backend-defined.

        Raises:
            QueryError: If the backend rejects or fails the query.
        """

    @abstractmethod
    async def health_check(self) -> AdapterHealth:
        """Check the health of the search backend."""

    async def bulk_replace(
        self,
        batches: DocumentBatches,
        still_live: LivenessCheck | None = None,
    ) -> BulkReplaceResult:
        """Make the index hold exactly the documents streamed in *batches*.

        Documents are upserted batch by batch. Once the stream is exhausted,
        documents whose ids were not streamed are removed. The index is
        never dropped or swapped, so writes made concurrently are kept.

        Args:
            batches: Async stream of document batches.
            still_live: Optional callback given the unseen ids; it returns
                the subset that must be kept because the source record
                appeared after it was streamed past.

        Returns:
            Counts of indexed, failed and removed documents.

        Raises:
            AdapterError: If listing or deleting stale documents fails.
        """
        result = BulkReplaceResult()
        seen: set[str] = set()

        async for batch in batches:
            if not batch:
                continue
            batch_ids = [doc.id for doc in batch]
            seen.update(batch_ids)
            try:
                failed = await self.index_batch(batch)
            except AdapterError as e:
                logger.error("Bulk write of %d documents failed: %s", len(batch), e)
                failed = batch_ids
            result.failed_ids.extend(failed)
            result.indexed += len(batch) - len(failed)

        stale = await self.document_ids() - seen
        if stale and still_live is not None:
            stale -= await still_live(stale)
        if stale:
            result.removed = await self.delete_many(stale)

        logger.info(
            "Bulk replace on %s: %d indexed, %d failed, %d removed",
            self.name,
            result.indexed,
            len(result.failed_ids),
            result.removed,
        )
        return result
