"""In-process index adapter — Keeps the mirror in a dict.

Used for local development and tests. Scoring is a small term-frequency
model with the title weighted double, which is enough to rank documents
the way a BM25 backend would for short queries.

Usage::

    adapter = MemoryIndexAdapter()
    await adapter.initialize()
    await adapter.upsert(document)
    hits = await adapter.query("ownership")
"""

from __future__ import annotations

import re
import time
from collections.abc import Collection, Sequence
from datetime import UTC, datetime
from typing import Any

from articlesync.adapters.base.adapter import AdapterHealth, IndexAdapter
from articlesync.models.document import SEARCH_FIELDS, SearchDocument, SearchHit

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)

_FIELD_BOOST: dict[str, float] = {"title": 2.0}


def _tokens(text: str) -> list[str]:
    return _TOKEN_RE.findall(text.lower())


class MemoryIndexAdapter(IndexAdapter):
    """Index adapter backed by a Python dict.

    Args:
        index: Name reported in health checks.
        **kwargs: Ignored; accepted so configuration can be shared with other backends.
    """

    def __init__(self, index: str = "articles", **kwargs: Any) -> None:
        self._index = index
        self._documents: dict[str, SearchDocument] = {}

    @property
    def name(self) -> str:
        return "memory"

    async def initialize(self) -> None:
        """Nothing to connect to."""

    async def shutdown(self) -> None:
        self._documents.clear()

    # ── Writes ───────────────────────────────────────────────────────────

    async def upsert(self, document: SearchDocument) -> None:
        self._documents[document.id] = document.model_copy()

    async def delete(self, doc_id: str) -> None:
        self._documents.pop(doc_id, None)

    async def index_batch(self, documents: Sequence[SearchDocument]) -> list[str]:
        for document in documents:
            self._documents[document.id] = document.model_copy()
        return []

    async def document_ids(self) -> set[str]:
        return set(self._documents)

    async def delete_many(self, doc_ids: Collection[str]) -> int:
        removed = 0
        for doc_id in doc_ids:
            if self._documents.pop(doc_id, None) is not None:
                removed += 1
        return removed

    # ── Search ───────────────────────────────────────────────────────────

    async def query(
        self,
        text: str,
        fields: Sequence[str] = SEARCH_FIELDS,
        limit: int = 20,
    ) -> list[SearchHit]:
        terms = set(_tokens(text))
        if not terms:
            return []

        hits: list[SearchHit] = []
        for document in self._documents.values():
            score = 0.0
            for field in fields:
                value = getattr(document, field, None)
                if value is None:
                    continue
                field_tokens = _tokens(str(value))
                matches = sum(1 for token in field_tokens if token in terms)
                score += matches * _FIELD_BOOST.get(field, 1.0)
            if score > 0:
                hits.append(SearchHit(document=document, score=score))

        hits.sort(key=lambda h: h.score, reverse=True)
        return hits[:limit]

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> AdapterHealth:
        start = time.monotonic()
        count = len(self._documents)
        return AdapterHealth(
            status="healthy",
            latency_ms=int((time.monotonic() - start) * 1000),
            last_check=datetime.now(UTC).isoformat(),
            message=f"Index: {self._index}, documents: {count}",
        )
