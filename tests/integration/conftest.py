"""Integration test fixtures — Docker-based search backends.

Expects backends to be running via:
    docker compose -f deployments/docker/docker-compose.test.yml up -d

Each backend fixture skips its tests when the service does not answer.
Hosts can be overridden with ARTICLESYNC_TEST_OPENSEARCH and
ARTICLESYNC_TEST_MEILISEARCH.
"""

from __future__ import annotations

import os
import time

import httpx
import pytest

from articlesync.models.document import SearchDocument

TEST_INDEX = "articlesync-test"
MEILI_MASTER_KEY = "test-master-key"

MOCK_DOCUMENTS: list[SearchDocument] = [
    SearchDocument(
        id="1",
        title="Go basics",
        content="Goroutines and channels make concurrent programs simple to write.",
        category_id=1,
        category_name="Tech",
        author_id=1,
    ),
    SearchDocument(
        id="2",
        title="Rust ownership",
        content="Borrowing and lifetimes let the compiler reject use-after-free bugs.",
        category_id=1,
        category_name="Tech",
        author_id=1,
    ),
    SearchDocument(
        id="3",
        title="Photosynthesis explained",
        content="Chlorophyll absorbs light to turn carbon dioxide and water into sugar.",
        category_id=2,
        category_name="Science",
        author_id=2,
    ),
]


def _wait_for_service(url: str, timeout: float = 30.0, **kwargs: object) -> bool:
    """Block until *url* returns HTTP 200, or timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            r = httpx.get(url, timeout=5, **kwargs)  # type: ignore[arg-type]
            if r.status_code == 200:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(2)
    return False


# ── OpenSearch ──────────────────────────────────────────────────


@pytest.fixture(scope="session")
def opensearch_ready() -> str:
    """Ensure OpenSearch is running."""
    host = os.environ.get("ARTICLESYNC_TEST_OPENSEARCH", "http://localhost:9201")
    if not _wait_for_service(host):
        pytest.skip(f"OpenSearch not available at {host}")
    httpx.delete(f"{host}/{TEST_INDEX}", params={"ignore_unavailable": "true"}, timeout=30)
    return host


# ── MeiliSearch ─────────────────────────────────────────────────


@pytest.fixture(scope="session")
def meilisearch_ready() -> str:
    """Ensure MeiliSearch is running."""
    host = os.environ.get("ARTICLESYNC_TEST_MEILISEARCH", "http://localhost:7700")
    if not _wait_for_service(f"{host}/health"):
        pytest.skip(f"MeiliSearch not available at {host}")
    httpx.delete(
        f"{host}/indexes/{TEST_INDEX}",
        headers={"Authorization": f"Bearer {MEILI_MASTER_KEY}"},
        timeout=30,
    )
    return host


@pytest.fixture
def documents() -> list[SearchDocument]:
    """Three article documents across two categories."""
    return [doc.model_copy() for doc in MOCK_DOCUMENTS]
