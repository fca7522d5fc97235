"""ArticleSync engine — Wires the primary store, search index and controllers.

The engine owns every long-lived resource:
  1. Database manager and the article/category repositories
  2. Index adapter holding the search mirror
  3. Synchronization controller (writes and reindex)
  4. Query router (reads and search)
  5. Credential verifier for the write endpoints
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from articlesync.adapters import create_adapter
from articlesync.adapters.base.adapter import AdapterHealth, IndexAdapter
from articlesync.auth.verifier import CredentialVerifier, JWTVerifier
from articlesync.core.query import QueryRouter
from articlesync.core.sync import SyncController
from articlesync.errors import IndexError as IndexBackendError
from articlesync.store.database import DatabaseManager
from articlesync.store.repository import ArticleStore, CategoryStore

if TYPE_CHECKING:
    from articlesync.config.settings import Settings

logger = logging.getLogger(__name__)


class ArticleSyncEngine:
    """Core orchestrator for ArticleSync.

    Attributes:
        settings: Application configuration.
        database: Primary store connection manager.
        index: Search index adapter.
        articles: Canonical article repository.
        categories: Category repository.
        sync: Write path keeping the mirror in step.
        queries: Read path.
        verifier: Bearer credential verifier.
    """

    def __init__(
        self,
        settings: Settings,
        index: IndexAdapter | None = None,
        verifier: CredentialVerifier | None = None,
    ) -> None:
        self.settings = settings
        self.database = DatabaseManager(settings.database)
        self.index = index if index is not None else create_adapter(settings.index)
        self.articles = ArticleStore(self.database)
        self.categories = CategoryStore(self.database)
        self.verifier = verifier if verifier is not None else JWTVerifier(settings.auth)
        self.sync = SyncController(
            self.articles,
            self.categories,
            self.index,
            batch_size=settings.sync.reindex_batch_size,
        )
        self.queries = QueryRouter(self.articles, self.index, settings.pagination)

    async def initialize(self) -> None:
        """Connect the primary store, then the search index.

        A primary store failure aborts startup. An unreachable search index
        does not: canonical reads keep working and mirror writes report a
        degraded status until the index is back and a reindex has run.
        """
        await self.database.initialize()
        try:
            await self.index.initialize()
        except IndexBackendError:
            logger.error(
                "Search index '%s' unavailable at startup; search is degraded until it recovers",
                self.index.name,
                exc_info=True,
            )
        logger.info("ArticleSync engine initialized (index backend: %s)", self.index.name)

    async def shutdown(self) -> None:
        """Gracefully shut down all components."""
        await self.index.shutdown()
        await self.database.shutdown()
        logger.info("ArticleSync engine shut down")

    async def health(self) -> dict[str, AdapterHealth]:
        """Health of both backing stores, keyed ``primary_store`` and ``search_index``."""
        return {
            "primary_store": await self.database.health_check(),
            "search_index": await self.index.health_check(),
        }
