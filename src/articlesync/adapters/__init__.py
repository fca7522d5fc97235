"""Index adapter layer — Pluggable connectors for the article search mirror.

Built-in adapters:
  - opensearch: OpenSearch v2+ (BM25 full-text search)
  - meilisearch: MeiliSearch (instant, typo-tolerant search)
  - memory: In-process dict (local development and tests)

Implement ``IndexAdapter`` to connect your own search backend.
"""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING, Any

from articlesync.adapters.base.exceptions import ConfigurationError

if TYPE_CHECKING:
    from articlesync.adapters.base.adapter import IndexAdapter
    from articlesync.config.settings import IndexSettings

logger = logging.getLogger(__name__)

# Maps adapter names to (module_path, class_name) for lazy import
_ADAPTER_MAP: dict[str, tuple[str, str]] = {
    "opensearch": ("articlesync.adapters.opensearch.adapter", "OpenSearchIndexAdapter"),
    "meilisearch": ("articlesync.adapters.meilisearch.adapter", "MeiliSearchIndexAdapter"),
    "memory": ("articlesync.adapters.memory.adapter", "MemoryIndexAdapter"),
}

# Backends addressed by a single base URL rather than a host list
_URL_ADAPTERS = {"meilisearch"}


def available_adapters() -> list[str]:
    """Names accepted by ``IndexSettings.backend``."""
    return list(_ADAPTER_MAP)


def create_adapter(settings: IndexSettings) -> IndexAdapter:
    """Build the adapter named by ``settings.backend`` (not yet initialized).

    Raises:
        ConfigurationError: If the backend name is unknown or its module cannot be imported.
    """
    entry = _ADAPTER_MAP.get(settings.backend)
    if entry is None:
        raise ConfigurationError(
            f"Unknown index backend '{settings.backend}'. Available backends: {available_adapters()}"
        )

    module_path, class_name = entry
    try:
        module = importlib.import_module(module_path)
        adapter_class = getattr(module, class_name)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Failed to import index backend '{settings.backend}': {e}") from e

    # Build constructor kwargs from IndexSettings
    kwargs: dict[str, Any] = {"index": settings.index}
    if settings.backend != "memory":
        kwargs["wait_for_visibility"] = settings.wait_for_visibility
        kwargs["timeout"] = settings.timeout
        if settings.hosts:
            if settings.backend in _URL_ADAPTERS:
                kwargs["base_url"] = settings.hosts[0]
            else:
                kwargs["hosts"] = settings.hosts
        if settings.backend == "meilisearch" and settings.api_key:
            kwargs["api_key"] = settings.api_key
        if settings.backend == "opensearch":
            kwargs["verify_certs"] = settings.verify_certs
            if settings.username:
                kwargs["username"] = settings.username
            if settings.password:
                kwargs["password"] = settings.password
    # Pass through any extra config
    kwargs.update(settings.extra)

    logger.info("Using index backend '%s' (index: %s)", settings.backend, settings.index)
    return adapter_class(**kwargs)
