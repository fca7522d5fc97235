"""Base adapter interface — Abstract classes for search index connectors."""

from articlesync.adapters.base.adapter import AdapterHealth, DocumentBatches, IndexAdapter, LivenessCheck

__all__ = ["AdapterHealth", "DocumentBatches", "IndexAdapter", "LivenessCheck"]
