"""Adapter-specific exceptions.

All of them are :class:`articlesync.errors.IndexError` subclasses, so the
core can treat any backend failure as a mirror failure.
"""

from articlesync.errors import IndexError as _IndexError


class AdapterError(_IndexError):
    """Base exception for adapter errors."""


class ConnectionError(AdapterError):
    """Raised when the adapter cannot connect to the search backend."""


class QueryError(AdapterError):
    """Raised when a search query fails."""


class IndexWriteError(AdapterError):
    """Raised when the backend rejects a document write or delete."""


class ConfigurationError(AdapterError):
    """Raised when adapter configuration is invalid."""
