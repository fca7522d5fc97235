"""Error taxonomy shared by the store, index, core and API layers."""


class ArticleSyncError(Exception):
    """Base exception for all ArticleSync errors."""


class ValidationError(ArticleSyncError):
    """Raised when input is missing or malformed."""


class NotFoundError(ArticleSyncError):
    """Raised when a requested record does not exist."""


class Unauthorized(ArticleSyncError):
    """Raised when a request carries no credential."""


class Forbidden(ArticleSyncError):
    """Raised when a credential is present but rejected."""


class StoreError(ArticleSyncError):
    """Raised when the primary store is unavailable or rejects an operation."""


class IndexError(ArticleSyncError):  # noqa: A001
    """Raised when the search index is unavailable or rejects an operation."""
