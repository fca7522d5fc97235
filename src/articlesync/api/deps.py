"""API dependencies — Dependency injection for FastAPI endpoints."""

from __future__ import annotations

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from articlesync.auth.verifier import Principal
from articlesync.core.engine import ArticleSyncEngine

# Global engine instance (set during application lifespan)
_engine: ArticleSyncEngine | None = None

# auto_error is off so a missing header reaches the verifier and maps to 401
_bearer = HTTPBearer(auto_error=False)


def set_engine(engine: ArticleSyncEngine | None) -> None:
    """Set the global engine instance (called during app lifespan)."""
    global _engine
    _engine = engine


def get_engine() -> ArticleSyncEngine:
    """Get the global ArticleSync engine instance.

    Returns:
        The initialized ArticleSyncEngine.

    Raises:
        RuntimeError: If the engine is not initialized.
    """
    if _engine is None:
        raise RuntimeError("ArticleSync engine not initialized. Is the server running?")
    return _engine


def require_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    engine: ArticleSyncEngine = Depends(get_engine),
) -> Principal:
    """Verify the bearer credential of a write request.

    Raises:
        Unauthorized: If the Authorization header is missing.
        Forbidden: If the token is invalid or expired.
    """
    return engine.verifier.verify(credentials.credentials if credentials else None)
