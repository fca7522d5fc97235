"""Health check endpoints — Service and backing store health monitoring."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from articlesync import __version__
from articlesync.adapters.base.adapter import AdapterHealth
from articlesync.api.deps import get_engine
from articlesync.core.engine import ArticleSyncEngine

router = APIRouter(tags=["health"])


# ── Response models ──────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    """System health check response."""

    status: str = Field(description="Health status (e.g. 'healthy')")
    version: str = Field(description="ArticleSync server version")
    service: str = Field(description="Service name ('articlesync')")
    index_backend: str = Field(description="Name of the configured search index backend")


class BackendHealthResponse(BaseModel):
    """Health of the primary store and the search index.

    Keys are ``primary_store`` and ``search_index``.
    """

    backends: dict[str, AdapterHealth] = Field(description="Map of backend role to its health status")


# ── Endpoints ────────────────────────────────────────────────────────────


@router.get("/health", response_model=HealthResponse, summary="System Health Check")
async def health_check(
    engine: ArticleSyncEngine = Depends(get_engine),
) -> HealthResponse:
    """Basic liveness check. Does not contact the backends."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        service="articlesync",
        index_backend=engine.index.name,
    )


@router.get(
    "/health/backends",
    response_model=BackendHealthResponse,
    summary="Backend Health Check",
    description="Ping the primary store and the search index and report latency and status for each.",
)
async def backend_health(
    engine: ArticleSyncEngine = Depends(get_engine),
) -> BackendHealthResponse:
    return BackendHealthResponse(backends=await engine.health())
