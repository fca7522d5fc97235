"""Admin endpoints — Mirror repair."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from articlesync.api.deps import get_engine, require_principal
from articlesync.auth.verifier import Principal
from articlesync.core.engine import ArticleSyncEngine
from articlesync.models.sync import ReindexResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/reindex",
    response_model=ReindexResult,
    summary="Rebuild Search Index",
    description=(
        "Rebuild the search index from the primary store. Safe to run while "
        "the service is taking writes, and safe to repeat. `complete` is false "
        "when `count < expected` or some ids failed; the run is still answered "
        "with 200 so the caller can inspect `failed_ids`."
    ),
    responses={
        502: {"description": "Search index unavailable"},
        503: {"description": "Primary store unavailable"},
    },
)
async def reindex(
    principal: Principal = Depends(require_principal),
    engine: ArticleSyncEngine = Depends(get_engine),
) -> ReindexResult:
    logger.info("Reindex requested by user %d", principal.user_id)
    return await engine.sync.reindex()
