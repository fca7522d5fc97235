"""Article endpoints — CRUD on the primary store plus full-text search.

Writes require a bearer token. Every write answers with an
``X-Mirror-Status`` header (``synced`` or ``degraded``); a degraded
mirror also adds an HTTP ``Warning`` header while the status code stays 2xx.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field

from articlesync.api.deps import get_engine, require_principal
from articlesync.auth.verifier import Principal
from articlesync.core.engine import ArticleSyncEngine
from articlesync.models.article import ArticleCreate, ArticlePage, ArticleRead, ArticleUpdate
from articlesync.models.document import SearchHit
from articlesync.models.sync import MirrorStatus, MutationResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/articles", tags=["articles"])


# ── Response models ──────────────────────────────────────────────────────


class DeleteResponse(BaseModel):
    """Acknowledgement of a deleted article."""

    message: str = Field(default="Article deleted")
    id: int = Field(description="Identifier of the deleted article")
    mirror_status: MirrorStatus = Field(description="Whether the search index followed the delete")


class SearchResponse(BaseModel):
    """Ranked search hits, best match first."""

    query: str = Field(description="The query text as received")
    total: int = Field(description="Number of hits returned")
    hits: list[SearchHit] = Field(default_factory=list)


def _apply_mirror_headers(response: Response, result: MutationResult) -> None:
    response.headers["X-Mirror-Status"] = result.mirror_status.value
    if result.degraded and result.warning:
        response.headers["Warning"] = f'199 articlesync "{result.warning}"'


# ── Endpoints ────────────────────────────────────────────────────────────


@router.post(
    "",
    response_model=ArticleRead,
    status_code=201,
    summary="Create Article",
    responses={
        401: {"description": "Missing bearer token"},
        403: {"description": "Invalid or expired bearer token"},
        422: {"description": "Missing field or unknown category"},
        503: {"description": "Primary store unavailable"},
    },
)
async def create_article(
    body: ArticleCreate,
    response: Response,
    principal: Principal = Depends(require_principal),
    engine: ArticleSyncEngine = Depends(get_engine),
) -> ArticleRead:
    """Create an article authored by the token's user, then mirror it."""
    result = await engine.sync.create(body, author_id=principal.user_id)
    _apply_mirror_headers(response, result)
    return result.require_article()


@router.get(
    "",
    response_model=ArticlePage,
    summary="List Articles",
    description="Newest first. Pages past the end return an empty `articles` list.",
)
async def list_articles(
    page: int | None = Query(default=None, description="1-based page number"),
    limit: int | None = Query(default=None, description="Page size"),
    engine: ArticleSyncEngine = Depends(get_engine),
) -> ArticlePage:
    return await engine.queries.list_articles(page, limit)


@router.get(
    "/search",
    response_model=SearchResponse,
    summary="Search Articles",
    description="Full-text search over title, content and category name, served by the search index.",
    responses={502: {"description": "Search index unavailable"}},
)
async def search_articles(
    q: str = Query(default="", description="Search text"),
    limit: int | None = Query(default=None, description="Maximum number of hits"),
    engine: ArticleSyncEngine = Depends(get_engine),
) -> SearchResponse:
    hits = await engine.queries.search(q, limit)
    return SearchResponse(query=q, total=len(hits), hits=hits)


@router.get(
    "/{article_id}",
    response_model=ArticleRead,
    summary="Get Article",
    responses={404: {"description": "Article not found"}},
)
async def get_article(
    article_id: int,
    engine: ArticleSyncEngine = Depends(get_engine),
) -> ArticleRead:
    return await engine.queries.get_article(article_id)


@router.put(
    "/{article_id}",
    response_model=ArticleRead,
    summary="Update Article",
    responses={404: {"description": "Article not found"}},
)
async def update_article(
    article_id: int,
    body: ArticleUpdate,
    response: Response,
    principal: Principal = Depends(require_principal),
    engine: ArticleSyncEngine = Depends(get_engine),
) -> ArticleRead:
    """Apply a partial update; omitted fields keep their values."""
    result = await engine.sync.update(article_id, body)
    _apply_mirror_headers(response, result)
    logger.debug("Article %d updated by user %d", article_id, principal.user_id)
    return result.require_article()


@router.delete(
    "/{article_id}",
    response_model=DeleteResponse,
    summary="Delete Article",
    responses={404: {"description": "Article not found"}},
)
async def delete_article(
    article_id: int,
    response: Response,
    principal: Principal = Depends(require_principal),
    engine: ArticleSyncEngine = Depends(get_engine),
) -> DeleteResponse:
    result = await engine.sync.delete(article_id)
    _apply_mirror_headers(response, result)
    logger.debug("Article %d deleted by user %d", article_id, principal.user_id)
    return DeleteResponse(id=article_id, mirror_status=result.mirror_status)
