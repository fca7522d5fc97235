"""Category endpoints — Create and look up article categories."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from articlesync.api.deps import get_engine, require_principal
from articlesync.auth.verifier import Principal
from articlesync.core.engine import ArticleSyncEngine
from articlesync.models.article import CategoryCreate, CategoryRead

router = APIRouter(prefix="/categories", tags=["categories"])


@router.post("", response_model=CategoryRead, status_code=201, summary="Create Category")
async def create_category(
    body: CategoryCreate,
    principal: Principal = Depends(require_principal),
    engine: ArticleSyncEngine = Depends(get_engine),
) -> CategoryRead:
    return await engine.categories.create(body)


@router.get("", response_model=list[CategoryRead], summary="List Categories")
async def list_categories(
    engine: ArticleSyncEngine = Depends(get_engine),
) -> list[CategoryRead]:
    return await engine.categories.list_all()


@router.get(
    "/{category_id}",
    response_model=CategoryRead,
    summary="Get Category",
    responses={404: {"description": "Category not found"}},
)
async def get_category(
    category_id: int,
    engine: ArticleSyncEngine = Depends(get_engine),
) -> CategoryRead:
    return await engine.categories.get(category_id)
