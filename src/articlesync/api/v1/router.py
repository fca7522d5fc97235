"""API v1 Router — Articles, categories, admin and health endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from articlesync.api.v1.endpoints.admin import router as admin_router
from articlesync.api.v1.endpoints.articles import router as articles_router
from articlesync.api.v1.endpoints.categories import router as categories_router
from articlesync.api.v1.endpoints.health import router as health_router

router = APIRouter()
router.include_router(articles_router)
router.include_router(categories_router)
router.include_router(admin_router)
router.include_router(health_router)
