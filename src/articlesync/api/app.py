"""FastAPI application factory and lifecycle management."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from articlesync import __version__
from articlesync.api.deps import set_engine
from articlesync.api.errors import register_exception_handlers
from articlesync.api.v1.router import router as v1_router
from articlesync.config.settings import Settings
from articlesync.core.engine import ArticleSyncEngine
from articlesync.observability.logging import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "articlesync-config.yaml"


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from *config_path*, or auto-detect ``articlesync-config.yaml``.

    Environment variables override values from the YAML file in both cases.
    """
    if config_path is not None:
        return Settings.from_yaml(config_path)
    yaml_path = Path(DEFAULT_CONFIG_FILE)
    if yaml_path.exists():
        logger.info("Loading configuration from %s", yaml_path)
        return Settings.from_yaml(yaml_path)
    return Settings()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from the environment
            and ``articlesync-config.yaml`` when present.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = load_settings()

    setup_logging(settings.observability)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Manage application lifecycle (startup/shutdown)."""
        logger.info("Starting ArticleSync v%s", __version__)

        engine = ArticleSyncEngine(settings)
        await engine.initialize()
        set_engine(engine)

        # Store settings in app state
        app.state.settings = settings
        app.state.engine = engine

        logger.info("ArticleSync is ready to serve requests on port %d", settings.server.port)
        yield

        # Shutdown
        logger.info("Shutting down ArticleSync...")
        await engine.shutdown()
        set_engine(None)
        logger.info("ArticleSync shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Article service backed by a relational primary store, "
            "with a search index mirror kept in step by dual writes and repaired by reindex."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Warning", "X-Mirror-Status"],
    )

    register_exception_handlers(app)

    # Register API routers
    app.include_router(v1_router, prefix="/v1")

    return app
