"""Structured logging configuration using structlog.

Standard library loggers (``logging.getLogger(__name__)``) are rendered by
structlog's ``ProcessorFormatter``, so context bound with
``structlog.contextvars.bound_contextvars`` (for example the ``article_id``
and ``operation`` of a mirror write) appears on every record logged
inside the block.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from articlesync.config.settings import ObservabilitySettings


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def create_log_handler(settings: ObservabilitySettings | None = None) -> logging.Handler:
    """Build a stdout handler that renders stdlib records through structlog."""
    log_format = getattr(settings, "log_format", "json") if settings else "json"
    renderer = structlog.dev.ConsoleRenderer() if log_format == "console" else structlog.processors.JSONRenderer()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_processors(),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    return handler


def setup_logging(settings: ObservabilitySettings | None = None) -> None:
    """Configure structured logging for ArticleSync.

    Args:
        settings: Observability settings. Uses defaults if None.
    """
    log_level = getattr(settings, "log_level", "info").upper() if settings else "INFO"

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Leave handlers installed by the host process (test runners, uvicorn) in place
    root = logging.getLogger()
    if not root.handlers:
        root.addHandler(create_log_handler(settings))
    root.setLevel(getattr(logging, log_level, logging.INFO))
