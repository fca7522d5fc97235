"""Tests for structured logging setup."""

from __future__ import annotations

import json
import logging

import structlog

from articlesync.config.settings import ObservabilitySettings
from articlesync.observability.logging import create_log_handler, setup_logging


def _record(msg: str, *args: object) -> logging.LogRecord:
    return logging.LogRecord("articlesync.core.sync", logging.WARNING, __file__, 1, msg, args, None)


class TestLogHandler:
    def test_json_includes_bound_context(self) -> None:
        handler = create_log_handler(ObservabilitySettings(log_format="json"))

        with structlog.contextvars.bound_contextvars(article_id=7, operation="update"):
            line = handler.format(_record("Search mirror degraded: %s", "index offline"))

        payload = json.loads(line)
        assert payload["event"] == "Search mirror degraded: index offline"
        assert payload["article_id"] == 7
        assert payload["operation"] == "update"
        assert payload["level"] == "warning"
        assert payload["logger"] == "articlesync.core.sync"
        assert "timestamp" in payload

    def test_context_does_not_leak(self) -> None:
        handler = create_log_handler(ObservabilitySettings(log_format="json"))

        with structlog.contextvars.bound_contextvars(article_id=7):
            pass
        payload = json.loads(handler.format(_record("done")))

        assert "article_id" not in payload

    def test_console_format(self) -> None:
        handler = create_log_handler(ObservabilitySettings(log_format="console"))
        with structlog.contextvars.bound_contextvars(article_id=3):
            line = handler.format(_record("hello"))
        assert "hello" in line
        assert "article_id" in line


class TestSetupLogging:
    def test_keeps_existing_handlers(self) -> None:
        root = logging.getLogger()
        before = list(root.handlers)
        setup_logging(ObservabilitySettings(log_level="debug"))
        try:
            assert root.handlers == before
            assert root.level == logging.DEBUG
        finally:
            setup_logging(ObservabilitySettings())
