"""Tests for the command line entry point."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest

from articlesync.cli import main
from articlesync.config.settings import Settings
from articlesync.models.sync import ReindexResult


@pytest.fixture
def cli_settings() -> Settings:
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        database={"url": "sqlite+aiosqlite:///:memory:"},
        index={"backend": "memory"},
    )


class TestCli:
    def test_command_required(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2

    def test_missing_config_file(self, tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(tmp_path / "missing.yaml"), "reindex"])
        assert exc_info.value.code == 1
        assert "Config file not found" in capsys.readouterr().err

    def test_reindex_prints_json(self, cli_settings: Settings, capsys: pytest.CaptureFixture[str]) -> None:
        with (
            patch("articlesync.api.app.load_settings", return_value=cli_settings),
            patch("articlesync.observability.logging.setup_logging"),
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["reindex"])

        assert exc_info.value.code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["count"] == 0
        assert payload["expected"] == 0
        assert payload["complete"] is True

    def test_incomplete_reindex_exits_1(self, cli_settings: Settings) -> None:
        incomplete = ReindexResult(count=1, expected=2, failed_ids=["2"])
        with (
            patch("articlesync.api.app.load_settings", return_value=cli_settings),
            patch("articlesync.observability.logging.setup_logging"),
            patch("articlesync.cli._run_reindex", new=MagicMock()),
            patch("articlesync.cli.asyncio.run", return_value=incomplete),
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["reindex"])
        assert exc_info.value.code == 1

    def test_serve_runs_uvicorn_factory(self, cli_settings: Settings) -> None:
        with (
            patch("articlesync.api.app.load_settings", return_value=cli_settings),
            patch("articlesync.cli._check_port"),
            patch("uvicorn.run") as run,
        ):
            main(["serve", "--port", "8123"])

        args, kwargs = run.call_args
        assert args == ("articlesync.api.app:create_app",)
        assert kwargs["factory"] is True
        assert kwargs["port"] == 8123
