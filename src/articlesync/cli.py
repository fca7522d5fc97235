"""CLI entry point for ArticleSync.

Subcommands:
  serve    Run the HTTP API with uvicorn
  reindex  Rebuild the search index from the primary store once and exit
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from articlesync.config.settings import Settings
    from articlesync.models.sync import ReindexResult


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    settings = _load_settings(args.config)
    if args.log_level:
        settings.observability.log_level = args.log_level

    if args.command == "reindex":
        sys.exit(_reindex(settings))
    _serve(settings, args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="articlesync",
        description="ArticleSync — Articles in a relational store, mirrored into a search index",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"ArticleSync {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True

    serve = subparsers.add_parser("serve", help="Run the HTTP API server")
    serve.add_argument("--host", type=str, default=None, help="Server bind address (overrides config)")
    serve.add_argument("--port", "-p", type=int, default=None, help="Server port (overrides config)")
    serve.add_argument("--workers", "-w", type=int, default=None, help="Number of worker processes")
    serve.add_argument("--reload", action="store_true", help="Enable auto-reload for development")

    subparsers.add_parser(
        "reindex",
        help="Rebuild the search index from the primary store and print the result as JSON",
    )
    return parser


def _load_settings(config: str | None) -> Settings:
    from articlesync.api.app import load_settings

    if config:
        config_path = Path(config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            sys.exit(1)
        return load_settings(config_path)
    return load_settings()


# ── serve ────────────────────────────────────────────────────────────────


def _serve(settings: Settings, args: argparse.Namespace) -> None:
    # Apply CLI overrides
    if args.host:
        settings.server.host = args.host
    if args.port:
        settings.server.port = args.port
    if args.workers:
        settings.server.workers = args.workers

    _check_port(settings.server.host, settings.server.port)

    import uvicorn

    uvicorn.run(
        "articlesync.api.app:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        workers=settings.server.workers if not args.reload else 1,
        reload=args.reload,
        log_level=settings.observability.log_level.lower(),
    )


def _check_port(host: str, port: int) -> None:
    """Exit with a message if *port* is already taken."""
    import socket

    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.bind((host if host != "0.0.0.0" else "127.0.0.1", port))
    except OSError:
        print(f"Error: Port {port} is already in use. Run 'lsof -i :{port}' to find the process.", file=sys.stderr)
        sys.exit(1)
    finally:
        sock.close()


# ── reindex ──────────────────────────────────────────────────────────────


def _reindex(settings: Settings) -> int:
    """Run one reindex. Returns the process exit code (1 when incomplete or failed)."""
    from articlesync.errors import ArticleSyncError
    from articlesync.observability.logging import setup_logging

    setup_logging(settings.observability)
    try:
        result = asyncio.run(_run_reindex(settings))
    except ArticleSyncError as e:
        print(f"Error: reindex failed: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result.model_dump(), indent=2))
    return 0 if result.complete else 1


async def _run_reindex(settings: Settings) -> ReindexResult:
    from articlesync.core.engine import ArticleSyncEngine

    engine = ArticleSyncEngine(settings)
    await engine.initialize()
    try:
        return await engine.sync.reindex()
    finally:
        await engine.shutdown()


def _get_version() -> str:
    """Get the package version."""
    try:
        from articlesync import __version__

        return __version__
    except ImportError:
        return "unknown"


if __name__ == "__main__":
    main()
