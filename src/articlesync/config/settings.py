"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. Environment variables (ARTICLESYNC_ prefix)
  2. YAML config file (if specified)
  3. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class ServerSettings(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=3000, description="Server port")
    workers: int = Field(default=1, description="Number of worker processes")
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")


class DatabaseSettings(BaseModel):
    """Primary store configuration."""

    url: str = Field(
        default="sqlite+aiosqlite:///./articlesync.db",
        description="SQLAlchemy async database URL",
    )
    echo: bool = Field(default=False, description="Log emitted SQL statements")
    pool_size: int = Field(default=10, description="Connection pool size (server databases only)")
    max_overflow: int = Field(default=20, description="Extra connections allowed beyond pool_size")
    create_tables: bool = Field(default=True, description="Create missing tables on startup")


class IndexSettings(BaseModel):
    """Search index (mirror) configuration."""

    backend: str = Field(default="memory", description="Index backend: opensearch, meilisearch, memory")
    hosts: list[str] = Field(default_factory=list, description="Backend host URLs")
    index: str = Field(default="articles", description="Index name holding article documents")
    username: str | None = Field(default=None, description="Authentication username")
    password: str | None = Field(default=None, description="Authentication password")
    api_key: str | None = Field(default=None, description="API key authentication")
    verify_certs: bool = Field(default=True, description="Verify TLS certificates")
    wait_for_visibility: bool = Field(
        default=True,
        description="Block every write until it is visible to search",
    )
    timeout: float = Field(default=30.0, gt=0, description="Backend request timeout in seconds")
    extra: dict[str, Any] = Field(default_factory=dict, description="Backend-specific options")

    @field_validator("hosts", mode="before")
    @classmethod
    def _parse_hosts(cls, v: Any) -> list[str]:
        """Parse hosts from JSON string (env var) or list."""
        if isinstance(v, str):
            import json

            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return [str(h) for h in parsed]
            except (json.JSONDecodeError, TypeError):
                pass
            # Single host as plain string
            return [v] if v else []
        return list(v)


class SyncSettings(BaseModel):
    """Synchronization behavior."""

    reindex_batch_size: int = Field(default=500, ge=1, description="Articles read per reindex batch")


class PaginationSettings(BaseModel):
    """Listing defaults."""

    default_limit: int = Field(default=10, ge=1, description="Page size when none is requested")
    max_limit: int = Field(default=100, ge=1, description="Largest accepted page size")
    search_limit: int = Field(default=20, ge=1, description="Maximum search hits returned")


MIN_SECRET_LENGTH = 32


class AuthSettings(BaseModel):
    """Bearer credential verification.

    There is no default secret. Until one is configured every bearer
    token is rejected.
    """

    jwt_secret: str | None = Field(
        default=None,
        description=f"Shared secret (or public key) used to verify JWTs, at least {MIN_SECRET_LENGTH} characters",
    )
    jwt_algorithms: list[str] = Field(default=["HS256"], description="Accepted JWT algorithms")

    @field_validator("jwt_secret")
    @classmethod
    def _validate_secret(cls, v: str | None) -> str | None:
        if not v:
            return None
        if len(v) < MIN_SECRET_LENGTH:
            raise ValueError(f"JWT secret must be at least {MIN_SECRET_LENGTH} characters long")
        return v


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the ARTICLESYNC_ prefix.
    Nested settings use double underscores: ARTICLESYNC_INDEX__BACKEND=opensearch

    Example:
        ARTICLESYNC_DATABASE__URL=postgresql+asyncpg://app:secret@db/articles
        ARTICLESYNC_INDEX__HOSTS='["https://search:9200"]'
        ARTICLESYNC_AUTH__JWT_SECRET=...
    """

    model_config = {
        "env_prefix": "ARTICLESYNC_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    app_name: str = Field(default="ArticleSync", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    server: ServerSettings = Field(default_factory=ServerSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    index: IndexSettings = Field(default_factory=IndexSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    pagination: PaginationSettings = Field(default_factory=PaginationSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Values from the YAML file are used as defaults; environment variables
        still take precedence.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
