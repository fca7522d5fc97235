"""Shared test fixtures and configuration."""

from __future__ import annotations

from collections.abc import AsyncIterator, Collection, Sequence

import httpx
import jwt
import pytest
from fastapi import FastAPI

from articlesync.adapters.base.exceptions import IndexWriteError
from articlesync.adapters.memory.adapter import MemoryIndexAdapter
from articlesync.api.app import create_app
from articlesync.api.deps import set_engine
from articlesync.config.settings import Settings
from articlesync.core.engine import ArticleSyncEngine
from articlesync.models.document import SearchDocument
from articlesync.store.tables import CategoryRecord, UserRecord

JWT_SECRET = "test-secret-0123456789abcdef0123456789"


class FlakyIndexAdapter(MemoryIndexAdapter):
    """Memory index whose writes can be switched off to simulate an outage."""

    def __init__(self, **kwargs: object) -> None:
        super().__init__(**kwargs)
        self.failing = False

    def _check(self) -> None:
        if self.failing:
            raise IndexWriteError("simulated index outage")

    async def upsert(self, document: SearchDocument) -> None:
        self._check()
        await super().upsert(document)

    async def delete(self, doc_id: str) -> None:
        self._check()
        await super().delete(doc_id)

    async def index_batch(self, documents: Sequence[SearchDocument]) -> list[str]:
        self._check()
        return await super().index_batch(documents)

    async def delete_many(self, doc_ids: Collection[str]) -> int:
        self._check()
        return await super().delete_many(doc_ids)


def _make_token(user_id: int = 1, email: str = "alice@example.com", secret: str = JWT_SECRET) -> str:
    return jwt.encode({"userId": user_id, "email": email}, secret, algorithm="HS256")


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance backed by in-memory SQLite and the memory index."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        debug=True,
        database={"url": "sqlite+aiosqlite:///:memory:"},
        index={"backend": "memory"},
        auth={"jwt_secret": JWT_SECRET},
        sync={"reindex_batch_size": 4},
    )


@pytest.fixture
def index() -> FlakyIndexAdapter:
    return FlakyIndexAdapter()


@pytest.fixture
async def engine(settings: Settings, index: FlakyIndexAdapter) -> AsyncIterator[ArticleSyncEngine]:
    """Initialized engine with two users and two categories seeded."""
    engine = ArticleSyncEngine(settings, index=index)
    await engine.initialize()
    async with engine.database.session() as session:
        session.add_all(
            [
                UserRecord(id=1, email="alice@example.com"),
                UserRecord(id=2, email="bob@example.com"),
                CategoryRecord(id=1, name="Tech"),
                CategoryRecord(id=2, name="Science"),
            ]
        )
        await session.commit()
    yield engine
    await engine.shutdown()


@pytest.fixture
def token() -> str:
    """Valid bearer token for user 1."""
    return _make_token()


@pytest.fixture
def app(settings: Settings, engine: ArticleSyncEngine) -> FastAPI:
    app = create_app(settings)
    set_engine(engine)
    yield app
    set_engine(None)


@pytest.fixture
async def http(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    """In-process HTTP client bound to the app."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def make_token():
    """Factory for bearer tokens with a chosen user or signing secret."""
    return _make_token
