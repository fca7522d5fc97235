"""Tests for the projection builder."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from articlesync.core.projection import build_search_document
from articlesync.errors import ValidationError
from articlesync.models.article import ArticleRead


@pytest.fixture
def article() -> ArticleRead:
    return ArticleRead(
        id=42,
        title="Rust ownership",
        content="Borrowing and lifetimes",
        category_id=3,
        author_id=7,
        created_at=datetime(2024, 5, 1, tzinfo=UTC),
    )


class TestBuildSearchDocument:
    def test_maps_every_field(self, article: ArticleRead) -> None:
        doc = build_search_document(article, "Tech")
        assert doc.id == "42"
        assert doc.title == "Rust ownership"
        assert doc.content == "Borrowing and lifetimes"
        assert doc.category_id == 3
        assert doc.category_name == "Tech"
        assert doc.author_id == 7

    def test_document_shape(self, article: ArticleRead) -> None:
        doc = build_search_document(article, "Tech")
        assert set(doc.model_dump()) == {"id", "title", "content", "category_id", "category_name", "author_id"}

    @pytest.mark.parametrize("name", [None, ""])
    def test_unresolved_category_raises(self, article: ArticleRead, name: str | None) -> None:
        with pytest.raises(ValidationError, match="article 42"):
            build_search_document(article, name)

    def test_is_pure(self, article: ArticleRead) -> None:
        assert build_search_document(article, "Tech") == build_search_document(article, "Tech")
