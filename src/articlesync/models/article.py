"""Article and category models — Request payloads and canonical read views.

Article payloads use camelCase field names on the wire (``categoryId``,
``authorId``, ``createdAt``, ``totalPages``). Requests may also use the
snake_case attribute names.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_WIRE = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ArticleCreate(BaseModel):
    """Fields accepted when creating an article."""

    model_config = _WIRE

    title: str = Field(min_length=1, description="Article title")
    content: str = Field(min_length=1, description="Article body")
    category_id: int = Field(ge=1, description="Identifier of an existing category")


class ArticleUpdate(BaseModel):
    """Fields accepted when updating an article. Omitted fields are left unchanged."""

    model_config = _WIRE

    title: str | None = Field(default=None, min_length=1, description="New title")
    content: str | None = Field(default=None, min_length=1, description="New body")
    category_id: int | None = Field(default=None, ge=1, description="New category identifier")

    def changes(self) -> dict[str, object]:
        """Return only the fields that were explicitly set to a value."""
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


class AuthorSummary(BaseModel):
    """Public view of an article's author."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str


class CategoryCreate(BaseModel):
    """Fields accepted when creating a category."""

    name: str = Field(min_length=1, max_length=255, description="Category name")


class CategoryRead(BaseModel):
    """Canonical category record."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class ArticleRead(BaseModel):
    """Canonical article record as stored in the primary store."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    title: str
    content: str
    category_id: int
    author_id: int
    created_at: datetime
    author: AuthorSummary | None = Field(default=None, description="Joined author summary")
    category: CategoryRead | None = Field(default=None, description="Joined category")


class ArticlePage(BaseModel):
    """One page of articles, newest first."""

    model_config = _WIRE

    page: int = Field(description="1-based page number")
    limit: int = Field(description="Page size")
    total: int = Field(description="Total number of articles")
    total_pages: int = Field(description="Number of pages at this page size")
    articles: list[ArticleRead] = Field(default_factory=list)
