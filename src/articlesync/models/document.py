"""Search document model — The projection of an article stored in the index."""

from __future__ import annotations

from pydantic import BaseModel, Field

SEARCH_FIELDS: tuple[str, ...] = ("title", "content", "category_name")
"""Fields matched by free-text search."""


class SearchDocument(BaseModel):
    """Denormalized article document held by the search index.

    ``id`` is the string form of the canonical article identifier, which
    is the only link between a document and its source record.
    """

    id: str = Field(description="String form of the article identifier")
    title: str
    content: str
    category_id: int
    category_name: str = Field(description="Category name, flattened at write time")
    author_id: int


class SearchHit(BaseModel):
    """A single ranked search result."""

    document: SearchDocument
    score: float = Field(default=0.0, description="Relevance score from the search backend")
