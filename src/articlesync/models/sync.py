"""Synchronization outcome models — Results of mutations and reindex runs."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, computed_field

from articlesync.models.article import ArticleRead


class MirrorStatus(str, Enum):
    """Whether the search index accepted the write that followed a canonical change."""

    SYNCED = "synced"
    DEGRADED = "degraded"


class MutationResult(BaseModel):
    """Outcome of a create, update or delete.

    The canonical change always succeeded when this is returned;
    ``mirror_status`` reports whether the search index followed.
    """

    article: ArticleRead | None = Field(default=None, description="Article after the change (None for deletes)")
    article_id: int = Field(description="Identifier of the mutated article")
    mirror_status: MirrorStatus = Field(default=MirrorStatus.SYNCED)
    warning: str | None = Field(default=None, description="Degraded-mirror message, if any")

    @property
    def degraded(self) -> bool:
        return self.mirror_status is MirrorStatus.DEGRADED

    def require_article(self) -> ArticleRead:
        """Return the article after a create or update.

        Raises:
            RuntimeError: If the result carries no article (a delete).
        """
        if self.article is None:
            raise RuntimeError(f"Mutation of article {self.article_id} carries no article")
        return self.article


class BulkReplaceResult(BaseModel):
    """What an index backend did during a bulk replace."""

    indexed: int = Field(default=0, description="Documents written successfully")
    failed_ids: list[str] = Field(default_factory=list, description="Document ids the backend rejected")
    removed: int = Field(default=0, description="Stale documents deleted")


class ReindexResult(BaseModel):
    """Summary of a full mirror rebuild."""

    count: int = Field(description="Documents rebuilt in the index")
    expected: int = Field(description="Articles read from the primary store")
    failed_ids: list[str] = Field(default_factory=list, description="Article ids that could not be indexed")
    removed: int = Field(default=0, description="Stale documents removed from the index")
    took_ms: int = Field(default=0, description="Wall-clock duration in ms")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def complete(self) -> bool:
        return self.count == self.expected and not self.failed_ids
