"""Projection builder — Maps a canonical article to its search document.

Create, update and reindex all go through :func:`build_search_document`,
so the document shape is defined in exactly one place.
"""

from __future__ import annotations

from articlesync.errors import ValidationError
from articlesync.models.article import ArticleRead
from articlesync.models.document import SearchDocument


def build_search_document(article: ArticleRead, category_name: str | None) -> SearchDocument:
    """Build the search document for *article*.

    Args:
        article: Canonical article.
        category_name: Name of the article's category, resolved by the caller.

    Returns:
        The denormalized document keyed by the string form of ``article.id``.

    Raises:
        ValidationError: If the category name could not be resolved.
    """
    if not category_name:
        raise ValidationError(f"Category name for article {article.id} could not be resolved")

    return SearchDocument(
        id=str(article.id),
        title=article.title,
        content=article.content,
        category_id=article.category_id,
        category_name=category_name,
        author_id=article.author_id,
    )
