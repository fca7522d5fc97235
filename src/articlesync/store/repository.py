"""Repositories over the primary store.

Every method opens its own session, commits on success and converts
SQLAlchemy failures into :class:`~articlesync.errors.StoreError`. Records
leave this module as pydantic models with author and category joined, so
callers never touch a detached ORM object.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Collection, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from articlesync.errors import NotFoundError, StoreError, ValidationError
from articlesync.models.article import ArticleCreate, ArticleRead, CategoryCreate, CategoryRead
from articlesync.store.database import DatabaseManager
from articlesync.store.tables import ArticleRecord, CategoryRecord

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset({"title", "content", "category_id"})


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    """Translate SQLAlchemy exceptions raised inside the block into StoreError."""
    try:
        yield
    except IntegrityError as e:
        logger.error("Integrity error during %s: %s", operation, e.orig)
        raise StoreError(f"Primary store rejected {operation}: {e.orig}") from e
    except SQLAlchemyError as e:
        logger.error("Primary store failure during %s: %s", operation, e)
        raise StoreError(f"Primary store failed during {operation}: {e}") from e


def _joined_select() -> Any:
    return select(ArticleRecord).options(
        selectinload(ArticleRecord.author),
        selectinload(ArticleRecord.category),
    )


class ArticleStore:
    """Canonical article persistence.

    Args:
        db: Initialized database manager.
    """

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def create(self, fields: ArticleCreate, author_id: int) -> ArticleRead:
        """Insert a new article.

        Raises:
            ValidationError: If the category does not exist.
            StoreError: On any lower-level store failure.
        """
        with _store_errors("create"):
            async with self._db.session() as session:
                await _require_category(session, fields.category_id)
                record = ArticleRecord(
                    title=fields.title,
                    content=fields.content,
                    category_id=fields.category_id,
                    author_id=author_id,
                )
                session.add(record)
                await session.commit()
                article = await self._load(session, record.id)

        logger.info("Created article %d", article.id)
        return article

    async def get(self, article_id: int) -> ArticleRead | None:
        """Fetch one article with author and category, or None."""
        with _store_errors("get"):
            async with self._db.session() as session:
                result = await session.execute(_joined_select().where(ArticleRecord.id == article_id))
                record = result.scalar_one_or_none()
                return ArticleRead.model_validate(record) if record else None

    async def update(self, article_id: int, changes: dict[str, Any]) -> ArticleRead | None:
        """Apply *changes* to an article. Returns None if it does not exist.

        Raises:
            ValidationError: If a field is not updatable or the new category does not exist.
        """
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {sorted(unknown)}")

        with _store_errors("update"):
            async with self._db.session() as session:
                record = await session.get(ArticleRecord, article_id)
                if record is None:
                    return None
                if "category_id" in changes:
                    await _require_category(session, changes["category_id"])
                for field, value in changes.items():
                    setattr(record, field, value)
                await session.commit()
                article = await self._load(session, article_id)

        logger.info("Updated article %d (%s)", article_id, ", ".join(sorted(changes)))
        return article

    async def delete(self, article_id: int) -> bool:
        """Delete an article. Returns False if it did not exist."""
        with _store_errors("delete"):
            async with self._db.session() as session:
                record = await session.get(ArticleRecord, article_id)
                if record is None:
                    return False
                await session.delete(record)
                await session.commit()

        logger.info("Deleted article %d", article_id)
        return True

    async def count(self) -> int:
        with _store_errors("count"):
            async with self._db.session() as session:
                result = await session.execute(select(func.count(ArticleRecord.id)))
                return int(result.scalar_one())

    async def list_newest(self, offset: int, limit: int) -> list[ArticleRead]:
        """Return a slice of articles ordered newest first."""
        query = (
            _joined_select()
            .order_by(ArticleRecord.created_at.desc(), ArticleRecord.id.desc())
            .offset(offset)
            .limit(limit)
        )
        with _store_errors("list"):
            async with self._db.session() as session:
                result = await session.execute(query)
                return [ArticleRead.model_validate(r) for r in result.scalars().all()]

    async def iter_batches(self, batch_size: int) -> AsyncIterator[list[ArticleRead]]:
        """Walk every article in id order, one batch per round trip.

        Uses keyset pagination on ``id`` so rows inserted or deleted while
        walking never cause skips or repeats of rows already passed.
        """
        last_id = 0
        while True:
            query = (
                _joined_select()
                .where(ArticleRecord.id > last_id)
                .order_by(ArticleRecord.id)
                .limit(batch_size)
            )
            with _store_errors("batch read"):
                async with self._db.session() as session:
                    result = await session.execute(query)
                    batch = [ArticleRead.model_validate(r) for r in result.scalars().all()]
            if not batch:
                return
            yield batch
            last_id = batch[-1].id

    async def existing_ids(self, article_ids: Collection[int]) -> set[int]:
        """Return the subset of *article_ids* present in the store."""
        if not article_ids:
            return set()
        with _store_errors("existence check"):
            async with self._db.session() as session:
                result = await session.execute(
                    select(ArticleRecord.id).where(ArticleRecord.id.in_(list(article_ids)))
                )
                return set(result.scalars().all())

    @staticmethod
    async def _load(session: AsyncSession, article_id: int) -> ArticleRead:
        query = (
            _joined_select()
            .where(ArticleRecord.id == article_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(query)
        return ArticleRead.model_validate(result.scalar_one())


class CategoryStore:
    """Category persistence and lookup.

    Args:
        db: Initialized database manager.
    """

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def create(self, fields: CategoryCreate) -> CategoryRead:
        with _store_errors("category create"):
            async with self._db.session() as session:
                existing = await session.execute(
                    select(CategoryRecord).where(CategoryRecord.name == fields.name)
                )
                if existing.scalar_one_or_none() is not None:
                    raise ValidationError(f"Category '{fields.name}' already exists")
                record = CategoryRecord(name=fields.name)
                session.add(record)
                await session.commit()
                return CategoryRead.model_validate(record)

    async def get(self, category_id: int) -> CategoryRead:
        """Fetch a category.

        Raises:
            NotFoundError: If the category does not exist.
        """
        with _store_errors("category get"):
            async with self._db.session() as session:
                record = await session.get(CategoryRecord, category_id)
        if record is None:
            raise NotFoundError(f"Category {category_id} not found")
        return CategoryRead.model_validate(record)

    async def get_name(self, category_id: int) -> str:
        """Resolve a category identifier to its name."""
        return (await self.get(category_id)).name

    async def list_all(self) -> list[CategoryRead]:
        with _store_errors("category list"):
            async with self._db.session() as session:
                result = await session.execute(select(CategoryRecord).order_by(CategoryRecord.id))
                return [CategoryRead.model_validate(r) for r in result.scalars().all()]


async def _require_category(session: AsyncSession, category_id: int) -> None:
    if await session.get(CategoryRecord, category_id) is None:
        raise ValidationError(f"Category {category_id} does not exist")
