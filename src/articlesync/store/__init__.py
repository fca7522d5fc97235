"""Primary store — SQLAlchemy async persistence for canonical articles."""

from articlesync.store.database import DatabaseManager
from articlesync.store.repository import ArticleStore, CategoryStore

__all__ = ["ArticleStore", "CategoryStore", "DatabaseManager"]
