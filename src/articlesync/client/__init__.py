"""ArticleSync Python SDK — Client library for the ArticleSync API.

Provides both async and sync clients for interacting with an ArticleSync server.

Quick start::

    from articlesync.client import ArticleSyncClient

    client = ArticleSyncClient("http://localhost:3000", token="...")

    article = client.create_article("Go basics", "Goroutines and channels", category_id=1)
    for hit in client.search("goroutines")["hits"]:
        print(hit["document"]["title"], hit["score"])
"""

from articlesync.client.client import ArticleSyncClient, AsyncArticleSyncClient

__all__ = ["ArticleSyncClient", "AsyncArticleSyncClient"]
