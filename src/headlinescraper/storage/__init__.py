"""Record store backends and the factory that selects one from configuration."""

from __future__ import annotations

from headlinescraper.config import AppConfig
from headlinescraper.storage.base import ArticleNotFound, ArticleStore, NoteNotFound, StoreError
from headlinescraper.storage.json_store import JsonArticleStore
from headlinescraper.storage.mongo_store import MongoArticleStore

__all__ = [
    "ArticleNotFound",
    "ArticleStore",
    "JsonArticleStore",
    "MongoArticleStore",
    "NoteNotFound",
    "StoreError",
    "create_store",
]


def create_store(config: AppConfig) -> ArticleStore:
    """Build the unopened store selected by ``config.storage_backend``."""

    if config.storage_backend == "mongo":
        return MongoArticleStore(config.mongodb_uri)
    return JsonArticleStore(config.blob_root)
