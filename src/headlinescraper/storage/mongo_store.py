"""MongoDB record store built on motor."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from headlinescraper.config import DEFAULT_MONGODB_URI
from headlinescraper.models import Article, ExtractedRecord, Note, NoteInput
from headlinescraper.storage.base import ArticleNotFound, ArticleStore, NoteNotFound, StoreError

__all__ = ["MongoArticleStore", "article_from_document", "note_from_document"]

logger = logging.getLogger(__name__)

LISTING_SORT = [("datePulled", DESCENDING), ("title", ASCENDING)]


def article_from_document(doc: Dict[str, Any]) -> Article:
    """Convert a raw ``articles`` document into an :class:`Article`."""

    return Article(
        id=str(doc["_id"]),
        title=doc.get("title", ""),
        link=doc.get("link") or "",
        saved=bool(doc.get("saved", False)),
        notes=[str(ref) for ref in doc.get("notes", [])],
        date_pulled=doc["datePulled"],
    )


def note_from_document(doc: Dict[str, Any]) -> Note:
    return Note(id=str(doc["_id"]), title=doc.get("title", ""), body=doc.get("body", ""))


def _object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


class MongoArticleStore(ArticleStore):
    """:class:`ArticleStore` backed by the ``articles`` and ``notes`` collections."""

    def __init__(self, uri: str = DEFAULT_MONGODB_URI, client: AsyncIOMotorClient | None = None) -> None:
        self._uri = uri
        self._client = client
        self._db = None

    @property
    def articles(self):
        if self._db is None:
            raise StoreError("Store has not been opened")
        return self._db["articles"]

    @property
    def notes(self):
        if self._db is None:
            raise StoreError("Store has not been opened")
        return self._db["notes"]

    async def open(self) -> None:
        if self._client is None:
            self._client = AsyncIOMotorClient(self._uri, tz_aware=True)
        self._db = self._client.get_default_database("articles_db")
        try:
            await self.articles.create_index(LISTING_SORT)
            await self.articles.create_index([("saved", ASCENDING)])
        except PyMongoError as exc:
            raise StoreError(f"Could not prepare MongoDB indexes: {exc}") from exc
        logger.info("MongoDB connection ready on database %s", self._db.name)

    async def close(self) -> None:
        if self._client is not None:
            self._client.close()
        self._client = None
        self._db = None

    async def insert(self, record: ExtractedRecord) -> Article:
        doc = {
            "title": record.title,
            "link": record.link or "",
            "saved": False,
            "notes": [],
            "datePulled": datetime.now(UTC),
        }
        try:
            result = await self.articles.insert_one(doc)
        except PyMongoError as exc:
            raise StoreError(f"Failed to insert article {record.title!r}: {exc}") from exc
        doc["_id"] = result.inserted_id
        return article_from_document(doc)

    async def find_all(self, limit: int = 30) -> List[Article]:
        try:
            cursor = self.articles.find().sort(LISTING_SORT).limit(limit)
            return [article_from_document(doc) async for doc in cursor]
        except PyMongoError as exc:
            raise StoreError(f"Failed to list articles: {exc}") from exc

    async def find_saved(self) -> List[Article]:
        try:
            cursor = self.articles.find({"saved": True})
            return [article_from_document(doc) async for doc in cursor]
        except PyMongoError as exc:
            raise StoreError(f"Failed to list saved articles: {exc}") from exc

    async def get(self, article_id: str) -> Article:
        oid = _object_id(article_id)
        if oid is None:
            raise ArticleNotFound(article_id)
        try:
            doc = await self.articles.find_one({"_id": oid})
        except PyMongoError as exc:
            raise StoreError(f"Failed to load article {article_id}: {exc}") from exc
        if doc is None:
            raise ArticleNotFound(article_id)
        return article_from_document(doc)

    async def _update_article(self, article_id: str, update: Dict[str, Any]) -> Article:
        oid = _object_id(article_id)
        if oid is None:
            raise ArticleNotFound(article_id)
        try:
            doc = await self.articles.find_one_and_update(
                {"_id": oid}, update, return_document=ReturnDocument.AFTER
            )
        except PyMongoError as exc:
            raise StoreError(f"Failed to update article {article_id}: {exc}") from exc
        if doc is None:
            raise ArticleNotFound(article_id)
        return article_from_document(doc)

    async def set_saved(self, article_id: str, saved: bool) -> Article:
        return await self._update_article(article_id, {"$set": {"saved": saved}})

    async def add_note(self, article_id: str, note: NoteInput) -> Note:
        await self.get(article_id)
        doc = note.model_dump()
        try:
            result = await self.notes.insert_one(doc)
        except PyMongoError as exc:
            raise StoreError(f"Failed to insert note: {exc}") from exc
        doc["_id"] = result.inserted_id
        await self._update_article(article_id, {"$push": {"notes": result.inserted_id}})
        return note_from_document(doc)

    async def get_notes(self, article_id: str) -> List[Note]:
        article = await self.get(article_id)
        refs = [oid for oid in (_object_id(ref) for ref in article.notes) if oid is not None]
        if not refs:
            return []
        try:
            docs = {str(doc["_id"]): doc async for doc in self.notes.find({"_id": {"$in": refs}})}
        except PyMongoError as exc:
            raise StoreError(f"Failed to load notes for {article_id}: {exc}") from exc
        return [note_from_document(docs[ref]) for ref in article.notes if ref in docs]

    async def delete_note(self, note_id: str) -> None:
        oid = _object_id(note_id)
        if oid is None:
            raise NoteNotFound(note_id)
        try:
            result = await self.notes.delete_one({"_id": oid})
            if result.deleted_count == 0:
                raise NoteNotFound(note_id)
            await self.articles.update_many({"notes": oid}, {"$pull": {"notes": oid}})
        except PyMongoError as exc:
            raise StoreError(f"Failed to delete note {note_id}: {exc}") from exc
