"""Record store that keeps articles and notes as JSON files in the blobstore."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, List

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from headlinescraper.blobstore import ensure_blob_root, load_json, store_json
from headlinescraper.models import Article, ExtractedRecord, Note, NoteInput
from headlinescraper.storage.base import ArticleNotFound, ArticleStore, NoteNotFound, StoreError

__all__ = ["ARTICLES_FILENAME", "NOTES_FILENAME", "JsonArticleStore"]

logger = logging.getLogger(__name__)

ARTICLES_FILENAME = "articles.json"
NOTES_FILENAME = "notes.json"


class JsonArticleStore(ArticleStore):
    """File-backed :class:`ArticleStore`.

    State is loaded once by :meth:`open` and kept in memory. Every mutation
    rewrites the affected file while holding a lock, so concurrent inserts from
    one scrape never interleave their writes.
    """

    def __init__(self, blob_root: Path | str | None = None) -> None:
        self._blob_root = blob_root
        self._root: Path | None = None
        self._articles: Dict[str, Article] = {}
        self._notes: Dict[str, Note] = {}
        self._lock = asyncio.Lock()

    @property
    def articles_path(self) -> Path:
        return self._require_root() / ARTICLES_FILENAME

    @property
    def notes_path(self) -> Path:
        return self._require_root() / NOTES_FILENAME

    def _require_root(self) -> Path:
        if self._root is None:
            raise StoreError("Store has not been opened")
        return self._root

    async def open(self) -> None:
        try:
            self._root = await run_in_threadpool(ensure_blob_root, self._blob_root)
            raw_articles = await run_in_threadpool(load_json, self.articles_path, [])
            raw_notes = await run_in_threadpool(load_json, self.notes_path, [])
            articles = [Article.model_validate(item) for item in raw_articles]
            notes = [Note.model_validate(item) for item in raw_notes]
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            raise StoreError(f"Could not load blobstore at {self._blob_root}: {exc}") from exc

        self._articles = {article.id: article for article in articles}
        self._notes = {note.id: note for note in notes}
        logger.info(
            "Loaded %d articles and %d notes from %s",
            len(self._articles),
            len(self._notes),
            self._root,
        )

    async def close(self) -> None:
        self._articles = {}
        self._notes = {}
        self._root = None

    async def _write(self, path: Path, items: List[Dict[str, Any]]) -> None:
        try:
            await run_in_threadpool(store_json, path, items)
        except OSError as exc:
            raise StoreError(f"Failed to write {path}: {exc}") from exc

    async def _write_articles(self) -> None:
        payload = [article.model_dump(mode="json", by_alias=True) for article in self._articles.values()]
        await self._write(self.articles_path, payload)

    async def _write_notes(self) -> None:
        payload = [note.model_dump(mode="json") for note in self._notes.values()]
        await self._write(self.notes_path, payload)

    def _lookup(self, article_id: str) -> Article:
        try:
            return self._articles[article_id]
        except KeyError:
            raise ArticleNotFound(article_id) from None

    async def insert(self, record: ExtractedRecord) -> Article:
        article = Article(
            id=uuid.uuid4().hex,
            title=record.title,
            link=record.link or "",
            date_pulled=datetime.now(UTC),
        )
        async with self._lock:
            self._require_root()
            self._articles[article.id] = article
            try:
                await self._write_articles()
            except StoreError:
                del self._articles[article.id]
                raise
        return article

    async def find_all(self, limit: int = 30) -> List[Article]:
        ordered = sorted(self._articles.values(), key=lambda article: article.title)
        ordered.sort(key=lambda article: article.date_pulled, reverse=True)
        return ordered[:limit]

    async def find_saved(self) -> List[Article]:
        return [article for article in self._articles.values() if article.saved]

    async def get(self, article_id: str) -> Article:
        return self._lookup(article_id)

    async def set_saved(self, article_id: str, saved: bool) -> Article:
        async with self._lock:
            previous = self._lookup(article_id)
            self._articles[article_id] = previous.model_copy(update={"saved": saved})
            try:
                await self._write_articles()
            except StoreError:
                self._articles[article_id] = previous
                raise
        return self._articles[article_id]

    async def _resync(self) -> None:
        """Rewrite both files from memory after a partially failed mutation."""

        try:
            await self._write_notes()
            await self._write_articles()
        except StoreError as exc:
            logger.warning("Blobstore at %s may be out of sync with memory: %s", self._root, exc)

    async def add_note(self, article_id: str, note: NoteInput) -> Note:
        async with self._lock:
            previous = self._lookup(article_id)
            created = Note(id=uuid.uuid4().hex, title=note.title, body=note.body)
            self._notes[created.id] = created
            self._articles[article_id] = previous.model_copy(
                update={"notes": [*previous.notes, created.id]}
            )
            try:
                await self._write_notes()
                await self._write_articles()
            except StoreError:
                self._notes.pop(created.id, None)
                self._articles[article_id] = previous
                await self._resync()
                raise
        return created

    async def get_notes(self, article_id: str) -> List[Note]:
        article = self._lookup(article_id)
        return [self._notes[note_id] for note_id in article.notes if note_id in self._notes]

    async def delete_note(self, note_id: str) -> None:
        async with self._lock:
            try:
                removed = self._notes.pop(note_id)
            except KeyError:
                raise NoteNotFound(note_id) from None

            referencing = [article for article in self._articles.values() if note_id in article.notes]
            for article in referencing:
                self._articles[article.id] = article.model_copy(
                    update={"notes": [ref for ref in article.notes if ref != note_id]}
                )
            try:
                await self._write_notes()
                await self._write_articles()
            except StoreError:
                self._notes[note_id] = removed
                for article in referencing:
                    self._articles[article.id] = article
                await self._resync()
                raise
