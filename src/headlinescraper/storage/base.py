"""Record store interface shared by the storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from headlinescraper.models import Article, ExtractedRecord, Note, NoteInput

__all__ = ["ArticleNotFound", "ArticleStore", "NoteNotFound", "StoreError"]


class StoreError(RuntimeError):
    """Raised when the record store cannot complete an operation."""


class ArticleNotFound(StoreError):
    """Raised when an article id does not exist in the store."""

    def __init__(self, article_id: str) -> None:
        super().__init__(f"Unknown article: {article_id}")
        self.article_id = article_id


class NoteNotFound(StoreError):
    """Raised when a note id does not exist in the store."""

    def __init__(self, note_id: str) -> None:
        super().__init__(f"Unknown note: {note_id}")
        self.note_id = note_id


class ArticleStore(ABC):
    """Asynchronous persistence for scraped articles and their notes.

    One instance is shared by the whole process. Implementations must accept
    concurrent, independent calls from the scrape pipeline and the web routes.
    Titles and links are written once by :meth:`insert`; afterwards only the
    saved flag and the note references change.
    """

    async def open(self) -> None:
        """Acquire connections or load state. Called once on startup."""

    async def close(self) -> None:
        """Release resources. Called once on shutdown."""

    @abstractmethod
    async def insert(self, record: ExtractedRecord) -> Article:
        """Store ``record`` as a new unsaved article without notes."""

    @abstractmethod
    async def find_all(self, limit: int = 30) -> List[Article]:
        """Return up to ``limit`` articles, newest first, ties broken by title."""

    @abstractmethod
    async def find_saved(self) -> List[Article]:
        """Return every article flagged as saved."""

    @abstractmethod
    async def get(self, article_id: str) -> Article:
        ...

    @abstractmethod
    async def set_saved(self, article_id: str, saved: bool) -> Article:
        ...

    @abstractmethod
    async def add_note(self, article_id: str, note: NoteInput) -> Note:
        """Create a note and append its id to the article's references."""

    @abstractmethod
    async def get_notes(self, article_id: str) -> List[Note]:
        """Return the notes referenced by an article, in reference order."""

    @abstractmethod
    async def delete_note(self, note_id: str) -> None:
        """Delete a note and drop its id from any article that references it."""
