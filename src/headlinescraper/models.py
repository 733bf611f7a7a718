"""Domain models used across the application."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RawDocument(BaseModel):
    """Markup returned by the fetcher for a single pipeline run."""

    url: str
    text: str


class ExtractedRecord(BaseModel):
    """A headline/link pair pulled from the listing page, before it is stored."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    link: Optional[str] = None


class Article(BaseModel):
    """Representation of a stored article."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    link: str = ""
    saved: bool = False
    notes: List[str] = Field(default_factory=list)
    date_pulled: datetime = Field(alias="datePulled")


class Note(BaseModel):
    """A user note attached to an article."""

    id: str
    title: str = ""
    body: str = ""


class NoteInput(BaseModel):
    """Payload accepted when creating a note."""

    title: str = ""
    body: str = ""


class SavedUpdate(BaseModel):
    """Payload accepted when toggling the saved flag of an article.

    ``saved`` is optional; each route supplies its own default when it is missing.
    """

    saved: Optional[bool] = None
