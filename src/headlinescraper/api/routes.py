"""Routes for triggering scrapes and curating stored articles."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Body, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import BaseModel, Field

from headlinescraper.api.views import render_index, render_notes, render_saved
from headlinescraper.config import AppConfig
from headlinescraper.models import Article, NoteInput, SavedUpdate
from headlinescraper.services.pipeline import ScrapePipeline, ScrapeReport
from headlinescraper.storage import ArticleNotFound, ArticleStore, NoteNotFound, StoreError

logger = logging.getLogger(__name__)

router = APIRouter()
api_router = APIRouter()


class ArticlesResponse(BaseModel):
    articles: List[Article] = Field(default_factory=list)


def _store(request: Request) -> ArticleStore:
    return request.app.state.store


def _pipeline(request: Request) -> ScrapePipeline:
    return request.app.state.pipeline


def _config(request: Request) -> AppConfig:
    return request.app.state.config


def _store_failure(exc: StoreError) -> HTTPException:
    if isinstance(exc, (ArticleNotFound, NoteNotFound)):
        return HTTPException(status_code=404, detail=str(exc))
    logger.exception("Record store operation failed")
    return HTTPException(status_code=500, detail=str(exc))


def _redirect(url: str) -> RedirectResponse:
    # 303: the follow-up request is always a GET.
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/scrape")
async def trigger_scrape(request: Request) -> RedirectResponse:
    """Start a scrape of the configured source and redirect to the listing at once."""

    url = str(_config(request).source_url)
    _pipeline(request).trigger(url)
    logger.info("Scrape of %s started", url)
    return RedirectResponse("/", status_code=status.HTTP_302_FOUND)


@router.get("/", response_class=HTMLResponse)
async def index(request: Request) -> str:
    try:
        articles = await _store(request).find_all(limit=_config(request).listing_limit)
    except StoreError as exc:
        raise _store_failure(exc) from exc
    return render_index(articles)


@router.get("/saved", response_class=HTMLResponse)
async def saved(request: Request) -> str:
    try:
        articles = await _store(request).find_saved()
    except StoreError as exc:
        raise _store_failure(exc) from exc
    return render_saved(articles)


@router.put("/delete/{article_id}")
async def unsave_article(
    request: Request, article_id: str, payload: SavedUpdate | None = Body(default=None)
) -> RedirectResponse:
    """Clear the saved flag of an article. The article itself is kept."""

    flag = False if payload is None or payload.saved is None else payload.saved
    try:
        article = await _store(request).set_saved(article_id, flag)
    except StoreError as exc:
        raise _store_failure(exc) from exc
    logger.info("Successfully removed: %r", article.title)
    return _redirect("/saved")


@router.put("/note/{note_id}")
async def delete_note(request: Request, note_id: str) -> RedirectResponse:
    try:
        await _store(request).delete_note(note_id)
    except StoreError as exc:
        raise _store_failure(exc) from exc
    logger.info("Deleted note %s", note_id)
    return _redirect("/saved")


@router.get("/notes/{article_id}", response_class=HTMLResponse)
async def article_notes(request: Request, article_id: str) -> str:
    store = _store(request)
    try:
        article = await store.get(article_id)
        notes = await store.get_notes(article_id)
    except StoreError as exc:
        raise _store_failure(exc) from exc
    return render_notes(article, notes)


@router.post("/notes/{article_id}")
async def create_note(request: Request, article_id: str, payload: NoteInput) -> RedirectResponse:
    try:
        note = await _store(request).add_note(article_id, payload)
    except StoreError as exc:
        raise _store_failure(exc) from exc
    logger.info("New note %s on article %s", note.id, article_id)
    return _redirect(f"/notes/{article_id}")


@router.put("/{article_id}")
async def save_article(
    request: Request, article_id: str, payload: SavedUpdate | None = Body(default=None)
) -> RedirectResponse:
    """Set the saved flag of an article (``true`` unless the body says otherwise)."""

    flag = True if payload is None or payload.saved is None else payload.saved
    try:
        article = await _store(request).set_saved(article_id, flag)
    except StoreError as exc:
        raise _store_failure(exc) from exc
    logger.info("Successfully saved: %r", article.title)
    return _redirect("/")


@api_router.get("/articles", response_model=ArticlesResponse)
async def list_articles(request: Request) -> ArticlesResponse:
    try:
        articles = await _store(request).find_all(limit=_config(request).listing_limit)
    except StoreError as exc:
        raise _store_failure(exc) from exc
    return ArticlesResponse(articles=articles)


@api_router.get("/articles/saved", response_model=ArticlesResponse)
async def list_saved_articles(request: Request) -> ArticlesResponse:
    try:
        articles = await _store(request).find_saved()
    except StoreError as exc:
        raise _store_failure(exc) from exc
    return ArticlesResponse(articles=articles)


@api_router.get("/scrape/last", response_model=ScrapeReport)
async def last_scrape(request: Request) -> ScrapeReport:
    """Return the report of the most recent scrape run in this process."""

    report = _pipeline(request).last_report
    if report is None:
        raise HTTPException(status_code=404, detail="No scrape has run yet.")
    return report
