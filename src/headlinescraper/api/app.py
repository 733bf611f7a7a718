"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from headlinescraper.api.routes import api_router, router
from headlinescraper.config import AppConfig
from headlinescraper.services.fetcher import DocumentFetcher
from headlinescraper.services.pipeline import ScrapePipeline
from headlinescraper.services.tasks import TaskRunner
from headlinescraper.storage import ArticleStore, create_store

logger = logging.getLogger(__name__)


def create_app(
    config: AppConfig | None = None,
    *,
    store: ArticleStore | None = None,
    fetcher: DocumentFetcher | None = None,
) -> FastAPI:
    """Build the application.

    The store and fetcher are created from ``config`` unless supplied. The
    store is opened on startup; on shutdown outstanding background work is
    drained before the store is closed.
    """

    settings = config or AppConfig.load()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        article_store = store or create_store(settings)
        document_fetcher = fetcher or DocumentFetcher(timeout=settings.request_timeout)
        runner = TaskRunner()

        await article_store.open()
        app.state.config = settings
        app.state.store = article_store
        app.state.runner = runner
        app.state.pipeline = ScrapePipeline(document_fetcher, article_store, runner)
        logger.info("Headline Scraper ready (backend=%s)", settings.storage_backend)
        try:
            yield
        finally:
            if runner.pending:
                logger.info("Waiting for %d background tasks before shutdown", runner.pending)
            await runner.drain()
            await article_store.close()
            if fetcher is None:
                document_fetcher.close()
            logger.info(
                "Headline Scraper stopped (%d background tasks, %d failed)",
                runner.spawned,
                runner.failed,
            )

    app = FastAPI(
        title="Headline Scraper",
        description="Scrape news headlines and curate them with notes",
        lifespan=lifespan,
    )
    app.include_router(api_router, prefix="/api")
    app.include_router(router)
    return app


app = create_app()
