"""Scrape pipeline: fetch the listing page, extract headlines, store each one."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from enum import Enum
from typing import List

from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from headlinescraper.models import Article, ExtractedRecord, RawDocument
from headlinescraper.services.extractor import DEFAULT_PATTERN, HeadlinePattern, extract
from headlinescraper.services.fetcher import DocumentFetcher, FetchError
from headlinescraper.services.parser import parse
from headlinescraper.services.tasks import TaskRunner
from headlinescraper.storage import ArticleStore, StoreError

__all__ = ["PipelineState", "ScrapePipeline", "ScrapeReport", "StoreFailure"]

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    PARSING = "parsing"
    EXTRACTING = "extracting"
    STORING = "storing"
    DONE = "done"
    ABORTED = "aborted"


class StoreFailure(BaseModel):
    title: str
    link: str | None = None
    error: str


class ScrapeReport(BaseModel):
    """Outcome of one pipeline run.

    ``stored`` and ``failures`` keep filling in after :meth:`ScrapePipeline.run`
    returns, as the detached inserts complete.
    """

    url: str
    state: PipelineState = PipelineState.IDLE
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    extracted: int = 0
    stored: List[str] = Field(default_factory=list)
    failures: List[StoreFailure] = Field(default_factory=list)
    error: str | None = None

    @property
    def settled(self) -> bool:
        """``True`` once every extracted record has either been stored or failed."""

        return len(self.stored) + len(self.failures) >= self.extracted


class ScrapePipeline:
    """Sequence fetch, parse, extract and store for a single listing URL."""

    def __init__(
        self,
        fetcher: DocumentFetcher,
        store: ArticleStore,
        runner: TaskRunner,
        pattern: HeadlinePattern = DEFAULT_PATTERN,
    ) -> None:
        self.fetcher = fetcher
        self.store = store
        self.runner = runner
        self.pattern = pattern
        self.last_report: ScrapeReport | None = None

    def trigger(self, url: str) -> None:
        """Start a run in the background and return immediately."""

        self.runner.spawn(self.run(url), name=f"scrape:{url}")

    async def run(self, url: str) -> ScrapeReport:
        """Run the pipeline up to the point where every insert has been spawned.

        A fetch failure aborts the run before anything is stored. Store outcomes
        are recorded on the returned report as they arrive and never change the
        terminal state.
        """

        report = ScrapeReport(url=url)
        self.last_report = report

        report.state = PipelineState.FETCHING
        try:
            document = await run_in_threadpool(self.fetcher.fetch, url)
        except FetchError as exc:
            report.state = PipelineState.ABORTED
            report.error = str(exc)
            logger.warning("Scrape of %s aborted: %s", url, exc)
            return report

        records = await run_in_threadpool(self._parse_and_extract, document, report)
        report.extracted = len(records)
        if not records:
            logger.info("No headlines matched on %s", url)

        report.state = PipelineState.STORING
        for index, record in enumerate(records):
            self.runner.spawn(self._store(record, report), name=f"store:{url}#{index}")

        report.state = PipelineState.DONE
        logger.info("Scraped %s: %d headlines queued for storage", url, report.extracted)
        return report

    def _parse_and_extract(self, document: RawDocument, report: ScrapeReport) -> List[ExtractedRecord]:
        """Parse and walk the document in a worker thread; both steps are CPU bound."""

        report.state = PipelineState.PARSING
        tree = parse(document)

        report.state = PipelineState.EXTRACTING
        return list(extract(tree, self.pattern))

    async def _store(self, record: ExtractedRecord, report: ScrapeReport) -> Article | None:
        article: Article | None = None
        try:
            article = await self.store.insert(record)
        except StoreError as exc:
            logger.error("Failed to store %r from %s: %s", record.title, report.url, exc)
            report.failures.append(StoreFailure(title=record.title, link=record.link, error=str(exc)))
        else:
            logger.debug("Stored article %s (%r)", article.id, article.title)
            report.stored.append(article.id)

        if report.settled:
            logger.info(
                "Finished storing %s: %d stored, %d failed",
                report.url,
                len(report.stored),
                len(report.failures),
            )
        return article
