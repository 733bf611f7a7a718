from __future__ import annotations

import asyncio
import threading
from datetime import UTC, datetime
from pathlib import Path

from headlinescraper.models import Article, ExtractedRecord, RawDocument
from headlinescraper.services.fetcher import FetchError
from headlinescraper.services import pipeline as pipeline_module
from headlinescraper.services.pipeline import PipelineState, ScrapePipeline
from headlinescraper.services.tasks import TaskRunner
from headlinescraper.storage import JsonArticleStore, StoreError

SOURCE_URL = "https://news.example.com/"

FRONT_PAGE = """
<html><body>
    <article><h2><a href="/politics/vote">  Vote counted </a></h2></article>
    <article><h2><a href="/science/moon">Moon landing</a></h2></article>
    <article><h2>Editorial</h2></article>
</body></html>
"""


class StaticFetcher:
    def __init__(self, html: str) -> None:
        self.html = html
        self.calls: list[str] = []

    def fetch(self, url: str) -> RawDocument:
        self.calls.append(url)
        return RawDocument(url=url, text=self.html)


class FailingFetcher:
    def fetch(self, url: str) -> RawDocument:
        raise FetchError(url, "connection refused")


class RecordingStore:
    """Store double that fails on selected insert positions."""

    def __init__(self, fail_on: set[int] | None = None) -> None:
        self.fail_on = fail_on or set()
        self.attempts: list[ExtractedRecord] = []

    async def insert(self, record: ExtractedRecord) -> Article:
        index = len(self.attempts)
        self.attempts.append(record)
        if index in self.fail_on:
            raise StoreError("connection lost")
        return Article(id=f"id-{index}", title=record.title, link=record.link or "", date_pulled=datetime.now(UTC))


def test_pipeline_stores_every_extracted_headline(tmp_path: Path) -> None:
    async def scenario():
        store = JsonArticleStore(tmp_path)
        await store.open()
        runner = TaskRunner()
        pipeline = ScrapePipeline(StaticFetcher(FRONT_PAGE), store, runner)

        report = await pipeline.run(SOURCE_URL)
        await runner.drain()
        return report, await store.find_all()

    report, articles = asyncio.run(scenario())

    assert report.state is PipelineState.DONE
    assert report.extracted == 3
    assert len(report.stored) == 3
    assert report.failures == []
    assert sorted((article.title, article.link) for article in articles) == [
        ("", ""),
        ("Moon landing", "/science/moon"),
        ("Vote counted", "/politics/vote"),
    ]
    assert all(not article.saved and article.notes == [] for article in articles)


def test_fetch_failure_aborts_without_store_attempts() -> None:
    store = RecordingStore()

    async def scenario():
        runner = TaskRunner()
        pipeline = ScrapePipeline(FailingFetcher(), store, runner)
        report = await pipeline.run(SOURCE_URL)
        await runner.drain()
        return report, runner

    report, runner = asyncio.run(scenario())

    assert report.state is PipelineState.ABORTED
    assert "connection refused" in report.error
    assert report.extracted == 0
    assert store.attempts == []
    assert runner.spawned == 0


def test_store_failure_does_not_stop_sibling_inserts(caplog) -> None:
    store = RecordingStore(fail_on={0})

    async def scenario():
        runner = TaskRunner()
        pipeline = ScrapePipeline(StaticFetcher(FRONT_PAGE), store, runner)
        report = await pipeline.run(SOURCE_URL)
        await runner.drain()
        return report, runner

    report, runner = asyncio.run(scenario())

    assert report.state is PipelineState.DONE
    assert len(store.attempts) == 3
    assert report.stored == ["id-1", "id-2"]
    assert [failure.title for failure in report.failures] == ["Vote counted"]
    assert report.failures[0].error == "connection lost"
    assert runner.failed == 0
    assert report.settled
    assert "Failed to store" in caplog.text


def test_no_matches_reaches_done_without_store_calls() -> None:
    store = RecordingStore()

    async def scenario():
        runner = TaskRunner()
        pipeline = ScrapePipeline(StaticFetcher("<html><h2>Not an article</h2></html>"), store, runner)
        report = await pipeline.run(SOURCE_URL)
        await runner.drain()
        return report

    report = asyncio.run(scenario())

    assert report.state is PipelineState.DONE
    assert report.extracted == 0
    assert store.attempts == []


def test_run_returns_before_inserts_complete() -> None:
    class SlowStore(RecordingStore):
        def __init__(self) -> None:
            super().__init__()
            self.gate = asyncio.Event()

        async def insert(self, record: ExtractedRecord) -> Article:
            await self.gate.wait()
            return await super().insert(record)

    async def scenario():
        store = SlowStore()
        runner = TaskRunner()
        pipeline = ScrapePipeline(StaticFetcher(FRONT_PAGE), store, runner)

        report = await pipeline.run(SOURCE_URL)
        stored_at_return = list(report.stored)
        pending_at_return = runner.pending

        store.gate.set()
        await runner.drain()
        return report, stored_at_return, pending_at_return

    report, stored_at_return, pending_at_return = asyncio.run(scenario())

    assert report.state is PipelineState.DONE
    assert stored_at_return == []
    assert pending_at_return == 3
    assert len(report.stored) == 3


def test_trigger_runs_pipeline_in_background() -> None:
    fetcher = StaticFetcher(FRONT_PAGE)
    store = RecordingStore()

    async def scenario():
        runner = TaskRunner()
        pipeline = ScrapePipeline(fetcher, store, runner)
        pipeline.trigger(SOURCE_URL)
        assert fetcher.calls == []
        await runner.drain()
        return pipeline

    pipeline = asyncio.run(scenario())

    assert fetcher.calls == [SOURCE_URL]
    assert len(store.attempts) == 3
    assert pipeline.last_report is not None
    assert pipeline.last_report.state is PipelineState.DONE


def test_parsing_runs_off_the_event_loop_thread(monkeypatch) -> None:
    parse_threads: list[int] = []
    real_parse = pipeline_module.parse

    def recording_parse(document):
        parse_threads.append(threading.get_ident())
        return real_parse(document)

    monkeypatch.setattr(pipeline_module, "parse", recording_parse)

    async def scenario():
        runner = TaskRunner()
        pipeline = ScrapePipeline(StaticFetcher(FRONT_PAGE), RecordingStore(), runner)
        report = await pipeline.run(SOURCE_URL)
        await runner.drain()
        return report, threading.get_ident()

    report, loop_thread = asyncio.run(scenario())

    assert report.extracted == 3
    assert len(parse_threads) == 1
    assert parse_threads[0] != loop_thread
