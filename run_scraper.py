"""Convenience script for running one scrape of the configured source locally."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

# Ensure the src directory is on the Python path so the headlinescraper package can be imported
SRC_PATH = Path(__file__).resolve().parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from headlinescraper.config import AppConfig  # noqa: E402  (import after path setup)
from headlinescraper.services import DocumentFetcher, PipelineState, ScrapePipeline, TaskRunner  # noqa: E402
from headlinescraper.storage import StoreError, create_store  # noqa: E402


async def scrape_once(config: AppConfig) -> int:
    """Run the pipeline against ``config.source_url`` and wait for every insert."""

    store = create_store(config)
    fetcher = DocumentFetcher(timeout=config.request_timeout)
    runner = TaskRunner()
    await store.open()
    try:
        pipeline = ScrapePipeline(fetcher, store, runner)
        report = await pipeline.run(str(config.source_url))
        await runner.drain()
    finally:
        await store.close()
        fetcher.close()

    print(report.model_dump_json(indent=2))
    return 1 if report.state is PipelineState.ABORTED else 0


def main() -> None:
    """Load the configuration and scrape the source once."""

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    try:
        config = AppConfig.load()
    except ValueError as exc:
        logging.error("Could not load configuration: %s", exc)
        sys.exit(1)

    try:
        sys.exit(asyncio.run(scrape_once(config)))
    except StoreError as exc:
        logging.error("Record store unavailable: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
