"""Service layer entry points for Headline Scraper."""

from __future__ import annotations

from .extractor import DEFAULT_PATTERN, HeadlinePattern, extract  # noqa: F401
from .fetcher import DocumentFetcher, FetchError  # noqa: F401
from .parser import ParsedTree, parse  # noqa: F401
from .pipeline import PipelineState, ScrapePipeline, ScrapeReport  # noqa: F401
from .tasks import TaskRunner  # noqa: F401

__all__ = [
    "DEFAULT_PATTERN",
    "DocumentFetcher",
    "FetchError",
    "HeadlinePattern",
    "ParsedTree",
    "PipelineState",
    "ScrapePipeline",
    "ScrapeReport",
    "TaskRunner",
    "extract",
    "parse",
]
