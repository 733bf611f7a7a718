"""API package for the Headline Scraper project."""

from __future__ import annotations

from .app import app, create_app  # noqa: F401
from .routes import api_router, router  # noqa: F401

__all__ = ["api_router", "app", "create_app", "router"]
