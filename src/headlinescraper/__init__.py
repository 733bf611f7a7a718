"""Headline Scraper package exposing configuration, API, and pipeline helpers."""

from __future__ import annotations

from .config import AppConfig, load_env_file

load_env_file()

__all__ = ["AppConfig", "load_env_file"]
