"""Configuration model and helpers for the Headline Scraper application."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, Literal, MutableMapping

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, ValidationError

__all__ = [
    "AppConfig",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_ENV_PATH",
    "DEFAULT_MONGODB_URI",
    "DEFAULT_SOURCE_URL",
    "load_env_file",
]

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "data" / "settings.json"
DEFAULT_ENV_PATH = Path(__file__).resolve().parents[2] / ".env"
DEFAULT_SOURCE_URL = "https://www.nytimes.com/"
DEFAULT_MONGODB_URI = "mongodb://localhost/articles_db"

# Environment variable -> field name
_ENV_OVERRIDES = {
    "SCRAPE_URL": "source_url",
    "STORAGE_BACKEND": "storage_backend",
    "MONGODB_URI": "mongodb_uri",
    "BLOB_ROOT": "blob_root",
}


def _parse_env_value(raw: str) -> str:
    value = raw.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", "\""}:
        return value[1:-1]
    # Unquoted values may carry a trailing " # comment".
    return value.split(" #", 1)[0].rstrip()


def load_env_file(
    path: Path | str | None = None, environ: MutableMapping[str, str] | None = None
) -> Dict[str, str]:
    """Copy ``KEY=value`` lines from a ``.env`` file into ``environ``.

    Variables that are already set win over the file. Blank lines, comments and
    an optional ``export`` prefix are handled; the variables actually applied
    are returned.
    """

    env_path = Path(path) if path else DEFAULT_ENV_PATH
    target = os.environ if environ is None else environ
    if not env_path.is_file():
        return {}

    applied: Dict[str, str] = {}
    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, raw_value = line.split("=", 1)
        key = key.strip()
        if not key or key in target:
            continue

        target[key] = applied[key] = _parse_env_value(raw_value)
    return applied


class AppConfig(BaseModel):
    """Runtime settings for the scraper, the store and the web layer."""

    model_config = ConfigDict(validate_default=True)

    source_url: HttpUrl = Field(
        default=DEFAULT_SOURCE_URL, description="Listing page the scrape pipeline fetches"
    )
    request_timeout: float = Field(
        default=15.0, gt=0, description="Seconds to wait for the listing page response"
    )
    storage_backend: Literal["json", "mongo"] = Field(
        default="json",
        description=(
            "Which record store to use. ``json`` keeps articles in the local blobstore, "
            "``mongo`` talks to a MongoDB server through motor."
        ),
    )
    mongodb_uri: str = Field(
        default=DEFAULT_MONGODB_URI,
        description="Connection string used by the MongoDB backend; must name a database",
    )
    blob_root: Path | None = Field(
        default=None,
        description="Directory for the JSON backend. Defaults to the package blobstore.",
    )
    listing_limit: int = Field(default=30, gt=0, description="Articles shown on the front page")

    @classmethod
    def from_file(cls, path: Path | str | None = None) -> "AppConfig":
        """Load configuration data from a JSON file."""

        config_path = Path(path) if path else DEFAULT_CONFIG_PATH
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise FileNotFoundError(f"Configuration file not found: {config_path}") from exc
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in configuration file: {config_path}") from exc

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Configuration file is invalid: {config_path}\n{exc}") from exc

    @classmethod
    def load(cls, path: Path | str | None = None) -> "AppConfig":
        """Return the file configuration (or defaults) with environment overrides applied.

        A missing file is not an error; the built-in defaults are used instead.
        Invalid files and invalid override values raise :class:`ValueError`.
        """

        try:
            config = cls.from_file(path)
        except FileNotFoundError:
            config = cls()
        return config.with_env_overrides()

    def with_env_overrides(self, environ: dict[str, str] | None = None) -> "AppConfig":
        """Return a copy of the configuration updated from environment variables."""

        env = os.environ if environ is None else environ
        data = self.model_dump(mode="json")
        changed = False
        for variable, field_name in _ENV_OVERRIDES.items():
            value = env.get(variable)
            if value:
                data[field_name] = value
                changed = True

        if not changed:
            return self

        try:
            return type(self).model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Invalid configuration in environment:\n{exc}") from exc

    def dump(self, path: Path | str | None = None) -> None:
        """Persist the configuration back to disk as JSON."""

        config_path = Path(path) if path else DEFAULT_CONFIG_PATH
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
