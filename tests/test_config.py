import warnings
from pathlib import Path

import pytest

pytest.importorskip("pydantic")

from pydantic import HttpUrl

from headlinescraper.config import DEFAULT_MONGODB_URI, DEFAULT_SOURCE_URL, AppConfig, load_env_file


def test_round_trip(tmp_path: Path) -> None:
    config_path = tmp_path / "settings.json"
    config = AppConfig(source_url="https://news.example.com/", storage_backend="mongo", listing_limit=10)
    config.dump(config_path)

    loaded = AppConfig.from_file(config_path)
    assert str(loaded.source_url) == "https://news.example.com/"
    assert loaded.storage_backend == "mongo"
    assert loaded.listing_limit == 10


def test_defaults_point_at_front_page_and_local_mongo() -> None:
    config = AppConfig()

    assert str(config.source_url) == DEFAULT_SOURCE_URL
    assert config.mongodb_uri == DEFAULT_MONGODB_URI
    assert config.storage_backend == "json"
    assert config.listing_limit == 30


def test_load_falls_back_to_defaults_when_file_missing(tmp_path: Path, monkeypatch) -> None:
    for variable in ("SCRAPE_URL", "STORAGE_BACKEND", "MONGODB_URI", "BLOB_ROOT"):
        monkeypatch.delenv(variable, raising=False)

    config = AppConfig.load(tmp_path / "missing.json")

    assert config == AppConfig()


def test_environment_overrides_file_values(tmp_path: Path, monkeypatch) -> None:
    config_path = tmp_path / "settings.json"
    AppConfig(source_url="https://file.example.com/").dump(config_path)
    monkeypatch.setenv("SCRAPE_URL", "https://env.example.com/")
    monkeypatch.setenv("BLOB_ROOT", str(tmp_path / "blobs"))
    monkeypatch.delenv("STORAGE_BACKEND", raising=False)
    monkeypatch.delenv("MONGODB_URI", raising=False)

    config = AppConfig.load(config_path)

    assert str(config.source_url) == "https://env.example.com/"
    assert config.blob_root == tmp_path / "blobs"


def test_invalid_override_is_rejected() -> None:
    with pytest.raises(ValueError):
        AppConfig().with_env_overrides({"STORAGE_BACKEND": "sqlite"})


def test_invalid_json_is_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "settings.json"
    config_path.write_text("{oops", encoding="utf-8")

    with pytest.raises(ValueError):
        AppConfig.from_file(config_path)


def test_default_source_url_is_validated() -> None:
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        config = AppConfig()
        dumped = config.model_dump(mode="json")

    assert isinstance(config.source_url, HttpUrl)
    assert dumped["source_url"] == DEFAULT_SOURCE_URL


def test_env_file_values_are_applied_without_overriding(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "# local settings",
                "",
                "export SCRAPE_URL=https://env.example.com/",
                "MONGODB_URI='mongodb://db.example/articles_db'",
                'BLOB_ROOT="/srv/blobs # not a comment"',
                "STORAGE_BACKEND=mongo # switch backends",
                "LISTING=ignored",
                "not a variable",
            ]
        ),
        encoding="utf-8",
    )
    environ = {"LISTING": "kept"}

    applied = load_env_file(env_path, environ=environ)

    assert applied == {
        "SCRAPE_URL": "https://env.example.com/",
        "MONGODB_URI": "mongodb://db.example/articles_db",
        "BLOB_ROOT": "/srv/blobs # not a comment",
        "STORAGE_BACKEND": "mongo",
    }
    assert environ["LISTING"] == "kept"
    assert environ["STORAGE_BACKEND"] == "mongo"


def test_missing_env_file_is_ignored(tmp_path: Path) -> None:
    environ: dict[str, str] = {}

    assert load_env_file(tmp_path / ".env", environ=environ) == {}
    assert environ == {}
