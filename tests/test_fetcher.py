from __future__ import annotations

from types import SimpleNamespace

import pytest
import requests

from headlinescraper.services.fetcher import DEFAULT_HEADERS, DocumentFetcher, FetchError


class DummyResponse:
    def __init__(self, text: str, status_code: int = 200, url: str = "") -> None:
        self.text = text
        self.status_code = status_code
        self.url = url

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def _session(get) -> SimpleNamespace:
    return SimpleNamespace(get=get, headers={}, close=lambda: None)


def test_fetch_returns_body_and_effective_url() -> None:
    calls: list[tuple[str, float]] = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return DummyResponse("<html>front page</html>", url="https://www.example.com/")

    session = _session(fake_get)
    fetcher = DocumentFetcher(session=session, timeout=5)

    document = fetcher.fetch("https://example.com/")

    assert document.text == "<html>front page</html>"
    assert document.url == "https://www.example.com/"
    assert calls == [("https://example.com/", 5)]
    assert session.headers["User-Agent"] == DEFAULT_HEADERS["User-Agent"]


def test_fetch_raises_fetch_error_for_error_status() -> None:
    fetcher = DocumentFetcher(session=_session(lambda url, timeout: DummyResponse("nope", 503)))

    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch("https://example.com/")

    assert excinfo.value.url == "https://example.com/"
    assert "503" in str(excinfo.value)


@pytest.mark.parametrize(
    "error",
    [requests.ConnectionError("unreachable"), requests.Timeout("too slow")],
)
def test_fetch_wraps_transport_errors(error: Exception) -> None:
    def fake_get(url, timeout):
        raise error

    fetcher = DocumentFetcher(session=_session(fake_get))

    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch("https://example.com/")

    assert excinfo.value.__cause__ is error


def test_fetch_does_not_retry() -> None:
    attempts = 0

    def fake_get(url, timeout):
        nonlocal attempts
        attempts += 1
        raise requests.ConnectionError("down")

    fetcher = DocumentFetcher(session=_session(fake_get))

    with pytest.raises(FetchError):
        fetcher.fetch("https://example.com/")

    assert attempts == 1
