"""HTTP fetcher that retrieves the listing page for a scrape run."""

from __future__ import annotations

import logging

import requests

from headlinescraper.models import RawDocument

__all__ = ["DEFAULT_HEADERS", "DocumentFetcher", "FetchError"]

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/129.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
}


class FetchError(RuntimeError):
    """Raised when the listing page could not be retrieved."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class DocumentFetcher:
    """Perform a single GET request and return the body as a :class:`RawDocument`.

    No retries are attempted. Transport failures, timeouts and non-2xx
    responses are all reported as :class:`FetchError`.
    """

    def __init__(self, session: requests.Session | None = None, timeout: float = 15.0) -> None:
        self._session = session or requests.Session()
        self._session.headers.update(DEFAULT_HEADERS)
        self.timeout = timeout

    def fetch(self, url: str) -> RawDocument:
        try:
            response = self._session.get(url, timeout=self.timeout)
            response.raise_for_status()
            text = response.text
        except requests.RequestException as exc:
            raise FetchError(url, str(exc)) from exc
        except UnicodeDecodeError as exc:
            raise FetchError(url, f"undecodable response body ({exc})") from exc

        logger.debug("Fetched %s (%d characters)", response.url or url, len(text))
        return RawDocument(url=response.url or url, text=text)

    def close(self) -> None:
        self._session.close()
