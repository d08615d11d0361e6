"""
pulse/sources/fetcher.py

Blocking CSV download with retry/backoff, plus local file reads.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from urllib.parse import urlparse

import requests

from pulse.config import HTTPFetchSettings
from pulse.sources.errors import FetchFailure

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

_REQUEST_HEADERS = {
    "Accept": "text/csv, text/plain;q=0.9, */*;q=0.5",
    "Cache-Control": "no-cache",
}


def is_remote_source(source: str) -> bool:
    """
    True for http(s) URLs; anything else is treated as a local path.
    """

    return urlparse(source).scheme.lower() in {"http", "https"}


def with_cache_buster(url: str, timestamp_ms: int) -> str:
    """
    Append a ``timestamp`` query parameter so intermediaries cannot serve a stale copy.
    """

    separator = "&" if "?" in url else "?"
    return f"{url}{separator}timestamp={timestamp_ms}"


class CSVFetcher:
    """
    Downloads CSV text over HTTP or reads it from disk.

    Calls block; the file cache runs them in worker threads.
    """

    def __init__(
        self,
        *,
        http_settings: HTTPFetchSettings,
        session: requests.Session | None = None,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout_seconds = http_settings.timeout_seconds
        self._max_retries = http_settings.max_retries
        self._backoff_initial_seconds = http_settings.backoff_initial_seconds
        self._backoff_multiplier = http_settings.backoff_multiplier

    def fetch_text(self, source: str) -> str:
        """
        Return the text behind ``source``; raises ``FetchFailure`` on any failure.
        """

        if not is_remote_source(source):
            return self._read_local(source)
        response = self._request(method="GET", url=source)
        if response.encoding is None or response.encoding.lower() == "iso-8859-1":
            response.encoding = "utf-8"
        return response.text

    def probe(self, url: str) -> bool:
        """
        Check that a source is reachable without downloading it.
        """

        if not is_remote_source(url):
            return Path(url).is_file()
        try:
            self._request(method="HEAD", url=url)
        except FetchFailure:
            return False
        return True

    def _request(self, *, method: str, url: str) -> requests.Response:
        """
        Execute an HTTP request with exponential backoff on retryable failures.
        """

        last_error: Exception | None = None
        for attempt in range(self._max_retries + 1):
            try:
                response = self._session.request(
                    method=method,
                    url=url,
                    headers=_REQUEST_HEADERS,
                    timeout=self._timeout_seconds,
                    allow_redirects=True,
                )
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(
                        f"Retryable HTTP status code: {response.status_code}",
                        response=response,
                    )
                response.raise_for_status()
                return response
            except requests.HTTPError as exc:
                last_error = exc
                status_code = exc.response.status_code if exc.response is not None else None
                if status_code not in RETRYABLE_STATUS_CODES:
                    logger.error(
                        "Source request failed status=%s url=%s error=%s",
                        status_code,
                        url,
                        exc,
                    )
                    raise FetchFailure(f"HTTP {status_code} while fetching {url}") from exc
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_error = exc
            except requests.RequestException as exc:
                logger.error("Source request failed url=%s error=%s", url, exc)
                raise FetchFailure(f"Request error while fetching {url}: {exc}") from exc

            if attempt >= self._max_retries:
                break

            backoff_seconds = self._backoff_initial_seconds * (self._backoff_multiplier**attempt)
            logger.warning(
                "Source request retry attempt=%s/%s wait_seconds=%.2f url=%s",
                attempt + 1,
                self._max_retries,
                backoff_seconds,
                url,
            )
            time.sleep(backoff_seconds)

        logger.error("Source request exhausted retries url=%s error=%s", url, last_error)
        raise FetchFailure(f"Request failed after retries: {url}") from last_error

    @staticmethod
    def _read_local(source: str) -> str:
        path = Path(source[len("file://"):] if source.startswith("file://") else source)
        try:
            return path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as exc:
            raise FetchFailure(f"File must be UTF-8 encoded: {path}") from exc
        except OSError as exc:
            raise FetchFailure(f"Could not read file {path}: {exc}") from exc
