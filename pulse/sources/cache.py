"""
pulse/sources/cache.py

Process-lifetime cache of normalized records keyed by logical file name.

Loading a key runs resolve -> fetch -> parse -> normalize once. Concurrent
loads of the same key share one in-flight task (singleflight). Failures are
cached as empty results with the error kept on the entry; they are not
retried until the key is invalidated.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Protocol

from pulse.config import FileCacheSettings
from pulse.domain.results import SourceCheckResult
from pulse.logging_utils import log_event
from pulse.mappers.csv_normalizer import CSVNormalizer, parse_csv_text
from pulse.mappers.schemas import PlatformSchema, get_schema
from pulse.sources.errors import FetchFailure, ParseFailure, SourceError
from pulse.sources.fetcher import is_remote_source, with_cache_buster
from pulse.sources.resolver import resolve_source

logger = logging.getLogger(__name__)


class TextFetcher(Protocol):
    def fetch_text(self, source: str) -> str: ...


@dataclass(frozen=True)
class FileCacheEntry:
    """
    Immutable result of one load attempt.

    ``records`` is empty both for an empty file and for a failed load;
    ``error`` tells them apart.
    """

    file_name: str
    records: tuple[Any, ...]
    error: str | None = None
    loaded_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @property
    def ok(self) -> bool:
        return self.error is None


class FileCache:
    """
    Explicit, injectable store for loaded platform files.

    ``sources`` maps logical file names to share URLs or local paths and is
    read on every fresh load, so a caller may swap mappings between refreshes.
    """

    def __init__(
        self,
        *,
        sources: Mapping[str, str],
        fetcher: TextFetcher,
        settings: FileCacheSettings | None = None,
        normalizer: CSVNormalizer | None = None,
        schema_lookup: Callable[[str], PlatformSchema | None] = get_schema,
        clock: Callable[[], float] = time.time,
    ) -> None:
        settings = settings or FileCacheSettings()
        self._sources = sources
        self._fetcher = fetcher
        self._normalizer = normalizer or CSVNormalizer()
        self._schema_lookup = schema_lookup
        self._clock = clock
        self._deadline_seconds = settings.fetch_deadline_seconds
        self._cache_busting = settings.cache_busting
        self._entries: dict[str, FileCacheEntry] = {}
        self._inflight: dict[str, asyncio.Future[FileCacheEntry]] = {}
        self._generations: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def load(self, file_name: str) -> list[Any]:
        """
        Return the normalized records of ``file_name``, loading it at most once.
        """

        entry = await self.load_entry(file_name)
        return list(entry.records)

    async def load_entry(self, file_name: str) -> FileCacheEntry:
        entry = self._entries.get(file_name)
        if entry is not None:
            log_event(logger, logging.DEBUG, "file_cache_hit", file_name=file_name)
            return entry

        task = self._inflight.get(file_name)
        if task is None:
            generation = self._generations.get(file_name, 0)
            task = asyncio.ensure_future(self._populate(file_name, generation))
            self._inflight[file_name] = task
            task.add_done_callback(lambda done, key=file_name: self._forget_inflight(key, done))
        # Shielded so an abandoning caller does not cancel the shared load.
        return await asyncio.shield(task)

    async def load_many(self, file_names: Iterable[str]) -> dict[str, list[Any]]:
        """
        Load several files concurrently; duplicate names share one load.
        """

        names = list(dict.fromkeys(file_names))
        results = await asyncio.gather(*(self.load(name) for name in names))
        return dict(zip(names, results))

    def invalidate(self, file_name: str) -> None:
        """
        Drop the cached entry; a load still in flight will not repopulate it.
        """

        self._entries.pop(file_name, None)
        self._inflight.pop(file_name, None)
        self._generations[file_name] = self._generations.get(file_name, 0) + 1
        log_event(logger, logging.INFO, "file_cache_invalidated", file_name=file_name)

    def invalidate_all(self) -> None:
        for file_name in set(self._entries) | set(self._inflight):
            self.invalidate(file_name)

    def entry(self, file_name: str) -> FileCacheEntry | None:
        return self._entries.get(file_name)

    def status(self, file_name: str) -> SourceCheckResult:
        """
        Report the last load outcome of ``file_name`` for diagnostics.
        """

        entry = self._entries.get(file_name)
        if entry is None:
            if file_name in self._inflight:
                return SourceCheckResult(valid=True, message=f"{file_name} is loading.")
            return SourceCheckResult(valid=False, message=f"{file_name} has not been loaded.")
        if entry.error is not None:
            return SourceCheckResult(valid=False, message=entry.error)
        return SourceCheckResult(
            valid=True,
            message=f"{file_name} loaded with {len(entry.records)} rows.",
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _forget_inflight(self, file_name: str, done: asyncio.Future[FileCacheEntry]) -> None:
        if self._inflight.get(file_name) is done:
            del self._inflight[file_name]

    async def _populate(self, file_name: str, generation: int) -> FileCacheEntry:
        try:
            records = await self._load_records(file_name)
            entry = FileCacheEntry(file_name=file_name, records=tuple(records))
            log_event(logger, logging.INFO, "file_cache_loaded", file_name=file_name, rows=len(records))
        except SourceError as exc:
            entry = FileCacheEntry(file_name=file_name, records=(), error=str(exc))
            log_event(
                logger,
                logging.ERROR,
                "file_cache_load_failed",
                file_name=file_name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
        except Exception as exc:
            logger.exception("Unexpected error while loading source file_name=%s", file_name)
            entry = FileCacheEntry(
                file_name=file_name,
                records=(),
                error=f"{type(exc).__name__}: {exc}",
            )

        if self._generations.get(file_name, 0) == generation:
            self._entries[file_name] = entry
        else:
            log_event(logger, logging.DEBUG, "file_cache_stale_result_dropped", file_name=file_name)
        return entry

    async def _load_records(self, file_name: str) -> list[Any]:
        schema = self._schema_lookup(file_name)
        if schema is None:
            raise ParseFailure(f"No schema is registered for {file_name}.")

        source = (self._sources.get(file_name) or "").strip()
        if not source:
            raise FetchFailure(f"No source URL is configured for {file_name}.")

        target = source
        if is_remote_source(source):
            resolution = resolve_source(source)
            if resolution.failure is not None:
                raise resolution.failure
            target = resolution.download_url
            if self._cache_busting:
                target = with_cache_buster(target, int(self._clock() * 1000))

        fetch = asyncio.to_thread(self._fetcher.fetch_text, target)
        try:
            if self._deadline_seconds is None:
                text = await fetch
            else:
                text = await asyncio.wait_for(fetch, timeout=self._deadline_seconds)
        except asyncio.TimeoutError as exc:
            raise FetchFailure(
                f"Fetching {file_name} exceeded {self._deadline_seconds:.1f}s deadline."
            ) from exc

        raw_rows = parse_csv_text(text)
        if not raw_rows:
            logger.warning("Source loaded but contains no rows file_name=%s", file_name)
        return self._normalizer.normalize(raw_rows, schema)
