"""
JSON event lines for the file cache lifecycle.

Events emitted by ``pulse.sources.cache``:

- ``file_cache_hit`` (DEBUG): a load served from a stored entry.
- ``file_cache_loaded`` (INFO): a source fetched and normalized, with ``rows``.
- ``file_cache_load_failed`` (ERROR): a resolve/fetch/parse failure, with
  ``error_type`` and ``error``.
- ``file_cache_invalidated`` (INFO): an entry dropped by refresh.
- ``file_cache_stale_result_dropped`` (DEBUG): a load finished after its key
  was invalidated.
"""

from __future__ import annotations

import json
import logging
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Log ``{"event": event, **fields}`` as one sorted JSON line.

    Values that are not JSON types are rendered with ``str``. Nothing is
    serialized when ``level`` is disabled for ``logger``.
    """

    if not logger.isEnabledFor(level):
        return
    logger.log(level, json.dumps({"event": event, **fields}, default=str, sort_keys=True))
