"""
pulse/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    for filename in (".env", ".env.local"):
        env_path = PROJECT_ROOT / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _resolve_path(raw_path: str) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (PROJECT_ROOT / candidate).resolve()


@dataclass(frozen=True)
class HTTPFetchSettings:
    """
    Shared HTTP behavior settings for CSV downloads.
    """

    timeout_seconds: float = 15.0
    max_retries: int = 2
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0


@dataclass(frozen=True)
class FileCacheSettings:
    """
    Runtime settings for the file cache.

    ``fetch_deadline_seconds`` of ``None`` means no deadline is imposed on
    a single load.
    """

    fetch_deadline_seconds: float | None = 30.0
    cache_busting: bool = True


@dataclass(frozen=True)
class DashboardSettings:
    """
    Settings for dashboard summaries and their periodic refresh.
    """

    config_path: str
    top_n: int = 5
    scheduler_enabled: bool = True


@lru_cache(maxsize=1)
def get_http_fetch_settings() -> HTTPFetchSettings:
    """
    Return cached HTTP fetch settings from environment variables.
    """

    return HTTPFetchSettings(
        timeout_seconds=max(1.0, _get_float_env("PULSE_HTTP_TIMEOUT_SECONDS", 15.0)),
        max_retries=max(0, _get_int_env("PULSE_HTTP_MAX_RETRIES", 2)),
        backoff_initial_seconds=max(0.0, _get_float_env("PULSE_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("PULSE_HTTP_BACKOFF_MULTIPLIER", 2.0)),
    )


@lru_cache(maxsize=1)
def get_file_cache_settings() -> FileCacheSettings:
    """
    Return cached file cache settings from environment variables.
    """

    deadline = _get_float_env("PULSE_FETCH_DEADLINE_SECONDS", 30.0)
    return FileCacheSettings(
        fetch_deadline_seconds=deadline if deadline > 0 else None,
        cache_busting=_get_bool_env("PULSE_CACHE_BUSTING", True),
    )


@lru_cache(maxsize=1)
def get_dashboard_settings() -> DashboardSettings:
    """
    Return cached dashboard settings from environment variables.
    """

    return DashboardSettings(
        config_path=str(_resolve_path(_get_str_env("PULSE_DASHBOARD_CONFIG_PATH", "dashboards.json"))),
        top_n=max(1, _get_int_env("PULSE_TOP_N", 5)),
        scheduler_enabled=_get_bool_env("PULSE_SCHEDULER_ENABLED", True),
    )
