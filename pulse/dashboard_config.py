"""
pulse/dashboard_config.py

Per-dashboard source configuration: which logical files feed a dashboard,
where each one lives, and how often the dashboard refreshes.

Configurations are read-only input. They come from a JSON file merged over
built-in defaults, so a dashboard missing from the file still has every file
slot it expects (with an empty URL).
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Protocol

from pydantic import BaseModel, Field, ValidationError

from pulse.domain.results import SourceCheckResult
from pulse.sources.fetcher import is_remote_source
from pulse.sources.resolver import resolve_source

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL_MINUTES = 5

DEFAULT_DASHBOARD_FILES: dict[str, tuple[str, ...]] = {
    "email": ("Email_Campaign_Performance.csv",),
    "social": (
        "FB_Posts.csv",
        "FB_Videos.csv",
        "FB_Follows.csv",
        "FB_Reach.csv",
        "FB_Visits.csv",
        "FB_Views.csv",
        "FB_Interactions.csv",
        "IG_Posts.csv",
        "IG_Follows.csv",
        "IG_Reach.csv",
        "IG_Visits.csv",
        "IG_Views.csv",
        "IG_Interactions.csv",
    ),
    "web": (
        "GA_Demographics.csv",
        "GA_Traffic_Acquisition.csv",
        "GA_Pages_And_Screens.csv",
        "GA_UTMs.csv",
    ),
    "video": (
        "YouTube_Age.csv",
        "YouTube_Gender.csv",
        "YouTube_Geography.csv",
        "YouTube_Subscription_Status.csv",
        "YouTube_Content.csv",
    ),
}

DASHBOARD_TYPES: tuple[str, ...] = tuple(DEFAULT_DASHBOARD_FILES)


class DashboardConfig(BaseModel):
    """
    Source mapping and refresh cadence of one dashboard.
    """

    dashboard_type: str
    files: dict[str, str] = Field(default_factory=dict)
    refresh_interval_minutes: int = Field(default=DEFAULT_REFRESH_INTERVAL_MINUTES, ge=1, le=60)
    last_updated: datetime | None = None

    def configured_files(self) -> dict[str, str]:
        """
        Files that have a non-blank source URL.
        """

        return {name: url.strip() for name, url in self.files.items() if url and url.strip()}


class SourceProbe(Protocol):
    def probe(self, url: str) -> bool: ...


def default_dashboard_config(dashboard_type: str) -> DashboardConfig:
    if dashboard_type not in DEFAULT_DASHBOARD_FILES:
        raise KeyError(f"Unknown dashboard type: {dashboard_type}")
    return DashboardConfig(
        dashboard_type=dashboard_type,
        files={name: "" for name in DEFAULT_DASHBOARD_FILES[dashboard_type]},
    )


def merge_dashboard_config(dashboard_type: str, overrides: Mapping[str, Any]) -> DashboardConfig:
    """
    Merge stored values over the defaults; ``files`` is merged key by key.

    Raises ``pydantic.ValidationError`` for out-of-range values.
    """

    base = default_dashboard_config(dashboard_type)
    files = dict(base.files)
    stored_files = overrides.get("files")
    if isinstance(stored_files, Mapping):
        files.update({str(name): str(url or "") for name, url in stored_files.items()})

    payload: dict[str, Any] = {
        "dashboard_type": dashboard_type,
        "files": files,
        "refresh_interval_minutes": overrides.get(
            "refresh_interval_minutes",
            overrides.get("refreshInterval", base.refresh_interval_minutes),
        ),
        "last_updated": overrides.get("last_updated", overrides.get("lastUpdated")),
    }
    return DashboardConfig.model_validate(payload)


def load_dashboard_configs(path: str | Path) -> dict[str, DashboardConfig]:
    """
    Load every dashboard configuration from a JSON file.

    The file maps dashboard type to ``{files, refresh_interval_minutes,
    last_updated}``. A missing or unreadable file, or an invalid entry,
    falls back to defaults and is logged.
    """

    configs = {name: default_dashboard_config(name) for name in DASHBOARD_TYPES}
    config_path = Path(path)
    if not config_path.exists():
        logger.info("Dashboard config file not found; using defaults path=%s", config_path)
        return configs

    try:
        stored = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Dashboard config file unreadable; using defaults path=%s error=%s", config_path, exc)
        return configs

    if not isinstance(stored, dict):
        logger.error("Dashboard config file must hold a JSON object path=%s", config_path)
        return configs

    for dashboard_type, overrides in stored.items():
        if dashboard_type not in DEFAULT_DASHBOARD_FILES:
            logger.warning("Ignoring unknown dashboard type in config dashboard=%s", dashboard_type)
            continue
        if not isinstance(overrides, dict):
            logger.warning("Ignoring malformed dashboard config dashboard=%s", dashboard_type)
            continue
        try:
            configs[dashboard_type] = merge_dashboard_config(dashboard_type, overrides)
        except ValidationError as exc:
            logger.error(
                "Invalid dashboard config; using defaults dashboard=%s errors=%s",
                dashboard_type,
                exc.errors(),
            )
    return configs


def validate_dashboard_config(config: DashboardConfig, fetcher: SourceProbe) -> SourceCheckResult:
    """
    Check that a dashboard has sources and that each one resolves and answers.

    Stops at the first failing file.
    """

    configured = config.configured_files()
    if not configured:
        return SourceCheckResult(
            valid=False,
            message="No file URLs have been configured. Please add Google Drive links.",
        )

    for file_name, url in configured.items():
        target = url
        if is_remote_source(url):
            resolution = resolve_source(url)
            if not resolution.ok:
                return SourceCheckResult(
                    valid=False,
                    message=f"The URL for {file_name} is not a recognized Google Drive or Sheets link.",
                )
            target = resolution.download_url
        if not fetcher.probe(target):
            return SourceCheckResult(
                valid=False,
                message=f"The URL for {file_name} is not accessible. Please check sharing permissions.",
            )

    return SourceCheckResult(valid=True, message="Configuration validated successfully!")
