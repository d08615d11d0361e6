"""
pulse/services/dashboard_service.py

Composes the ingestion pipeline into per-dashboard summaries.

Pipeline per request
--------------------
1. Load every file of the dashboard through the shared ``FileCache``.
2. Pick the reporting period: the caller's ``ComparisonSpec``, or the last
   30 days of available data against the 30 days before them.
3. Filter dated files to the current (and comparison) range. Snapshot
   exports without dates are used as-is and never compared.
4. Aggregate with the platform formula, rank with ``metrics.ranking``, and
   compare the two periods.

Every summary is a JSON-ready ``dict``. Load failures never raise here; the
affected sections come back empty and the failure shows in ``sources``.
"""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import Any, Mapping, Sequence

from metrics.email import aggregate_email, average_rate
from metrics.ranking import compare_entities, compare_totals, top_n
from metrics.social import (
    facebook_post_row,
    facebook_post_totals,
    facebook_video_row,
    facebook_video_totals,
    follower_growth,
    instagram_engagement_distribution,
    instagram_post_row,
    instagram_post_totals,
    page_metrics,
)
from metrics.video import VideoMetricFormula
from metrics.web import WebMetricFormula, utm_summary
from pulse.config import get_dashboard_settings, get_file_cache_settings, get_http_fetch_settings
from pulse.dashboard_config import (
    DashboardConfig,
    SourceProbe,
    load_dashboard_configs,
    validate_dashboard_config,
)
from pulse.domain.date_range import ComparisonSpec, DateRange, default_comparison
from pulse.domain.results import SourceCheckResult
from pulse.formatting import kpi_card
from pulse.mappers.schemas import get_schema
from pulse.services.date_filter import available_date_range, filter_by_date_range
from pulse.sources.cache import FileCache
from pulse.sources.fetcher import CSVFetcher

logger = logging.getLogger(__name__)

DEFAULT_COMPARISON_DAYS = 30

Files = Mapping[str, Sequence[Any]]


class UnknownDashboardError(KeyError):
    """
    Raised when a dashboard type has no configuration.
    """


class DashboardService:
    """
    Builds dashboard summaries from cached platform files.

    The cache is injected so tests and the API share one explicit store.
    """

    def __init__(
        self,
        *,
        cache: FileCache,
        configs: Mapping[str, DashboardConfig],
        probe: SourceProbe | None = None,
        top_n: int = 5,
    ) -> None:
        self._cache = cache
        self._configs = dict(configs)
        self._probe = probe
        self._top_n = top_n

    @property
    def dashboard_types(self) -> list[str]:
        return list(self._configs)

    def config(self, dashboard_type: str) -> DashboardConfig:
        try:
            return self._configs[dashboard_type]
        except KeyError as exc:
            raise UnknownDashboardError(dashboard_type) from exc

    def dashboard_files(self, dashboard_type: str) -> list[str]:
        return list(self.config(dashboard_type).files)

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    async def summary(
        self,
        dashboard_type: str,
        comparison: ComparisonSpec | None = None,
        limit: int | None = None,
    ) -> dict[str, Any]:
        """
        Build the summary of one dashboard.

        Raises ``UnknownDashboardError`` for an unconfigured dashboard type.
        """

        builders = {
            "email": self.email_summary,
            "social": self.social_summary,
            "web": self.web_summary,
            "video": self.video_summary,
        }
        self.config(dashboard_type)
        builder = builders.get(dashboard_type)
        if builder is None:
            raise UnknownDashboardError(dashboard_type)
        return await builder(comparison=comparison, limit=limit)

    async def email_summary(
        self,
        comparison: ComparisonSpec | None = None,
        limit: int | None = None,
    ) -> dict[str, Any]:
        limit = limit or self._top_n
        period, current, prior = await self._period_files("email", comparison)

        def section(files: Files) -> dict[str, Any]:
            aggregate = aggregate_email(files.get("Email_Campaign_Performance.csv", ()))
            result = aggregate.to_dict()
            campaigns = result["campaigns"]
            result["average_open_rate"] = average_rate(aggregate.campaigns, "open_rate")
            result["average_click_rate"] = average_rate(aggregate.campaigns, "click_rate")
            result["top_campaigns_by_open_rate"] = top_n(campaigns, "open_rate", limit)
            result["top_campaigns_by_click_rate"] = top_n(campaigns, "click_rate", limit)
            return result

        current_section = section(current)
        prior_section = section(prior) if prior is not None else None
        changes = None
        if prior_section is not None:
            rate_fields = {"average_open_rate", "average_click_rate"}
            changes = {
                "totals": compare_totals(current_section["totals"], prior_section["totals"]),
                "rates": compare_totals(
                    {**current_section["rates"], **_pick(current_section, rate_fields)},
                    {**prior_section["rates"], **_pick(prior_section, rate_fields)},
                    rate_fields=set(current_section["rates"]) | rate_fields,
                ),
                "campaigns": compare_entities(
                    current_section["campaigns"],
                    prior_section["campaigns"],
                    key="name",
                    metrics=("sent", "opened", "clicked"),
                ),
            }
        cards = [
            kpi_card(
                "Emails Sent",
                current_section["totals"]["sent"],
                _dig(prior_section, "totals", "sent"),
            ),
            kpi_card(
                "Open Rate",
                current_section["rates"]["open_rate"],
                _dig(prior_section, "rates", "open_rate"),
                "percent",
            ),
            kpi_card(
                "Click Rate",
                current_section["rates"]["click_rate"],
                _dig(prior_section, "rates", "click_rate"),
                "percent",
            ),
            kpi_card(
                "Unsubscribe Rate",
                current_section["rates"]["unsubscribe_rate"],
                _dig(prior_section, "rates", "unsubscribe_rate"),
                "percent",
            ),
        ]
        return self._envelope("email", period, current_section, prior_section, changes, cards)

    async def social_summary(
        self,
        comparison: ComparisonSpec | None = None,
        limit: int | None = None,
    ) -> dict[str, Any]:
        limit = limit or self._top_n
        period, current, prior = await self._period_files("social", comparison)

        def platform(files: Files, prefix: str) -> dict[str, Any]:
            series = {
                name: files.get(f"{prefix}_{name.capitalize()}.csv", ())
                for name in ("follows", "reach", "visits", "views", "interactions")
            }
            section: dict[str, Any] = {
                "page_metrics": page_metrics(**series),
                "follower_growth": follower_growth(series["follows"]),
            }
            if prefix == "FB":
                posts = files.get("FB_Posts.csv", ())
                videos = files.get("FB_Videos.csv", ())
                section["posts"] = facebook_post_totals(posts)
                section["top_posts"] = top_n([facebook_post_row(post) for post in posts], "reach", limit)
                section["videos"] = facebook_video_totals(videos)
                section["top_videos"] = top_n([facebook_video_row(video) for video in videos], "views", limit)
            else:
                posts = files.get("IG_Posts.csv", ())
                section["posts"] = instagram_post_totals(posts)
                section["top_posts"] = top_n([instagram_post_row(post) for post in posts], "reach", limit)
                section["engagement_distribution"] = instagram_engagement_distribution(posts)
            return section

        def build(files: Files) -> dict[str, Any]:
            return {"facebook": platform(files, "FB"), "instagram": platform(files, "IG")}

        current_section = build(current)
        prior_section = build(prior) if prior is not None else None
        changes = None
        if prior_section is not None:
            changes = {
                name: {
                    "page_metrics": compare_totals(
                        current_section[name]["page_metrics"],
                        prior_section[name]["page_metrics"],
                        rate_fields=("engagement_rate",),
                    ),
                    "posts": compare_totals(
                        current_section[name]["posts"],
                        prior_section[name]["posts"],
                        rate_fields=("engagement_rate",),
                    ),
                }
                for name in ("facebook", "instagram")
            }
        cards = []
        for name, label in (("facebook", "Facebook"), ("instagram", "Instagram")):
            current_page = current_section[name]["page_metrics"]
            cards.extend(
                [
                    kpi_card(
                        f"{label} Followers",
                        current_page["followers"],
                        _dig(prior_section, name, "page_metrics", "followers"),
                    ),
                    kpi_card(
                        f"{label} Reach",
                        current_page["reach"],
                        _dig(prior_section, name, "page_metrics", "reach"),
                    ),
                    kpi_card(
                        f"{label} Engagement Rate",
                        current_page["engagement_rate"],
                        _dig(prior_section, name, "page_metrics", "engagement_rate"),
                        "percent",
                    ),
                ]
            )
        return self._envelope("social", period, current_section, prior_section, changes, cards)

    async def web_summary(
        self,
        comparison: ComparisonSpec | None = None,
        limit: int | None = None,
    ) -> dict[str, Any]:
        limit = limit or self._top_n
        period, current, prior = await self._period_files("web", comparison)

        section = WebMetricFormula().calculate(
            {
                "demographics": current.get("GA_Demographics.csv", ()),
                "channels": current.get("GA_Traffic_Acquisition.csv", ()),
                "pages": current.get("GA_Pages_And_Screens.csv", ()),
                "utms": current.get("GA_UTMs.csv", ()),
            }
        )
        demographics = section["demographics"]
        demographics["top_countries"] = top_n(demographics["countries"], "users", limit)
        demographics["top_cities"] = top_n(demographics["cities"], "users", limit)
        demographics["top_languages"] = top_n(demographics["languages"], "users", limit)
        section["traffic"]["top_channels"] = top_n(section["traffic"]["channels"], "sessions", limit)
        section["pages"]["top_pages"] = top_n(section["pages"]["pages"], "views", limit)
        section["utms"]["top_campaigns"] = top_n(section["utms"]["campaigns"], "sessions", limit)
        section["utms"]["top_sources"] = top_n(section["utms"]["sources"], "sessions", limit)

        prior_section = None
        changes = None
        if prior is not None:
            prior_section = {"utms": utm_summary(prior.get("GA_UTMs.csv", ()))}
            changes = {
                "utms": {
                    "totals": compare_totals(
                        section["utms"]["totals"],
                        prior_section["utms"]["totals"],
                        rate_fields=("engagement_rate",),
                    ),
                    "campaigns": compare_entities(
                        section["utms"]["campaigns"],
                        prior_section["utms"]["campaigns"],
                        key="name",
                        metrics=("sessions", "engaged_sessions", "key_events"),
                    ),
                }
            }
        cards = [
            kpi_card("Total Users", section["demographics"]["totals"]["total_users"]),
            kpi_card("Sessions", section["traffic"]["totals"]["sessions"]),
            kpi_card("Engagement Rate", section["traffic"]["totals"]["engagement_rate"], kind="percent"),
            kpi_card("Page Views", section["pages"]["totals"]["views"]),
            kpi_card(
                "Campaign Sessions",
                section["utms"]["totals"]["sessions"],
                _dig(prior_section, "utms", "totals", "sessions"),
            ),
        ]
        return self._envelope("web", period, section, prior_section, changes, cards)

    async def video_summary(
        self,
        comparison: ComparisonSpec | None = None,
        limit: int | None = None,
    ) -> dict[str, Any]:
        limit = limit or self._top_n
        # Every video export is a period-less snapshot.
        period, current, _ = await self._period_files("video", comparison)

        section = VideoMetricFormula().calculate(
            {
                "age": current.get("YouTube_Age.csv", ()),
                "gender": current.get("YouTube_Gender.csv", ()),
                "geography": current.get("YouTube_Geography.csv", ()),
                "subscription": current.get("YouTube_Subscription_Status.csv", ()),
                "content": current.get("YouTube_Content.csv", ()),
            }
        )
        section["top_geographies"] = top_n(section["geography"], "views", limit)
        section["content"]["top_videos_by_views"] = top_n(section["content"]["videos"], "views", limit)
        totals = section["content"]["totals"]
        cards = [
            kpi_card("Total Views", totals["views"]),
            kpi_card("Watch Time (hours)", totals["watch_time_hours"]),
            kpi_card("Subscribers Gained", totals["subscribers"]),
            kpi_card("Engagement Rate", totals["engagement_rate"], kind="percent"),
        ]
        return self._envelope("video", period, section, None, None, cards)

    # ------------------------------------------------------------------
    # Diagnostics and refresh
    # ------------------------------------------------------------------

    def source_statuses(self, dashboard_type: str) -> dict[str, dict[str, Any]]:
        return {
            file_name: self._cache.status(file_name).to_dict()
            for file_name in self.dashboard_files(dashboard_type)
        }

    async def validate(self, dashboard_type: str) -> SourceCheckResult:
        """
        Probe the configured sources of a dashboard without loading them.
        """

        config = self.config(dashboard_type)
        if self._probe is None:
            return SourceCheckResult(valid=False, message="No source probe is configured.")
        return await asyncio.to_thread(validate_dashboard_config, config, self._probe)

    def refresh(self, dashboard_type: str) -> list[str]:
        """
        Invalidate every cached file of a dashboard; the next summary reloads them.
        """

        file_names = self.dashboard_files(dashboard_type)
        for file_name in file_names:
            self._cache.invalidate(file_name)
        logger.info("Dashboard refreshed dashboard=%s files=%s", dashboard_type, len(file_names))
        return file_names

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _period_files(
        self,
        dashboard_type: str,
        comparison: ComparisonSpec | None,
    ) -> tuple[ComparisonSpec | None, dict[str, list[Any]], dict[str, list[Any]] | None]:
        """
        Load a dashboard's files and split dated ones into current and prior periods.

        Returns ``(period, current, prior)``. ``prior`` holds dated files only
        and is ``None`` when there is no comparison range.
        """

        loaded = await self._cache.load_many(self.dashboard_files(dashboard_type))
        dated = {name: records for name, records in loaded.items() if _is_dated(name)}

        period = comparison
        if period is None and dated:
            available = available_date_range(dated.values())
            if available is not None:
                period = default_comparison(
                    available.end,
                    earliest=available.start,
                    days=DEFAULT_COMPARISON_DAYS,
                )

        if period is None:
            return None, loaded, None

        current = {
            name: _filter(name, records, period.current) if name in dated else records
            for name, records in loaded.items()
        }
        prior = None
        if period.comparison is not None:
            prior = {name: _filter(name, records, period.comparison) for name, records in dated.items()}
        return period, current, prior

    def _envelope(
        self,
        dashboard_type: str,
        period: ComparisonSpec | None,
        current: dict[str, Any],
        prior: dict[str, Any] | None,
        changes: dict[str, Any] | None,
        kpi_cards: list[dict[str, Any]],
    ) -> dict[str, Any]:
        return {
            "dashboard_type": dashboard_type,
            "period": period.to_dict() if period is not None else None,
            "current": current,
            "comparison": prior,
            "changes": changes,
            "kpi_cards": kpi_cards,
            "sources": self.source_statuses(dashboard_type),
        }


def _is_dated(file_name: str) -> bool:
    schema = get_schema(file_name)
    return schema is not None and schema.dated


def _filter(file_name: str, records: Sequence[Any], date_range: DateRange) -> list[Any]:
    schema = get_schema(file_name)
    field = schema.date_field if schema is not None and schema.date_field else "date"
    return filter_by_date_range(records, date_range, field)


def _pick(section: Mapping[str, Any], keys: set[str]) -> dict[str, Any]:
    return {key: section[key] for key in keys if key in section}


def _dig(section: Mapping[str, Any] | None, *path: str) -> Any:
    value: Any = section
    for key in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


@lru_cache(maxsize=1)
def get_dashboard_service() -> DashboardService:
    """
    Build the process-wide dashboard service from environment settings.
    """

    dashboard_settings = get_dashboard_settings()
    configs = load_dashboard_configs(dashboard_settings.config_path)
    sources = {
        file_name: url
        for config in configs.values()
        for file_name, url in config.files.items()
    }
    fetcher = CSVFetcher(http_settings=get_http_fetch_settings())
    cache = FileCache(
        sources=sources,
        fetcher=fetcher,
        settings=get_file_cache_settings(),
    )
    return DashboardService(
        cache=cache,
        configs=configs,
        probe=fetcher,
        top_n=dashboard_settings.top_n,
    )
