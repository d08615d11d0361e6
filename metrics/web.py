"""
metrics/web.py

Website analytics metric formula implementation.

Expected inputs
---------------
demographics : Sequence[WebDemographicRecord]
channels : Sequence[TrafficChannelRecord]
pages : Sequence[PageRecord]
utms : Sequence[UTMRecord]
    Only the keys present are aggregated.

Formulas
--------
Channel Engagement Rate = engaged sessions / sessions * 100
Views Per User          = page views / active users
UTM Engagement Rate     = engaged sessions / sessions * 100

Rows whose grouping dimension is "(not set)" or missing are left out of the
groupings but still count toward the totals.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Sequence, TypeVar

from metrics.base import BaseMetricFormula, safe_rate
from pulse.domain.records import (
    UNKNOWN,
    PageRecord,
    TrafficChannelRecord,
    UTMRecord,
    WebDemographicRecord,
)

R = TypeVar("R")

_UNSET_VALUES: frozenset[str] = frozenset({"(not set)", "not set", UNKNOWN.lower(), ""})


def is_set(value: str) -> bool:
    return value.strip().lower() not in _UNSET_VALUES


class WebMetricFormula(BaseMetricFormula):
    """
    Audience, acquisition, content, and campaign metrics of one website.
    """

    def calculate(self, inputs: Mapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if "demographics" in inputs:
            result["demographics"] = demographics_summary(inputs["demographics"] or ())
        if "channels" in inputs:
            result["traffic"] = traffic_summary(inputs["channels"] or ())
        if "pages" in inputs:
            result["pages"] = pages_summary(inputs["pages"] or ())
        if "utms" in inputs:
            result["utms"] = utm_summary(inputs["utms"] or ())
        return result


def _group(
    records: Iterable[R],
    key: Callable[[R], str],
    fields: Mapping[str, Callable[[R], float]],
) -> list[dict[str, Any]]:
    grouped: dict[str, dict[str, Any]] = {}
    for record in records:
        name = key(record)
        if not is_set(name):
            continue
        bucket = grouped.setdefault(name, {"name": name, **{field: 0 for field in fields}})
        for field, getter in fields.items():
            bucket[field] += getter(record)
    return list(grouped.values())


# ---------------------------------------------------------------------------
# Demographics
# ---------------------------------------------------------------------------


def demographics_summary(records: Sequence[WebDemographicRecord]) -> dict[str, Any]:
    """
    User totals plus users and sessions grouped by country, city, and language.
    """
    user_fields: dict[str, Callable[[WebDemographicRecord], float]] = {
        "users": lambda record: record.total_users,
        "sessions": lambda record: record.sessions,
    }
    return {
        "totals": {
            "total_users": sum(record.total_users for record in records),
            "new_users": sum(record.new_users for record in records),
            "returning_users": sum(record.returning_users for record in records),
            "sessions": sum(record.sessions for record in records),
        },
        "countries": _group(records, lambda record: record.country, user_fields),
        "cities": _group(records, lambda record: record.city, user_fields),
        "languages": _group(
            records,
            lambda record: record.language,
            {"users": lambda record: record.total_users},
        ),
    }


# ---------------------------------------------------------------------------
# Traffic acquisition
# ---------------------------------------------------------------------------


def traffic_summary(records: Sequence[TrafficChannelRecord]) -> dict[str, Any]:
    channels = _group(
        records,
        lambda record: record.channel,
        {
            "sessions": lambda record: record.sessions,
            "engaged_sessions": lambda record: record.engaged_sessions,
        },
    )
    for channel in channels:
        channel["engagement_rate"] = safe_rate(channel["engaged_sessions"], channel["sessions"])

    sessions = sum(record.sessions for record in records)
    engaged_sessions = sum(record.engaged_sessions for record in records)
    return {
        "totals": {
            "sessions": sessions,
            "engaged_sessions": engaged_sessions,
            "engagement_rate": safe_rate(engaged_sessions, sessions),
        },
        "channels": channels,
    }


# ---------------------------------------------------------------------------
# Pages and screens
# ---------------------------------------------------------------------------


def pages_summary(records: Sequence[PageRecord]) -> dict[str, Any]:
    """
    Pages grouped by path; the first title seen for a path is kept.
    """
    pages: dict[str, dict[str, Any]] = {}
    for record in records:
        page = pages.setdefault(
            record.path,
            {"path": record.path, "title": record.title, "views": 0, "users": 0, "events": 0},
        )
        page["views"] += record.views
        page["users"] += record.active_users
        page["events"] += record.event_count

    for page in pages.values():
        page["views_per_user"] = page["views"] / page["users"] if page["users"] else 0.0

    total_views = sum(page["views"] for page in pages.values())
    total_users = sum(page["users"] for page in pages.values())
    return {
        "totals": {
            "views": total_views,
            "users": total_users,
            "events": sum(page["events"] for page in pages.values()),
            "views_per_user": total_views / total_users if total_users else 0.0,
        },
        "pages": list(pages.values()),
    }


# ---------------------------------------------------------------------------
# UTM campaigns
# ---------------------------------------------------------------------------


def utm_summary(records: Sequence[UTMRecord]) -> dict[str, Any]:
    """
    Sessions, engaged sessions, and key events per UTM campaign and per source/medium.
    """
    fields: dict[str, Callable[[UTMRecord], float]] = {
        "sessions": lambda record: record.sessions,
        "engaged_sessions": lambda record: record.engaged_sessions,
        "key_events": lambda record: record.key_events,
    }
    campaigns = _group(records, lambda record: record.campaign, fields)
    sources = _group(records, lambda record: record.source_medium, fields)

    first_source: dict[str, str] = {}
    for record in records:
        first_source.setdefault(record.campaign, record.source_medium)
    for campaign in campaigns:
        campaign["source_medium"] = first_source.get(campaign["name"], UNKNOWN)

    for row in (*campaigns, *sources):
        row["engagement_rate"] = safe_rate(row["engaged_sessions"], row["sessions"])

    sessions = sum(record.sessions for record in records)
    engaged_sessions = sum(record.engaged_sessions for record in records)
    return {
        "totals": {
            "sessions": sessions,
            "engaged_sessions": engaged_sessions,
            "key_events": sum(record.key_events for record in records),
            "engagement_rate": safe_rate(engaged_sessions, sessions),
        },
        "campaigns": campaigns,
        "sources": sources,
    }
