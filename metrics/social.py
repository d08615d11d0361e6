"""
metrics/social.py

Social page (Facebook / Instagram) metric formula implementation.

Expected inputs
---------------
follows, reach, visits, views, interactions : Sequence[DailyMetricRecord]
    Daily page-level series of one platform, already date-filtered.
facebook_posts : Sequence[FacebookPostRecord]
facebook_videos : Sequence[FacebookVideoRecord]
instagram_posts : Sequence[InstagramPostRecord]
    Optional; only the keys present are aggregated.

Formulas
--------
Followers           = sum of daily follows over the period
Engagement Rate     = interactions / reach * 100
Post Engagements    = reactions (or likes) + comments + shares
Post Engagement Rate= post engagements / post reach * 100
Follower Growth     = daily follows summed per calendar month

Division-by-zero cases return 0.0 for the affected metric.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from metrics.base import BaseMetricFormula, safe_rate
from pulse.domain.records import (
    DailyMetricRecord,
    FacebookPostRecord,
    FacebookVideoRecord,
    InstagramPostRecord,
)
from pulse.validators.field_parser import parse_date

PAGE_SERIES: tuple[str, ...] = ("follows", "reach", "visits", "views", "interactions")


class SocialMetricFormula(BaseMetricFormula):
    """
    Page metrics plus post and video totals for one social platform.
    """

    def calculate(self, inputs: Mapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {
            "page_metrics": page_metrics(
                **{name: inputs.get(name) or () for name in PAGE_SERIES}
            ),
            "follower_growth": follower_growth(inputs.get("follows") or ()),
        }
        if "facebook_posts" in inputs:
            result["posts"] = facebook_post_totals(inputs["facebook_posts"] or ())
        if "facebook_videos" in inputs:
            result["videos"] = facebook_video_totals(inputs["facebook_videos"] or ())
        if "instagram_posts" in inputs:
            result["posts"] = instagram_post_totals(inputs["instagram_posts"] or ())
            result["engagement_distribution"] = instagram_engagement_distribution(
                inputs["instagram_posts"] or ()
            )
        return result


# ---------------------------------------------------------------------------
# Page-level series
# ---------------------------------------------------------------------------


def _series_total(records: Iterable[DailyMetricRecord]) -> int:
    return sum(record.value for record in records)


def page_metrics(
    *,
    follows: Sequence[DailyMetricRecord] = (),
    reach: Sequence[DailyMetricRecord] = (),
    visits: Sequence[DailyMetricRecord] = (),
    views: Sequence[DailyMetricRecord] = (),
    interactions: Sequence[DailyMetricRecord] = (),
) -> dict[str, float]:
    """
    Period totals of the daily page series and the page engagement rate.
    """
    total_reach = _series_total(reach)
    total_interactions = _series_total(interactions)
    return {
        "followers": _series_total(follows),
        "reach": total_reach,
        "visits": _series_total(visits),
        "views": _series_total(views),
        "interactions": total_interactions,
        "engagement_rate": safe_rate(total_interactions, total_reach),
    }


def follower_growth(follows: Iterable[DailyMetricRecord]) -> list[dict[str, Any]]:
    """
    New followers per calendar month, oldest month first.

    Rows with an unparsable date are left out.
    """
    monthly: dict[str, int] = {}
    for record in follows:
        parsed = parse_date(record.date)
        if parsed is None:
            continue
        month = parsed.strftime("%Y-%m")
        monthly[month] = monthly.get(month, 0) + record.value
    return [{"month": month, "followers": monthly[month]} for month in sorted(monthly)]


# ---------------------------------------------------------------------------
# Posts and videos
# ---------------------------------------------------------------------------


def facebook_post_row(record: FacebookPostRecord) -> dict[str, Any]:
    engagements = record.reactions + record.comments + record.shares
    return {
        "post_id": record.post_id,
        "title": record.title,
        "date": record.date,
        "reach": record.reach,
        "reactions": record.reactions,
        "comments": record.comments,
        "shares": record.shares,
        "clicks": record.clicks,
        "engagements": engagements,
        "engagement_rate": safe_rate(engagements, record.reach),
    }


def facebook_post_totals(posts: Iterable[FacebookPostRecord]) -> dict[str, float]:
    rows = list(posts)
    reach = sum(row.reach for row in rows)
    engagements = sum(row.reactions + row.comments + row.shares for row in rows)
    return {
        "posts": len(rows),
        "reach": reach,
        "reactions": sum(row.reactions for row in rows),
        "comments": sum(row.comments for row in rows),
        "shares": sum(row.shares for row in rows),
        "clicks": sum(row.clicks for row in rows),
        "engagements": engagements,
        "engagement_rate": safe_rate(engagements, reach),
    }


def facebook_video_row(record: FacebookVideoRecord) -> dict[str, Any]:
    return {
        "title": record.title,
        "date": record.date,
        "views": record.views,
        "engagements": record.reactions + record.comments + record.shares,
        "average_seconds_viewed": record.average_seconds_viewed,
    }


def facebook_video_totals(videos: Iterable[FacebookVideoRecord]) -> dict[str, float]:
    """
    Video count, 3-second views, engagements, and mean seconds viewed.
    """
    rows = list(videos)
    seconds = [row.average_seconds_viewed for row in rows]
    return {
        "videos": len(rows),
        "views": sum(row.views for row in rows),
        "engagements": sum(row.reactions + row.comments + row.shares for row in rows),
        "average_seconds_viewed": sum(seconds) / len(seconds) if seconds else 0.0,
    }


def instagram_post_row(record: InstagramPostRecord) -> dict[str, Any]:
    engagements = record.likes + record.comments + record.shares
    return {
        "post_id": record.post_id,
        "description": record.description,
        "post_type": record.post_type,
        "date": record.date,
        "reach": record.reach,
        "likes": record.likes,
        "comments": record.comments,
        "shares": record.shares,
        "saves": record.saves,
        "follows": record.follows,
        "engagements": engagements,
        "engagement_rate": safe_rate(engagements, record.reach),
    }


def instagram_post_totals(posts: Iterable[InstagramPostRecord]) -> dict[str, float]:
    rows = list(posts)
    reach = sum(row.reach for row in rows)
    engagements = sum(row.likes + row.comments + row.shares for row in rows)
    return {
        "posts": len(rows),
        "reach": reach,
        "likes": sum(row.likes for row in rows),
        "comments": sum(row.comments for row in rows),
        "shares": sum(row.shares for row in rows),
        "saves": sum(row.saves for row in rows),
        "follows": sum(row.follows for row in rows),
        "engagements": engagements,
        "engagement_rate": safe_rate(engagements, reach),
    }


def instagram_engagement_distribution(posts: Iterable[InstagramPostRecord]) -> list[dict[str, Any]]:
    """
    Share of likes, comments, shares, and saves in all post interactions.
    """
    rows = list(posts)
    counts = {
        "likes": sum(row.likes for row in rows),
        "comments": sum(row.comments for row in rows),
        "shares": sum(row.shares for row in rows),
        "saves": sum(row.saves for row in rows),
    }
    total = sum(counts.values())
    return [
        {"type": name, "count": count, "percentage": safe_rate(count, total)}
        for name, count in counts.items()
    ]
