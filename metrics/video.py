"""
metrics/video.py

Video channel (YouTube) metric formula implementation.

Expected inputs
---------------
age, gender : Sequence[AudienceShareRecord]
geography : Sequence[GeographyRecord]
subscription : Sequence[SubscriptionRecord]
content : Sequence[VideoContentRecord]
    Period-less snapshot exports; only the keys present are aggregated.

Formulas
--------
Subscription Share  = status views / all views * 100
Engagement Rate     = (likes + comments + shares) / views * 100
Top Video           = highest views, likes, comments, and shares

Division-by-zero cases return 0.0 for the affected metric.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from metrics.base import BaseMetricFormula, safe_rate
from pulse.domain.records import (
    AudienceShareRecord,
    GeographyRecord,
    SubscriptionRecord,
    VideoContentRecord,
)

TOP_VIDEO_METRICS: tuple[str, ...] = ("views", "likes", "comments", "shares")


class VideoMetricFormula(BaseMetricFormula):
    """
    Audience, reach, and content metrics of one video channel.
    """

    def calculate(self, inputs: Mapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if "age" in inputs:
            result["age"] = audience_shares(inputs["age"] or ())
        if "gender" in inputs:
            result["gender"] = audience_shares(inputs["gender"] or ())
        if "geography" in inputs:
            result["geography"] = geography_rows(inputs["geography"] or ())
        if "subscription" in inputs:
            result["subscription"] = subscription_split(inputs["subscription"] or ())
        if "content" in inputs:
            result["content"] = content_summary(inputs["content"] or ())
        return result


def audience_shares(records: Sequence[AudienceShareRecord]) -> list[dict[str, Any]]:
    return [
        {
            "segment": record.segment,
            "views_percentage": record.views_percentage,
            "average_view_duration": record.average_view_duration,
            "average_percentage_viewed": record.average_percentage_viewed,
            "watch_time_percentage": record.watch_time_percentage,
        }
        for record in records
    ]


def geography_rows(records: Sequence[GeographyRecord]) -> list[dict[str, Any]]:
    total_views = sum(record.views for record in records)
    return [
        {
            "country": record.country,
            "views": record.views,
            "watch_time_hours": record.watch_time_hours,
            "average_view_duration": record.average_view_duration,
            "share_of_views": safe_rate(record.views, total_views),
        }
        for record in records
    ]


def subscription_split(records: Sequence[SubscriptionRecord]) -> dict[str, Any]:
    """
    Views per subscription status with each status's share of all views.
    """
    total_views = sum(record.views for record in records)
    return {
        "total_views": total_views,
        "statuses": [
            {
                "status": record.status,
                "views": record.views,
                "watch_time_hours": record.watch_time_hours,
                "average_view_duration": record.average_view_duration,
                "percentage": safe_rate(record.views, total_views),
            }
            for record in records
        ],
    }


def video_row(record: VideoContentRecord) -> dict[str, Any]:
    engagements = record.likes + record.comments + record.shares
    return {
        "title": record.title,
        "publish_time": record.publish_time,
        "duration": record.duration,
        "views": record.views,
        "watch_time_hours": record.watch_time_hours,
        "likes": record.likes,
        "comments": record.comments,
        "shares": record.shares,
        "subscribers": record.subscribers,
        "impressions": record.impressions,
        "click_through_rate": record.click_through_rate,
        "engagements": engagements,
        "engagement_rate": safe_rate(engagements, record.views),
    }


def content_summary(records: Sequence[VideoContentRecord]) -> dict[str, Any]:
    rows = [video_row(record) for record in records]
    views = sum(row["views"] for row in rows)
    engagements = sum(row["engagements"] for row in rows)

    top_videos: dict[str, str | None] = {}
    for metric in TOP_VIDEO_METRICS:
        best: dict[str, Any] | None = None
        for row in rows:
            # first row wins ties
            if best is None or row[metric] > best[metric]:
                best = row
        top_videos[metric] = best["title"] if best is not None else None

    return {
        "totals": {
            "videos": len(rows),
            "views": views,
            "watch_time_hours": sum(row["watch_time_hours"] for row in rows),
            "likes": sum(row["likes"] for row in rows),
            "comments": sum(row["comments"] for row in rows),
            "shares": sum(row["shares"] for row in rows),
            "subscribers": sum(row["subscribers"] for row in rows),
            "impressions": sum(row["impressions"] for row in rows),
            "engagement_rate": safe_rate(engagements, views),
        },
        "top_videos": top_videos,
        "videos": rows,
    }
