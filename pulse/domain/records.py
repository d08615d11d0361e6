"""
pulse/domain/records.py

Typed records produced by CSV normalization, one type per platform export.

Counts are non-negative integers. Rate-typed source columns are carried as
0-100 percentages; every other rate is derived at aggregation time.
"""

from __future__ import annotations

from dataclasses import dataclass

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class EmailCampaignRecord:
    """
    One row of the email campaign performance export.
    """

    name: str
    date: str
    sent: int
    opened: int
    clicked: int
    unsubscribes: int
    bounces: int
    reported_open_rate: float
    reported_click_rate: float


@dataclass(frozen=True)
class DailyMetricRecord:
    """
    One day of a single page-level social metric (follows, reach, visits, ...).
    """

    date: str
    value: int


@dataclass(frozen=True)
class FacebookPostRecord:
    post_id: str
    title: str
    description: str
    date: str
    publish_time: str
    reach: int
    reactions: int
    comments: int
    shares: int
    clicks: int


@dataclass(frozen=True)
class FacebookVideoRecord:
    title: str
    date: str
    views: int
    reactions: int
    comments: int
    shares: int
    average_seconds_viewed: float


@dataclass(frozen=True)
class InstagramPostRecord:
    post_id: str
    username: str
    description: str
    post_type: str
    date: str
    publish_time: str
    reach: int
    likes: int
    comments: int
    shares: int
    saves: int
    follows: int


@dataclass(frozen=True)
class WebDemographicRecord:
    country: str
    city: str
    language: str
    total_users: int
    new_users: int
    returning_users: int
    sessions: int


@dataclass(frozen=True)
class TrafficChannelRecord:
    channel: str
    sessions: int
    engaged_sessions: int
    engagement_rate: float


@dataclass(frozen=True)
class PageRecord:
    path: str
    title: str
    views: int
    active_users: int
    event_count: int


@dataclass(frozen=True)
class UTMRecord:
    campaign: str
    source_medium: str
    date: str
    sessions: int
    engaged_sessions: int
    engagement_rate: float
    key_events: float


@dataclass(frozen=True)
class AudienceShareRecord:
    """
    One audience segment (age band or gender) of a video channel.
    """

    segment: str
    views_percentage: float
    average_view_duration: str
    average_percentage_viewed: float
    watch_time_percentage: float


@dataclass(frozen=True)
class GeographyRecord:
    country: str
    views: int
    watch_time_hours: float
    average_view_duration: str


@dataclass(frozen=True)
class SubscriptionRecord:
    status: str
    views: int
    watch_time_hours: float
    average_view_duration: str


@dataclass(frozen=True)
class VideoContentRecord:
    title: str
    publish_time: str
    duration: float
    views: int
    watch_time_hours: float
    likes: int
    comments: int
    shares: int
    subscribers: int
    impressions: int
    click_through_rate: float
