"""
pulse/mappers/schemas.py

Declared column schemas for every supported platform export.

Each logical file name maps to exactly one ``PlatformSchema``. A field lists
the source headers it may appear under, in priority order.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from pulse.domain.records import (
    AudienceShareRecord,
    DailyMetricRecord,
    EmailCampaignRecord,
    FacebookPostRecord,
    FacebookVideoRecord,
    GeographyRecord,
    InstagramPostRecord,
    PageRecord,
    SubscriptionRecord,
    TrafficChannelRecord,
    UTMRecord,
    VideoContentRecord,
    WebDemographicRecord,
)


class FieldKind(str, Enum):
    INT = "int"
    FLOAT = "float"
    RATE = "rate"
    TEXT = "text"
    NAME = "name"
    DATE = "date"


@dataclass(frozen=True)
class FieldSpec:
    """
    One target field of a normalized record.
    """

    name: str
    kind: FieldKind
    headers: tuple[str, ...]
    default: Any = None


@dataclass(frozen=True)
class PlatformSchema:
    """
    Column layout of one platform export and the record type it yields.

    ``date_field`` names the record attribute used for date filtering;
    ``None`` marks a period-less snapshot export.
    """

    file_name: str
    record_type: type
    fields: tuple[FieldSpec, ...]
    date_field: str | None = None

    @property
    def dated(self) -> bool:
        return self.date_field is not None


def _field(name: str, kind: FieldKind, *headers: str, default: Any = None) -> FieldSpec:
    return FieldSpec(name=name, kind=kind, headers=tuple(headers), default=default)


_DATE_HEADERS = ("Date", "Publish time", "publish_time", "date")

EMAIL_CAMPAIGN_SCHEMA = PlatformSchema(
    file_name="Email_Campaign_Performance.csv",
    record_type=EmailCampaignRecord,
    date_field="date",
    fields=(
        _field("name", FieldKind.NAME, "Campaign"),
        _field("date", FieldKind.DATE, *_DATE_HEADERS),
        _field("sent", FieldKind.INT, "Emails sent"),
        _field("opened", FieldKind.INT, "Email opened (MPP excluded)", "Email opened"),
        _field("clicked", FieldKind.INT, "Email clicked"),
        _field("unsubscribes", FieldKind.INT, "Email unsubscribes"),
        _field("bounces", FieldKind.INT, "Email bounces"),
        _field("reported_open_rate", FieldKind.RATE, "Email open rate (MPP excluded)", "Email open rate"),
        _field("reported_click_rate", FieldKind.RATE, "Email click rate"),
    ),
)


def _daily_metric_schema(file_name: str) -> PlatformSchema:
    return PlatformSchema(
        file_name=file_name,
        record_type=DailyMetricRecord,
        date_field="date",
        fields=(
            _field("date", FieldKind.DATE, "Date", "date"),
            _field("value", FieldKind.INT, "Primary"),
        ),
    )


FACEBOOK_POSTS_SCHEMA = PlatformSchema(
    file_name="FB_Posts.csv",
    record_type=FacebookPostRecord,
    date_field="date",
    fields=(
        _field("post_id", FieldKind.TEXT, "Post ID"),
        _field("title", FieldKind.NAME, "Title"),
        _field("description", FieldKind.TEXT, "Description"),
        _field("date", FieldKind.DATE, *_DATE_HEADERS),
        _field("publish_time", FieldKind.TEXT, "Publish time"),
        _field("reach", FieldKind.INT, "Reach"),
        _field("reactions", FieldKind.INT, "Reactions"),
        _field("comments", FieldKind.INT, "Comments"),
        _field("shares", FieldKind.INT, "Shares"),
        _field("clicks", FieldKind.INT, "Total clicks"),
    ),
)

FACEBOOK_VIDEOS_SCHEMA = PlatformSchema(
    file_name="FB_Videos.csv",
    record_type=FacebookVideoRecord,
    date_field="date",
    fields=(
        _field("title", FieldKind.NAME, "Title"),
        _field("date", FieldKind.DATE, *_DATE_HEADERS),
        _field("views", FieldKind.INT, "3-second video views"),
        _field("reactions", FieldKind.INT, "Reactions"),
        _field("comments", FieldKind.INT, "Comments"),
        _field("shares", FieldKind.INT, "Shares"),
        _field("average_seconds_viewed", FieldKind.FLOAT, "Average Seconds viewed"),
    ),
)

INSTAGRAM_POSTS_SCHEMA = PlatformSchema(
    file_name="IG_Posts.csv",
    record_type=InstagramPostRecord,
    date_field="date",
    fields=(
        _field("post_id", FieldKind.TEXT, "Post ID"),
        _field("username", FieldKind.TEXT, "Account username"),
        _field("description", FieldKind.NAME, "Description"),
        _field("post_type", FieldKind.TEXT, "Post type"),
        _field("date", FieldKind.DATE, *_DATE_HEADERS),
        _field("publish_time", FieldKind.TEXT, "Publish time"),
        _field("reach", FieldKind.INT, "Reach"),
        _field("likes", FieldKind.INT, "Likes"),
        _field("comments", FieldKind.INT, "Comments"),
        _field("shares", FieldKind.INT, "Shares"),
        _field("saves", FieldKind.INT, "Saves"),
        _field("follows", FieldKind.INT, "Follows"),
    ),
)

WEB_DEMOGRAPHICS_SCHEMA = PlatformSchema(
    file_name="GA_Demographics.csv",
    record_type=WebDemographicRecord,
    fields=(
        _field("country", FieldKind.NAME, "Country"),
        _field("city", FieldKind.NAME, "City"),
        _field("language", FieldKind.NAME, "Language"),
        _field("total_users", FieldKind.INT, "Total users"),
        _field("new_users", FieldKind.INT, "New users"),
        _field("returning_users", FieldKind.INT, "Returning users"),
        _field("sessions", FieldKind.INT, "Sessions"),
    ),
)

TRAFFIC_ACQUISITION_SCHEMA = PlatformSchema(
    file_name="GA_Traffic_Acquisition.csv",
    record_type=TrafficChannelRecord,
    fields=(
        _field(
            "channel",
            FieldKind.NAME,
            "Session primary channel group (Default Channel Group)",
            "Session default channel group",
        ),
        _field("sessions", FieldKind.INT, "Sessions"),
        _field("engaged_sessions", FieldKind.INT, "Engaged sessions"),
        _field("engagement_rate", FieldKind.RATE, "Engagement rate"),
    ),
)

PAGES_SCHEMA = PlatformSchema(
    file_name="GA_Pages_And_Screens.csv",
    record_type=PageRecord,
    fields=(
        _field("path", FieldKind.NAME, "Page path and screen class"),
        _field("title", FieldKind.NAME, "Page title and screen class"),
        _field("views", FieldKind.INT, "Views"),
        _field("active_users", FieldKind.INT, "Active users"),
        _field("event_count", FieldKind.INT, "Event count"),
    ),
)

UTM_SCHEMA = PlatformSchema(
    file_name="GA_UTMs.csv",
    record_type=UTMRecord,
    date_field="date",
    fields=(
        _field("campaign", FieldKind.NAME, "Manual campaign name"),
        _field("source_medium", FieldKind.NAME, "Manual source / medium"),
        _field("date", FieldKind.DATE, "Date + hour (YYYYMMDDHH)", "Date"),
        _field("sessions", FieldKind.INT, "Sessions"),
        _field("engaged_sessions", FieldKind.INT, "Engaged sessions"),
        _field("engagement_rate", FieldKind.RATE, "Engagement rate"),
        _field("key_events", FieldKind.FLOAT, "Key events"),
    ),
)


def _audience_schema(file_name: str, segment_header: str) -> PlatformSchema:
    return PlatformSchema(
        file_name=file_name,
        record_type=AudienceShareRecord,
        fields=(
            _field("segment", FieldKind.NAME, segment_header),
            _field("views_percentage", FieldKind.FLOAT, "Views (%)"),
            _field("average_view_duration", FieldKind.TEXT, "Average view duration", default="0:00"),
            _field("average_percentage_viewed", FieldKind.FLOAT, "Average percentage viewed (%)"),
            _field("watch_time_percentage", FieldKind.FLOAT, "Watch time (hours) (%)"),
        ),
    )


YOUTUBE_GEOGRAPHY_SCHEMA = PlatformSchema(
    file_name="YouTube_Geography.csv",
    record_type=GeographyRecord,
    fields=(
        _field("country", FieldKind.NAME, "Geography"),
        _field("views", FieldKind.INT, "Views"),
        _field("watch_time_hours", FieldKind.FLOAT, "Watch time (hours)"),
        _field("average_view_duration", FieldKind.TEXT, "Average view duration", default="0:00"),
    ),
)

YOUTUBE_SUBSCRIPTION_SCHEMA = PlatformSchema(
    file_name="YouTube_Subscription_Status.csv",
    record_type=SubscriptionRecord,
    fields=(
        _field("status", FieldKind.NAME, "Subscription status"),
        _field("views", FieldKind.INT, "Views"),
        _field("watch_time_hours", FieldKind.FLOAT, "Watch time (hours)"),
        _field("average_view_duration", FieldKind.TEXT, "Average view duration", default="0:00"),
    ),
)

YOUTUBE_CONTENT_SCHEMA = PlatformSchema(
    file_name="YouTube_Content.csv",
    record_type=VideoContentRecord,
    fields=(
        _field("title", FieldKind.NAME, "Video title"),
        _field("publish_time", FieldKind.TEXT, "Video publish time"),
        _field("duration", FieldKind.FLOAT, "Duration"),
        _field("views", FieldKind.INT, "Views"),
        _field("watch_time_hours", FieldKind.FLOAT, "Watch time (hours)"),
        _field("likes", FieldKind.INT, "Likes"),
        _field("comments", FieldKind.INT, "Comments added"),
        _field("shares", FieldKind.INT, "Shares"),
        _field("subscribers", FieldKind.INT, "Subscribers"),
        _field("impressions", FieldKind.INT, "Impressions"),
        _field("click_through_rate", FieldKind.FLOAT, "Impressions click-through rate (%)"),
    ),
)

_SOCIAL_DAILY_FILES: tuple[str, ...] = tuple(
    f"{prefix}_{metric}.csv"
    for prefix in ("FB", "IG")
    for metric in ("Follows", "Reach", "Visits", "Views", "Interactions")
)

SCHEMAS: Mapping[str, PlatformSchema] = {
    schema.file_name: schema
    for schema in (
        EMAIL_CAMPAIGN_SCHEMA,
        *(_daily_metric_schema(name) for name in _SOCIAL_DAILY_FILES),
        FACEBOOK_POSTS_SCHEMA,
        FACEBOOK_VIDEOS_SCHEMA,
        INSTAGRAM_POSTS_SCHEMA,
        WEB_DEMOGRAPHICS_SCHEMA,
        TRAFFIC_ACQUISITION_SCHEMA,
        PAGES_SCHEMA,
        UTM_SCHEMA,
        _audience_schema("YouTube_Age.csv", "Viewer age"),
        _audience_schema("YouTube_Gender.csv", "Viewer gender"),
        YOUTUBE_GEOGRAPHY_SCHEMA,
        YOUTUBE_SUBSCRIPTION_SCHEMA,
        YOUTUBE_CONTENT_SCHEMA,
    )
}


def get_schema(file_name: str) -> PlatformSchema | None:
    """
    Look up the schema registered for a logical file name.
    """

    return SCHEMAS.get(file_name)
