"""
tests/test_platform_metrics.py

Pytest unit tests for the social, web, and video metric formulas.
"""

from __future__ import annotations

import pytest

from metrics.social import (
    SocialMetricFormula,
    facebook_post_totals,
    follower_growth,
    instagram_engagement_distribution,
    page_metrics,
)
from metrics.video import VideoMetricFormula, content_summary, subscription_split
from metrics.web import WebMetricFormula, demographics_summary, is_set, pages_summary, traffic_summary, utm_summary
from pulse.domain.records import (
    DailyMetricRecord,
    FacebookPostRecord,
    InstagramPostRecord,
    PageRecord,
    SubscriptionRecord,
    TrafficChannelRecord,
    UTMRecord,
    VideoContentRecord,
    WebDemographicRecord,
)


def _daily(*pairs: tuple[str, int]) -> list[DailyMetricRecord]:
    return [DailyMetricRecord(date=day, value=value) for day, value in pairs]


def _instagram_post(post_id: str, *, reach: int, likes: int, comments: int, shares: int, saves: int) -> InstagramPostRecord:
    return InstagramPostRecord(
        post_id=post_id,
        username="brand",
        description="",
        post_type="IG image",
        date="2024-03-05",
        publish_time="03/05/2024 10:00",
        reach=reach,
        likes=likes,
        comments=comments,
        shares=shares,
        saves=saves,
        follows=0,
    )


def _video(title: str, *, views: int, likes: int = 0, comments: int = 0, shares: int = 0) -> VideoContentRecord:
    return VideoContentRecord(
        title=title,
        publish_time="Mar 5, 2024",
        duration=60.0,
        views=views,
        watch_time_hours=1.0,
        likes=likes,
        comments=comments,
        shares=shares,
        subscribers=0,
        impressions=0,
        click_through_rate=0.0,
    )


# ---------------------------------------------------------------------------
# Social
# ---------------------------------------------------------------------------


class TestSocialMetrics:
    def test_page_metrics_sum_series_and_derive_engagement(self) -> None:
        result = page_metrics(
            follows=_daily(("2024-03-01", 3), ("2024-03-02", 2)),
            reach=_daily(("2024-03-01", 400)),
            interactions=_daily(("2024-03-01", 20)),
        )

        assert result["followers"] == 5
        assert result["reach"] == 400
        assert result["visits"] == 0
        assert result["engagement_rate"] == pytest.approx(5.0)

    def test_engagement_rate_without_reach_is_zero(self) -> None:
        assert page_metrics(interactions=_daily(("2024-03-01", 7)))["engagement_rate"] == 0.0

    def test_follower_growth_groups_by_month(self) -> None:
        follows = _daily(("2024-04-02", 1), ("2024-03-30", 4), ("2024-03-01", 2), ("N/A", 9))

        assert follower_growth(follows) == [
            {"month": "2024-03", "followers": 6},
            {"month": "2024-04", "followers": 1},
        ]

    def test_facebook_post_totals(self) -> None:
        posts = [
            FacebookPostRecord("1", "Launch", "", "2024-03-05", "", 200, 10, 5, 5, 3),
            FacebookPostRecord("2", "Recap", "", "2024-03-06", "", 0, 0, 0, 0, 0),
        ]

        totals = facebook_post_totals(posts)

        assert totals["posts"] == 2
        assert totals["engagements"] == 20
        assert totals["engagement_rate"] == pytest.approx(10.0)

    def test_instagram_engagement_distribution_sums_to_hundred(self) -> None:
        posts = [_instagram_post("1", reach=100, likes=6, comments=2, shares=1, saves=1)]

        distribution = instagram_engagement_distribution(posts)

        assert [row["type"] for row in distribution] == ["likes", "comments", "shares", "saves"]
        assert distribution[0]["percentage"] == pytest.approx(60.0)
        assert sum(row["percentage"] for row in distribution) == pytest.approx(100.0)

    def test_formula_only_includes_supplied_roles(self) -> None:
        result = SocialMetricFormula().calculate({"follows": _daily(("2024-03-01", 1))})

        assert set(result) == {"page_metrics", "follower_growth"}

    def test_formula_with_instagram_posts(self) -> None:
        posts = [_instagram_post("1", reach=50, likes=5, comments=0, shares=0, saves=0)]

        result = SocialMetricFormula().calculate({"instagram_posts": posts})

        assert result["posts"]["engagement_rate"] == pytest.approx(10.0)
        assert "engagement_distribution" in result


# ---------------------------------------------------------------------------
# Web
# ---------------------------------------------------------------------------


class TestWebMetrics:
    @pytest.mark.parametrize("value", ["(not set)", "Not Set", "Unknown", "  "])
    def test_unset_dimension_values(self, value: str) -> None:
        assert is_set(value) is False

    def test_demographics_group_and_skip_unset(self) -> None:
        records = [
            WebDemographicRecord("United States", "Austin", "English", 10, 6, 4, 12),
            WebDemographicRecord("United States", "(not set)", "English", 5, 5, 0, 5),
            WebDemographicRecord("(not set)", "(not set)", "Spanish", 1, 1, 0, 1),
        ]

        summary = demographics_summary(records)

        assert summary["totals"]["total_users"] == 16
        assert summary["countries"] == [{"name": "United States", "users": 15, "sessions": 17}]
        assert summary["cities"] == [{"name": "Austin", "users": 10, "sessions": 12}]
        assert [row["name"] for row in summary["languages"]] == ["English", "Spanish"]

    def test_channel_engagement_uses_engaged_sessions(self) -> None:
        records = [
            TrafficChannelRecord("Organic Search", 100, 60, 0.0),
            TrafficChannelRecord("Organic Search", 100, 40, 0.0),
            TrafficChannelRecord("Direct", 50, 0, 0.0),
        ]

        summary = traffic_summary(records)

        organic = summary["channels"][0]
        assert organic["sessions"] == 200
        assert organic["engagement_rate"] == pytest.approx(50.0)
        assert summary["totals"]["engagement_rate"] == pytest.approx(40.0)

    def test_pages_group_by_path(self) -> None:
        records = [
            PageRecord("/", "Home", 30, 10, 50),
            PageRecord("/", "Home (old)", 10, 10, 5),
            PageRecord("/about", "About", 4, 0, 1),
        ]

        summary = pages_summary(records)

        home = summary["pages"][0]
        assert home["title"] == "Home"
        assert home["views"] == 40
        assert home["views_per_user"] == pytest.approx(2.0)
        assert summary["pages"][1]["views_per_user"] == 0.0
        assert summary["totals"]["views_per_user"] == pytest.approx(2.2)

    def test_utm_campaigns_and_sources(self) -> None:
        records = [
            UTMRecord("launch", "newsletter / email", "2024030510", 30, 15, 0.0, 2.0),
            UTMRecord("launch", "facebook / social", "2024030611", 10, 5, 0.0, 0.0),
            UTMRecord("(not set)", "google / organic", "2024030612", 60, 30, 0.0, 1.0),
        ]

        summary = utm_summary(records)

        assert summary["totals"]["sessions"] == 100
        assert len(summary["campaigns"]) == 1
        launch = summary["campaigns"][0]
        assert launch["sessions"] == 40
        assert launch["source_medium"] == "newsletter / email"
        assert launch["engagement_rate"] == pytest.approx(50.0)
        assert len(summary["sources"]) == 3

    def test_formula_keys(self) -> None:
        result = WebMetricFormula().calculate({"channels": [], "pages": []})

        assert set(result) == {"traffic", "pages"}


# ---------------------------------------------------------------------------
# Video
# ---------------------------------------------------------------------------


class TestVideoMetrics:
    def test_subscription_percentages(self) -> None:
        records = [
            SubscriptionRecord("Subscribed", 25, 1.0, "0:30"),
            SubscriptionRecord("Not subscribed", 75, 2.0, "0:20"),
        ]

        split = subscription_split(records)

        assert split["total_views"] == 100
        assert [row["percentage"] for row in split["statuses"]] == [25.0, 75.0]

    def test_top_videos_per_metric(self) -> None:
        videos = [
            _video("Intro", views=100, likes=5, comments=9),
            _video("Tour", views=300, likes=5, shares=2),
        ]

        summary = content_summary(videos)

        assert summary["top_videos"] == {
            "views": "Tour",
            "likes": "Intro",
            "comments": "Intro",
            "shares": "Tour",
        }
        assert summary["totals"]["views"] == 400
        assert summary["totals"]["engagement_rate"] == pytest.approx(21 / 400 * 100)

    def test_empty_content_has_no_top_videos(self) -> None:
        summary = content_summary([])

        assert summary["top_videos"]["views"] is None
        assert summary["totals"]["engagement_rate"] == 0.0

    def test_formula_keys(self) -> None:
        result = VideoMetricFormula().calculate({"subscription": [], "content": []})

        assert set(result) == {"subscription", "content"}
