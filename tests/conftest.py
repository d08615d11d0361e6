"""
Shared fixtures: a dashboard service backed by in-memory CSV sources.
"""

from __future__ import annotations

from typing import Callable

import pytest

from pulse.config import FileCacheSettings
from pulse.dashboard_config import DASHBOARD_TYPES, default_dashboard_config, merge_dashboard_config
from pulse.services.dashboard_service import DashboardService
from pulse.sources.cache import FileCache

EMAIL_CSV = (
    "Campaign,Date,Emails sent,Email opened (MPP excluded),Email clicked,Email unsubscribes,Email bounces\n"
    "Spring A,2024-03-05,100,50,10,1,0\n"
    "Spring B,2024-03-10,100,0,0,0,2\n"
    "Spring C,2024-03-20,100,100,100,0,0\n"
    "Winter,2024-02-10,100,20,5,0,0\n"
)

FB_FOLLOWS_CSV = "Date,Primary\n2024-03-01,3\n2024-03-02,2\n2024-02-15,4\n"
FB_REACH_CSV = "Date,Primary\n2024-03-01,400\n2024-02-15,100\n"
FB_INTERACTIONS_CSV = "Date,Primary\n2024-03-01,20\n"

UTM_CSV = (
    "Manual campaign name,Manual source / medium,Date + hour (YYYYMMDDHH),Sessions,Engaged sessions,Key events\n"
    "launch,newsletter / email,2024030510,30,15,2\n"
    "launch,newsletter / email,2024021010,10,5,0\n"
)

SUBSCRIPTION_CSV = (
    "Subscription status,Views,Watch time (hours),Average view duration\n"
    "Subscribed,25,1.0,0:30\n"
    "Not subscribed,75,2.0,0:20\n"
)

CSV_BY_FILE = {
    "Email_Campaign_Performance.csv": EMAIL_CSV,
    "FB_Follows.csv": FB_FOLLOWS_CSV,
    "FB_Reach.csv": FB_REACH_CSV,
    "FB_Interactions.csv": FB_INTERACTIONS_CSV,
    "GA_UTMs.csv": UTM_CSV,
    "YouTube_Subscription_Status.csv": SUBSCRIPTION_CSV,
}


def share_url(file_name: str) -> str:
    return f"https://drive.google.com/file/d/{file_name.removesuffix('.csv')}/view"


def download_url(file_name: str) -> str:
    return f"https://drive.google.com/uc?export=download&id={file_name.removesuffix('.csv')}"


class InMemoryFetcher:
    """
    Serves CSV text by download URL and counts fetches per URL.
    """

    def __init__(self, texts: dict[str, str]) -> None:
        self._texts = {download_url(name): text for name, text in texts.items()}
        self.calls: list[str] = []

    def fetch_text(self, source: str) -> str:
        self.calls.append(source)
        return self._texts[source]

    def probe(self, url: str) -> bool:
        return url in self._texts


@pytest.fixture()
def fetcher() -> InMemoryFetcher:
    return InMemoryFetcher(CSV_BY_FILE)


@pytest.fixture()
def service_factory(fetcher: InMemoryFetcher) -> Callable[..., DashboardService]:
    def build(*, with_probe: bool = True, top_n: int = 5) -> DashboardService:
        configs = {}
        for dashboard_type in DASHBOARD_TYPES:
            files = default_dashboard_config(dashboard_type).files
            configured = {name: share_url(name) for name in files if name in CSV_BY_FILE}
            configs[dashboard_type] = merge_dashboard_config(dashboard_type, {"files": configured})
        sources = {
            name: url for config in configs.values() for name, url in config.files.items()
        }
        cache = FileCache(
            sources=sources,
            fetcher=fetcher,
            settings=FileCacheSettings(fetch_deadline_seconds=5.0, cache_busting=False),
        )
        return DashboardService(
            cache=cache,
            configs=configs,
            probe=fetcher if with_probe else None,
            top_n=top_n,
        )

    return build


@pytest.fixture()
def service(service_factory: Callable[..., DashboardService]) -> DashboardService:
    return service_factory()
