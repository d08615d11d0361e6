"""
tests/test_config.py

Environment-driven settings getters.
"""

from __future__ import annotations

from typing import Iterator

import pytest

from pulse.config import get_dashboard_settings, get_file_cache_settings, get_http_fetch_settings


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    for getter in (get_dashboard_settings, get_file_cache_settings, get_http_fetch_settings):
        getter.cache_clear()
    yield
    for getter in (get_dashboard_settings, get_file_cache_settings, get_http_fetch_settings):
        getter.cache_clear()


class TestSettings:
    def test_http_settings_are_clamped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PULSE_HTTP_TIMEOUT_SECONDS", "0.1")
        monkeypatch.setenv("PULSE_HTTP_MAX_RETRIES", "-3")

        settings = get_http_fetch_settings()

        assert settings.timeout_seconds == 1.0
        assert settings.max_retries == 0

    def test_invalid_numbers_fall_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PULSE_HTTP_MAX_RETRIES", "many")

        assert get_http_fetch_settings().max_retries == 2

    def test_non_positive_deadline_disables_it(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PULSE_FETCH_DEADLINE_SECONDS", "0")
        monkeypatch.setenv("PULSE_CACHE_BUSTING", "off")

        settings = get_file_cache_settings()

        assert settings.fetch_deadline_seconds is None
        assert settings.cache_busting is False

    def test_dashboard_settings(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        config_path = tmp_path / "dashboards.json"
        monkeypatch.setenv("PULSE_DASHBOARD_CONFIG_PATH", str(config_path))
        monkeypatch.setenv("PULSE_TOP_N", "0")
        monkeypatch.setenv("PULSE_SCHEDULER_ENABLED", "false")

        settings = get_dashboard_settings()

        assert settings.config_path == str(config_path)
        assert settings.top_n == 1
        assert settings.scheduler_enabled is False
