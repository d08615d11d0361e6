"""
pulse/schemas/dashboard.py

Response schemas for dashboard endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SourceCheckResponse(BaseModel):
    """
    API response model for one source or configuration check.
    """

    valid: bool
    message: str


class DateRangeResponse(BaseModel):
    start: str
    end: str


class PeriodResponse(BaseModel):
    current: DateRangeResponse
    comparison: DateRangeResponse | None = None


class DashboardSummaryResponse(BaseModel):
    """
    API response model for a dashboard summary.

    ``current``, ``comparison``, and ``changes`` are platform-specific
    aggregate dictionaries.
    """

    dashboard_type: str
    period: PeriodResponse | None = None
    current: dict[str, Any]
    comparison: dict[str, Any] | None = None
    changes: dict[str, Any] | None = None
    kpi_cards: list[dict[str, Any]] = Field(default_factory=list)
    sources: dict[str, SourceCheckResponse] = Field(default_factory=dict)


class DashboardSourcesResponse(BaseModel):
    dashboard_type: str
    refresh_interval_minutes: int = Field(..., ge=1, le=60)
    sources: dict[str, SourceCheckResponse] = Field(default_factory=dict)


class DashboardRefreshResponse(BaseModel):
    dashboard_type: str
    invalidated_files: list[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    dashboards: list[str] = Field(default_factory=list)
