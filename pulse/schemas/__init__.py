"""
pulse/schemas package marker.
"""

from pulse.schemas.dashboard import (
    DashboardRefreshResponse,
    DashboardSourcesResponse,
    DashboardSummaryResponse,
    HealthResponse,
    SourceCheckResponse,
)

__all__ = [
    "DashboardRefreshResponse",
    "DashboardSourcesResponse",
    "DashboardSummaryResponse",
    "HealthResponse",
    "SourceCheckResponse",
]
