"""
pulse/services package marker.
"""

from pulse.services.dashboard_service import (
    DashboardService,
    UnknownDashboardError,
    get_dashboard_service,
)
from pulse.services.date_filter import available_date_range, filter_by_date_range

__all__ = [
    "DashboardService",
    "UnknownDashboardError",
    "available_date_range",
    "filter_by_date_range",
    "get_dashboard_service",
]
