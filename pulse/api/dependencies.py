"""
pulse/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from datetime import date

from fastapi import HTTPException, Query, status

from pulse.domain.date_range import ComparisonSpec, DateRange
from pulse.services.dashboard_service import DashboardService, get_dashboard_service


def get_service() -> DashboardService:
    """
    Provide the process-wide dashboard service; overridden in tests.
    """

    return get_dashboard_service()


def _parse_query_date(name: str, value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Query parameter '{name}' must be an ISO date (YYYY-MM-DD).",
        ) from exc


def _build_range(start_name: str, start: str | None, end_name: str, end: str | None) -> DateRange | None:
    if start is None and end is None:
        return None
    if start is None or end is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Query parameters '{start_name}' and '{end_name}' must be provided together.",
        )
    start_date = _parse_query_date(start_name, start)
    end_date = _parse_query_date(end_name, end)
    if start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"'{start_name}' must not be after '{end_name}'.",
        )
    return DateRange(start=start_date, end=end_date)


def get_comparison_spec(
    start: str | None = Query(default=None),
    end: str | None = Query(default=None),
    compare_start: str | None = Query(default=None),
    compare_end: str | None = Query(default=None),
) -> ComparisonSpec | None:
    """
    Validate the optional reporting and comparison ranges of a summary request.

    No range at all means "let the service pick the default period".
    """

    current = _build_range("start", start, "end", end)
    comparison = _build_range("compare_start", compare_start, "compare_end", compare_end)
    if current is None:
        if comparison is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A comparison range requires 'start' and 'end'.",
            )
        return None
    return ComparisonSpec(current=current, comparison=comparison)
