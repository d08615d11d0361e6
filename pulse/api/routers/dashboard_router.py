"""
pulse/api/routers/dashboard_router.py

Dashboard summary, source diagnostics, validation, and refresh endpoints.

Source failures never fail a summary request: the affected sections come
back empty and the failure is reported under ``sources``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from pulse.api.dependencies import get_comparison_spec, get_service
from pulse.domain.date_range import ComparisonSpec
from pulse.schemas.dashboard import (
    DashboardRefreshResponse,
    DashboardSourcesResponse,
    DashboardSummaryResponse,
    SourceCheckResponse,
)
from pulse.services.dashboard_service import DashboardService, UnknownDashboardError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboards", tags=["dashboards"])


def _unknown_dashboard(dashboard_type: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Unknown dashboard type: {dashboard_type}",
    )


@router.get(
    "/{dashboard_type}/summary",
    response_model=DashboardSummaryResponse,
    status_code=status.HTTP_200_OK,
)
async def get_dashboard_summary(
    dashboard_type: str,
    top_n: int | None = Query(default=None, ge=1, le=100),
    comparison: ComparisonSpec | None = Depends(get_comparison_spec),
    service: DashboardService = Depends(get_service),
) -> DashboardSummaryResponse:
    """
    Aggregate one dashboard over the requested period.

    Without ``start``/``end`` the last 30 days of available data are used
    and compared with the 30 days before them.

    Raises HTTP 400 for malformed or inverted dates.
    Raises HTTP 404 for an unknown dashboard type.
    """
    try:
        summary = await service.summary(dashboard_type, comparison=comparison, limit=top_n)
    except UnknownDashboardError as exc:
        raise _unknown_dashboard(dashboard_type) from exc

    logger.info(
        "Dashboard summary built dashboard=%s period=%s",
        dashboard_type,
        summary["period"],
    )
    return DashboardSummaryResponse.model_validate(summary)


@router.get(
    "/{dashboard_type}/sources",
    response_model=DashboardSourcesResponse,
    status_code=status.HTTP_200_OK,
)
def get_dashboard_sources(
    dashboard_type: str,
    service: DashboardService = Depends(get_service),
) -> DashboardSourcesResponse:
    """
    Report the last load outcome of every file of a dashboard.
    """
    try:
        config = service.config(dashboard_type)
        statuses = service.source_statuses(dashboard_type)
    except UnknownDashboardError as exc:
        raise _unknown_dashboard(dashboard_type) from exc

    return DashboardSourcesResponse(
        dashboard_type=dashboard_type,
        refresh_interval_minutes=config.refresh_interval_minutes,
        sources={name: SourceCheckResponse(**result) for name, result in statuses.items()},
    )


@router.post(
    "/{dashboard_type}/validate",
    response_model=SourceCheckResponse,
    status_code=status.HTTP_200_OK,
)
async def validate_dashboard(
    dashboard_type: str,
    service: DashboardService = Depends(get_service),
) -> SourceCheckResponse:
    """
    Probe every configured source of a dashboard.

    An invalid configuration is reported in the body with HTTP 200.
    """
    try:
        result = await service.validate(dashboard_type)
    except UnknownDashboardError as exc:
        raise _unknown_dashboard(dashboard_type) from exc
    return SourceCheckResponse(valid=result.valid, message=result.message)


@router.post(
    "/{dashboard_type}/refresh",
    response_model=DashboardRefreshResponse,
    status_code=status.HTTP_200_OK,
)
async def refresh_dashboard(
    dashboard_type: str,
    service: DashboardService = Depends(get_service),
) -> DashboardRefreshResponse:
    """
    Invalidate a dashboard's cached files so the next summary reloads them.
    """
    try:
        invalidated = service.refresh(dashboard_type)
    except UnknownDashboardError as exc:
        raise _unknown_dashboard(dashboard_type) from exc
    return DashboardRefreshResponse(dashboard_type=dashboard_type, invalidated_files=invalidated)
