from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import Depends, FastAPI

from pulse.api.dependencies import get_service
from pulse.api.routers import dashboard_router
from pulse.schemas.dashboard import HealthResponse
from pulse.services.dashboard_service import DashboardService


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    from pulse.config import load_env_files

    load_env_files()
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Start the source refresh scheduler on boot; shut it down on exit."""
    from pulse.config import get_dashboard_settings

    if not get_dashboard_settings().scheduler_enabled:
        logging.getLogger(__name__).info("Scheduler disabled by PULSE_SCHEDULER_ENABLED")
        yield
        return

    from pulse.scheduler.jobs import build_scheduler

    service = application.dependency_overrides.get(get_service, get_service)()
    scheduler = build_scheduler(service)
    scheduler.start()
    logging.getLogger(__name__).info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        scheduler.shutdown(wait=False)
        logging.getLogger(__name__).info("Scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _configure_logging()

    application = FastAPI(
        title="Marketing Pulse API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    application.include_router(dashboard_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck(service: DashboardService = Depends(get_service)) -> HealthResponse:
        return HealthResponse(status="ok", dashboards=service.dashboard_types)

    return application


app = create_app()
