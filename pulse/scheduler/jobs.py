"""
pulse/scheduler/jobs.py

APScheduler-based periodic refresh of dashboard sources.

Each configured dashboard gets one interval job that invalidates its cached
files every ``refresh_interval_minutes``. Nothing is fetched by the job
itself; the next summary request reloads the invalidated files.

Lifecycle
----------
Call ``build_scheduler(service)`` once to get a configured ``AsyncIOScheduler``.
Start it inside the running event loop on app boot; shut it down on app
shutdown. Jobs run on the event loop, so cache invalidation never races an
in-flight load from another thread. The scheduler is wired into FastAPI via
the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from pulse.services.dashboard_service import DashboardService, UnknownDashboardError

logger = logging.getLogger(__name__)


async def refresh_dashboard(service: DashboardService, dashboard_type: str) -> None:
    """
    Invalidate one dashboard's cached files on the scheduler's event loop.
    """
    logger.info("Scheduler: refresh %s starting", dashboard_type)
    try:
        file_names = service.refresh(dashboard_type)
    except UnknownDashboardError:
        logger.warning("Scheduler: refresh %s skipped, dashboard is not configured", dashboard_type)
        return
    logger.info("Scheduler: refresh %s complete files=%d", dashboard_type, len(file_names))


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler(service: DashboardService) -> AsyncIOScheduler:
    """
    Build and register one refresh job per dashboard.

    Returns a configured but *not yet started* ``AsyncIOScheduler``.
    The caller must call ``.start()`` and ``.shutdown()`` at the
    appropriate lifecycle points.
    """
    scheduler = AsyncIOScheduler(timezone="UTC")

    for dashboard_type in service.dashboard_types:
        interval = service.config(dashboard_type).refresh_interval_minutes
        scheduler.add_job(
            refresh_dashboard,
            trigger="interval",
            minutes=interval,
            args=(service, dashboard_type),
            id=f"refresh_{dashboard_type}",
            name=f"Refresh {dashboard_type} dashboard sources",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
            misfire_grace_time=60,
        )

    return scheduler
