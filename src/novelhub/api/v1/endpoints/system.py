"""System endpoints for the NovelHub API."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from novelhub.api.v1.dependencies import SessionDep
from novelhub.core.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
        },
        "views": {
            "window_timezone": settings.view_window_timezone,
        },
        "publishing": {
            "scheduler_auth_required": bool(settings.cron_secret),
            "notify_subscribers": settings.publish_notify_subscribers,
            "sweep_interval_seconds": settings.publish_sweep_interval_seconds,
        },
    }


@router.get("/health")
async def get_system_health(request: Request, db: SessionDep) -> dict[str, object]:
    """Health check covering database connectivity and the sweep worker."""
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as e:
        logger.warning("Database health check failed: %s", e)
        db_status = f"unhealthy: {e}"

    worker = getattr(request.app.state, "sweep_worker", None)
    if worker is None:
        worker_status: dict[str, object] = {"enabled": False}
    else:
        worker_status = {
            "enabled": True,
            "ticks": worker.state.ticks,
            "published_total": worker.state.published_total,
            "consecutive_failures": worker.state.consecutive_failures,
        }

    return {
        "status": "healthy" if db_status == "healthy" else "unhealthy",
        "timestamp": int(time.time()),
        "components": {
            "database": db_status,
            "sweep_worker": worker_status,
        },
        "version": settings.app_version,
    }
