# src/novelhub/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    chapters_router,
    cron_router,
    system_router,
    views_router,
)

__all__ = [
    "chapters_router",
    "cron_router",
    "system_router",
    "views_router",
]
