"""API endpoint modules for version 1."""

from .chapters import router as chapters_router
from .cron import router as cron_router
from .system import router as system_router
from .views import router as views_router

__all__ = [
    "chapters_router",
    "cron_router",
    "system_router",
    "views_router",
]
