# src/novelhub/services/__init__.py
"""Business logic services for the NovelHub application."""

from .chapters import ChapterPublishingService
from .notifications import NotificationService
from .publishing import PublicationSweeper, SweepResult
from .views import ViewAccountingService, ViewOutcome, ViewResult, ViewScope

__all__ = [
    "ChapterPublishingService",
    "NotificationService",
    "PublicationSweeper",
    "SweepResult",
    "ViewAccountingService",
    "ViewOutcome",
    "ViewResult",
    "ViewScope",
]
