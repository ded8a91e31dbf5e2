# src/novelhub/models/__init__.py
"""SQLAlchemy models for the NovelHub application."""

from .library import LibraryEntry
from .notification import Notification
from .novel import Chapter, ChapterStatus, Novel
from .user import User, UserRole
from .view_credit import ViewCredit

__all__ = [
    "Chapter", "ChapterStatus", "Novel",
    "LibraryEntry",
    "Notification",
    "User", "UserRole",
    "ViewCredit",
]
