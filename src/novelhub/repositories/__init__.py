"""Data access layer."""

from .content_store import ContentStore

__all__ = ["ContentStore"]
