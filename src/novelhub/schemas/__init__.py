"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .chapter import ChapterResponse, ChapterSchedule
from .publish import PublishSweepResponse
from .view import ViewRequest, ViewResponse

__all__ = [
    "ChapterResponse", "ChapterSchedule",
    "PublishSweepResponse",
    "ViewRequest", "ViewResponse",
]
