"""Chapter-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from novelhub.models import ChapterStatus


class ChapterSchedule(BaseModel):
    """Schema for scheduling a chapter."""

    publish_at: datetime = Field(..., description="Instant at which the chapter goes live")


class ChapterResponse(BaseModel):
    """Schema for chapter responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    novel_id: int
    title: str
    slug: str
    number: int
    status: ChapterStatus
    publish_at: datetime | None = None
    view_count: int
    updated_at: datetime
