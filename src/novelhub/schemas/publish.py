"""Scheduled publication response schema."""

from pydantic import BaseModel, ConfigDict, Field


class PublishSweepResponse(BaseModel):
    """Result of one sweep, serialized with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    published_count: int = Field(..., alias="publishedCount")
    published_ids: list[int] = Field(default_factory=list, alias="publishedIds")
    failed_ids: list[int] = Field(default_factory=list, alias="failedIds")
