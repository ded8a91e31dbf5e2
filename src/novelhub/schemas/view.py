"""View accounting request/response schemas."""

from pydantic import BaseModel, ConfigDict, Field


class ViewRequest(BaseModel):
    """Identifiers of the item being viewed.

    ``chapterId`` takes precedence; the novel id alone counts a novel view.
    Zero or negative ids are treated as absent.
    """

    model_config = ConfigDict(populate_by_name=True)

    novel_id: int | None = Field(default=None, alias="novelId")
    chapter_id: int | None = Field(default=None, alias="chapterId")


class ViewResponse(BaseModel):
    success: bool = True
    counted: bool
