"""Chapter publication endpoints for authors and administrators."""

from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, HTTPException, status

from novelhub.api.v1.dependencies import CurrentUserDep, StoreDep
from novelhub.core.errors import (
    InvalidTransitionError,
    NotFoundError,
    NovelHubError,
    PermissionDeniedError,
    ValidationError,
)
from novelhub.schemas.chapter import ChapterResponse, ChapterSchedule
from novelhub.services.chapters import ChapterPublishingService

router = APIRouter(prefix="/chapters", tags=["chapters"])

_STATUS_BY_ERROR: dict[type[NovelHubError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
}


def get_chapter_service_dep(store: StoreDep) -> ChapterPublishingService:
    """Return the chapter publishing service for this request."""
    return ChapterPublishingService(store)


ChapterServiceDep = Annotated[ChapterPublishingService, Depends(get_chapter_service_dep)]


def _raise_http(err: NovelHubError) -> NoReturn:
    code = _STATUS_BY_ERROR.get(type(err), status.HTTP_400_BAD_REQUEST)
    raise HTTPException(status_code=code, detail=str(err)) from err


@router.get("/{chapter_id}", response_model=ChapterResponse)
async def get_chapter(chapter_id: int, service: ChapterServiceDep) -> ChapterResponse:
    """Return a single chapter's publication state and counters."""
    try:
        chapter = service.get_chapter(chapter_id)
    except NovelHubError as err:
        _raise_http(err)
    return ChapterResponse.model_validate(chapter)


@router.post("/{chapter_id}/schedule", response_model=ChapterResponse)
async def schedule_chapter(
    chapter_id: int,
    payload: ChapterSchedule,
    current_user: CurrentUserDep,
    service: ChapterServiceDep,
) -> ChapterResponse:
    """Schedule a draft chapter, or move an existing schedule."""
    try:
        chapter = service.schedule(chapter_id, current_user, payload.publish_at)
    except NovelHubError as err:
        _raise_http(err)
    return ChapterResponse.model_validate(chapter)


@router.post("/{chapter_id}/unschedule", response_model=ChapterResponse)
async def unschedule_chapter(
    chapter_id: int,
    current_user: CurrentUserDep,
    service: ChapterServiceDep,
) -> ChapterResponse:
    """Cancel a pending schedule and return the chapter to draft."""
    try:
        chapter = service.unschedule(chapter_id, current_user)
    except NovelHubError as err:
        _raise_http(err)
    return ChapterResponse.model_validate(chapter)


@router.post("/{chapter_id}/publish", response_model=ChapterResponse)
async def publish_chapter(
    chapter_id: int,
    current_user: CurrentUserDep,
    service: ChapterServiceDep,
) -> ChapterResponse:
    """Publish a chapter immediately, bypassing any schedule."""
    try:
        chapter = service.publish_now(chapter_id, current_user)
    except NovelHubError as err:
        _raise_http(err)
    return ChapterResponse.model_validate(chapter)
