"""Author and administrator operations on a chapter's publication state."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from novelhub.core.errors import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from novelhub.db.time import as_utc, utcnow
from novelhub.models import Chapter, ChapterStatus, User
from novelhub.repositories.content_store import ContentStore
from novelhub.services.notifications import NotificationService

logger = logging.getLogger(__name__)

_UNPUBLISHED = (ChapterStatus.DRAFT, ChapterStatus.SCHEDULED)


class ChapterPublishingService:
    """Schedule, unschedule or immediately publish a chapter.

    Only the novel's uploader or an administrator may change a chapter. Every
    transition is a conditional update on the current status, so a chapter
    published by the sweeper in the meantime is reported as a conflict rather
    than silently reverted.
    """

    def __init__(
        self,
        store: ContentStore,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.notifications = NotificationService(store)
        self.clock = clock

    def get_chapter(self, chapter_id: int) -> Chapter:
        chapter = self.store.get_chapter(chapter_id)
        if chapter is None:
            raise NotFoundError(f"Chapter {chapter_id} not found")
        return chapter

    def get_editable_chapter(self, chapter_id: int, user: User) -> Chapter:
        """Return the chapter if ``user`` may manage it."""
        chapter = self.get_chapter(chapter_id)
        if not user.is_admin and chapter.novel.uploader_id != user.id:
            raise PermissionDeniedError("You do not have permission to edit this chapter")
        return chapter

    def schedule(self, chapter_id: int, user: User, publish_at: datetime) -> Chapter:
        """Schedule (or reschedule) an unpublished chapter for a future instant."""
        now = as_utc(self.clock())
        chapter = self.get_editable_chapter(chapter_id, user)
        publish_at = as_utc(publish_at)
        if publish_at <= now:
            raise ValidationError("publish_at must be in the future")
        if not self.store.update_chapter_status(
            chapter.id, _UNPUBLISHED, ChapterStatus.SCHEDULED, now=now, publish_at=publish_at
        ):
            raise InvalidTransitionError("Chapter is already published")
        self.store.commit()
        logger.info("Chapter id=%s scheduled for %s by user id=%s", chapter.id, publish_at, user.id)
        return self._reload(chapter)

    def unschedule(self, chapter_id: int, user: User) -> Chapter:
        """Return a scheduled chapter to draft."""
        now = as_utc(self.clock())
        chapter = self.get_editable_chapter(chapter_id, user)
        if not self.store.update_chapter_status(
            chapter.id, ChapterStatus.SCHEDULED, ChapterStatus.DRAFT, now=now, publish_at=None
        ):
            raise InvalidTransitionError("Chapter is not scheduled")
        self.store.commit()
        return self._reload(chapter)

    def publish_now(self, chapter_id: int, user: User) -> Chapter:
        """Publish a draft or scheduled chapter immediately."""
        now = as_utc(self.clock())
        chapter = self.get_editable_chapter(chapter_id, user)
        with self.store.savepoint():
            if not self.store.update_chapter_status(
                chapter.id, _UNPUBLISHED, ChapterStatus.PUBLISHED, now=now, publish_at=None
            ):
                raise InvalidTransitionError("Chapter is already published")
            self.store.touch_novel(chapter.novel_id, now)
            self.notifications.notify_new_chapter(chapter, chapter.novel)
        self.store.commit()
        logger.info("Chapter id=%s published by user id=%s", chapter.id, user.id)
        return self._reload(chapter)

    def _reload(self, chapter: Chapter) -> Chapter:
        self.store.refresh(chapter)
        return chapter
