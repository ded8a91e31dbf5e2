"""Scheduled chapter publication.

An external scheduler calls the sweep on its own cadence. Each due chapter is
moved from SCHEDULED to PUBLISHED with a conditional UPDATE, so overlapping
sweeps never both claim the same row: the loser sees zero affected rows and
does not report it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.exc import OperationalError, SQLAlchemyError

from novelhub.core.errors import StoreUnavailableError
from novelhub.core.settings import settings
from novelhub.db.time import as_utc, utcnow
from novelhub.models import Chapter, ChapterStatus
from novelhub.repositories.content_store import ContentStore
from novelhub.services.notifications import NotificationService

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    """Chapters transitioned by one sweep invocation."""

    published_ids: list[int] = field(default_factory=list)
    failed_ids: list[int] = field(default_factory=list)

    @property
    def published_count(self) -> int:
        return len(self.published_ids)


class PublicationSweeper:
    """Publish every scheduled chapter whose time has come."""

    def __init__(
        self,
        store: ContentStore,
        *,
        notify_subscribers: bool | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.notifications = NotificationService(store)
        self.notify_subscribers = (
            settings.publish_notify_subscribers if notify_subscribers is None else notify_subscribers
        )
        self.clock = clock

    def sweep(self, now: datetime | None = None) -> SweepResult:
        """Run one best-effort pass over due chapters.

        Raises:
            StoreUnavailableError: If the store cannot be queried or drops the
                connection mid-sweep. Nothing from this pass is committed.
        """
        now = as_utc(now or self.clock())
        result = SweepResult()

        try:
            due = self.store.find_due_chapters(now)
        except SQLAlchemyError as err:
            logger.exception("Could not query scheduled chapters")
            raise StoreUnavailableError("Content store unavailable") from err

        for chapter in due:
            chapter_id = chapter.id
            try:
                if self._publish(chapter, now):
                    result.published_ids.append(chapter_id)
            except OperationalError as err:
                logger.exception("Lost the content store while publishing chapter id=%s", chapter_id)
                raise StoreUnavailableError("Content store unavailable") from err
            except SQLAlchemyError:
                logger.exception("Failed to publish scheduled chapter id=%s", chapter_id)
                result.failed_ids.append(chapter_id)

        self._commit(result)
        if result.published_ids:
            logger.info(
                "Published %d scheduled chapters: %s",
                result.published_count,
                ", ".join(str(i) for i in result.published_ids),
            )
        return result

    def _publish(self, chapter: Chapter, now: datetime) -> bool:
        with self.store.savepoint():
            claimed = self.store.update_chapter_status(
                chapter.id,
                ChapterStatus.SCHEDULED,
                ChapterStatus.PUBLISHED,
                now=now,
                publish_at=None,
            )
            if not claimed:
                logger.debug("Chapter id=%s already published by a concurrent sweep", chapter.id)
                return False
            self.store.touch_novel(chapter.novel_id, now)
            if self.notify_subscribers:
                self.notifications.notify_new_chapter(chapter, chapter.novel)
        return True

    def _commit(self, result: SweepResult) -> None:
        try:
            self.store.commit()
        except SQLAlchemyError as err:
            logger.exception("Could not commit sweep after publishing %s", result.published_ids)
            raise StoreUnavailableError("Content store unavailable") from err
