"""Reader notifications raised by publication events."""

from __future__ import annotations

import logging

from novelhub.models import Chapter, Notification, Novel
from novelhub.models.notification import NOTIFICATION_NEW_CHAPTER
from novelhub.repositories.content_store import ContentStore

logger = logging.getLogger(__name__)


class NotificationService:
    """Fan out notifications to the readers following a novel."""

    def __init__(self, store: ContentStore) -> None:
        self.store = store

    def notify_new_chapter(self, chapter: Chapter, novel: Novel) -> int:
        """Create a NEW_CHAPTER notification for each library follower of ``novel``.

        Returns the number of notifications created. The caller owns the
        transaction.
        """
        subscribers = self.store.library_subscribers(novel.id)
        if not subscribers:
            return 0

        message = f"New chapter in your library: {novel.title} - {chapter.title}"
        self.store.add_notifications(
            [
                Notification(
                    user_id=user_id,
                    type=NOTIFICATION_NEW_CHAPTER,
                    resource_id=chapter.reader_path,
                    resource_type="chapter",
                    message=message,
                )
                for user_id in subscribers
            ]
        )
        logger.debug("Notified %d readers of chapter id=%s", len(subscribers), chapter.id)
        return len(subscribers)
