"""Data access helpers backing view accounting and scheduled publication."""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.orm import Session, SessionTransaction

from novelhub.models import (
    Chapter,
    ChapterStatus,
    LibraryEntry,
    Notification,
    Novel,
    User,
    ViewCredit,
)

__all__ = ["ContentStore"]


class ContentStore:
    """Thin wrapper around the SQLAlchemy session for content rows.

    Every mutation here is a single SQL statement so that concurrent callers
    rely on the database's own row-level atomicity rather than on
    read-modify-write in Python.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the store with a SQLAlchemy session."""
        self.session = session

    # --- transactions ---------------------------------------------------------------
    def savepoint(self) -> AbstractContextManager[SessionTransaction]:
        """Open a SAVEPOINT; leaving the block by exception rolls only it back."""
        return self.session.begin_nested()

    def commit(self) -> None:
        self.session.commit()

    def refresh(self, instance: Any) -> None:
        self.session.refresh(instance)

    # --- lookups --------------------------------------------------------------------
    def get_novel(self, novel_id: int) -> Novel | None:
        return self.session.get(Novel, novel_id)

    def get_chapter(self, chapter_id: int) -> Chapter | None:
        return self.session.get(Chapter, chapter_id)

    def get_user(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    # --- view counters --------------------------------------------------------------
    def increment(self, model: Any, entity_id: int, field: str = "view_count", amount: int = 1) -> bool:
        """Atomically add ``amount`` to ``field`` of one row.

        Returns:
            False if no row with ``entity_id`` exists.
        """
        column = getattr(model, field)
        result = self.session.execute(
            update(model).where(model.id == entity_id).values({field: column + amount})
        )
        return bool(result.rowcount)

    def increment_chapter_views(self, chapter_id: int) -> bool:
        """Increment a published chapter's view counter and its novel's aggregate counter.

        Returns:
            False if the chapter does not exist or is not published yet.
        """
        result = self.session.execute(
            update(Chapter)
            .where(Chapter.id == chapter_id, Chapter.status == ChapterStatus.PUBLISHED)
            .values(view_count=Chapter.view_count + 1)
        )
        if not result.rowcount:
            return False
        parent_id = select(Chapter.novel_id).where(Chapter.id == chapter_id).scalar_subquery()
        self.session.execute(
            update(Novel)
            .where(Novel.id == parent_id)
            .values(view_count=Novel.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        return True

    def insert_view_credit(
        self, *, visitor_id: str, scope: str, entity_id: int, window_end: datetime
    ) -> None:
        """Insert a ledger row; raises ``IntegrityError`` if it already exists."""
        self.session.execute(
            insert(ViewCredit).values(
                visitor_id=visitor_id,
                scope=scope,
                entity_id=entity_id,
                window_end=window_end,
            )
        )

    def purge_view_credits(self, now: datetime) -> int:
        """Delete ledger rows whose window ended at or before ``now``."""
        result = self.session.execute(
            delete(ViewCredit)
            .where(ViewCredit.window_end <= now)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)

    # --- chapter status -------------------------------------------------------------
    def find_due_chapters(self, now: datetime) -> list[Chapter]:
        """Return scheduled chapters whose publish time is at or before ``now``."""
        result = self.session.execute(
            select(Chapter)
            .where(
                Chapter.status == ChapterStatus.SCHEDULED,
                Chapter.publish_at.is_not(None),
                Chapter.publish_at <= now,
            )
            .order_by(Chapter.publish_at, Chapter.id)
        )
        return list(result.scalars())

    def update_chapter_status(
        self,
        chapter_id: int,
        expected: ChapterStatus | Iterable[ChapterStatus],
        new: ChapterStatus,
        *,
        now: datetime,
        publish_at: datetime | None = None,
    ) -> bool:
        """Move a chapter to ``new`` only if it is still in ``expected``.

        ``publish_at`` is written alongside the status, so passing ``None``
        clears any schedule.

        Returns:
            True if this call performed the transition.
        """
        if isinstance(expected, ChapterStatus):
            condition = Chapter.status == expected
        else:
            condition = Chapter.status.in_(list(expected))
        result = self.session.execute(
            update(Chapter)
            .where(Chapter.id == chapter_id, condition)
            .values(status=new, publish_at=publish_at, updated_at=now)
        )
        return bool(result.rowcount)

    def touch_novel(self, novel_id: int, now: datetime) -> None:
        self.session.execute(
            update(Novel)
            .where(Novel.id == novel_id)
            .values(updated_at=now)
            .execution_options(synchronize_session=False)
        )

    # --- followers ------------------------------------------------------------------
    def library_subscribers(self, novel_id: int) -> list[int]:
        """Return ids of users who keep ``novel_id`` in their library."""
        result = self.session.execute(
            select(LibraryEntry.user_id)
            .where(LibraryEntry.novel_id == novel_id)
            .order_by(LibraryEntry.user_id)
        )
        return list(result.scalars())

    def add_notifications(self, notifications: Sequence[Notification]) -> None:
        self.session.add_all(notifications)
        self.session.flush()
