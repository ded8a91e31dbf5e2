"""Tests for author-driven chapter scheduling."""

from datetime import UTC, datetime, timedelta

import pytest

from novelhub.core.errors import (
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from novelhub.models import ChapterStatus, Notification
from novelhub.services.chapters import ChapterPublishingService
from tests.factories import make_chapter

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def _service(store) -> ChapterPublishingService:
    return ChapterPublishingService(store, clock=lambda: NOW)


def test_schedule_draft(store, author, draft_chapter) -> None:
    publish_at = NOW + timedelta(days=1)

    chapter = _service(store).schedule(draft_chapter.id, author, publish_at)

    assert chapter.status == ChapterStatus.SCHEDULED
    assert chapter.publish_at.replace(tzinfo=UTC) == publish_at


def test_schedule_in_the_past_is_rejected(store, author, draft_chapter) -> None:
    with pytest.raises(ValidationError):
        _service(store).schedule(draft_chapter.id, author, NOW - timedelta(minutes=1))


def test_schedule_published_chapter_conflicts(db_session, store, author, novel) -> None:
    chapter = make_chapter(db_session, novel, status=ChapterStatus.PUBLISHED)

    with pytest.raises(InvalidTransitionError):
        _service(store).schedule(chapter.id, author, NOW + timedelta(hours=1))


def test_only_owner_or_admin_may_schedule(store, reader, admin, draft_chapter) -> None:
    service = _service(store)
    with pytest.raises(PermissionDeniedError):
        service.schedule(draft_chapter.id, reader, NOW + timedelta(hours=1))

    chapter = service.schedule(draft_chapter.id, admin, NOW + timedelta(hours=1))
    assert chapter.status == ChapterStatus.SCHEDULED


def test_missing_chapter_is_reported(store, author) -> None:
    with pytest.raises(NotFoundError):
        _service(store).schedule(424242, author, NOW + timedelta(hours=1))


def test_unschedule_returns_to_draft(db_session, store, author, novel) -> None:
    chapter = make_chapter(
        db_session, novel, status=ChapterStatus.SCHEDULED, publish_at=NOW + timedelta(hours=2)
    )

    chapter = _service(store).unschedule(chapter.id, author)

    assert chapter.status == ChapterStatus.DRAFT
    assert chapter.publish_at is None


def test_unschedule_draft_conflicts(store, author, draft_chapter) -> None:
    with pytest.raises(InvalidTransitionError):
        _service(store).unschedule(draft_chapter.id, author)


def test_publish_now_notifies_followers(db_session, store, author, follower, draft_chapter) -> None:
    chapter = _service(store).publish_now(draft_chapter.id, author)

    assert chapter.status == ChapterStatus.PUBLISHED
    assert db_session.query(Notification).filter(Notification.user_id == follower.id).count() == 1


def test_publish_twice_conflicts(store, author, draft_chapter) -> None:
    service = _service(store)
    service.publish_now(draft_chapter.id, author)

    with pytest.raises(InvalidTransitionError):
        service.publish_now(draft_chapter.id, author)
