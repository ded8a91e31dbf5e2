"""Tests for once-per-day view accounting."""

from datetime import UTC, datetime, timedelta

from sqlalchemy.exc import OperationalError

from novelhub.models import ChapterStatus, ViewCredit
from novelhub.services.views import ViewAccountingService, ViewOutcome, ViewScope
from tests.factories import make_chapter, make_novel

NOW = datetime(2024, 5, 1, 10, 0, tzinfo=UTC)


def _service(store) -> ViewAccountingService:
    return ViewAccountingService(store, secret="views-secret", algorithm="HS256", zone=UTC)


def test_first_view_is_credited(db_session, store) -> None:
    novel = make_novel(db_session, view_count=10)
    service = _service(store)

    result = service.record_view(ViewScope.NOVEL, novel.id, None, now=NOW)

    db_session.refresh(novel)
    assert result.outcome is ViewOutcome.CREDITED
    assert result.counted is True
    assert novel.view_count == 11
    assert novel.id in result.token
    assert result.max_age == 14 * 3600


def test_repeat_view_same_day_is_not_credited(db_session, store) -> None:
    novel = make_novel(db_session, view_count=10)
    service = _service(store)
    first = service.record_view(ViewScope.NOVEL, novel.id, None, now=NOW)

    second = service.record_view(
        ViewScope.NOVEL, novel.id, first.cookie_value, now=NOW + timedelta(hours=3)
    )

    db_session.refresh(novel)
    assert second.outcome is ViewOutcome.ALREADY_CREDITED
    assert second.cookie_value is None
    assert novel.view_count == 11


def test_token_accumulates_multiple_entities(db_session, store) -> None:
    first_novel = make_novel(db_session)
    second_novel = make_novel(db_session)
    service = _service(store)

    first = service.record_view(ViewScope.NOVEL, first_novel.id, None, now=NOW)
    second = service.record_view(ViewScope.NOVEL, second_novel.id, first.cookie_value, now=NOW)

    assert second.counted
    assert second.token.entity_ids == frozenset({first_novel.id, second_novel.id})
    assert second.token.visitor_id == first.token.visitor_id


def test_window_rollover_credits_again(db_session, store) -> None:
    novel = make_novel(db_session)
    service = _service(store)
    late = datetime(2024, 5, 1, 23, 50, tzinfo=UTC)
    first = service.record_view(ViewScope.NOVEL, novel.id, None, now=late)

    next_day = datetime(2024, 5, 2, 0, 10, tzinfo=UTC)
    second = service.record_view(ViewScope.NOVEL, novel.id, first.cookie_value, now=next_day)

    db_session.refresh(novel)
    assert second.counted
    assert novel.view_count == 2


def test_racing_requests_with_same_token_count_once(db_session, store) -> None:
    novel = make_novel(db_session)
    other = make_novel(db_session)
    service = _service(store)
    # Establish a token that already names the visitor but not ``novel``.
    shared = service.record_view(ViewScope.NOVEL, other.id, None, now=NOW).cookie_value

    results = [service.record_view(ViewScope.NOVEL, novel.id, shared, now=NOW) for _ in range(5)]

    db_session.refresh(novel)
    assert novel.view_count == 1
    assert [r.counted for r in results].count(True) == 1
    assert all(novel.id in r.token for r in results)


def test_chapter_view_increments_chapter_and_novel(db_session, store) -> None:
    novel = make_novel(db_session, view_count=3)
    chapter = make_chapter(db_session, novel, status=ChapterStatus.PUBLISHED, view_count=1)
    service = _service(store)

    result = service.record_view(ViewScope.CHAPTER, chapter.id, None, now=NOW)

    db_session.refresh(novel)
    db_session.refresh(chapter)
    assert result.counted
    assert chapter.view_count == 2
    assert novel.view_count == 4


def test_novel_and_chapter_tokens_are_independent(db_session, store) -> None:
    novel = make_novel(db_session)
    chapter = make_chapter(db_session, novel, status=ChapterStatus.PUBLISHED)
    service = _service(store)
    novel_token = service.record_view(ViewScope.NOVEL, novel.id, None, now=NOW).cookie_value

    # A novel token never suppresses a chapter view with the same numeric id.
    result = service.record_view(ViewScope.CHAPTER, chapter.id, novel_token, now=NOW)
    assert result.counted


def test_unpublished_chapter_view_is_not_counted(db_session, store) -> None:
    novel = make_novel(db_session)
    chapter = make_chapter(
        db_session, novel, status=ChapterStatus.SCHEDULED, publish_at=NOW + timedelta(days=1)
    )

    result = _service(store).record_view(ViewScope.CHAPTER, chapter.id, None, now=NOW)

    db_session.refresh(chapter)
    db_session.refresh(novel)
    assert result.counted is False
    assert result.cookie_value is None
    assert chapter.view_count == 0
    assert novel.view_count == 0
    assert db_session.query(ViewCredit).count() == 0


def test_unknown_entity_is_silent_noop(db_session, store) -> None:
    service = _service(store)

    result = service.record_view(ViewScope.NOVEL, 999_999, None, now=NOW)

    assert result.counted is False
    assert result.cookie_value is None
    assert db_session.query(ViewCredit).count() == 0


def test_store_failure_is_not_counted(db_session, store, mocker) -> None:
    novel = make_novel(db_session, view_count=5)
    mocker.patch.object(
        store,
        "increment",
        side_effect=OperationalError("UPDATE novel", {}, Exception("database is locked")),
    )
    service = _service(store)

    result = service.record_view(ViewScope.NOVEL, novel.id, None, now=NOW)

    db_session.refresh(novel)
    assert result.counted is False
    assert novel.view_count == 5


def test_purge_expired_credits(db_session, store) -> None:
    first = make_novel(db_session)
    second = make_novel(db_session)
    service = _service(store)
    service.record_view(ViewScope.NOVEL, first.id, None, now=NOW)
    service.record_view(ViewScope.NOVEL, second.id, None, now=NOW + timedelta(days=1))

    removed = service.purge_expired_credits(now=NOW + timedelta(days=1))

    assert removed == 1
    assert db_session.query(ViewCredit).count() == 1
