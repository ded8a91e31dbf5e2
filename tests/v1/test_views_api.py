"""Tests for the view counting endpoint."""

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from novelhub.api.v1.endpoints import views as views_endpoints
from novelhub.models import ChapterStatus
from tests.factories import make_chapter, make_novel

NOVEL_COOKIE = "viewed_novels_today"
CHAPTER_COOKIE = "viewed_chapters_today"


def test_novel_view_counted_once_per_day(client: TestClient, db_session) -> None:
    novel = make_novel(db_session, view_count=10)

    r = client.post("/api/v1/views", json={"novelId": novel.id})
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"success": True, "counted": True}
    assert NOVEL_COOKIE in r.cookies

    r = client.post("/api/v1/views", json={"novelId": novel.id})
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"success": True, "counted": False}

    db_session.refresh(novel)
    assert novel.view_count == 11


def test_cookie_attributes(client: TestClient, db_session) -> None:
    novel = make_novel(db_session)

    r = client.post("/api/v1/views", json={"novelId": novel.id})

    header = r.headers["set-cookie"].lower()
    assert header.startswith(f"{NOVEL_COOKIE}=")
    assert "httponly" in header
    assert "samesite=lax" in header
    assert "path=/" in header
    assert "max-age=" in header
    assert "secure" not in header


def test_chapter_view_uses_chapter_cookie(client: TestClient, db_session) -> None:
    novel = make_novel(db_session)
    chapter = make_chapter(db_session, novel, status=ChapterStatus.PUBLISHED)

    r = client.post("/api/v1/views", json={"novelId": novel.id, "chapterId": chapter.id})

    assert r.json()["counted"] is True
    assert CHAPTER_COOKIE in r.cookies
    db_session.refresh(chapter)
    db_session.refresh(novel)
    assert chapter.view_count == 1
    assert novel.view_count == 1


def test_snake_case_body_is_accepted(client: TestClient, db_session) -> None:
    novel = make_novel(db_session)

    r = client.post("/api/v1/views", json={"novel_id": novel.id})

    assert r.json()["counted"] is True


def test_missing_identifiers_is_bad_request(client: TestClient) -> None:
    r = client.post("/api/v1/views", json={})

    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["success"] is False


@pytest.mark.parametrize("body", [{"novelId": 0}, {"chapterId": -3}, {"novelId": 0, "chapterId": 0}])
def test_non_positive_identifiers_are_bad_request(client: TestClient, body) -> None:
    r = client.post("/api/v1/views", json=body)

    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert r.json()["success"] is False


def test_unknown_novel_is_not_an_error(client: TestClient) -> None:
    r = client.post("/api/v1/views", json={"novelId": 987654})

    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"success": True, "counted": False}
    assert NOVEL_COOKIE not in r.cookies


def test_store_failure_is_soft(client: TestClient, db_session, mocker) -> None:
    novel = make_novel(db_session)
    mocker.patch(
        "novelhub.repositories.content_store.ContentStore.increment",
        side_effect=OperationalError("UPDATE novel", {}, Exception("database is locked")),
    )

    r = client.post("/api/v1/views", json={"novelId": novel.id})

    assert r.status_code == status.HTTP_200_OK
    assert r.json()["counted"] is False


def test_unexpected_failure_is_server_error(client: TestClient, app, db_session, mocker) -> None:
    novel = make_novel(db_session)
    service = mocker.Mock()
    service.record_view.side_effect = RuntimeError("boom")
    app.dependency_overrides[views_endpoints.get_view_service_dep] = lambda: service
    try:
        r = client.post("/api/v1/views", json={"novelId": novel.id})
    finally:
        app.dependency_overrides.pop(views_endpoints.get_view_service_dep, None)

    assert r.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert r.json() == {"success": False, "error": "Failed to increment view"}
