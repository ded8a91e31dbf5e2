# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator
from datetime import UTC, datetime, timedelta

import pytest

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PUBLISH_SWEEP_INTERVAL_SECONDS", "0")

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from novelhub.db.session import Base, enable_sqlite_savepoints
from novelhub.db.session import get_db as app_get_session
from novelhub.main import app as fastapi_app
from novelhub.models import Chapter, ChapterStatus, LibraryEntry, Novel, User, UserRole
from novelhub.repositories.content_store import ContentStore
from tests.factories import auth_headers, make_chapter, make_novel, make_user

TEST_DB_URL = "sqlite://"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = enable_sqlite_savepoints(
        create_engine(
            TEST_DB_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    # Commits inside the code under test release a SAVEPOINT; the outer
    # transaction is rolled back when the test ends.
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def store(db_session: Session) -> ContentStore:
    return ContentStore(db_session)


@pytest.fixture()
def author(db_session: Session) -> User:
    """Create the uploader of the default novel."""
    return make_user(db_session, UserRole.AUTHOR)


@pytest.fixture()
def reader(db_session: Session) -> User:
    """Create a reader with no special rights."""
    return make_user(db_session, UserRole.READER)


@pytest.fixture()
def admin(db_session: Session) -> User:
    """Create an administrator."""
    return make_user(db_session, UserRole.ADMIN)


@pytest.fixture()
def novel(db_session: Session, author: User) -> Novel:
    """Create a novel owned by ``author``."""
    return make_novel(db_session, uploader=author)


@pytest.fixture()
def draft_chapter(db_session: Session, novel: Novel) -> Chapter:
    return make_chapter(db_session, novel)


@pytest.fixture()
def due_chapter(db_session: Session, novel: Novel) -> Chapter:
    """A scheduled chapter whose publish time has already passed."""
    return make_chapter(
        db_session,
        novel,
        status=ChapterStatus.SCHEDULED,
        publish_at=datetime.now(UTC) - timedelta(minutes=5),
    )


@pytest.fixture()
def follower(db_session: Session, reader: User, novel: Novel) -> User:
    """A reader who keeps ``novel`` in their library."""
    db_session.add(LibraryEntry(user_id=reader.id, novel_id=novel.id))
    db_session.flush()
    return reader


@pytest.fixture()
def author_headers(author: User) -> dict[str, str]:
    """Return authorization headers for the novel's uploader."""
    return auth_headers(author)
