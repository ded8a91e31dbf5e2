"""Database engine, session factory and schema helpers."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from novelhub.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import novelhub.models  # noqa: E402,F401


def enable_sqlite_savepoints(bind: Engine) -> Engine:
    """Let SQLAlchemy own transaction boundaries on a pysqlite engine.

    View crediting and the publication sweep rely on SAVEPOINT; the pysqlite
    driver's implicit BEGIN handling breaks nested transactions unless it is
    switched off and SQLAlchemy emits BEGIN itself.
    """
    if bind.dialect.name != "sqlite":
        return bind

    @event.listens_for(bind, "connect")
    def _disable_driver_transactions(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(bind, "begin")
    def _emit_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")

    return bind


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine for ``url`` with SQLite handled for threaded request workers."""
    connect_args: dict[str, Any] = {}
    if make_url(url).get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
    return enable_sqlite_savepoints(
        create_engine(url, pool_pre_ping=True, echo=echo, connect_args=connect_args)
    )


engine = build_engine(settings.effective_database_url, echo=settings.sql_debug)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
