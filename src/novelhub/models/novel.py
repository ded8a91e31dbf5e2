# src/novelhub/models/novel.py
"""SQLAlchemy models for novels and their chapters."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from novelhub.db.session import Base
from novelhub.db.time import utcnow


class ChapterStatus(str, enum.Enum):
    """Publication state machine: DRAFT -> SCHEDULED -> PUBLISHED.

    DRAFT -> PUBLISHED is the direct path. Nothing ever moves a chapter
    out of PUBLISHED.
    """

    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    PUBLISHED = "PUBLISHED"


class Novel(Base):
    """A novel owned by the uploading author or translator."""

    __tablename__ = "novel"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    uploader_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Only ever changed through an atomic SQL increment.
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    chapters: Mapped[list[Chapter]] = relationship(
        "Chapter",
        back_populates="novel",
        cascade="all, delete-orphan",
        order_by="Chapter.number",
    )


class Chapter(Base):
    """A chapter of a novel; both viewable and schedulable."""

    __tablename__ = "chapter"
    __table_args__ = (
        Index("ix_chapter_status_publish_at", "status", "publish_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    novel_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("novel.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    status: Mapped[ChapterStatus] = mapped_column(
        Enum(ChapterStatus, native_enum=False, length=16),
        nullable=False,
        default=ChapterStatus.DRAFT,
    )
    # Only consulted while status is SCHEDULED; cleared on publish.
    publish_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    novel: Mapped[Novel] = relationship("Novel", back_populates="chapters")

    @property
    def reader_path(self) -> str:
        """Return the reader-facing path of this chapter."""
        return f"/novels/{self.novel.slug}/{self.slug}"
