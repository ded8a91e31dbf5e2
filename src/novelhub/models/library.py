# src/novelhub/models/library.py
"""Reader library entries (novels a user follows)."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from novelhub.db.session import Base
from novelhub.db.time import utcnow


class LibraryEntry(Base):
    """A novel kept in a reader's library."""

    __tablename__ = "library_entry"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    novel_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("novel.id", ondelete="CASCADE"),
        primary_key=True,
    )
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
