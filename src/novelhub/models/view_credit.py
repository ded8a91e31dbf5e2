# src/novelhub/models/view_credit.py
"""Server-side ledger of view credits granted within a day window."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from novelhub.db.session import Base


class ViewCredit(Base):
    """One credited view for a visitor, scope and entity in one day window.

    The unique constraint is what makes concurrent requests sharing a view
    token increment a counter at most once per window.
    """

    __tablename__ = "view_credit"
    __table_args__ = (
        UniqueConstraint(
            "visitor_id", "scope", "entity_id", "window_end",
            name="uq_view_credit_window",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    visitor_id: Mapped[str] = mapped_column(String(64), nullable=False)
    scope: Mapped[str] = mapped_column(String(16), nullable=False)
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False)
    window_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
