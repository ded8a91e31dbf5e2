# src/novelhub/models/user.py
"""SQLAlchemy models for platform accounts."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from novelhub.db.session import Base
from novelhub.db.time import utcnow


class UserRole(str, enum.Enum):
    """Coarse roles used for authorization checks."""

    READER = "READER"
    AUTHOR = "AUTHOR"
    ADMIN = "ADMIN"


class User(Base):
    """A reader, author/translator or administrator account."""

    __tablename__ = "user_account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=16),
        nullable=False,
        default=UserRole.READER,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
