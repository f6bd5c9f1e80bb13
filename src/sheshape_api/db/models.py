"""
sheshape_api.db.models

Persistence schema.

Responsibilities:
- Define the `User` account row and the `Role` enum used for authorization.
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from sheshape_api.db.base import Base


def _utcnow() -> datetime:
    # Persist naive UTC timestamps for portability across SQLite/Postgres.
    return datetime.utcnow()


class Role(enum.StrEnum):
    # Stored by name; the values double as JWT role claims.
    USER = "USER"
    ADMIN = "ADMIN"
    TRAINER = "TRAINER"
    NUTRITIONIST = "NUTRITIONIST"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)

    role: Mapped[Role] = mapped_column(Enum(Role), nullable=False, default=Role.USER, index=True)
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, username={self.username!r}, role={self.role!r})"
