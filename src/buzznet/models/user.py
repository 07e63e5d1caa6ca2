# src/buzznet/models/user.py
"""SQLAlchemy model for user accounts and their lockout state."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from buzznet.db.session import Base
from buzznet.db.time import as_utc, utcnow


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


class UserRole(str, enum.Enum):
    """Roles that gate destructive mutations."""

    USER = "user"
    ADMIN = "admin"


class User(Base):
    """Registered account. The password hash never leaves this model."""

    __tablename__ = "user_account"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    username: Mapped[str] = mapped_column(Text, nullable=False)
    # Stored lower-cased so the unique index is case-insensitive.
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(60), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(
            UserRole,
            native_enum=False,
            length=16,
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
        default=UserRole.USER,
    )

    login_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lock_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    def is_locked(self, now: datetime) -> bool:
        """Return True while ``lock_until`` lies in the future."""
        return self.lock_until is not None and as_utc(self.lock_until) > now
