"""
Microposts Backend - User and Follow SQLAlchemy Models
========================================================

What:  ORM models for the `users` and `follows` tables.
Who:   Used by the user repository and by Alembic for schema management.

Table Design:
    users
        - id: UUID4 text; opaque to every layer above the store
        - email: unique; the login key
        - password_hash: never leaves the repository/service boundary
          (no public schema carries it)
        - name / last_name / about: optional profile fields

    follows
        - composite primary key (follower_id, followed_id), so the same
          ordered pair can only exist once
        - both columns reference users.id with ON DELETE CASCADE
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from microposts.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A registered account.

    Query Patterns:
        - Login: SELECT ... WHERE email = :email  → unique index
        - Identity lookup per request: SELECT ... WHERE id = :id → primary key
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        comment="Opaque user identifier (UUID4 text)",
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login email, unique across all users",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="passlib hash string; never exposed through the API",
    )

    name: Mapped[str | None] = mapped_column(String(120), nullable=True, default=None)
    last_name: Mapped[str | None] = mapped_column(String(120), nullable=True, default=None)
    about: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"


class Follow(Base):
    """
    Directed edge: `follower_id` follows `followed_id`.

    No surrogate key; the ordered pair is the identity of the edge.
    """

    __tablename__ = "follows"

    follower_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    followed_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # "who follows X" lookups; the primary key already covers "whom does X follow"
    __table_args__ = (
        Index("idx_follows_followed_id", "followed_id"),
    )

    def __repr__(self) -> str:
        return f"<Follow(follower_id={self.follower_id}, followed_id={self.followed_id})>"
