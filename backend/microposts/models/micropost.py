"""
Microposts Backend - MicroPost SQLAlchemy Model
=================================================

What:  ORM model representing the `microposts` table.
Who:   Used by the micro-post repository and by Alembic.

Lifecycle:
    1. Created by an authenticated user (author_id = that user's id)
    2. Title/content may be updated by the author only
    3. Deleted by the author, or together with the author's account

    author_id never changes after creation; the repository's update path
    only writes title and content.

Index on created_at DESC:
    Every listing is newest-first, including the paginated feed.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from microposts.database import Base
from microposts.models.user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MicroPost(Base):
    """A short authored text item with a title and body."""

    __tablename__ = "microposts"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    author_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Author user id; immutable after creation",
    )

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

    # Joined eagerly: async sessions cannot lazy-load, and every post
    # response embeds the author's public fields
    author: Mapped[User] = relationship(lazy="joined")

    __table_args__ = (
        Index("idx_microposts_created_at", created_at.desc()),
        Index("idx_microposts_author_id", "author_id"),
    )

    def __repr__(self) -> str:
        return f"<MicroPost(id={self.id}, author_id={self.author_id}, title='{self.title}')>"
