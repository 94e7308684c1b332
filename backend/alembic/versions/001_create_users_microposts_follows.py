"""Create users, follows and microposts tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema: accounts, the directed follow graph, and posts.
How:   Plain string UUID keys (generated by the application), timezone-aware
       timestamps, and ON DELETE CASCADE from both dependent tables to users.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False, comment="Opaque user identifier (UUID4 text)"),
        sa.Column("email", sa.String(255), nullable=False, comment="Login email, unique across all users"),
        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=False,
            comment="passlib hash string; never exposed through the API",
        ),
        sa.Column("name", sa.String(120), nullable=True),
        sa.Column("last_name", sa.String(120), nullable=True),
        sa.Column("about", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "follows",
        sa.Column("follower_id", sa.String(36), nullable=False),
        sa.Column("followed_id", sa.String(36), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["follower_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["followed_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("follower_id", "followed_id"),
    )
    op.create_index("idx_follows_followed_id", "follows", ["followed_id"])

    op.create_table(
        "microposts",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "author_id",
            sa.String(36),
            nullable=False,
            comment="Author user id; immutable after creation",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    # The feed is always newest-first
    op.create_index("idx_microposts_created_at", "microposts", [sa.text("created_at DESC")])
    op.create_index("idx_microposts_author_id", "microposts", ["author_id"])


def downgrade() -> None:
    op.drop_index("idx_microposts_author_id", table_name="microposts")
    op.drop_index("idx_microposts_created_at", table_name="microposts")
    op.drop_table("microposts")
    op.drop_index("idx_follows_followed_id", table_name="follows")
    op.drop_table("follows")
    op.drop_table("users")
