"""
Microposts Backend - User Repository
======================================

What:  Row-store operations for users and follow edges.
Who:   Called by UserService, FollowService and the authentication
       middleware's identity lookup.

Operations:
    get_user_by_id, get_user_by_email, list_users,
    create_user, update_user, delete_user,
    create_follow, delete_follow, follow_exists,
    list_followers, list_following

Every method takes the caller's AsyncSession and only flushes; the
commit belongs to the request-scoped session in `get_db_session`.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from microposts.models.micropost import MicroPost
from microposts.models.user import Follow, User

logger = logging.getLogger(__name__)

# Columns an update may touch; id, email and password_hash are fixed here
UPDATABLE_USER_FIELDS = frozenset({"name", "last_name", "about"})


class UserRepository:
    """Async data access for the `users` and `follows` tables."""

    # ── Users ─────────────────────────────────────────────────────────────

    async def get_user_by_id(self, db: AsyncSession, user_id: str) -> Optional[User]:
        return await db.get(User, user_id)

    async def get_user_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def list_users(self, db: AsyncSession) -> List[User]:
        result = await db.execute(select(User).order_by(User.created_at, User.id))
        return list(result.scalars().all())

    async def create_user(
        self,
        db: AsyncSession,
        email: str,
        password_hash: str,
        name: Optional[str] = None,
        last_name: Optional[str] = None,
        about: Optional[str] = None,
    ) -> User:
        user = User(
            email=email,
            password_hash=password_hash,
            name=name,
            last_name=last_name,
            about=about,
        )
        db.add(user)
        await db.flush()  # Assigns the id and timestamps without committing
        logger.debug("User row created: %s", user.id)
        return user

    async def update_user(
        self, db: AsyncSession, user_id: str, changes: Dict[str, Any]
    ) -> Optional[User]:
        """Apply `changes` (profile fields only); returns None if the user is gone."""
        user = await self.get_user_by_id(db, user_id)
        if user is None:
            return None
        for field, value in changes.items():
            if field in UPDATABLE_USER_FIELDS:
                setattr(user, field, value)
        await db.flush()
        return user

    async def delete_user(self, db: AsyncSession, user_id: str) -> bool:
        """
        Delete a user together with their posts and follow edges.

        Dependent rows are removed explicitly so the result does not depend
        on the backend enforcing ON DELETE CASCADE (SQLite does not by default).
        """
        await db.execute(
            delete(Follow).where(
                or_(Follow.follower_id == user_id, Follow.followed_id == user_id)
            )
        )
        await db.execute(delete(MicroPost).where(MicroPost.author_id == user_id))
        result = await db.execute(delete(User).where(User.id == user_id))
        return result.rowcount > 0

    # ── Follow edges ──────────────────────────────────────────────────────

    async def follow_exists(
        self, db: AsyncSession, follower_id: str, followed_id: str
    ) -> bool:
        edge = await db.get(Follow, (follower_id, followed_id))
        return edge is not None

    async def create_follow(
        self, db: AsyncSession, follower_id: str, followed_id: str
    ) -> Follow:
        edge = Follow(follower_id=follower_id, followed_id=followed_id)
        db.add(edge)
        await db.flush()
        return edge

    async def delete_follow(
        self, db: AsyncSession, follower_id: str, followed_id: str
    ) -> bool:
        result = await db.execute(
            delete(Follow).where(
                Follow.follower_id == follower_id,
                Follow.followed_id == followed_id,
            )
        )
        return result.rowcount > 0

    async def list_followers(self, db: AsyncSession, user_id: str) -> List[User]:
        """Users following `user_id`."""
        result = await db.execute(
            select(User)
            .join(Follow, Follow.follower_id == User.id)
            .where(Follow.followed_id == user_id)
            .order_by(Follow.created_at)
        )
        return list(result.scalars().all())

    async def list_following(self, db: AsyncSession, user_id: str) -> List[User]:
        """Users that `user_id` follows."""
        result = await db.execute(
            select(User)
            .join(Follow, Follow.followed_id == User.id)
            .where(Follow.follower_id == user_id)
            .order_by(Follow.created_at)
        )
        return list(result.scalars().all())


user_repository = UserRepository()
