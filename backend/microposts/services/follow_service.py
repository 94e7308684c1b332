"""
Microposts Backend - Follow Service
=====================================

What:  Follow/unfollow toggling and follower/following listings.
Who:   Called by the users router (POST /users/{id}/follow and the
       /followers and /following listings).

Toggle semantics:
    edge present → delete it
    edge absent  → create it
    Two successive toggles restore the original state.

Concurrency:
    The toggle is a read (follow_exists) followed by a separate write,
    with no lock or transaction spanning both. Two simultaneous toggles of
    the same pair can both read "absent": one insert then fails on the
    composite primary key and the request errors. Two that both read
    "present" both delete, and the edge ends up gone. This race is accepted
    behavior for follow edges.

Self-follow:
    Rejected with ValidationError; following yourself has no meaning in
    the feed and would show up in your own follower list.
"""

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from microposts.exceptions import DatabaseError, NotFoundError, ValidationError
from microposts.repositories.users import user_repository
from microposts.schemas.user import UserPublic

logger = logging.getLogger(__name__)


class FollowService:
    """Business logic for follow edges."""

    async def toggle_follow(
        self, db: AsyncSession, follower_id: str, followed_id: str
    ) -> bool:
        """
        Flip the (follower → followed) edge.

        Returns:
            True if `follower_id` follows `followed_id` after the call.

        Raises:
            ValidationError: follower and followed are the same user
            NotFoundError:   the followed user does not exist
        """
        if follower_id == followed_id:
            raise ValidationError(message="Users cannot follow themselves", field="followed_id")

        await self._ensure_user_exists(db, followed_id)

        try:
            already_following = await user_repository.follow_exists(db, follower_id, followed_id)
            if already_following:
                await user_repository.delete_follow(db, follower_id, followed_id)
            else:
                await user_repository.create_follow(db, follower_id, followed_id)
        except SQLAlchemyError as e:
            logger.error(
                "Database error toggling follow %s -> %s: %s", follower_id, followed_id, str(e)
            )
            raise DatabaseError(
                message="Could not update the follow. Please try again.",
                context={"follower_id": follower_id, "followed_id": followed_id},
            )

        following = not already_following
        logger.info(
            "User %s %s user %s",
            follower_id,
            "followed" if following else "unfollowed",
            followed_id,
        )
        return following

    async def is_following(self, db: AsyncSession, follower_id: str, followed_id: str) -> bool:
        return await user_repository.follow_exists(db, follower_id, followed_id)

    async def list_followers(self, db: AsyncSession, user_id: str) -> List[UserPublic]:
        await self._ensure_user_exists(db, user_id)
        rows = await user_repository.list_followers(db, user_id)
        return [UserPublic.model_validate(row) for row in rows]

    async def list_following(self, db: AsyncSession, user_id: str) -> List[UserPublic]:
        await self._ensure_user_exists(db, user_id)
        rows = await user_repository.list_following(db, user_id)
        return [UserPublic.model_validate(row) for row in rows]

    async def _ensure_user_exists(self, db: AsyncSession, user_id: str) -> None:
        if await user_repository.get_user_by_id(db, user_id) is None:
            raise NotFoundError(resource="user", resource_id=user_id)


follow_service = FollowService()
