"""
Microposts Backend - Micro-post Service
=========================================

What:  Use cases for micro-posts: listing, pagination, show, create,
       update and delete.
How:   Composes the micro-post repository, the pagination calculator and
       the ownership check.
Who:   Called by the posts router.

Mutation flow (update / delete):
    ┌──────────────┐  absent   ┌───────────────┐
    │ post exists? │──────────▶│ NotFoundError │  404
    └──────┬───────┘           └───────────────┘
           │ present
    ┌──────▼───────┐  denied   ┌────────────────────┐
    │  has_access  │──────────▶│ AuthorizationError │  401
    └──────┬───────┘           └────────────────────┘
           │ granted
    ┌──────▼───────┐
    │  repository  │
    └──────────────┘

    has_access() answers False for both "missing" and "not yours", so the
    existence check comes first to keep 404 and 401 apart.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from microposts.exceptions import (
    AuthenticationRequiredError,
    AuthorizationError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from microposts.models.micropost import MicroPost
from microposts.repositories.microposts import micropost_repository
from microposts.repositories.users import user_repository
from microposts.schemas.micropost import (
    MicroPostCreateRequest,
    MicroPostPage,
    MicroPostResponse,
    MicroPostUpdateRequest,
)
from microposts.services.authorization import has_access
from microposts.utils.pagination import page_offset, paginate

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 16


class MicroPostService:
    """Business logic for micro-posts."""

    async def list_posts(self, db: AsyncSession) -> List[MicroPostResponse]:
        """Every post, newest first."""
        try:
            posts = await micropost_repository.list_posts(db)
        except SQLAlchemyError as e:
            logger.error("Database error listing micro-posts: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not retrieve posts. Please try again.")
        return [MicroPostResponse.model_validate(post) for post in posts]

    async def list_posts_for_user(self, db: AsyncSession, user_id: str) -> List[MicroPostResponse]:
        """Posts authored by `user_id`, newest first."""
        if await user_repository.get_user_by_id(db, user_id) is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        posts = await micropost_repository.list_posts_for_user(db, user_id)
        return [MicroPostResponse.model_validate(post) for post in posts]

    async def get_posts_page(
        self, db: AsyncSession, page: int = 1, per_page: int = DEFAULT_PER_PAGE
    ) -> MicroPostPage:
        """
        One page of the newest-first feed plus its page descriptor.

        The requested page is not clamped: a page past the end yields an
        empty `data` list with prev_page set and next_page null.
        """
        if per_page < 1:
            raise ValidationError(message="per_page must be at least 1", field="per_page")

        try:
            total_records = await micropost_repository.count_posts(db)
            posts = await micropost_repository.list_posts(
                db, skip=page_offset(page, per_page), take=per_page
            )
        except SQLAlchemyError as e:
            logger.error("Database error paginating micro-posts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve posts. Please try again.",
                context={"page": page, "per_page": per_page},
            )

        descriptor = paginate(page, per_page, total_records)
        return MicroPostPage(
            **descriptor.model_dump(),
            data=[MicroPostResponse.model_validate(post) for post in posts],
        )

    async def get_post(self, db: AsyncSession, post_id: str) -> MicroPostResponse:
        """Raises NotFoundError when the post does not exist."""
        post = await self._get_existing(db, post_id)
        return MicroPostResponse.model_validate(post)

    async def create_post(
        self, db: AsyncSession, author_id: Optional[str], data: MicroPostCreateRequest
    ) -> MicroPostResponse:
        """
        Publish a post as `author_id`.

        Raises:
            AuthenticationRequiredError: no author (anonymous caller)
            NotFoundError:               the author does not exist
            ValidationError:             blank title
        """
        if not author_id:
            raise AuthenticationRequiredError()

        title = data.title.strip()
        if not title:
            raise ValidationError(message="Title must not be blank", field="title")

        if await user_repository.get_user_by_id(db, author_id) is None:
            raise NotFoundError(resource="user", resource_id=author_id)

        try:
            post = await micropost_repository.create_post(
                db, author_id=author_id, title=title, content=data.content
            )
        except SQLAlchemyError as e:
            logger.error("Database error creating micro-post: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not publish the post. Please try again.",
                context={"author_id": author_id},
            )

        logger.info("MicroPost %s created by %s", post.id, author_id)
        return MicroPostResponse.model_validate(post)

    async def update_post(
        self,
        db: AsyncSession,
        user_id: Optional[str],
        post_id: str,
        data: MicroPostUpdateRequest,
    ) -> MicroPostResponse:
        """
        Edit title/content of a post owned by `user_id`.

        Raises:
            NotFoundError:      the post does not exist
            AuthorizationError: `user_id` is not the author (or is anonymous)
            ValidationError:    blank title
        """
        await self._get_existing(db, post_id)
        if not await has_access(db, user_id=user_id, post_id=post_id):
            raise AuthorizationError(resource="micro post", action="edit")

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "title" in changes:
            changes["title"] = changes["title"].strip()
            if not changes["title"]:
                raise ValidationError(message="Title must not be blank", field="title")

        post = await micropost_repository.update_post(db, post_id, changes)
        if post is None:
            raise NotFoundError(resource="micro-post", resource_id=post_id)
        logger.info("MicroPost %s updated by %s", post_id, user_id)
        return MicroPostResponse.model_validate(post)

    async def delete_post(
        self, db: AsyncSession, user_id: Optional[str], post_id: str
    ) -> None:
        """
        Delete a post owned by `user_id`.

        Raises:
            NotFoundError:      the post does not exist
            AuthorizationError: `user_id` is not the author (or is anonymous)
        """
        await self._get_existing(db, post_id)
        if not await has_access(db, user_id=user_id, post_id=post_id):
            raise AuthorizationError(resource="micro post", action="delete")

        await micropost_repository.delete_post(db, post_id)
        logger.info("MicroPost %s deleted by %s", post_id, user_id)

    async def _get_existing(self, db: AsyncSession, post_id: str) -> MicroPost:
        try:
            post = await micropost_repository.get_post_by_id(db, post_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching micro-post %s: %s", post_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the post. Please try again.",
                context={"post_id": post_id},
            )
        if post is None:
            raise NotFoundError(resource="micro-post", resource_id=post_id)
        return post


micropost_service = MicroPostService()
