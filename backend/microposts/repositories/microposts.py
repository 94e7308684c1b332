"""
Microposts Backend - Micro-post Repository
============================================

What:  Row-store operations for micro-posts.
Who:   Called by MicroPostService and the ownership check.

Query plans:
    list_posts: SELECT ... ORDER BY created_at DESC [OFFSET :skip LIMIT :take]
                → idx_microposts_created_at
    get_post_by_id: primary key lookup, author joined eagerly
    count_posts: SELECT count(id)
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from microposts.models.micropost import MicroPost

logger = logging.getLogger(__name__)

# author_id is immutable after creation
UPDATABLE_POST_FIELDS = frozenset({"title", "content"})


class MicroPostRepository:
    """Async data access for the `microposts` table."""

    async def get_post_by_id(self, db: AsyncSession, post_id: str) -> Optional[MicroPost]:
        return await db.get(MicroPost, post_id)

    async def list_posts(
        self,
        db: AsyncSession,
        skip: Optional[int] = None,
        take: Optional[int] = None,
    ) -> List[MicroPost]:
        """All posts newest first, optionally windowed with skip/take."""
        query = select(MicroPost).order_by(desc(MicroPost.created_at), MicroPost.id)
        if skip:
            query = query.offset(skip)
        if take is not None:
            query = query.limit(take)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def list_posts_for_user(self, db: AsyncSession, user_id: str) -> List[MicroPost]:
        result = await db.execute(
            select(MicroPost)
            .where(MicroPost.author_id == user_id)
            .order_by(desc(MicroPost.created_at), MicroPost.id)
        )
        return list(result.scalars().all())

    async def count_posts(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count(MicroPost.id)))
        return result.scalar() or 0

    async def create_post(
        self, db: AsyncSession, author_id: str, title: str, content: str
    ) -> MicroPost:
        post = MicroPost(author_id=author_id, title=title, content=content)
        db.add(post)
        await db.flush()
        # Load the author now; async sessions cannot lazy-load it later
        await db.refresh(post, attribute_names=["author"])
        logger.debug("MicroPost row created: %s", post.id)
        return post

    async def update_post(
        self, db: AsyncSession, post_id: str, changes: Dict[str, Any]
    ) -> Optional[MicroPost]:
        post = await self.get_post_by_id(db, post_id)
        if post is None:
            return None
        for field, value in changes.items():
            if field in UPDATABLE_POST_FIELDS:
                setattr(post, field, value)
        await db.flush()
        return post

    async def delete_post(self, db: AsyncSession, post_id: str) -> bool:
        result = await db.execute(delete(MicroPost).where(MicroPost.id == post_id))
        return result.rowcount > 0


micropost_repository = MicroPostRepository()
