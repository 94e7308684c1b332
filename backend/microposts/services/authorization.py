"""
Microposts Backend - Post Ownership Check
===========================================

What:  Decides whether a user may mutate (edit/delete) a micro-post.
How:   Fetch the post; grant access iff its author is the acting user.

Argument order is fixed as (acting user, target post) and every call site
passes both by keyword.

"Not found" and "not yours" both come back as False from this predicate.
Callers that must answer 404 vs 401 check existence first
(see MicroPostService.update_post / delete_post).
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from microposts.repositories.microposts import micropost_repository

logger = logging.getLogger(__name__)


async def has_access(db: AsyncSession, *, user_id: Optional[str], post_id: str) -> bool:
    """Return True iff `user_id` is the author of post `post_id`."""
    if not user_id:
        return False

    post = await micropost_repository.get_post_by_id(db, post_id)
    if post is None:
        return False

    allowed = post.author_id == user_id
    if not allowed:
        logger.info("User %s denied access to micro-post %s", user_id, post_id)
    return allowed
