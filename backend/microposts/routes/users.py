"""
Microposts Backend - Users Route Handlers
===========================================

What:  Profiles, the user listing, follow toggling and follow listings.

Route Inventory:
    GET    /users                   list users (?filter=alphabetical|withPrefix)
    GET    /users/{id}              public profile
    PATCH  /users/{id}              edit own profile
    DELETE /users/{id}              delete own account
    GET    /users/{id}/posts        posts by that user
    GET    /users/{id}/followers    who follows the user
    GET    /users/{id}/following    whom the user follows
    POST   /users/{id}/follow       toggle "current user follows {id}"

Profile mutations are only allowed on your own account; anything else is
answered with 401 before the target is even looked up.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from microposts.database import get_db_session
from microposts.exceptions import AuthorizationError
from microposts.identity import Identity
from microposts.routes.dependencies import require_identity
from microposts.schemas.common import ErrorResponse
from microposts.schemas.micropost import MicroPostResponse
from microposts.schemas.user import (
    FollowToggleResponse,
    UserListResponse,
    UserPublic,
    UserUpdateRequest,
)
from microposts.services.follow_service import follow_service
from microposts.services.micropost_service import micropost_service
from microposts.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])

NOT_FOUND = {404: {"description": "User not found", "model": ErrorResponse}}
UNAUTHORIZED = {401: {"description": "Not logged in or not your account", "model": ErrorResponse}}


def _ensure_self(identity: Identity, user_id: str, action: str) -> None:
    if identity.user_id != user_id:
        raise AuthorizationError(resource="profile", action=action)


@router.get(
    "",
    response_model=UserListResponse,
    responses={400: {"description": "Unknown filter", "model": ErrorResponse}},
    summary="List users with an optional display filter",
)
async def list_users(
    display_filter: Optional[str] = Query(
        default=None,
        alias="filter",
        description="'alphabetical' (sorted, last names capitalised) or 'withPrefix' (grouped by a/b/c)",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> UserListResponse:
    return await user_service.list_users(db, applied_filter=display_filter)


@router.get("/{user_id}", response_model=UserPublic, responses=NOT_FOUND, summary="Public profile")
async def get_user(user_id: str, db: AsyncSession = Depends(get_db_session)) -> UserPublic:
    return await user_service.get_user_public_info(db, user_id)


@router.patch(
    "/{user_id}",
    response_model=UserPublic,
    responses={**NOT_FOUND, **UNAUTHORIZED},
    summary="Edit your own profile",
)
async def update_user(
    user_id: str,
    payload: UserUpdateRequest,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> UserPublic:
    _ensure_self(identity, user_id, action="edit")
    return await user_service.update_user_info(db, user_id, payload)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**NOT_FOUND, **UNAUTHORIZED},
    summary="Delete your own account",
)
async def delete_user(
    user_id: str,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    _ensure_self(identity, user_id, action="delete")
    await user_service.delete_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{user_id}/posts",
    response_model=List[MicroPostResponse],
    responses=NOT_FOUND,
    summary="Posts authored by a user, newest first",
)
async def list_user_posts(
    user_id: str, db: AsyncSession = Depends(get_db_session)
) -> List[MicroPostResponse]:
    return await micropost_service.list_posts_for_user(db, user_id)


@router.get(
    "/{user_id}/followers",
    response_model=List[UserPublic],
    responses=NOT_FOUND,
    summary="Users following this user",
)
async def list_followers(
    user_id: str, db: AsyncSession = Depends(get_db_session)
) -> List[UserPublic]:
    return await follow_service.list_followers(db, user_id)


@router.get(
    "/{user_id}/following",
    response_model=List[UserPublic],
    responses=NOT_FOUND,
    summary="Users this user follows",
)
async def list_following(
    user_id: str, db: AsyncSession = Depends(get_db_session)
) -> List[UserPublic]:
    return await follow_service.list_following(db, user_id)


@router.post(
    "/{user_id}/follow",
    response_model=FollowToggleResponse,
    responses={
        **NOT_FOUND,
        **UNAUTHORIZED,
        400: {"description": "Cannot follow yourself", "model": ErrorResponse},
    },
    summary="Follow or unfollow a user",
)
async def toggle_follow(
    user_id: str,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> FollowToggleResponse:
    following = await follow_service.toggle_follow(db, identity.user_id, user_id)
    return FollowToggleResponse(
        follower_id=identity.user_id,
        followed_id=user_id,
        following=following,
    )
