"""
Microposts Backend - Micro-post Route Handlers
================================================

What:  The paginated feed and micro-post show/create/edit/delete.
How:   Reads the current identity from AuthenticationMiddleware and hands
       it to MicroPostService, which decides 404 vs 401 for mutations.

Route Inventory:
    GET    /posts?page=N    feed page (settings.posts_per_page per page, 16 by default)
    GET    /posts/{id}      single post
    POST   /posts           publish (logged in)
    PATCH  /posts/{id}      edit (author only)
    DELETE /posts/{id}      delete (author only)
"""

import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from microposts.config import Settings
from microposts.database import get_db_session
from microposts.identity import Identity
from microposts.routes.dependencies import get_app_settings, get_identity, require_identity
from microposts.schemas.common import ErrorResponse
from microposts.schemas.micropost import (
    MicroPostCreateRequest,
    MicroPostPage,
    MicroPostResponse,
    MicroPostUpdateRequest,
)
from microposts.services.micropost_service import micropost_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["Micro-posts"])

NOT_FOUND = {404: {"description": "Micro-post not found", "model": ErrorResponse}}
UNAUTHORIZED = {401: {"description": "Not logged in or not the author", "model": ErrorResponse}}


@router.get(
    "",
    response_model=MicroPostPage,
    summary="Paginated feed, newest first",
)
async def list_posts(
    response: Response,
    page: int = Query(default=1, ge=1, description="1-based page number"),
    db: AsyncSession = Depends(get_db_session),
    app_settings: Settings = Depends(get_app_settings),
) -> MicroPostPage:
    result = await micropost_service.get_posts_page(db, page=page, per_page=app_settings.posts_per_page)
    response.headers["X-Total-Count"] = str(result.total_records)
    return result


@router.get(
    "/{post_id}",
    response_model=MicroPostResponse,
    responses=NOT_FOUND,
    summary="Get a single micro-post",
)
async def get_post(post_id: str, db: AsyncSession = Depends(get_db_session)) -> MicroPostResponse:
    return await micropost_service.get_post(db, post_id)


@router.post(
    "",
    response_model=MicroPostResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**UNAUTHORIZED, 400: {"description": "Blank title", "model": ErrorResponse}},
    summary="Publish a micro-post",
)
async def create_post(
    payload: MicroPostCreateRequest,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> MicroPostResponse:
    return await micropost_service.create_post(db, identity.user_id, payload)


@router.patch(
    "/{post_id}",
    response_model=MicroPostResponse,
    responses={**NOT_FOUND, **UNAUTHORIZED},
    summary="Edit your micro-post",
)
async def update_post(
    post_id: str,
    payload: MicroPostUpdateRequest,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db_session),
) -> MicroPostResponse:
    # Anonymous callers fall through to the service, which answers 404 for
    # missing posts before refusing them
    return await micropost_service.update_post(db, identity.user_id, post_id, payload)


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**NOT_FOUND, **UNAUTHORIZED},
    summary="Delete your micro-post",
)
async def delete_post(
    post_id: str,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await micropost_service.delete_post(db, identity.user_id, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
