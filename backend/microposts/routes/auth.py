"""
Microposts Backend - Auth Route Handlers
==========================================

What:  Registration, login, logout and "who am I".
How:   Delegates credential checks to UserService; on success mints a
       session token and stores it in an HTTP-only cookie. Every later
       request is authenticated by AuthenticationMiddleware reading that
       cookie.

Cookie:
    name      settings.auth_cookie_name ("authToken")
    max-age   settings.auth_token_expire_minutes (one hour)
    flags     HttpOnly, Secure (unless AUTH_COOKIE_SECURE=false), SameSite=Lax
"""

import logging

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from microposts.config import Settings
from microposts.database import get_db_session
from microposts.identity import Identity
from microposts.routes.dependencies import get_app_settings, require_identity
from microposts.schemas.common import ErrorResponse
from microposts.schemas.user import LoginRequest, RegisterRequest, UserPublic
from microposts.security.tokens import create_access_token
from microposts.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def set_session_cookie(response: Response, user_id: str, app_settings: Settings) -> None:
    """Mint a token for `user_id` and attach it to `response` as the auth cookie."""
    token = create_access_token(
        user_id,
        secret=app_settings.jwt_secret_key,
        algorithm=app_settings.jwt_algorithm,
        expires_minutes=app_settings.auth_token_expire_minutes,
    )
    response.set_cookie(
        key=app_settings.auth_cookie_name,
        value=token,
        max_age=app_settings.auth_token_expire_minutes * 60,
        httponly=True,
        secure=app_settings.auth_cookie_secure,
        samesite="lax",
    )


@router.post(
    "/register",
    response_model=UserPublic,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid email", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Create an account and start a session",
)
async def register(
    payload: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    app_settings: Settings = Depends(get_app_settings),
) -> UserPublic:
    user = await user_service.register(db, payload.email, payload.password)
    set_session_cookie(response, user.id, app_settings)
    return user


@router.post(
    "/login",
    response_model=UserPublic,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Log in and start a session",
)
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    app_settings: Settings = Depends(get_app_settings),
) -> UserPublic:
    user = await user_service.login(db, payload.email, payload.password)
    set_session_cookie(response, user.id, app_settings)
    return UserPublic.model_validate(user)


@router.post(
    "/logout",
    status_code=status.HTTP_302_FOUND,
    summary="End the session and redirect to the feed",
)
async def logout(app_settings: Settings = Depends(get_app_settings)) -> RedirectResponse:
    """Tokens are stateless, so logging out only clears the cookie."""
    response = RedirectResponse(url="/posts", status_code=status.HTTP_302_FOUND)
    response.delete_cookie(
        key=app_settings.auth_cookie_name,
        httponly=True,
        secure=app_settings.auth_cookie_secure,
        samesite="lax",
    )
    return response


@router.get(
    "/me",
    response_model=UserPublic,
    responses={401: {"description": "Not logged in", "model": ErrorResponse}},
    summary="The currently authenticated user",
)
async def me(identity: Identity = Depends(require_identity)) -> UserPublic:
    return identity.user
