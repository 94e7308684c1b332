"""
Microposts Backend - Authentication Middleware
================================================

What:  Resolves the session cookie into an Identity for every request.
How:   Reads the signed token from the auth cookie, verifies it with the
       configured secret, looks the user up, and stores the result on
       `request.state.identity` before any route handler runs.
Who:   Applied to every request via Starlette middleware.
When:  After RequestIDMiddleware, before RequestLoggingMiddleware.

Resolution (every failure path ends in the same anonymous identity):

    no cookie ───────────────────────────────▶ anonymous
    bad signature / expired / malformed ─────▶ anonymous
    payload not an object, or no user id ────▶ anonymous
    store lookup raises or finds no user ────▶ anonymous
    user found ──────────────────────────────▶ identified(user)

    The request itself is never rejected here. Routes that need a user
    ask for one through `require_identity` (routes/dependencies.py),
    which raises AuthenticationRequiredError for anonymous callers.

Side effect: at most one row-store lookup per request, and only for a
signature-valid, object-shaped token that carries a user id.
"""

import logging
from collections.abc import Mapping
from typing import Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from microposts.identity import ANONYMOUS, Identity
from microposts.repositories.users import user_repository
from microposts.schemas.user import UserPublic
from microposts.security.tokens import USER_ID_CLAIM, InvalidTokenError, decode_access_token

logger = logging.getLogger(__name__)

UserLookup = Callable[[str], Awaitable[Optional[UserPublic]]]


def session_user_lookup(session_factory: async_sessionmaker[AsyncSession]) -> UserLookup:
    """
    Build a lookup that opens its own short session per call.

    The middleware runs outside FastAPI's dependency system, so it cannot
    share the route's `get_db_session` session.
    """

    async def lookup(user_id: str) -> Optional[UserPublic]:
        async with session_factory() as session:
            user = await user_repository.get_user_by_id(session, user_id)
            return UserPublic.model_validate(user) if user is not None else None

    return lookup


async def resolve_identity(
    token: Optional[str],
    secret: str,
    lookup_user: UserLookup,
    algorithm: str = "HS256",
) -> Identity:
    """Map (token, secret, store state) to an Identity. Never raises for bad input."""
    if not token:
        return ANONYMOUS

    try:
        payload = decode_access_token(token, secret, algorithm)
    except InvalidTokenError as e:
        logger.debug("Rejected session token: %s", type(e).__name__)
        return ANONYMOUS

    if not isinstance(payload, Mapping):
        logger.debug("Rejected session token: payload is %s", type(payload).__name__)
        return ANONYMOUS

    user_id = payload.get(USER_ID_CLAIM)
    if not isinstance(user_id, str) or not user_id:
        logger.debug("Rejected session token: no user id claim")
        return ANONYMOUS

    try:
        user = await lookup_user(user_id)
    except Exception:
        logger.warning("Identity lookup failed for user %s", user_id, exc_info=True)
        return ANONYMOUS

    if user is None:
        logger.debug("Session token references unknown user %s", user_id)
        return ANONYMOUS

    return Identity.identified(user)


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    Attaches `request.state.identity` to every request.

    Configuration is injected by `create_app()`:
        secret:          token verification secret (immutable for the app's lifetime)
        algorithm:       JWT algorithm, HS256 by default
        cookie_name:     cookie carrying the token ("authToken")
        session_factory: where the identity lookup opens its session
    """

    def __init__(
        self,
        app,
        secret: str,
        session_factory: async_sessionmaker[AsyncSession],
        algorithm: str = "HS256",
        cookie_name: str = "authToken",
    ):
        super().__init__(app)
        self._secret = secret
        self._algorithm = algorithm
        self._cookie_name = cookie_name
        self._lookup_user = session_user_lookup(session_factory)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        token = request.cookies.get(self._cookie_name)
        request.state.identity = await resolve_identity(
            token,
            secret=self._secret,
            lookup_user=self._lookup_user,
            algorithm=self._algorithm,
        )
        return await call_next(request)
