"""
Microposts Backend - Session Tokens
=====================================

What:  Mints and verifies the signed session token stored in the auth cookie.
How:   HS256 JWT (PyJWT) with the claims
           id   → user id
           exp  → expiry (auth_token_expire_minutes after issue, one hour by default)
           iat  → issue time
       signed with the single process-wide secret from settings.

Who:   Minted by the login/register routes; verified by the
       authentication middleware on every request.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt

# Re-exported so callers can catch verification failures without importing jwt
InvalidTokenError = jwt.InvalidTokenError

USER_ID_CLAIM = "id"


def create_access_token(
    user_id: str,
    secret: str,
    algorithm: str = "HS256",
    expires_minutes: int = 60,
    now: Optional[datetime] = None,
) -> str:
    """Return a signed token identifying `user_id`, valid for `expires_minutes`."""
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        USER_ID_CLAIM: user_id,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_access_token(token: str, secret: str, algorithm: str = "HS256") -> Any:
    """
    Verify signature and expiry and return the decoded payload.

    Raises:
        InvalidTokenError: bad signature, expired, missing exp/id claim,
                           malformed, or a payload that is not a JSON object
    """
    return jwt.decode(
        token,
        secret,
        algorithms=[algorithm],
        options={"require": ["exp", USER_ID_CLAIM]},
    )
