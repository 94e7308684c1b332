"""
Microposts Backend - Authentication Middleware Tests
======================================================

What:  Tests for resolving the session cookie into an Identity.
How:   resolve_identity() is exercised directly with an AsyncMock lookup;
       the middleware itself is exercised end-to-end through /auth/me.

What we test:
    ✅ No token, garbage, wrong secret and expired tokens are anonymous
    ✅ Payloads that are not objects or lack a user id are anonymous
    ✅ Lookup failures and unknown users are anonymous
    ✅ A valid token for an existing user identifies that user
    ✅ The store is consulted at most once, and only for a usable token
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import jwt
import pytest
from sqlalchemy.exc import OperationalError

from microposts.identity import ANONYMOUS
from microposts.middleware.authentication import resolve_identity
from microposts.schemas.user import UserPublic
from microposts.security.tokens import create_access_token

SECRET = "middleware-secret"


def _in_one_hour() -> datetime:
    return datetime.now(timezone.utc) + timedelta(hours=1)


def _user(user_id: str = "user-1") -> UserPublic:
    return UserPublic(id=user_id, email="alice@example.com", created_at=datetime.now(timezone.utc))


class TestResolveIdentity:
    """resolve_identity(token, secret, lookup_user) never raises for bad input."""

    @pytest.mark.asyncio
    async def test_no_token_is_anonymous(self):
        lookup = AsyncMock()
        identity = await resolve_identity(None, SECRET, lookup)
        assert identity == ANONYMOUS
        lookup.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_token_is_anonymous(self):
        lookup = AsyncMock()
        assert await resolve_identity("", SECRET, lookup) == ANONYMOUS
        lookup.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_garbage_token_is_anonymous(self):
        lookup = AsyncMock()
        identity = await resolve_identity("not.a.jwt", SECRET, lookup)
        assert not identity.is_authenticated
        lookup.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_wrong_secret_is_anonymous(self):
        lookup = AsyncMock(return_value=_user())
        token = create_access_token("user-1", secret="some-other-secret")
        assert await resolve_identity(token, SECRET, lookup) == ANONYMOUS
        lookup.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expired_token_is_anonymous(self):
        lookup = AsyncMock(return_value=_user())
        issued = datetime.now(timezone.utc) - timedelta(hours=2)
        token = create_access_token("user-1", secret=SECRET, now=issued)
        assert await resolve_identity(token, SECRET, lookup) == ANONYMOUS
        lookup.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_object_payload_is_anonymous(self):
        lookup = AsyncMock(return_value=_user())
        with patch(
            "microposts.middleware.authentication.decode_access_token",
            return_value="user-1",
        ):
            identity = await resolve_identity("token", SECRET, lookup)
        assert identity == ANONYMOUS
        lookup.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_user_id_claim_is_anonymous(self):
        lookup = AsyncMock(return_value=_user())
        token = jwt.encode({"sub": "user-1", "exp": _in_one_hour()}, SECRET, algorithm="HS256")
        assert await resolve_identity(token, SECRET, lookup) == ANONYMOUS
        lookup.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_string_user_id_is_anonymous(self):
        lookup = AsyncMock(return_value=_user())
        token = jwt.encode({"id": 42, "exp": _in_one_hour()}, SECRET, algorithm="HS256")
        assert await resolve_identity(token, SECRET, lookup) == ANONYMOUS
        lookup.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_token_without_expiry_is_anonymous(self):
        lookup = AsyncMock(return_value=_user())
        token = jwt.encode({"id": "user-1"}, SECRET, algorithm="HS256")
        assert await resolve_identity(token, SECRET, lookup) == ANONYMOUS
        lookup.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_user_is_anonymous(self):
        lookup = AsyncMock(return_value=None)
        token = create_access_token("ghost", secret=SECRET)
        assert await resolve_identity(token, SECRET, lookup) == ANONYMOUS
        lookup.assert_awaited_once_with("ghost")

    @pytest.mark.asyncio
    async def test_lookup_failure_is_anonymous(self):
        lookup = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("db down")))
        token = create_access_token("user-1", secret=SECRET)
        assert await resolve_identity(token, SECRET, lookup) == ANONYMOUS

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [RuntimeError("pool closed"), asyncio.TimeoutError(), ValueError("bad row")],
    )
    async def test_any_lookup_error_is_anonymous(self, error, caplog):
        lookup = AsyncMock(side_effect=error)
        token = create_access_token("user-1", secret=SECRET)

        with caplog.at_level(logging.WARNING, logger="microposts.middleware.authentication"):
            identity = await resolve_identity(token, SECRET, lookup)

        assert identity == ANONYMOUS
        assert "Identity lookup failed" in caplog.text

    @pytest.mark.asyncio
    async def test_valid_token_identifies_user(self):
        user = _user("user-1")
        lookup = AsyncMock(return_value=user)
        token = create_access_token("user-1", secret=SECRET)

        identity = await resolve_identity(token, SECRET, lookup)

        assert identity.is_authenticated
        assert identity.user_id == "user-1"
        assert identity.user == user
        lookup.assert_awaited_once_with("user-1")


class TestAuthenticationMiddlewareHTTP:
    """The middleware as seen through /auth/me."""

    @pytest.mark.asyncio
    async def test_no_cookie_is_rejected_by_protected_route(self, test_client):
        response = await test_client.get("/auth/me")
        assert response.status_code == 401
        assert response.json()["error"] == "authentication_required"

    @pytest.mark.asyncio
    async def test_valid_cookie_identifies_user(self, test_client, make_user, auth_cookie):
        alice = await make_user("alice@example.com", name="Alice")

        response = await test_client.get("/auth/me", headers=auth_cookie(alice.id))

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == alice.id
        assert body["email"] == "alice@example.com"
        assert "password_hash" not in body

    @pytest.mark.asyncio
    async def test_tampered_cookie_does_not_fail_public_routes(
        self, test_client, make_user, auth_cookie
    ):
        alice = await make_user("alice@example.com")

        response = await test_client.get(
            "/posts", headers=auth_cookie(alice.id, secret="forged-secret")
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_cookie_for_deleted_user_is_anonymous(self, test_client, auth_cookie):
        response = await test_client.get("/auth/me", headers=auth_cookie("no-such-user"))
        assert response.status_code == 401
