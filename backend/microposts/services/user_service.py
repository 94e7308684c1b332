"""
Microposts Backend - User Service (Registration, Login, Profiles)
===================================================================

What:  Use cases for accounts: register, login, profile read/update/delete,
       and the user listing with display filters.
How:   Validates input, applies business rules, and calls the user
       repository. Returns Pydantic schemas, except `login`, which hands
       the stored User back so the route can mint the session token.
Who:   Called by the auth and users routers.

Error Handling Strategy:
    Business-rule failures raise the matching MicroPostsError subclass.
    Unexpected SQLAlchemy failures are logged and wrapped in DatabaseError
    so driver details never reach the client.

Login failures:
    Unknown email and wrong password raise the same
    InvalidCredentialsError ("Invalid credentials"). A password hash is
    also computed for unknown emails so both paths cost about the same time.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from microposts.exceptions import (
    AlreadyExistsError,
    DatabaseError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from microposts.models.user import User
from microposts.repositories.users import user_repository
from microposts.schemas.user import UserListResponse, UserPublic, UserUpdateRequest
from microposts.security.passwords import hash_password, verify_password
from microposts.utils.email import validate_email
from microposts.utils.users import apply_user_filter

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "User with that email already exists"

# Verified against when the email is unknown, so login timing does not
# reveal which accounts exist
_DUMMY_PASSWORD_HASH = hash_password("not-a-real-password")


class UserService:
    """Business logic for user accounts."""

    async def register(self, db: AsyncSession, email: str, password: str) -> UserPublic:
        """
        Create a new account.

        Raises:
            ValidationError:    email fails the format check
            AlreadyExistsError: an account with that email exists
            DatabaseError:      the insert failed unexpectedly
        """
        email = email.strip()
        if not validate_email(email):
            raise ValidationError(message="Invalid email", field="email")

        try:
            if await user_repository.get_user_by_email(db, email) is not None:
                raise AlreadyExistsError(message=DUPLICATE_EMAIL_MESSAGE, context={"field": "email"})

            user = await user_repository.create_user(
                db,
                email=email,
                password_hash=hash_password(password),
            )
        except IntegrityError:
            # A concurrent registration won the unique index
            raise AlreadyExistsError(message=DUPLICATE_EMAIL_MESSAGE, context={"field": "email"})
        except SQLAlchemyError as e:
            logger.error("Database error registering user: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the account. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("User registered: %s", user.id)
        return UserPublic.model_validate(user)

    async def login(self, db: AsyncSession, email: str, password: str) -> User:
        """
        Check credentials and return the stored user.

        Raises:
            InvalidCredentialsError: unknown email or wrong password (same error)
        """
        try:
            user = await user_repository.get_user_by_email(db, email.strip())
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        if user is None:
            verify_password(password, _DUMMY_PASSWORD_HASH)
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        logger.info("User logged in: %s", user.id)
        return user

    async def get_user_public_info(self, db: AsyncSession, user_id: str) -> UserPublic:
        """Raises NotFoundError when the user does not exist."""
        user = await self._get_existing(db, user_id)
        return UserPublic.model_validate(user)

    async def update_user_info(
        self,
        db: AsyncSession,
        user_id: str,
        changes: Union[UserUpdateRequest, Dict[str, Any]],
    ) -> UserPublic:
        """Update profile fields (name, last_name, about). Omitted fields are kept."""
        if isinstance(changes, UserUpdateRequest):
            changes = changes.model_dump(exclude_unset=True)

        await self._get_existing(db, user_id)
        try:
            user = await user_repository.update_user(db, user_id, changes)
        except SQLAlchemyError as e:
            logger.error("Database error updating user %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not update the profile. Please try again.",
                context={"user_id": user_id},
            )
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return UserPublic.model_validate(user)

    async def delete_user(self, db: AsyncSession, user_id: str) -> None:
        """Delete the account with its posts and follow edges."""
        await self._get_existing(db, user_id)
        try:
            await user_repository.delete_user(db, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error deleting user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id})
        logger.info("User deleted: %s", user_id)

    async def list_users(
        self, db: AsyncSession, applied_filter: Optional[str] = None
    ) -> UserListResponse:
        """
        All users, optionally passed through a display filter.

        Raises:
            ValidationError: unknown filter name
        """
        try:
            rows = await user_repository.list_users(db)
        except SQLAlchemyError as e:
            logger.error("Database error listing users: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not retrieve users. Please try again.")

        users: List[UserPublic] = [UserPublic.model_validate(row) for row in rows]
        listing = apply_user_filter(users, applied_filter)
        if isinstance(listing, dict):
            return UserListResponse(filter=applied_filter, groups=listing)
        return UserListResponse(filter=applied_filter, users=listing)

    async def _get_existing(self, db: AsyncSession, user_id: str) -> User:
        try:
            user = await user_repository.get_user_by_id(db, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the user. Please try again.",
                context={"user_id": user_id},
            )
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return user


user_service = UserService()
