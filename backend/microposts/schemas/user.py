"""
Microposts Backend - User Request/Response Schemas
====================================================

What:  Pydantic models for the auth and user endpoints.
How:   FastAPI validates request bodies against the *Request models and
       serializes ORM objects through the *Public models
       (`from_attributes=True`).

Security:
    No model in this module has a `password_hash` field, so a User row can
    never be serialized with its hash, even by accident.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    """Body of POST /auth/register. Email format is checked by the service."""
    email: str = Field(max_length=255, description="Login email (must be unique)")
    password: str = Field(min_length=8, max_length=128, description="Plain-text password")


class LoginRequest(BaseModel):
    """Body of POST /auth/login."""
    email: str = Field(max_length=255)
    password: str = Field(max_length=128)


class UserUpdateRequest(BaseModel):
    """
    Body of PATCH /users/{id}.

    Only profile fields are accepted; `extra="forbid"` rejects attempts to
    smuggle `email`, `password_hash` or `id` into the update.
    """
    name: Optional[str] = Field(default=None, max_length=120)
    last_name: Optional[str] = Field(default=None, max_length=120)
    about: Optional[str] = Field(default=None, max_length=2000)

    model_config = {"extra": "forbid"}


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserPublic(BaseModel):
    """
    Public-safe snapshot of a user.

    Also the type of the identified user attached to each request by the
    authentication middleware.
    """
    id: str = Field(description="Opaque user identifier")
    email: str
    name: Optional[str] = None
    last_name: Optional[str] = None
    about: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class AuthorPublic(BaseModel):
    """Author fields embedded in micro-post responses."""
    id: str
    name: Optional[str] = None
    last_name: Optional[str] = None

    model_config = {"from_attributes": True}


class UserListResponse(BaseModel):
    """
    Response of GET /users.

    Exactly one of `users` / `groups` is populated: the `withPrefix`
    filter groups users by name prefix, every other mode returns a flat list.
    """
    filter: Optional[str] = Field(default=None, description="Applied display filter")
    users: Optional[List[UserPublic]] = None
    groups: Optional[Dict[str, List[UserPublic]]] = None


class FollowToggleResponse(BaseModel):
    """Response of POST /users/{id}/follow."""
    follower_id: str
    followed_id: str
    following: bool = Field(description="Whether the edge exists after the toggle")
