"""
Microposts Backend - Micro-post Request/Response Schemas
==========================================================

What:  Pydantic models for the /posts endpoints and the page descriptor.
Who:   Routes use them as request bodies and response models; the
       pagination calculator returns a PageDescriptor.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from microposts.schemas.user import AuthorPublic


class PageDescriptor(BaseModel):
    """
    Describes one page of a larger ordered result set.

    prev_page / next_page are null when there is no such page.
    """
    page: int
    per_page: int
    total_records: int
    total_pages: int
    prev_page: Optional[int] = None
    next_page: Optional[int] = None

    model_config = {"frozen": True}


class MicroPostCreateRequest(BaseModel):
    """Body of POST /posts. The author is always the current user."""
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(default="", max_length=5000)


class MicroPostUpdateRequest(BaseModel):
    """Body of PATCH /posts/{id}. Omitted fields stay unchanged."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, max_length=5000)

    model_config = {"extra": "forbid"}


class MicroPostResponse(BaseModel):
    """Full representation of a micro-post including its author."""
    id: str
    title: str
    content: str
    author_id: str
    author: AuthorPublic
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MicroPostPage(PageDescriptor):
    """Response of GET /posts: the page descriptor plus that page's posts."""
    data: List[MicroPostResponse] = Field(default_factory=list)
