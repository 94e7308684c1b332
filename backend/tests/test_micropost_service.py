"""
Microposts Backend - Micro-post Service Tests
===============================================

What we test:
    ✅ A feed page carries its descriptor and the right slice, newest first
    ✅ Pages past the end are empty, not errors
    ✅ Create requires an author and a non-blank title
    ✅ Update/delete: missing post → NotFoundError, not yours → AuthorizationError
"""

from datetime import datetime, timedelta, timezone

import pytest

from microposts.exceptions import (
    AuthenticationRequiredError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from microposts.models.micropost import MicroPost
from microposts.schemas.micropost import MicroPostCreateRequest, MicroPostUpdateRequest
from microposts.services.micropost_service import MicroPostService


async def _seed_posts(session, author_id: str, count: int) -> None:
    """Insert `count` posts one minute apart; post-0 is the oldest."""
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for i in range(count):
        session.add(
            MicroPost(
                author_id=author_id,
                title=f"post-{i}",
                content="",
                created_at=start + timedelta(minutes=i),
            )
        )
    await session.flush()


class TestPostsPage:

    def setup_method(self):
        self.service = MicroPostService()

    @pytest.mark.asyncio
    async def test_first_page(self, db_session, make_user):
        alice = await make_user("alice@example.com")
        await _seed_posts(db_session, alice.id, 25)

        page = await self.service.get_posts_page(db_session, page=1, per_page=10)

        assert page.total_records == 25
        assert page.total_pages == 3
        assert page.prev_page is None
        assert page.next_page == 2
        assert [p.title for p in page.data] == [f"post-{i}" for i in range(24, 14, -1)]

    @pytest.mark.asyncio
    async def test_last_partial_page(self, db_session, make_user):
        alice = await make_user("alice@example.com")
        await _seed_posts(db_session, alice.id, 25)

        page = await self.service.get_posts_page(db_session, page=3, per_page=10)

        assert page.next_page is None
        assert [p.title for p in page.data] == [f"post-{i}" for i in range(4, -1, -1)]

    @pytest.mark.asyncio
    async def test_page_past_the_end_is_empty(self, db_session, make_user):
        alice = await make_user("alice@example.com")
        await _seed_posts(db_session, alice.id, 5)

        page = await self.service.get_posts_page(db_session, page=4, per_page=10)

        assert page.data == []
        assert page.prev_page == 3
        assert page.next_page is None

    @pytest.mark.asyncio
    async def test_empty_feed(self, db_session):
        page = await self.service.get_posts_page(db_session, page=1, per_page=16)
        assert page.total_pages == 0
        assert page.data == []

    @pytest.mark.asyncio
    async def test_per_page_must_be_positive(self, db_session):
        with pytest.raises(ValidationError):
            await self.service.get_posts_page(db_session, page=1, per_page=0)

    @pytest.mark.asyncio
    async def test_default_page_size(self, db_session, make_user):
        alice = await make_user("alice@example.com")
        await _seed_posts(db_session, alice.id, 20)

        page = await self.service.get_posts_page(db_session)

        assert page.per_page == 16
        assert len(page.data) == 16
        assert page.next_page == 2


class TestListPosts:

    def setup_method(self):
        self.service = MicroPostService()

    @pytest.mark.asyncio
    async def test_all_posts_newest_first(self, db_session, make_user):
        alice = await make_user("alice@example.com", name="Alice")
        await _seed_posts(db_session, alice.id, 4)

        posts = await self.service.list_posts(db_session)

        assert [p.title for p in posts] == ["post-3", "post-2", "post-1", "post-0"]
        assert all(p.author.name == "Alice" for p in posts)

    @pytest.mark.asyncio
    async def test_empty(self, db_session):
        assert await self.service.list_posts(db_session) == []


class TestCreatePost:

    def setup_method(self):
        self.service = MicroPostService()

    @pytest.mark.asyncio
    async def test_create_post(self, db_session, make_user):
        alice = await make_user("alice@example.com", name="Alice")

        post = await self.service.create_post(
            db_session, alice.id, MicroPostCreateRequest(title="  Hello ", content="World")
        )

        assert post.title == "Hello"
        assert post.author_id == alice.id
        assert post.author.name == "Alice"

    @pytest.mark.asyncio
    async def test_anonymous_cannot_post(self, db_session):
        with pytest.raises(AuthenticationRequiredError):
            await self.service.create_post(db_session, None, MicroPostCreateRequest(title="Hi"))

    @pytest.mark.asyncio
    async def test_blank_title(self, db_session, make_user):
        alice = await make_user("alice@example.com")
        with pytest.raises(ValidationError):
            await self.service.create_post(db_session, alice.id, MicroPostCreateRequest(title="   "))


class TestMutatePost:

    def setup_method(self):
        self.service = MicroPostService()

    @pytest.mark.asyncio
    async def test_author_can_update(self, db_session, make_user):
        alice = await make_user("alice@example.com")
        post = await self.service.create_post(db_session, alice.id, MicroPostCreateRequest(title="Old"))

        updated = await self.service.update_post(
            db_session, alice.id, post.id, MicroPostUpdateRequest(title="New")
        )

        assert updated.title == "New"
        assert updated.author_id == alice.id

    @pytest.mark.asyncio
    async def test_other_user_cannot_update(self, db_session, make_user):
        alice = await make_user("alice@example.com")
        bob = await make_user("bob@example.com")
        post = await self.service.create_post(db_session, alice.id, MicroPostCreateRequest(title="Mine"))

        with pytest.raises(AuthorizationError):
            await self.service.update_post(
                db_session, bob.id, post.id, MicroPostUpdateRequest(title="Stolen")
            )

    @pytest.mark.asyncio
    async def test_missing_post_is_not_found_even_for_anonymous(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.update_post(
                db_session, None, "missing", MicroPostUpdateRequest(title="x")
            )
        with pytest.raises(NotFoundError):
            await self.service.delete_post(db_session, None, "missing")

    @pytest.mark.asyncio
    async def test_author_can_delete(self, db_session, make_user):
        alice = await make_user("alice@example.com")
        post = await self.service.create_post(db_session, alice.id, MicroPostCreateRequest(title="Bye"))

        await self.service.delete_post(db_session, alice.id, post.id)

        with pytest.raises(NotFoundError):
            await self.service.get_post(db_session, post.id)

    @pytest.mark.asyncio
    async def test_anonymous_cannot_delete(self, db_session, make_user):
        alice = await make_user("alice@example.com")
        post = await self.service.create_post(db_session, alice.id, MicroPostCreateRequest(title="Keep"))

        with pytest.raises(AuthorizationError):
            await self.service.delete_post(db_session, None, post.id)
