"""
Tests for the in-memory user store.
"""

from uuid import uuid4

import pytest
import pytest_asyncio

from userdir.core.context import RequestContext
from userdir.core.errors import ConflictError, DeadlineExceededError, NotFoundError
from userdir.models.user import User, UserRoleUpdate, UserUpdate
from userdir.storage.memory import InMemoryUserStore


def make_user(first: str, last: str, email: str, **kwargs) -> User:
    return User(first_name=first, last_name=last, email=email, password="hash", **kwargs)


class TestRegister:
    """Tests for InMemoryUserStore.register."""

    @pytest.mark.asyncio
    async def test_assigns_id_and_timestamps(
        self, ctx: RequestContext, user_store: InMemoryUserStore
    ) -> None:
        """Test registration generates id, role and timestamps."""
        created = await user_store.register(ctx, make_user("Ada", "Lovelace", "ada@x.io", role=""))

        assert created.user_id is not None
        assert created.role == "user"
        assert created.created_at is not None
        assert created.updated_at is not None
        assert user_store.user_count == 1

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(
        self, ctx: RequestContext, user_store: InMemoryUserStore
    ) -> None:
        """Test unique email constraint."""
        await user_store.register(ctx, make_user("Ada", "Lovelace", "ada@x.io"))

        with pytest.raises(ConflictError):
            await user_store.register(ctx, make_user("Other", "Person", "ada@x.io"))
        assert user_store.user_count == 1

    @pytest.mark.asyncio
    async def test_returns_copies(
        self, ctx: RequestContext, user_store: InMemoryUserStore
    ) -> None:
        """Test mutating a returned user does not change the store."""
        created = await user_store.register(ctx, make_user("Ada", "Lovelace", "ada@x.io"))
        created.first_name = "Changed"

        stored = await user_store.get_by_id(ctx, created.user_id)
        assert stored.first_name == "Ada"


class TestUpdate:
    """Tests for coalescing updates."""

    @pytest.mark.asyncio
    async def test_coalesces_empty_fields(
        self, ctx: RequestContext, user_store: InMemoryUserStore
    ) -> None:
        """Test None fields keep stored values."""
        created = await user_store.register(
            ctx, make_user("Ada", "Lovelace", "ada@x.io", city="London", postcode=1234)
        )

        updated = await user_store.update(
            ctx, UserUpdate(user_id=created.user_id, last_name="King", country="UK")
        )

        assert updated.first_name == "Ada"
        assert updated.last_name == "King"
        assert updated.city == "London"
        assert updated.country == "UK"
        assert updated.postcode == 1234
        assert updated.password == "hash"

    @pytest.mark.asyncio
    async def test_email_conflict(
        self, ctx: RequestContext, user_store: InMemoryUserStore
    ) -> None:
        """Test changing email to another user's email conflicts."""
        await user_store.register(ctx, make_user("Ada", "Lovelace", "ada@x.io"))
        grace = await user_store.register(ctx, make_user("Grace", "Hopper", "grace@x.io"))

        with pytest.raises(ConflictError):
            await user_store.update(ctx, UserUpdate(user_id=grace.user_id, email="ada@x.io"))

    @pytest.mark.asyncio
    async def test_missing_user(
        self, ctx: RequestContext, user_store: InMemoryUserStore
    ) -> None:
        """Test updating an unknown user raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await user_store.update(ctx, UserUpdate(user_id=uuid4(), first_name="X"))

    @pytest.mark.asyncio
    async def test_update_role(
        self, ctx: RequestContext, user_store: InMemoryUserStore
    ) -> None:
        """Test role changes and blank roles keep the stored value."""
        created = await user_store.register(ctx, make_user("Ada", "Lovelace", "ada@x.io"))

        updated = await user_store.update_role(
            ctx, UserRoleUpdate(user_id=created.user_id, role="admin")
        )
        assert updated.role == "admin"

        kept = await user_store.update_role(ctx, UserRoleUpdate(user_id=created.user_id, role=" "))
        assert kept.role == "admin"

        with pytest.raises(NotFoundError):
            await user_store.update_role(ctx, UserRoleUpdate(user_id=uuid4(), role="admin"))


class TestDeleteAndLookup:
    """Tests for delete, get_by_id and find_by_email."""

    @pytest.mark.asyncio
    async def test_delete(self, ctx: RequestContext, user_store: InMemoryUserStore) -> None:
        """Test deleted users are gone and a second delete is NotFound."""
        created = await user_store.register(ctx, make_user("Ada", "Lovelace", "ada@x.io"))

        await user_store.delete(ctx, created.user_id)

        with pytest.raises(NotFoundError):
            await user_store.get_by_id(ctx, created.user_id)
        with pytest.raises(NotFoundError):
            await user_store.delete(ctx, created.user_id)

    @pytest.mark.asyncio
    async def test_find_by_email(
        self, ctx: RequestContext, user_store: InMemoryUserStore
    ) -> None:
        """Test lookup by exact normalized email."""
        created = await user_store.register(ctx, make_user("Ada", "Lovelace", "ada@x.io"))

        found = await user_store.find_by_email(ctx, "ada@x.io")
        assert found.user_id == created.user_id
        with pytest.raises(NotFoundError):
            await user_store.find_by_email(ctx, "nobody@x.io")

    @pytest.mark.asyncio
    async def test_expired_context(self, user_store: InMemoryUserStore) -> None:
        """Test operations honour an expired deadline."""
        with pytest.raises(DeadlineExceededError):
            await user_store.get_by_id(RequestContext(deadline=0.0), uuid4())


class TestListing:
    """Tests for counting, searching and listing."""

    @pytest_asyncio.fixture
    async def populated(
        self, ctx: RequestContext, user_store: InMemoryUserStore
    ) -> InMemoryUserStore:
        for first, last, email in [
            ("Grace", "Hopper", "grace@x.io"),
            ("Ada", "Lovelace", "ada@x.io"),
            ("Alan", "Turing", "alan@x.io"),
            ("Barbara", "Liskov", "barbara@x.io"),
        ]:
            await user_store.register(ctx, make_user(first, last, email))
        return user_store

    @pytest.mark.asyncio
    async def test_count(self, ctx: RequestContext, populated: InMemoryUserStore) -> None:
        """Test count returns all users."""
        assert await populated.count(ctx) == 4

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_substring(
        self, ctx: RequestContext, populated: InMemoryUserStore
    ) -> None:
        """Test name search matches first or last name substrings."""
        assert await populated.count_by_name(ctx, "LI") == 1
        assert await populated.count_by_name(ctx, "a") == 4

        users = await populated.find_by_name(ctx, "l", limit=10, offset=0)
        assert [u.first_name for u in users] == ["Ada", "Alan", "Barbara"]

    @pytest.mark.asyncio
    async def test_search_wildcards_are_literal(
        self, ctx: RequestContext, populated: InMemoryUserStore
    ) -> None:
        """Test % and _ in search text only match themselves."""
        assert await populated.count_by_name(ctx, "%") == 0
        assert await populated.count_by_name(ctx, "A_a") == 0

        await populated.register(ctx, make_user("Jean_Luc", "Picard", "jl@x.io"))
        assert await populated.count_by_name(ctx, "n_L") == 1

    @pytest.mark.asyncio
    async def test_list_default_order_and_paging(
        self, ctx: RequestContext, populated: InMemoryUserStore
    ) -> None:
        """Test listing orders by first and last name and applies offset."""
        users = await populated.list_users(ctx, limit=2, offset=1)
        assert [u.first_name for u in users] == ["Alan", "Barbara"]

    @pytest.mark.asyncio
    async def test_list_order_by(
        self, ctx: RequestContext, populated: InMemoryUserStore
    ) -> None:
        """Test listing by an explicit column."""
        users = await populated.list_users(ctx, limit=10, offset=0, order_by="email")
        assert [u.email for u in users] == [
            "ada@x.io",
            "alan@x.io",
            "barbara@x.io",
            "grace@x.io",
        ]
