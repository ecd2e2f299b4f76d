"""
In-memory user store.

Dictionary-backed implementation of UserStore for tests and local
development. Enforces the same unique-email constraint as the database.
Not suitable for production (no persistence, single-instance only).
"""

import asyncio
import uuid
from uuid import UUID

from userdir.core.context import RequestContext
from userdir.core.errors import ConflictError, NotFoundError
from userdir.models.user import (
    COALESCE_TEXT_FIELDS,
    DEFAULT_ROLE,
    User,
    UserRoleUpdate,
    UserUpdate,
    utcnow,
)
from userdir.storage.base import UserStore


def _default_sort_key(user: User) -> tuple[str, str]:
    return (user.first_name.lower(), user.last_name.lower())


class InMemoryUserStore(UserStore):
    """
    In-memory user store.

    Thread-safety is provided via asyncio.Lock. Stored users are copied on
    the way in and out so callers never share mutable state with the store.
    """

    def __init__(self):
        """Initialize the in-memory store."""
        self._users: dict[UUID, User] = {}
        self._lock = asyncio.Lock()

    @property
    def user_count(self) -> int:
        """Number of stored users."""
        return len(self._users)

    def _email_taken(self, email: str, exclude: UUID | None = None) -> bool:
        return any(
            u.email == email and u.user_id != exclude for u in self._users.values()
        )

    async def register(self, ctx: RequestContext, user: User) -> User:
        ctx.check("register")
        async with self._lock:
            if self._email_taken(user.email):
                raise ConflictError(f"Email already registered: {user.email}")
            now = utcnow()
            stored = user.model_copy(
                update={
                    "user_id": uuid.uuid4(),
                    "role": (user.role or "").strip() or DEFAULT_ROLE,
                    "created_at": now,
                    "updated_at": now,
                    "login_date": now,
                }
            )
            self._users[stored.user_id] = stored
            return stored.model_copy()

    async def update(self, ctx: RequestContext, update: UserUpdate) -> User:
        ctx.check("update")
        async with self._lock:
            current = self._users.get(update.user_id)
            if current is None:
                raise NotFoundError(f"User not found: {update.user_id}")

            changes: dict = {}
            for name in COALESCE_TEXT_FIELDS:
                value = getattr(update, name)
                if value:
                    changes[name] = value
            if update.postcode:
                changes["postcode"] = update.postcode
            if update.birthday is not None:
                changes["birthday"] = update.birthday

            if "email" in changes and self._email_taken(changes["email"], exclude=update.user_id):
                raise ConflictError(f"Email already registered: {changes['email']}")

            changes["updated_at"] = utcnow()
            stored = current.model_copy(update=changes)
            self._users[update.user_id] = stored
            return stored.model_copy()

    async def update_role(self, ctx: RequestContext, update: UserRoleUpdate) -> User:
        ctx.check("update_role")
        async with self._lock:
            current = self._users.get(update.user_id)
            if current is None:
                raise NotFoundError(f"User not found: {update.user_id}")
            changes: dict = {"updated_at": utcnow()}
            role = (update.role or "").strip()
            if role:
                changes["role"] = role
            stored = current.model_copy(update=changes)
            self._users[update.user_id] = stored
            return stored.model_copy()

    async def delete(self, ctx: RequestContext, user_id: UUID) -> None:
        ctx.check("delete")
        async with self._lock:
            if self._users.pop(user_id, None) is None:
                raise NotFoundError(f"User not found: {user_id}")

    async def get_by_id(self, ctx: RequestContext, user_id: UUID) -> User:
        ctx.check("get_by_id")
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise NotFoundError(f"User not found: {user_id}")
            return user.model_copy()

    async def find_by_email(self, ctx: RequestContext, email: str) -> User:
        ctx.check("find_by_email")
        async with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return user.model_copy()
        raise NotFoundError(f"User not found: {email}")

    def _matching(self, name: str) -> list[User]:
        needle = name.lower()
        return [
            u
            for u in self._users.values()
            if needle in u.first_name.lower() or needle in u.last_name.lower()
        ]

    async def count_by_name(self, ctx: RequestContext, name: str) -> int:
        ctx.check("count_by_name")
        async with self._lock:
            return len(self._matching(name))

    async def find_by_name(
        self,
        ctx: RequestContext,
        name: str,
        limit: int,
        offset: int,
    ) -> list[User]:
        ctx.check("find_by_name")
        async with self._lock:
            users = sorted(self._matching(name), key=_default_sort_key)
            return [u.model_copy() for u in users[offset : offset + limit]]

    async def count(self, ctx: RequestContext) -> int:
        ctx.check("count")
        async with self._lock:
            return len(self._users)

    async def list_users(
        self,
        ctx: RequestContext,
        limit: int,
        offset: int,
        order_by: str | None = None,
    ) -> list[User]:
        ctx.check("list_users")
        async with self._lock:
            if order_by:
                users = sorted(
                    self._users.values(),
                    key=lambda u: (getattr(u, order_by) is None, str(getattr(u, order_by) or "")),
                )
            else:
                users = sorted(self._users.values(), key=_default_sort_key)
            return [u.model_copy() for u in users[offset : offset + limit]]
