"""
In-memory user cache and session store.

TTL-aware dictionary backends used in tests and local development. Values
are stored serialized, exactly as the Redis backends store them, and expire
lazily on read. The clock is injectable so expiry can be tested without
sleeping.
"""

import asyncio
import time
import uuid
from dataclasses import dataclass
from typing import Callable
from uuid import UUID

from pydantic import ValidationError

from userdir.cache.base import SessionStore, UserCache
from userdir.core.context import RequestContext
from userdir.core.errors import CacheError, NotFoundError
from userdir.models.session import Session
from userdir.models.user import User

Clock = Callable[[], float]


@dataclass
class CacheEntry:
    """Represents a cached value with expiration."""

    value: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """Check if the cache entry has expired."""
        return now >= self.expires_at


class InMemoryKeyValue:
    """
    Minimal TTL key-value map shared by the in-memory backends.

    Thread-safety is provided via asyncio.Lock.
    """

    def __init__(self, clock: Clock = time.monotonic):
        self._entries: dict[str, CacheEntry] = {}
        self._clock = clock
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> str | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            return entry.value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        async with self._lock:
            self._entries[key] = CacheEntry(
                value=value, expires_at=self._clock() + ttl_seconds
            )

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not entry.is_expired(self._clock())

    def __len__(self) -> int:
        now = self._clock()
        return sum(1 for e in self._entries.values() if not e.is_expired(now))


class InMemoryUserCache(UserCache):
    """In-memory user snapshot cache."""

    def __init__(self, key_prefix: str = "api-user:", clock: Clock = time.monotonic):
        self._prefix = key_prefix
        self._kv = InMemoryKeyValue(clock)

    def key_for(self, user_id: UUID) -> str:
        """Namespaced cache key for a user id."""
        return f"{self._prefix}{user_id}"

    def __contains__(self, user_id: UUID) -> bool:
        return self.key_for(user_id) in self._kv

    async def get(self, ctx: RequestContext, user_id: UUID) -> User | None:
        ctx.check("userCache.get")
        raw = await self._kv.get(self.key_for(user_id))
        if raw is None:
            return None
        try:
            return User.model_validate_json(raw)
        except ValidationError as e:
            raise CacheError(f"Corrupt cache entry for user {user_id}") from e

    async def set(
        self,
        ctx: RequestContext,
        user_id: UUID,
        ttl_seconds: int,
        user: User,
    ) -> None:
        ctx.check("userCache.set")
        await self._kv.set(self.key_for(user_id), user.model_dump_json(), ttl_seconds)

    async def invalidate(self, ctx: RequestContext, user_id: UUID) -> None:
        ctx.check("userCache.invalidate")
        await self._kv.delete(self.key_for(user_id))


class InMemorySessionStore(SessionStore):
    """In-memory session store."""

    def __init__(self, key_prefix: str = "api-session:", clock: Clock = time.monotonic):
        self._prefix = key_prefix
        self._kv = InMemoryKeyValue(clock)

    def key_for(self, token: str) -> str:
        """Namespaced store key for a session token."""
        return f"{self._prefix}{token}"

    @property
    def session_count(self) -> int:
        """Number of live sessions."""
        return len(self._kv)

    async def create(self, ctx: RequestContext, user_id: UUID, ttl_seconds: int) -> str:
        ctx.check("sessionStore.create")
        session = Session(session_id=str(uuid.uuid4()), user_id=user_id)
        await self._kv.set(
            self.key_for(session.session_id), session.model_dump_json(), ttl_seconds
        )
        return session.session_id

    async def get(self, ctx: RequestContext, token: str) -> Session:
        ctx.check("sessionStore.get")
        raw = await self._kv.get(self.key_for(token))
        if raw is None:
            raise NotFoundError("Session not found")
        try:
            return Session.model_validate_json(raw)
        except ValidationError as e:
            raise CacheError("Corrupt session record") from e

    async def delete(self, ctx: RequestContext, token: str) -> None:
        ctx.check("sessionStore.delete")
        await self._kv.delete(self.key_for(token))
