"""
Redis user cache and session store.

Both backends share one redis.asyncio client (and its connection pool).
Entries are JSON documents written with SET ... EX so Redis expires them
without any sweeper on our side.
"""

import logging
import uuid
from uuid import UUID

from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

from userdir.cache.base import SessionStore, UserCache
from userdir.core.context import RequestContext
from userdir.core.errors import CacheError, NotFoundError
from userdir.models.session import Session
from userdir.models.user import User

logger = logging.getLogger(__name__)


class RedisUserCache(UserCache):
    """
    Redis-backed user snapshot cache.

    Keys are "{key_prefix}{user_id}"; values are full user snapshots,
    password hash included. Sanitizing is the caller's job.
    """

    def __init__(self, client: Redis, key_prefix: str = "api-user:"):
        self._client = client
        self._prefix = key_prefix

    def key_for(self, user_id: UUID) -> str:
        """Namespaced cache key for a user id."""
        return f"{self._prefix}{user_id}"

    async def get(self, ctx: RequestContext, user_id: UUID) -> User | None:
        key = self.key_for(user_id)
        try:
            raw = await ctx.run(self._client.get(key), "userCache.get")
        except RedisError as e:
            raise CacheError(f"userCache.get failed for {key}") from e
        if raw is None:
            return None
        try:
            return User.model_validate_json(raw)
        except ValidationError as e:
            raise CacheError(f"Corrupt cache entry for {key}") from e

    async def set(
        self,
        ctx: RequestContext,
        user_id: UUID,
        ttl_seconds: int,
        user: User,
    ) -> None:
        key = self.key_for(user_id)
        try:
            await ctx.run(
                self._client.set(key, user.model_dump_json(), ex=ttl_seconds),
                "userCache.set",
            )
        except RedisError as e:
            raise CacheError(f"userCache.set failed for {key}") from e

    async def invalidate(self, ctx: RequestContext, user_id: UUID) -> None:
        key = self.key_for(user_id)
        try:
            await ctx.run(self._client.delete(key), "userCache.invalidate")
        except RedisError as e:
            raise CacheError(f"userCache.invalidate failed for {key}") from e


class RedisSessionStore(SessionStore):
    """
    Redis-backed session store.

    Keys are "{key_prefix}{token}"; values are {"session_id", "user_id"}.
    A missing key means the session never existed or has expired.
    """

    def __init__(self, client: Redis, key_prefix: str = "api-session:"):
        self._client = client
        self._prefix = key_prefix

    def key_for(self, token: str) -> str:
        """Namespaced store key for a session token."""
        return f"{self._prefix}{token}"

    async def create(self, ctx: RequestContext, user_id: UUID, ttl_seconds: int) -> str:
        session = Session(session_id=str(uuid.uuid4()), user_id=user_id)
        key = self.key_for(session.session_id)
        try:
            await ctx.run(
                self._client.set(key, session.model_dump_json(), ex=ttl_seconds),
                "sessionStore.create",
            )
        except RedisError as e:
            raise CacheError("sessionStore.create failed") from e
        logger.debug(f"Session created for user {user_id}")
        return session.session_id

    async def get(self, ctx: RequestContext, token: str) -> Session:
        try:
            raw = await ctx.run(self._client.get(self.key_for(token)), "sessionStore.get")
        except RedisError as e:
            raise CacheError("sessionStore.get failed") from e
        if raw is None:
            raise NotFoundError("Session not found")
        try:
            return Session.model_validate_json(raw)
        except ValidationError as e:
            raise CacheError("Corrupt session record") from e

    async def delete(self, ctx: RequestContext, token: str) -> None:
        try:
            await ctx.run(self._client.delete(self.key_for(token)), "sessionStore.delete")
        except RedisError as e:
            raise CacheError("sessionStore.delete failed") from e
