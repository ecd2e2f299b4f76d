"""
Key-value cache abstractions.

UserCache holds serialized user snapshots keyed by user id; SessionStore
holds session records keyed by token. Both rely on per-entry TTL enforced
by the backend itself.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from userdir.core.context import RequestContext
from userdir.models.session import Session
from userdir.models.user import User


class UserCache(ABC):
    """
    Abstract base class for the user snapshot cache.

    The cache is an optimization, never the source of truth: callers treat
    every CacheError as a miss (reads) or ignore it (writes).
    """

    @abstractmethod
    async def get(self, ctx: RequestContext, user_id: UUID) -> User | None:
        """
        Get a cached user snapshot.

        Args:
            ctx: Request context.
            user_id: User identifier.

        Returns:
            The cached user, or None on a miss.

        Raises:
            CacheError: On transport or deserialization failure.
        """
        ...

    @abstractmethod
    async def set(
        self,
        ctx: RequestContext,
        user_id: UUID,
        ttl_seconds: int,
        user: User,
    ) -> None:
        """
        Cache a full user snapshot, overwriting any existing entry.

        Raises:
            CacheError: On transport or serialization failure.
        """
        ...

    @abstractmethod
    async def invalidate(self, ctx: RequestContext, user_id: UUID) -> None:
        """
        Delete the cached entry. Deleting a missing entry succeeds.

        Raises:
            CacheError: On transport failure.
        """
        ...

    async def close(self) -> None:
        """Release resources. Default: nothing to do."""


class SessionStore(ABC):
    """Abstract base class for the session store."""

    @abstractmethod
    async def create(self, ctx: RequestContext, user_id: UUID, ttl_seconds: int) -> str:
        """
        Create a session for a user.

        Args:
            ctx: Request context.
            user_id: Owning user.
            ttl_seconds: Absolute lifetime, not refreshed on access.

        Returns:
            The new opaque session token.

        Raises:
            CacheError: On transport or serialization failure.
        """
        ...

    @abstractmethod
    async def get(self, ctx: RequestContext, token: str) -> Session:
        """
        Look up a session by token.

        Raises:
            NotFoundError: If the token never existed or has expired.
            CacheError: On transport or deserialization failure.
        """
        ...

    @abstractmethod
    async def delete(self, ctx: RequestContext, token: str) -> None:
        """
        Delete a session. Deleting a missing session succeeds.

        Raises:
            CacheError: On transport failure.
        """
        ...

    async def close(self) -> None:
        """Release resources. Default: nothing to do."""
