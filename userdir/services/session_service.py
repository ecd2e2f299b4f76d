"""
Session service.

Thin seam over the session store so the API layer never depends on a
concrete store.
"""

from uuid import UUID

from userdir.cache.base import SessionStore
from userdir.core.context import RequestContext
from userdir.models.session import Session


class SessionService:
    """Create, fetch and delete login sessions."""

    def __init__(self, store: SessionStore):
        self._store = store

    async def create_session(self, ctx: RequestContext, user_id: UUID, ttl_seconds: int) -> str:
        """Create a session and return its token."""
        return await self._store.create(ctx, user_id, ttl_seconds)

    async def get_session(self, ctx: RequestContext, token: str) -> Session:
        """
        Fetch a live session.

        Raises:
            NotFoundError: If the session does not exist or has expired.
        """
        return await self._store.get(ctx, token)

    async def delete_session(self, ctx: RequestContext, token: str) -> None:
        """Delete a session. Deleting a missing session succeeds."""
        await self._store.delete(ctx, token)
