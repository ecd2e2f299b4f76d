"""
Durable user store abstraction.

Defines the provider-agnostic interface the user service depends on.
Implementations may use PostgreSQL, an in-memory dictionary, etc.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from userdir.core.context import RequestContext
from userdir.models.user import User, UserRoleUpdate, UserUpdate


class UserStore(ABC):
    """
    Abstract base class for the authoritative user store.

    All operations take the request context first. Emails passed in are
    already normalized by the caller.

    Errors:
        NotFoundError: The addressed user does not exist.
        ConflictError: The email address is already taken.
        InternalError: Any transport or driver failure.
    """

    @abstractmethod
    async def register(self, ctx: RequestContext, user: User) -> User:
        """
        Insert a new user.

        The store generates user_id and timestamps, and defaults a blank
        role to "user".

        Args:
            ctx: Request context.
            user: User with a hashed password.

        Returns:
            The stored user, including the password hash.

        Raises:
            ConflictError: If the email is already registered.
        """
        ...

    @abstractmethod
    async def update(self, ctx: RequestContext, update: UserUpdate) -> User:
        """
        Coalesce-update a user's profile fields.

        Raises:
            NotFoundError: If the user does not exist.
            ConflictError: If the new email belongs to another user.
        """
        ...

    @abstractmethod
    async def update_role(self, ctx: RequestContext, update: UserRoleUpdate) -> User:
        """
        Change a user's role, keeping it when the new role is blank.

        Raises:
            NotFoundError: If the user does not exist.
        """
        ...

    @abstractmethod
    async def delete(self, ctx: RequestContext, user_id: UUID) -> None:
        """
        Delete a user.

        Raises:
            NotFoundError: If no row was deleted.
        """
        ...

    @abstractmethod
    async def get_by_id(self, ctx: RequestContext, user_id: UUID) -> User:
        """
        Fetch a user by identifier.

        Raises:
            NotFoundError: If the user does not exist.
        """
        ...

    @abstractmethod
    async def find_by_email(self, ctx: RequestContext, email: str) -> User:
        """
        Fetch a user by normalized email, including the password hash.

        Raises:
            NotFoundError: If no user has this email.
        """
        ...

    @abstractmethod
    async def count_by_name(self, ctx: RequestContext, name: str) -> int:
        """Count users whose first or last name contains `name` (case-insensitive)."""
        ...

    @abstractmethod
    async def find_by_name(
        self,
        ctx: RequestContext,
        name: str,
        limit: int,
        offset: int,
    ) -> list[User]:
        """
        List users whose first or last name contains `name`.

        Results are ordered by first name, then last name.
        """
        ...

    @abstractmethod
    async def count(self, ctx: RequestContext) -> int:
        """Count all users."""
        ...

    @abstractmethod
    async def list_users(
        self,
        ctx: RequestContext,
        limit: int,
        offset: int,
        order_by: str | None = None,
    ) -> list[User]:
        """
        List all users.

        Args:
            ctx: Request context.
            limit: Maximum number of users.
            offset: Number of users to skip.
            order_by: Column to order by; first name then last name if None.
        """
        ...

    async def connect(self) -> None:
        """Open connections. Default: nothing to do."""

    async def close(self) -> None:
        """Release connections. Default: nothing to do."""
