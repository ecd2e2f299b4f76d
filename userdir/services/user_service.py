"""
User service.

Coordinates the durable user store and the user snapshot cache:

- Reads are cache-aside: check the cache, fall back to the store on a miss,
  then populate the cache with a fixed TTL.
- Writes go to the store and then invalidate the cache entry; the cache is
  never updated in place.
- Cache failures, including a deadline expiring during a cache call, are
  logged and never propagated. Store failures are.

Every user returned by this service is sanitized (password hash cleared).
Cached snapshots keep the hash.

There is no lock between store and cache. A read racing a write can
repopulate the cache with the pre-write value until the entry's TTL or the
next invalidation; this is accepted.
"""

import logging
from uuid import UUID

from userdir.cache.base import UserCache
from userdir.core.context import RequestContext
from userdir.core.errors import (
    CacheError,
    ConflictError,
    DeadlineExceededError,
    NotFoundError,
    UnauthenticatedError,
)
from userdir.models.pagination import PaginationQuery, get_has_more, get_total_pages
from userdir.models.user import (
    DEFAULT_ROLE,
    User,
    UserRoleUpdate,
    UsersList,
    UserUpdate,
    normalize_email,
)
from userdir.services.passwords import PasswordHasher
from userdir.storage.base import UserStore

logger = logging.getLogger(__name__)

DEFAULT_USER_CACHE_TTL = 3600

INVALID_CREDENTIALS = "Invalid email or password"


class UserService:
    """
    Identity operations over the user store and user cache.

    Usage:
        service = UserService(store, cache, hasher, cache_ttl_seconds=3600)
        user = await service.register(ctx, User(email="a@b.io", password="secret"))
        same = await service.get_by_id(ctx, user.user_id)
    """

    def __init__(
        self,
        store: UserStore,
        cache: UserCache,
        hasher: PasswordHasher,
        cache_ttl_seconds: int = DEFAULT_USER_CACHE_TTL,
    ):
        """
        Initialize the service.

        Args:
            store: Authoritative user store.
            cache: User snapshot cache.
            hasher: Password hashing primitive.
            cache_ttl_seconds: TTL for snapshots populated on read.
        """
        self._store = store
        self._cache = cache
        self._hasher = hasher
        self._cache_ttl = cache_ttl_seconds

    async def register(self, ctx: RequestContext, user: User) -> User:
        """
        Register a new user.

        The uniqueness pre-check gives a fast, friendly error; the store's
        unique constraint catches concurrent registrations that both pass it.

        Args:
            ctx: Request context.
            user: New user with a plain-text password.

        Returns:
            The created user, sanitized.

        Raises:
            ConflictError: If the email is already registered.
        """
        email = normalize_email(user.email)

        try:
            await self._store.find_by_email(ctx, email)
        except NotFoundError:
            pass
        else:
            raise ConflictError(f"Email already registered: {email}")

        hashed = await self._hasher.hash(user.password or "")
        to_create = user.model_copy(
            update={
                "email": email,
                "password": hashed,
                "role": (user.role or "").strip() or DEFAULT_ROLE,
            }
        )
        created = await self._store.register(ctx, to_create)
        logger.info(f"User registered: {created.user_id}")
        return created.sanitized()

    async def login(self, ctx: RequestContext, email: str, password: str) -> User:
        """
        Verify credentials.

        Unknown email and wrong password produce the same error so callers
        cannot probe which emails are registered. Creating the session is
        the caller's job.

        Returns:
            The authenticated user, sanitized.

        Raises:
            UnauthenticatedError: If the credentials do not match.
        """
        email = normalize_email(email)
        try:
            found = await self._store.find_by_email(ctx, email)
        except NotFoundError as e:
            raise UnauthenticatedError(INVALID_CREDENTIALS) from e

        if not await self._hasher.verify(password, found.password or ""):
            raise UnauthenticatedError(INVALID_CREDENTIALS)

        return found.sanitized()

    async def get_by_id(self, ctx: RequestContext, user_id: UUID) -> User:
        """
        Get a user, reading through the cache.

        Raises:
            NotFoundError: If the user does not exist.
        """
        try:
            cached = await self._cache.get(ctx, user_id)
        except (CacheError, DeadlineExceededError) as e:
            logger.error(f"userCache.get: {e}")
            cached = None
        if cached is not None:
            return cached.sanitized()

        user = await self._store.get_by_id(ctx, user_id)

        try:
            await self._cache.set(ctx, user_id, self._cache_ttl, user)
        except (CacheError, DeadlineExceededError) as e:
            logger.error(f"userCache.set: {e}")

        return user.sanitized()

    async def update(self, ctx: RequestContext, update: UserUpdate) -> User:
        """
        Coalesce-update a user's profile and invalidate its cache entry.

        Raises:
            NotFoundError: If the user does not exist.
            ConflictError: If the new email belongs to another user.
        """
        updated = await self._store.update(ctx, update.normalized())
        await self._invalidate(ctx, update.user_id, "update")
        return updated.sanitized()

    async def update_role(self, ctx: RequestContext, update: UserRoleUpdate) -> User:
        """
        Change a user's role and invalidate its cache entry.

        Raises:
            NotFoundError: If the user does not exist.
        """
        role = (update.role or "").strip() or None
        updated = await self._store.update_role(
            ctx, update.model_copy(update={"role": role})
        )
        await self._invalidate(ctx, update.user_id, "update_role")
        return updated.sanitized()

    async def delete(self, ctx: RequestContext, user_id: UUID) -> None:
        """
        Delete a user, then invalidate its cache entry.

        Raises:
            NotFoundError: If the user does not exist. The cache is left untouched.
        """
        await self._store.delete(ctx, user_id)
        await self._invalidate(ctx, user_id, "delete")
        logger.info(f"User deleted: {user_id}")

    async def find_by_name(
        self,
        ctx: RequestContext,
        name: str,
        pagination: PaginationQuery,
    ) -> UsersList:
        """Page through users whose first or last name contains `name`."""
        name = name.strip()
        total_count = await self._store.count_by_name(ctx, name)
        if total_count == 0:
            return self._page(total_count, pagination, [])

        users = await self._store.find_by_name(
            ctx, name, limit=pagination.limit, offset=pagination.offset
        )
        return self._page(total_count, pagination, users)

    async def get_users(self, ctx: RequestContext, pagination: PaginationQuery) -> UsersList:
        """Page through all users."""
        total_count = await self._store.count(ctx)
        if total_count == 0:
            return self._page(total_count, pagination, [])

        users = await self._store.list_users(
            ctx,
            limit=pagination.limit,
            offset=pagination.offset,
            order_by=pagination.order_by,
        )
        return self._page(total_count, pagination, users)

    async def _invalidate(self, ctx: RequestContext, user_id: UUID, operation: str) -> None:
        """Best-effort cache invalidation after a write."""
        try:
            await self._cache.invalidate(ctx, user_id)
        except (CacheError, DeadlineExceededError) as e:
            logger.error(f"userService.{operation}.invalidate: {e}")

    @staticmethod
    def _page(total_count: int, pagination: PaginationQuery, users: list[User]) -> UsersList:
        return UsersList(
            total_count=total_count,
            total_pages=get_total_pages(total_count, pagination.size),
            page=pagination.page,
            size=pagination.size,
            has_more=get_has_more(pagination.page, total_count, pagination.size),
            users=[u.sanitized() for u in users],
        )
