"""
PostgreSQL user store.

Implements UserStore on top of the `databases` async query interface with
the asyncpg driver. Driver errors are logged with full detail and surfaced
as InternalError with a generic message; unique-constraint violations on
the email column become ConflictError.
"""

import logging
from typing import Any, Awaitable, TypeVar
from uuid import UUID

from asyncpg.exceptions import UniqueViolationError
from databases import Database

from userdir.core.context import RequestContext
from userdir.core.errors import ConflictError, InternalError, NotFoundError, ServiceError
from userdir.models.pagination import ORDERABLE_COLUMNS
from userdir.models.user import User, UserRoleUpdate, UserUpdate
from userdir.storage import queries
from userdir.storage.base import UserStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _row_to_user(row: Any) -> User:
    """Map a result row to a User."""
    return User.model_validate(dict(row._mapping))


def _escape_like(text: str) -> str:
    """Escape LIKE wildcards so search text matches literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PostgresUserStore(UserStore):
    """
    PostgreSQL-backed user store.

    Usage:
        database = Database(settings.get_database_url())
        store = PostgresUserStore(database)
        await store.connect()
        user = await store.get_by_id(ctx, user_id)
    """

    def __init__(self, database: Database, init_schema: bool = True):
        """
        Initialize the store.

        Args:
            database: Database handle; its connection pool is shared by all requests.
            init_schema: Create the users table on connect if it does not exist.
        """
        self._database = database
        self._init_schema = init_schema

    async def connect(self) -> None:
        """Connect the pool and optionally create the schema."""
        if not self._database.is_connected:
            await self._database.connect()
        if self._init_schema:
            await self._database.execute(queries.CREATE_USERS_TABLE)

    async def close(self) -> None:
        """Disconnect the pool."""
        if self._database.is_connected:
            await self._database.disconnect()

    async def _call(
        self,
        ctx: RequestContext,
        awaitable: Awaitable[T],
        operation: str,
    ) -> T:
        """Run a database call under the request deadline and translate errors."""
        try:
            return await ctx.run(awaitable, f"userStore.{operation}")
        except ServiceError:
            raise
        except UniqueViolationError as e:
            logger.warning(f"userStore.{operation}: unique violation: {e}")
            raise ConflictError("Email already registered") from e
        except Exception as e:
            logger.error(f"userStore.{operation} failed: {e}")
            raise InternalError("User store failure") from e

    async def register(self, ctx: RequestContext, user: User) -> User:
        values = {
            "first_name": user.first_name,
            "last_name": user.last_name,
            "email": user.email,
            "password": user.password,
            "role": user.role or "",
            "about": user.about,
            "avatar": user.avatar,
            "phone_number": user.phone_number,
            "address": user.address,
            "city": user.city,
            "country": user.country,
            "gender": user.gender,
            "postcode": user.postcode,
            "birthday": user.birthday,
        }
        row = await self._call(
            ctx, self._database.fetch_one(queries.CREATE_USER, values), "register"
        )
        if row is None:
            raise InternalError("User store returned no row for insert")
        return _row_to_user(row)

    async def update(self, ctx: RequestContext, update: UserUpdate) -> User:
        values = {
            "first_name": update.first_name or "",
            "last_name": update.last_name or "",
            "email": update.email or "",
            "about": update.about or "",
            "avatar": update.avatar or "",
            "phone_number": update.phone_number or "",
            "address": update.address or "",
            "city": update.city or "",
            "country": update.country or "",
            "gender": update.gender or "",
            "postcode": update.postcode or 0,
            "birthday": update.birthday,
            "user_id": update.user_id,
        }
        row = await self._call(
            ctx, self._database.fetch_one(queries.UPDATE_USER, values), "update"
        )
        if row is None:
            raise NotFoundError(f"User not found: {update.user_id}")
        return _row_to_user(row)

    async def update_role(self, ctx: RequestContext, update: UserRoleUpdate) -> User:
        values = {"role": (update.role or "").strip(), "user_id": update.user_id}
        row = await self._call(
            ctx, self._database.fetch_one(queries.UPDATE_USER_ROLE, values), "update_role"
        )
        if row is None:
            raise NotFoundError(f"User not found: {update.user_id}")
        return _row_to_user(row)

    async def delete(self, ctx: RequestContext, user_id: UUID) -> None:
        row = await self._call(
            ctx,
            self._database.fetch_one(queries.DELETE_USER, {"user_id": user_id}),
            "delete",
        )
        if row is None:
            raise NotFoundError(f"User not found: {user_id}")

    async def get_by_id(self, ctx: RequestContext, user_id: UUID) -> User:
        row = await self._call(
            ctx,
            self._database.fetch_one(queries.GET_USER, {"user_id": user_id}),
            "get_by_id",
        )
        if row is None:
            raise NotFoundError(f"User not found: {user_id}")
        return _row_to_user(row)

    async def find_by_email(self, ctx: RequestContext, email: str) -> User:
        row = await self._call(
            ctx,
            self._database.fetch_one(queries.FIND_USER_BY_EMAIL, {"email": email}),
            "find_by_email",
        )
        if row is None:
            raise NotFoundError(f"User not found: {email}")
        return _row_to_user(row)

    async def count_by_name(self, ctx: RequestContext, name: str) -> int:
        count = await self._call(
            ctx,
            self._database.fetch_val(queries.COUNT_USERS_BY_NAME, {"name": _escape_like(name)}),
            "count_by_name",
        )
        return int(count or 0)

    async def find_by_name(
        self,
        ctx: RequestContext,
        name: str,
        limit: int,
        offset: int,
    ) -> list[User]:
        rows = await self._call(
            ctx,
            self._database.fetch_all(
                queries.FIND_USERS_BY_NAME,
                {"name": _escape_like(name), "offset": offset, "limit": limit},
            ),
            "find_by_name",
        )
        return [_row_to_user(row) for row in rows]

    async def count(self, ctx: RequestContext) -> int:
        count = await self._call(
            ctx, self._database.fetch_val(queries.COUNT_USERS), "count"
        )
        return int(count or 0)

    async def list_users(
        self,
        ctx: RequestContext,
        limit: int,
        offset: int,
        order_by: str | None = None,
    ) -> list[User]:
        order = order_by if order_by in ORDERABLE_COLUMNS else queries.DEFAULT_ORDER
        query = queries.LIST_USERS.format(order_by=order)
        rows = await self._call(
            ctx,
            self._database.fetch_all(query, {"offset": offset, "limit": limit}),
            "list_users",
        )
        return [_row_to_user(row) for row in rows]
