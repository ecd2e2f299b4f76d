"""
Dependency Injection Container for the user directory service.

Provides lazy initialization of shared resources. The container built for
the running app lives on `app.state.container`; FastAPI dependencies below
resolve services from it, so no module-level client handles exist.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from fastapi import Request

from userdir.core.config import CacheProvider, Settings, StoreProvider, get_settings
from userdir.core.context import RequestContext

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from userdir.cache.base import SessionStore, UserCache
    from userdir.services.passwords import PasswordHasher
    from userdir.services.session_service import SessionService
    from userdir.services.user_service import UserService
    from userdir.storage.base import UserStore

logger = logging.getLogger(__name__)


class Container:
    """
    Dependency Injection Container.

    Manages lifecycle of shared resources:
    - Settings (configuration)
    - Redis client (shared by user cache and session store)
    - User store (PostgreSQL or in-memory)
    - User cache and session store (Redis or in-memory)
    - User and session services

    Usage:
        container = Container(settings)
        await container.startup()
        user_service = container.get_user_service()
        ...
        await container.shutdown()
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize the container.

        Args:
            settings: Optional settings override. If None, loads from config.
        """
        self._settings = settings
        self._redis: "Redis | None" = None
        self._user_store: "UserStore | None" = None
        self._user_cache: "UserCache | None" = None
        self._session_store: "SessionStore | None" = None
        self._password_hasher: "PasswordHasher | None" = None
        self._user_service: "UserService | None" = None
        self._session_service: "SessionService | None" = None

    @property
    def settings(self) -> Settings:
        """
        Get the application settings.

        Returns:
            Cached Settings instance.
        """
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    def get_redis_client(self) -> "Redis":
        """
        Get or create the shared Redis client.

        The client owns a connection pool and is safe for concurrent use.

        Returns:
            Shared redis.asyncio.Redis instance.
        """
        if self._redis is None:
            from redis.asyncio import Redis

            self._redis = Redis.from_url(self.settings.redis_url, decode_responses=True)
        return self._redis

    async def close_redis_client(self) -> None:
        """Close the Redis client and its connection pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    def get_user_store(self) -> "UserStore":
        """
        Get or create the user store.

        Returns:
            UserStore instance (singleton per container)

        Raises:
            ValueError: If the configured provider is not supported or misconfigured
        """
        if self._user_store is None:
            provider = self.settings.store.provider

            if provider == StoreProvider.POSTGRES:
                from databases import Database

                from userdir.storage.postgres import PostgresUserStore

                database = Database(
                    self.settings.get_database_url(),
                    min_size=self.settings.store.min_connections,
                    max_size=self.settings.store.max_connections,
                )
                self._user_store = PostgresUserStore(
                    database, init_schema=self.settings.store.init_schema
                )

            elif provider == StoreProvider.MEMORY:
                from userdir.storage.memory import InMemoryUserStore

                self._user_store = InMemoryUserStore()

            else:
                raise ValueError(f"Unsupported store provider: {provider}")

        return self._user_store

    async def close_user_store(self) -> None:
        """Close the user store's connections."""
        if self._user_store is not None:
            await self._user_store.close()
            self._user_store = None

    def get_user_cache(self) -> "UserCache":
        """
        Get or create the user snapshot cache.

        Returns:
            UserCache instance (singleton per container)
        """
        if self._user_cache is None:
            provider = self.settings.cache.provider
            prefix = self.settings.cache.key_prefix

            if provider == CacheProvider.REDIS:
                from userdir.cache.redis import RedisUserCache

                self._user_cache = RedisUserCache(self.get_redis_client(), key_prefix=prefix)
            elif provider == CacheProvider.MEMORY:
                from userdir.cache.memory import InMemoryUserCache

                self._user_cache = InMemoryUserCache(key_prefix=prefix)
            else:
                raise ValueError(f"Unsupported cache provider: {provider}")

        return self._user_cache

    def get_session_store(self) -> "SessionStore":
        """
        Get or create the session store.

        Uses the same backend as the user cache.

        Returns:
            SessionStore instance (singleton per container)
        """
        if self._session_store is None:
            provider = self.settings.cache.provider
            prefix = self.settings.session.key_prefix

            if provider == CacheProvider.REDIS:
                from userdir.cache.redis import RedisSessionStore

                self._session_store = RedisSessionStore(
                    self.get_redis_client(), key_prefix=prefix
                )
            elif provider == CacheProvider.MEMORY:
                from userdir.cache.memory import InMemorySessionStore

                self._session_store = InMemorySessionStore(key_prefix=prefix)
            else:
                raise ValueError(f"Unsupported cache provider: {provider}")

        return self._session_store

    def get_password_hasher(self) -> "PasswordHasher":
        """Get or create the password hasher."""
        if self._password_hasher is None:
            from userdir.services.passwords import BcryptPasswordHasher

            self._password_hasher = BcryptPasswordHasher(
                rounds=self.settings.security.bcrypt_rounds
            )
        return self._password_hasher

    def get_user_service(self) -> "UserService":
        """
        Get or create the user service.

        Returns:
            UserService wired to the store, cache and hasher of this container
        """
        if self._user_service is None:
            from userdir.services.user_service import UserService

            self._user_service = UserService(
                store=self.get_user_store(),
                cache=self.get_user_cache(),
                hasher=self.get_password_hasher(),
                cache_ttl_seconds=self.settings.cache.user_ttl_seconds,
            )
        return self._user_service

    def get_session_service(self) -> "SessionService":
        """Get or create the session service."""
        if self._session_service is None:
            from userdir.services.session_service import SessionService

            self._session_service = SessionService(self.get_session_store())
        return self._session_service

    async def startup(self) -> None:
        """
        Initialize resources on application startup.

        Called by FastAPI lifespan context manager.
        Connects the user store so configuration errors surface early.
        """
        _ = self.settings
        store = self.get_user_store()
        await store.connect()
        logger.info(
            f"Container started (store={self.settings.store.provider.value}, "
            f"cache={self.settings.cache.provider.value})"
        )

    async def shutdown(self) -> None:
        """
        Clean up resources on application shutdown.

        Called by FastAPI lifespan context manager.
        """
        self._user_service = None
        self._session_service = None
        self._user_cache = None
        self._session_store = None
        await self.close_user_store()
        await self.close_redis_client()


# Container for the module-level app instance
@lru_cache
def get_container() -> Container:
    """
    Get the cached container instance.

    Call get_container.cache_clear() to reset (useful for testing).

    Returns:
        Cached Container instance.
    """
    return Container()


def clear_container_cache() -> None:
    """
    Clear the container cache.

    Useful for testing to reset the container state.
    Also clears the settings cache.
    """
    get_container.cache_clear()
    get_settings.cache_clear()


# Convenience functions for FastAPI dependencies
def get_container_dep(request: Request) -> Container:
    """
    FastAPI dependency for getting the container of the running app.

    Usage:
        @app.get("/")
        async def root(container: Container = Depends(get_container_dep)):
            ...
    """
    return request.app.state.container


def get_settings_dep(request: Request) -> Settings:
    """FastAPI dependency for getting settings."""
    return get_container_dep(request).settings


def get_user_service_dep(request: Request) -> "UserService":
    """
    FastAPI dependency for getting the user service.

    Usage:
        @router.get("/users/{user_id}")
        async def get_user(
            user_id: str,
            users: UserService = Depends(get_user_service_dep),
        ):
            ...
    """
    return get_container_dep(request).get_user_service()


def get_session_service_dep(request: Request) -> "SessionService":
    """FastAPI dependency for getting the session service."""
    return get_container_dep(request).get_session_service()


def get_request_context_dep(request: Request) -> RequestContext:
    """
    FastAPI dependency building the per-request deadline context.

    The deadline is `server.request_timeout_seconds` from now.
    """
    timeout = get_settings_dep(request).server.request_timeout_seconds
    return RequestContext.with_timeout(timeout)
