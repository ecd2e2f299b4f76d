"""
Cache package.

Provides the user snapshot cache and session store abstractions with
Redis and in-memory implementations.
"""

from userdir.cache.base import SessionStore, UserCache
from userdir.cache.memory import InMemorySessionStore, InMemoryUserCache
from userdir.cache.redis import RedisSessionStore, RedisUserCache

__all__ = [
    "UserCache",
    "SessionStore",
    "InMemoryUserCache",
    "InMemorySessionStore",
    "RedisUserCache",
    "RedisSessionStore",
]
