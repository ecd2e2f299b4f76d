"""
Durable user store package.

Provides the UserStore abstraction and its PostgreSQL and in-memory implementations.
"""

from userdir.storage.base import UserStore
from userdir.storage.memory import InMemoryUserStore
from userdir.storage.postgres import PostgresUserStore

__all__ = [
    "UserStore",
    "InMemoryUserStore",
    "PostgresUserStore",
]
