"""
Password hashing.

bcrypt is CPU-bound, so hashing and verification run in a worker thread.
"""

import asyncio
from abc import ABC, abstractmethod

import bcrypt

from userdir.core.errors import InvalidArgumentError

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


class PasswordHasher(ABC):
    """One-way password hashing primitive with verification."""

    @abstractmethod
    async def hash(self, password: str) -> str:
        """Return a one-way hash of `password`."""
        ...

    @abstractmethod
    async def verify(self, password: str, hashed: str) -> bool:
        """Return True when `password` matches `hashed`."""
        ...


class BcryptPasswordHasher(PasswordHasher):
    """bcrypt password hasher."""

    def __init__(self, rounds: int = 12):
        """
        Args:
            rounds: bcrypt cost factor (log2 of the iteration count).
        """
        self._rounds = rounds

    def _hash_sync(self, password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(self._rounds)).decode("utf-8")

    @staticmethod
    def _verify_sync(password: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # Malformed stored hash or over-long password
            return False

    async def hash(self, password: str) -> str:
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise InvalidArgumentError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes"
            )
        return await asyncio.to_thread(self._hash_sync, password)

    async def verify(self, password: str, hashed: str) -> bool:
        if not hashed:
            return False
        return await asyncio.to_thread(self._verify_sync, password, hashed)
