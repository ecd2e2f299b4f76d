"""
Per-request context carrying a cancellable deadline.

A RequestContext is the first argument of every service and backend
operation. Backends bound their I/O with RequestContext.run(), so no call
outlives the request that issued it. Cancellation of the request task
propagates through the awaited call as asyncio.CancelledError.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, TypeVar

from userdir.core.errors import DeadlineExceededError

T = TypeVar("T")


@dataclass(frozen=True)
class RequestContext:
    """
    Deadline holder for a single inbound operation.

    Attributes:
        deadline: Absolute time.monotonic() value, or None for no deadline.
    """

    deadline: float | None = None

    @classmethod
    def with_timeout(cls, seconds: float) -> "RequestContext":
        """Create a context expiring `seconds` from now."""
        return cls(deadline=time.monotonic() + seconds)

    @classmethod
    def background(cls) -> "RequestContext":
        """Create a context without a deadline."""
        return cls()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, None when unbounded."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def check(self, operation: str) -> None:
        """
        Raise if the deadline has already passed.

        Args:
            operation: Name of the operation, used in the error message.

        Raises:
            DeadlineExceededError: If the deadline has passed.
        """
        if self.expired:
            raise DeadlineExceededError(f"Deadline exceeded before {operation}")

    async def run(self, awaitable: Awaitable[T], operation: str) -> T:
        """
        Await `awaitable`, bounded by the remaining time.

        Args:
            awaitable: Coroutine performing the I/O.
            operation: Name of the operation, used in the error message.

        Returns:
            The awaitable's result.

        Raises:
            DeadlineExceededError: If the deadline passes first.
        """
        remaining = self.remaining()
        if remaining is None:
            return await awaitable
        if remaining <= 0:
            # Close the coroutine so it is not reported as never awaited
            close = getattr(awaitable, "close", None)
            if close is not None:
                close()
            raise DeadlineExceededError(f"Deadline exceeded before {operation}")
        try:
            return await asyncio.wait_for(awaitable, timeout=remaining)
        except asyncio.TimeoutError as e:
            raise DeadlineExceededError(f"Deadline exceeded during {operation}") from e
