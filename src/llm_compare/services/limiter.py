"""Process-wide concurrency limiter.

At most ``max_concurrency`` scheduled tasks run at once, across every
request sharing the limiter. Further tasks wait in FIFO order and start
as running ones finish, whether those finished normally or raised.
"""

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
from typing import TypeVar

from llm_compare.config import settings

T = TypeVar("T")


class ConcurrencyLimiter:
    """FIFO admission control for coroutine factories.

    Example:
        ```python
        limiter = ConcurrencyLimiter(max_concurrency=3)
        result = await limiter.schedule(lambda: client.complete(...))
        ```
    """

    def __init__(self, max_concurrency: int | None = None) -> None:
        """Initialize the limiter.

        Args:
            max_concurrency: Ceiling on running tasks. Defaults to settings.
        """
        self._limit = settings.max_concurrency if max_concurrency is None else max_concurrency
        if self._limit < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._running = 0
        self._waiters: deque[asyncio.Future[None]] = deque()

    @property
    def max_concurrency(self) -> int:
        return self._limit

    @property
    def running(self) -> int:
        """Number of tasks currently holding a slot."""
        return self._running

    @property
    def pending(self) -> int:
        """Number of tasks queued for a slot."""
        return sum(1 for waiter in self._waiters if not waiter.done())

    async def schedule(self, task: Callable[[], Awaitable[T]]) -> T:
        """Run ``task()`` once a slot is free and return its result.

        Exceptions raised by the task propagate to the caller; the slot is
        released either way.
        """
        await self._acquire()
        try:
            return await task()
        finally:
            self._release()

    async def _acquire(self) -> None:
        if self._running < self._limit and not self._waiters:
            self._running += 1
            return

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # The slot was handed over just before cancellation: pass it on
                self._release()
            elif waiter in self._waiters:
                self._waiters.remove(waiter)
            raise

    def _release(self) -> None:
        # Hand the slot straight to the oldest live waiter; the running count is unchanged
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        self._running -= 1
