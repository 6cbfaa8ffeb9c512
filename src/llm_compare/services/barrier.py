"""Completion barrier for per-model outcomes."""

import asyncio
from typing import Generic, TypeVar

from llm_compare.errors import BarrierError, DispatchError

T = TypeVar("T")


class CompletionBarrier(Generic[T]):
    """Countdown that resolves once every slot has reported exactly once.

    Each slot is identified by its index in the selected model list, so
    a slot reporting twice is rejected instead of being double-counted.
    ``wait()`` returns the reported values in slot order.

    Example:
        ```python
        barrier = CompletionBarrier(2)
        barrier.arrive(1, "b")
        barrier.arrive(0, "a")
        await barrier.wait()   # ["a", "b"]
        ```
    """

    def __init__(self, expected: int) -> None:
        if expected < 0:
            raise ValueError("expected must not be negative")
        self._expected = expected
        self._values: dict[int, T] = {}
        self._error: BaseException | None = None
        self._done = asyncio.Event()
        if expected == 0:
            self._done.set()

    @property
    def expected(self) -> int:
        return self._expected

    @property
    def remaining(self) -> int:
        return self._expected - len(self._values)

    @property
    def is_done(self) -> bool:
        return self._done.is_set()

    def arrive(self, index: int, value: T) -> None:
        """Report the value for one slot.

        Raises:
            BarrierError: If the index is out of range or already reported
        """
        if not 0 <= index < self._expected:
            raise BarrierError(f"slot {index} out of range for {self._expected} slots")
        if index in self._values:
            raise BarrierError(f"slot {index} already arrived")

        self._values[index] = value
        if len(self._values) == self._expected:
            self._done.set()

    def abort(self, error: BaseException) -> None:
        """Release waiters with a failure; the first abort wins."""
        if self._done.is_set():
            return
        self._error = error
        self._done.set()

    async def wait(self) -> list[T]:
        """Wait for all slots.

        Returns:
            Values in slot order

        Raises:
            DispatchError: If the barrier was aborted
        """
        await self._done.wait()
        if self._error is not None:
            raise DispatchError(f"dispatch aborted: {self._error}") from self._error
        return [self._values[index] for index in range(self._expected)]
