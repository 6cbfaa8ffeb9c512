"""Response cache protocol.

Defines the interface for the time-bounded memo of successful model
results. The store is an accelerator only: dropping it at any time
must not change correctness.
"""

from typing import Protocol, runtime_checkable

from llm_compare.entities import ModelResult


@runtime_checkable
class ResponseStore(Protocol):
    """Protocol for response cache backends."""

    def get(self, key: str) -> ModelResult | None:
        """Look up a live entry.

        Args:
            key: Key built by ``cache_key``

        Returns:
            The cached result, or None when absent or older than the TTL
        """
        ...

    def put(self, key: str, result: ModelResult) -> None:
        """Store a result, overwriting any existing entry.

        Args:
            key: Key built by ``cache_key``
            result: The result to remember
        """
        ...

    def clear(self) -> int:
        """Drop every entry.

        Returns:
            Number of entries removed
        """
        ...

    def get_stats(self) -> dict:
        """Get store statistics.

        Returns:
            Dictionary with stats (implementation-specific)
        """
        ...
