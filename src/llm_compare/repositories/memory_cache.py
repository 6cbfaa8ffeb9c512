"""In-memory implementation of ResponseStore.

Entries expire lazily: an entry older than the TTL is treated as absent
on read and replaced by the next successful invocation. Capacity is
bounded with least-recently-used eviction.
"""

import base64
import time
from collections import OrderedDict
from collections.abc import Callable

from llm_compare.config import settings
from llm_compare.entities import ModelResult


def cache_key(provider: str, engine: str, query: str) -> str:
    """Build the cache key for a (provider, engine, query) triple.

    The query is base64-encoded so separators and newlines inside it
    cannot collide with the ``:`` delimiters. Providers never contain
    ``:`` (identifiers split on the first one), and base64 output never
    does, so distinct triples give distinct keys.

    Args:
        provider: Provider name
        engine: Engine name (may contain ``:``)
        query: Arbitrary query text

    Returns:
        The key string
    """
    encoded = base64.b64encode(query.encode("utf-8")).decode("ascii")
    return f"{provider}:{engine}:{encoded}"


class InMemoryResponseCache:
    """TTL + LRU response cache.

    This class satisfies the ResponseStore protocol through structural
    typing - no explicit inheritance needed.

    Readers tolerate a write racing in over them: ``put`` is a plain
    overwrite and the last writer wins.
    """

    def __init__(
        self,
        ttl: float | None = None,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl: Entry lifetime in seconds. Defaults to settings.
            max_entries: Capacity before LRU eviction. Defaults to settings.
            clock: Monotonic time source, replaceable in tests.
        """
        self._ttl = settings.cache_ttl if ttl is None else ttl
        self._max_entries = settings.cache_max_entries if max_entries is None else max_entries
        if self._ttl <= 0 or self._max_entries < 1:
            raise ValueError("ttl and max_entries must be positive")
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, ModelResult]] = OrderedDict()
        self._evictions = 0

    @classmethod
    def create(
        cls,
        ttl: float | None = None,
        max_entries: int | None = None,
    ) -> "InMemoryResponseCache":
        """Factory method to create InMemoryResponseCache with defaults.

        Args:
            ttl: Entry lifetime in seconds. If None, uses settings.
            max_entries: Capacity. If None, uses settings.

        Returns:
            Configured InMemoryResponseCache
        """
        return cls(ttl=ttl, max_entries=max_entries)

    def get(self, key: str) -> ModelResult | None:
        entry = self._entries.get(key)
        if entry is None:
            return None

        stored_at, result = entry
        if self._clock() - stored_at >= self._ttl:
            # Stale: treat as absent
            del self._entries[key]
            return None

        self._entries.move_to_end(key)
        return result

    def put(self, key: str, result: ModelResult) -> None:
        self._entries[key] = (self._clock(), result)
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
            self._evictions += 1

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with stats
        """
        return {
            "total_entries": len(self._entries),
            "max_entries": self._max_entries,
            "ttl_seconds": self._ttl,
            "evictions": self._evictions,
        }
