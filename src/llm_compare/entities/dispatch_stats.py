"""Dispatch counters."""

from dataclasses import dataclass


@dataclass
class DispatchStats:
    """Track counters for dispatch operations."""

    requests: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    invocations: int = 0
    errors: int = 0
    skips: int = 0
    timeouts: int = 0
    total_invocation_time_ms: float = 0.0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        lookups = self.cache_hits + self.cache_misses
        if lookups == 0:
            return 0.0
        return self.cache_hits / lookups

    @property
    def avg_invocation_time_ms(self) -> float:
        """Calculate average upstream invocation time."""
        if self.invocations == 0:
            return 0.0
        return self.total_invocation_time_ms / self.invocations

    def record_invocation(self, duration_ms: float) -> None:
        """Record an upstream call."""
        self.invocations += 1
        self.total_invocation_time_ms += duration_ms

    def to_dict(self) -> dict[str, float | int]:
        """Convert counters to dictionary."""
        return {
            "requests": self.requests,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "hit_rate": self.hit_rate,
            "invocations": self.invocations,
            "avg_invocation_time_ms": self.avg_invocation_time_ms,
            "errors": self.errors,
            "skips": self.skips,
            "timeouts": self.timeouts,
        }
