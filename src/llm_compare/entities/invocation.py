"""Normalized upstream invocation results."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class InvocationOptions:
    """Generation options forwarded to every provider.

    Attributes:
        max_tokens: Upper bound on generated tokens
        temperature: Sampling temperature
    """

    max_tokens: int = 512
    temperature: float = 0.2


@dataclass(frozen=True)
class InvocationSuccess:
    """A completed upstream call.

    Attributes:
        text: The generated text (empty string when the provider returned none)
        time_ms: Wall-clock duration of the upstream call in milliseconds
        raw: The decoded provider payload, kept for diagnostics
    """

    text: str
    time_ms: int
    raw: Any = None


@dataclass(frozen=True)
class InvocationFailure:
    """An upstream call that failed in an expected way.

    Attributes:
        message: Human-readable failure description
        status: Upstream HTTP status, when there was a response
        body: Upstream response body (decoded JSON or text)
        time_ms: Duration until the failure was observed
    """

    message: str
    status: int | None = None
    body: Any = None
    time_ms: int | None = None


InvocationResult = InvocationSuccess | InvocationFailure
