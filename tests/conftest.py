"""
Shared fixtures and stubs for the compare service tests.
"""

import asyncio
import json

import pytest

from llm_compare.entities import InvocationFailure, InvocationOptions, InvocationSuccess
from llm_compare.repositories import InMemoryResponseCache, ProviderInvoker
from llm_compare.services import ConcurrencyLimiter, DeprecationFilter, DispatchService


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubClient:
    """ProviderClient returning canned text, with a call log and optional hooks."""

    def __init__(
        self,
        name: str,
        text: str = "ABC",
        time_ms: int = 5,
        failures: dict[str, InvocationFailure] | None = None,
        errors: dict[str, Exception] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self._name = name
        self.text = text
        self.time_ms = time_ms
        self.failures = failures or {}
        self.errors = errors or {}
        self.delays = delays or {}
        self.calls: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    @property
    def name(self) -> str:
        return self._name

    async def complete(self, engine: str, query: str, options: InvocationOptions):
        self.calls.append((engine, query))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if engine in self.delays:
                await asyncio.sleep(self.delays[engine])
            if engine in self.errors:
                raise self.errors[engine]
            if engine in self.failures:
                return self.failures[engine]
            return InvocationSuccess(text=self.text, time_ms=self.time_ms, raw={"engine": engine})
        finally:
            self.in_flight -= 1

    async def aclose(self) -> None:
        self.closed = True


def build_service(
    clients: list[StubClient] | None = None,
    clock: FakeClock | None = None,
    deny: list[str] | None = None,
    limiter: ConcurrencyLimiter | None = None,
    invocation_timeout: float = 1.0,
    chunk_size: int = 200,
) -> DispatchService:
    """Build a DispatchService over stub provider clients."""
    clients = clients if clients is not None else [StubClient("openai"), StubClient("anthropic")]
    return DispatchService(
        invoker=ProviderInvoker(clients=clients),
        cache=InMemoryResponseCache(ttl=1800, max_entries=100, clock=clock or FakeClock()),
        limiter=limiter or ConcurrencyLimiter(max_concurrency=3),
        deprecation_filter=DeprecationFilter(deny=deny or []),
        max_models=3,
        chunk_size=chunk_size,
        invocation_timeout=invocation_timeout,
    )


def parse_sse(body: str) -> list[tuple[str, dict]]:
    """Parse a text/event-stream body into (event, payload) pairs."""
    events = []
    for block in body.split("\n\n"):
        if not block.strip():
            continue
        name = None
        data_lines = []
        for line in block.split("\n"):
            if line.startswith("event: "):
                name = line[len("event: ") :]
            elif line.startswith("data: "):
                data_lines.append(line[len("data: ") :])
        events.append((name, json.loads("\n".join(data_lines))))
    return events


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def openai_client() -> StubClient:
    return StubClient("openai")


@pytest.fixture
def anthropic_client() -> StubClient:
    return StubClient("anthropic")
