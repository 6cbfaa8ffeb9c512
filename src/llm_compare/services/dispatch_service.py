"""Dispatch service for multi-model fan-out.

This service runs one query against up to ``max_models`` model identifiers.
Each identifier goes through the same pipeline under the shared
concurrency limiter:

1. Deprecation filter -> skipped, no invocation
2. Split ``provider:engine`` -> error when the engine is missing
3. Cache lookup -> cached success, no invocation
4. Invoke under a deadline -> error or fresh success (written to the cache)

Every failure is converted into an outcome for that model only; sibling
models and the completion signal are never affected by it.
"""

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable, Sequence

from llm_compare.config import settings
from llm_compare.entities import (
    DispatchStats,
    ErrorOutcome,
    InvocationFailure,
    InvocationOptions,
    ModelEvent,
    ModelOutcome,
    ModelResult,
    SkippedOutcome,
    SuccessOutcome,
    chunk_text,
    parse_model_id,
)
from llm_compare.errors import DispatchError
from llm_compare.protocols import ModelInvoker, ResponseStore
from llm_compare.repositories import InMemoryResponseCache, cache_key

from .barrier import CompletionBarrier
from .deprecation import DeprecationFilter
from .limiter import ConcurrencyLimiter

logger = logging.getLogger(__name__)

DEPRECATED_REASON = "deprecated"
INVALID_MODEL_ID = "invalid model id format"

EventSink = Callable[[ModelEvent], None]


def _discard(event: ModelEvent) -> None:
    pass


class DispatchService:
    """Fan one query out to several models and collect or stream the results.

    The cache and limiter are injected, so several independent services can
    live in one process; the API lifespan owns the shared instances.

    Example:
        ```python
        service = DispatchService.create(invoker=ProviderInvoker.create())

        outcomes = await service.gather("hi", ["openai:gpt-4o", "anthropic:claude-3-opus-20240229"])

        async for event in service.stream("hi", ["openai:gpt-4o"]):
            print(event.name, event.data)
        ```
    """

    def __init__(
        self,
        invoker: ModelInvoker,
        cache: ResponseStore,
        limiter: ConcurrencyLimiter,
        deprecation_filter: DeprecationFilter,
        max_models: int | None = None,
        chunk_size: int | None = None,
        invocation_timeout: float | None = None,
        options: InvocationOptions | None = None,
    ) -> None:
        """Initialize the dispatch service.

        Args:
            invoker: Model invocation collaborator (required).
            cache: Response cache (required).
            limiter: Concurrency limiter shared across requests (required).
            deprecation_filter: Skip policy (required).
            max_models: Identifiers processed per request. Defaults to settings.
            chunk_size: Characters per ``model-chunk`` event. Defaults to settings.
            invocation_timeout: Deadline per invocation in seconds. Defaults to settings.
            options: Generation options. Invoker defaults when None.

        Raises:
            ValueError: If a bound is not positive
        """
        self._invoker = invoker
        self._cache = cache
        self._limiter = limiter
        self._deprecation = deprecation_filter
        self._max_models = settings.max_models_per_request if max_models is None else max_models
        self._chunk_size = settings.stream_chunk_size if chunk_size is None else chunk_size
        self._timeout = settings.invocation_timeout if invocation_timeout is None else invocation_timeout
        if self._max_models < 1 or self._chunk_size < 1:
            raise ValueError("max_models and chunk_size must be at least 1")
        if self._timeout <= 0:
            raise ValueError("invocation_timeout must be positive")
        self._options = options
        self._stats = DispatchStats()

    @classmethod
    def create(
        cls,
        invoker: ModelInvoker,
        cache: ResponseStore | None = None,
        limiter: ConcurrencyLimiter | None = None,
        deprecation_filter: DeprecationFilter | None = None,
        invocation_timeout: float | None = None,
    ) -> "DispatchService":
        """Factory method to create DispatchService with defaults from settings.

        Args:
            invoker: Model invocation collaborator (required).
            cache: Response cache. If None, a fresh InMemoryResponseCache.
            limiter: Concurrency limiter. If None, a fresh ConcurrencyLimiter.
            deprecation_filter: Skip policy. If None, built from DEPRECATED_MODELS.
            invocation_timeout: Deadline per invocation. If None, uses settings.

        Returns:
            Configured DispatchService
        """
        return cls(
            invoker=invoker,
            cache=cache if cache is not None else InMemoryResponseCache.create(),
            limiter=limiter if limiter is not None else ConcurrencyLimiter(),
            deprecation_filter=deprecation_filter if deprecation_filter is not None else DeprecationFilter(),
            invocation_timeout=invocation_timeout,
        )

    def select(self, model_ids: Sequence[str]) -> list[str]:
        """Keep the first ``max_models`` identifiers; the rest are dropped silently."""
        return list(model_ids[: self._max_models])

    async def gather(self, query: str, model_ids: Sequence[str]) -> list[ModelOutcome]:
        """Run every selected model and return all outcomes.

        Outcomes are returned in request order, one per selected identifier.

        Raises:
            DispatchError: If a failure escaped per-model isolation
        """
        selected = self.select(model_ids)
        self._stats.requests += 1
        logger.info("Dispatch gather", extra={"model_ids": selected, "query_length": len(query)})

        barrier: CompletionBarrier[ModelOutcome] = CompletionBarrier(len(selected))
        tasks = [
            asyncio.create_task(self._run_slot(index, model_id, query, barrier, _discard))
            for index, model_id in enumerate(selected)
        ]
        try:
            return await barrier.wait()
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

    async def stream(self, query: str, model_ids: Sequence[str]) -> AsyncIterator[ModelEvent]:
        """Run every selected model and yield lifecycle events as they happen.

        Events of one model keep their order; events of different models
        interleave freely. The last event is always ``done``: ``ok`` is False
        only when a failure escaped per-model isolation.
        """
        selected = self.select(model_ids)
        self._stats.requests += 1
        logger.info("Dispatch stream", extra={"model_ids": selected, "query_length": len(query)})

        queue: asyncio.Queue[ModelEvent] = asyncio.Queue()
        barrier: CompletionBarrier[ModelOutcome] = CompletionBarrier(len(selected))
        tasks = [
            asyncio.create_task(self._run_slot(index, model_id, query, barrier, queue.put_nowait))
            for index, model_id in enumerate(selected)
        ]
        tasks.append(asyncio.create_task(self._finish_stream(barrier, queue.put_nowait)))
        try:
            while True:
                event = await queue.get()
                yield event
                if event.is_terminal:
                    break
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

    async def _finish_stream(self, barrier: CompletionBarrier[ModelOutcome], emit: EventSink) -> None:
        try:
            await barrier.wait()
        except DispatchError as e:
            emit(ModelEvent.error(None, str(e)))
            emit(ModelEvent.done(ok=False))
            return
        emit(ModelEvent.done(ok=True))

    async def _run_slot(
        self,
        index: int,
        model_id: str,
        query: str,
        barrier: CompletionBarrier[ModelOutcome],
        emit: EventSink,
    ) -> None:
        try:
            outcome = await self._limiter.schedule(lambda: self._process(model_id, query, emit))
        except Exception as e:
            logger.exception("Dispatch slot failed", extra={"model_id": model_id})
            barrier.abort(e)
            return
        barrier.arrive(index, outcome)

    async def _process(self, model_id: str, query: str, emit: EventSink) -> ModelOutcome:
        if self._deprecation.is_deprecated(model_id):
            self._stats.skips += 1
            logger.info("Skipping deprecated model", extra={"model_id": model_id})
            emit(ModelEvent.skipped(model_id, DEPRECATED_REASON))
            return SkippedOutcome(model_id=model_id, reason=DEPRECATED_REASON)

        provider, engine = parse_model_id(model_id)
        if not engine:
            emit(ModelEvent.start(model_id, model_id, cached=False))
            return self._fail(model_id, INVALID_MODEL_ID, emit)

        model_display = f"{provider}:{engine}"
        key = cache_key(provider, engine, query)

        cached = self._cache.get(key)
        if cached is not None:
            self._stats.cache_hits += 1
            emit(ModelEvent.start(model_id, cached.model_display, cached=True))
            self._emit_result(cached, emit)
            return SuccessOutcome(result=cached, cached=True)

        self._stats.cache_misses += 1
        emit(ModelEvent.start(model_id, model_display, cached=False))

        start_time = time.time()
        try:
            invocation = await asyncio.wait_for(
                self._invoker.invoke(provider, engine, query, self._options),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            self._stats.timeouts += 1
            return self._fail(
                model_id,
                f"invocation timed out after {self._timeout:g}s",
                emit,
                model_display=model_display,
            )
        except Exception as e:
            logger.exception("Model invocation raised", extra={"model_id": model_id})
            return self._fail(model_id, str(e) or e.__class__.__name__, emit, model_display=model_display)
        finally:
            self._stats.record_invocation((time.time() - start_time) * 1000)

        if isinstance(invocation, InvocationFailure):
            return self._fail(
                model_id,
                invocation.message,
                emit,
                status=invocation.status,
                body=invocation.body,
                model_display=model_display,
            )

        result = ModelResult(
            model_id=model_id,
            model_display=model_display,
            text=invocation.text or "",
            time_ms=invocation.time_ms or 0,
            raw=invocation.raw,
        )
        self._cache.put(key, result)
        self._emit_result(result, emit)
        return SuccessOutcome(result=result, cached=False)

    def _emit_result(self, result: ModelResult, emit: EventSink) -> None:
        for piece in chunk_text(result.text, self._chunk_size):
            emit(ModelEvent.chunk(result.model_id, piece))
        emit(ModelEvent.end(result.model_id, result.metrics))

    def _fail(
        self,
        model_id: str,
        message: str,
        emit: EventSink,
        status: int | None = None,
        body: object = None,
        model_display: str | None = None,
    ) -> ErrorOutcome:
        self._stats.errors += 1
        logger.warning("Model failed", extra={"model_id": model_id, "error": message, "status": status})
        emit(ModelEvent.error(model_id, message, status=status, body=body))
        return ErrorOutcome(
            model_id=model_id,
            message=message,
            status=status,
            body=body,
            model_display=model_display,
        )

    def clear_cache(self) -> int:
        """Drop every cached response.

        Returns:
            Number of entries removed
        """
        return self._cache.clear()

    def get_stats(self) -> dict:
        """Get dispatch statistics.

        Returns:
            Dictionary with dispatch counters, cache stats and limiter state
        """
        return {
            "dispatch": self._stats.to_dict(),
            "cache": self._cache.get_stats(),
            "limiter": {
                "max_concurrency": self._limiter.max_concurrency,
                "running": self._limiter.running,
                "pending": self._limiter.pending,
            },
            "max_models": self._max_models,
            "chunk_size": self._chunk_size,
            "invocation_timeout": self._timeout,
        }

    @property
    def cache(self) -> ResponseStore:
        """Get the underlying response cache (for testing)."""
        return self._cache

    @property
    def limiter(self) -> ConcurrencyLimiter:
        """Get the underlying limiter (for testing)."""
        return self._limiter
