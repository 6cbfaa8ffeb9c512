"""
Tests for multi-model dispatch: gather and stream modes.
"""

import asyncio

import pytest

from llm_compare.entities import ErrorOutcome, InvocationFailure, SkippedOutcome, SuccessOutcome
from llm_compare.errors import DispatchError
from llm_compare.repositories import InMemoryResponseCache, ProviderInvoker
from llm_compare.services import ConcurrencyLimiter, DeprecationFilter, DispatchService

from conftest import StubClient, build_service

MODELS = ["openai:gpt-4o", "anthropic:claude-3-opus-20240229", "bogus:engine"]


async def collect(service, query, model_ids):
    return [event async for event in service.stream(query, model_ids)]


def events_for(events, model_id):
    return [event for event in events if event.model_id == model_id]


# -- gather -----------------------------------------------------------------


@pytest.mark.asyncio
async def test_gather_concrete_scenario():
    """Two supported providers succeed, the unknown one is a per-model error."""
    service = build_service()

    outcomes = await service.gather("hi", MODELS)

    assert [outcome.model_id for outcome in outcomes] == MODELS
    for outcome in outcomes[:2]:
        assert isinstance(outcome, SuccessOutcome)
        assert outcome.cached is False
        assert outcome.result.text == "ABC"
        assert outcome.result.metrics.to_dict() == {"timeMs": 5, "length": 3}
    assert outcomes[0].result.model_display == "openai:gpt-4o"

    assert isinstance(outcomes[2], ErrorOutcome)
    assert outcomes[2].message == "unsupported provider: bogus"


@pytest.mark.asyncio
async def test_gather_truncates_to_three_models():
    openai = StubClient("openai")
    service = build_service(clients=[openai])
    model_ids = [f"openai:m{i}" for i in range(5)]

    outcomes = await service.gather("hi", model_ids)

    assert len(outcomes) == 3
    assert [outcome.model_id for outcome in outcomes] == model_ids[:3]
    assert sorted(engine for engine, _ in openai.calls) == ["m0", "m1", "m2"]


@pytest.mark.asyncio
async def test_deprecated_model_is_never_invoked():
    openai = StubClient("openai")
    service = build_service(clients=[openai])

    outcomes = await service.gather("hi", ["openai:gpt-3.5-turbo-deprecated"])

    assert outcomes == [SkippedOutcome(model_id="openai:gpt-3.5-turbo-deprecated", reason="deprecated")]
    assert openai.calls == []


@pytest.mark.asyncio
async def test_deny_listed_model_is_skipped():
    anthropic = StubClient("anthropic")
    service = build_service(clients=[anthropic], deny=["anthropic:claude-2.1"])

    outcomes = await service.gather("hi", ["anthropic:claude-2.1"])

    assert isinstance(outcomes[0], SkippedOutcome)
    assert anthropic.calls == []


@pytest.mark.asyncio
async def test_missing_engine_is_invalid_format():
    openai = StubClient("openai")
    service = build_service(clients=[openai])

    outcomes = await service.gather("hi", ["openai", "openai:"])

    assert all(isinstance(outcome, ErrorOutcome) for outcome in outcomes)
    assert {outcome.message for outcome in outcomes} == {"invalid model id format"}
    assert openai.calls == []


@pytest.mark.asyncio
async def test_engine_keeps_colons_after_the_first():
    openai = StubClient("openai")
    service = build_service(clients=[openai])

    outcomes = await service.gather("hi", ["openai:ft:gpt-4o:acme"])

    assert openai.calls == [("ft:gpt-4o:acme", "hi")]
    assert outcomes[0].result.model_display == "openai:ft:gpt-4o:acme"


@pytest.mark.asyncio
async def test_second_request_within_ttl_is_cached(clock):
    openai = StubClient("openai", text="cached answer", time_ms=42)
    service = build_service(clients=[openai], clock=clock)

    first = (await service.gather("hi", ["openai:gpt-4o"]))[0]
    second = (await service.gather("hi", ["openai:gpt-4o"]))[0]

    assert first.cached is False
    assert second.cached is True
    assert second.result.text == first.result.text
    assert second.result.metrics == first.result.metrics
    assert len(openai.calls) == 1

    clock.advance(1800)
    third = (await service.gather("hi", ["openai:gpt-4o"]))[0]

    assert third.cached is False
    assert len(openai.calls) == 2


@pytest.mark.asyncio
async def test_cache_is_keyed_by_query():
    openai = StubClient("openai")
    service = build_service(clients=[openai])

    await service.gather("hi", ["openai:gpt-4o"])
    outcome = (await service.gather("hello", ["openai:gpt-4o"]))[0]

    assert outcome.cached is False
    assert len(openai.calls) == 2


@pytest.mark.asyncio
async def test_failures_are_not_cached():
    openai = StubClient("openai", failures={"gpt-4o": InvocationFailure(message="rate limited", status=429)})
    service = build_service(clients=[openai])

    await service.gather("hi", ["openai:gpt-4o"])
    await service.gather("hi", ["openai:gpt-4o"])

    assert len(openai.calls) == 2


@pytest.mark.asyncio
async def test_upstream_failure_keeps_status_and_body():
    failure = InvocationFailure(message="OpenAI REST error 429", status=429, body={"error": "slow down"})
    service = build_service(clients=[StubClient("openai", failures={"gpt-4o": failure})])

    outcome = (await service.gather("hi", ["openai:gpt-4o"]))[0]

    assert outcome == ErrorOutcome(
        model_id="openai:gpt-4o",
        message="OpenAI REST error 429",
        status=429,
        body={"error": "slow down"},
        model_display="openai:gpt-4o",
    )


@pytest.mark.asyncio
async def test_raising_invoker_is_isolated():
    openai = StubClient("openai", errors={"gpt-4o": RuntimeError("boom")})
    service = build_service(clients=[openai, StubClient("anthropic")])

    outcomes = await service.gather("hi", ["openai:gpt-4o", "anthropic:claude-3-opus-20240229"])

    assert isinstance(outcomes[0], ErrorOutcome)
    assert outcomes[0].message == "boom"
    assert isinstance(outcomes[1], SuccessOutcome)


@pytest.mark.asyncio
async def test_hanging_invoker_times_out_instead_of_stalling():
    openai = StubClient("openai", delays={"slow": 30})
    service = build_service(clients=[openai], invocation_timeout=0.05)

    outcomes = await asyncio.wait_for(service.gather("hi", ["openai:slow", "openai:fast"]), timeout=5)

    assert isinstance(outcomes[0], ErrorOutcome)
    assert outcomes[0].message == "invocation timed out after 0.05s"
    assert isinstance(outcomes[1], SuccessOutcome)
    assert service.get_stats()["dispatch"]["timeouts"] == 1


@pytest.mark.asyncio
async def test_services_from_factory_share_an_injected_cache():
    openai = StubClient("openai")
    invoker = ProviderInvoker(clients=[openai])
    shared_cache = InMemoryResponseCache(ttl=1800, max_entries=100)
    shared_limiter = ConcurrencyLimiter(max_concurrency=3)

    first = DispatchService.create(invoker=invoker, cache=shared_cache, limiter=shared_limiter)
    second = DispatchService.create(invoker=invoker, cache=shared_cache, limiter=shared_limiter)

    assert first.cache is shared_cache
    assert second.limiter is shared_limiter

    await first.gather("hi", ["openai:gpt-4o"])
    outcome = (await second.gather("hi", ["openai:gpt-4o"]))[0]

    assert outcome.cached is True
    assert len(shared_cache) == 1
    assert len(openai.calls) == 1


@pytest.mark.parametrize(
    "bounds",
    [{"max_models": 0}, {"chunk_size": 0}, {"invocation_timeout": 0}, {"invocation_timeout": -1}],
)
def test_explicit_zero_bounds_are_rejected(bounds):
    with pytest.raises(ValueError):
        DispatchService(
            invoker=ProviderInvoker(clients=[]),
            cache=InMemoryResponseCache(ttl=1800, max_entries=100),
            limiter=ConcurrencyLimiter(max_concurrency=3),
            deprecation_filter=DeprecationFilter(deny=[]),
            **bounds,
        )


@pytest.mark.asyncio
async def test_limiter_ceiling_is_global_across_requests():
    openai = StubClient("openai", delays={f"m{i}": 0.02 for i in range(6)})
    limiter = ConcurrencyLimiter(max_concurrency=3)
    first = build_service(clients=[openai], limiter=limiter)
    second = build_service(clients=[openai], limiter=limiter)

    await asyncio.gather(
        first.gather("hi", ["openai:m0", "openai:m1", "openai:m2"]),
        second.gather("hi", ["openai:m3", "openai:m4", "openai:m5"]),
    )

    assert len(openai.calls) == 6
    assert openai.max_in_flight == 3


class ExplodingCache:
    """Response store whose lookups fail, simulating a bug outside invocation."""

    def get(self, key):
        raise KeyError("cache exploded")

    def put(self, key, result):
        pass

    def clear(self):
        return 0

    def get_stats(self):
        return {}


@pytest.mark.asyncio
async def test_gather_surfaces_engine_level_failure():
    service = build_service()
    service._cache = ExplodingCache()

    with pytest.raises(DispatchError):
        await service.gather("hi", ["openai:gpt-4o"])


# -- stream -----------------------------------------------------------------


@pytest.mark.asyncio
async def test_stream_event_sequence_per_model():
    service = build_service()

    events = await collect(service, "hi", MODELS)

    assert [event.name for event in events_for(events, "openai:gpt-4o")] == [
        "model-start",
        "model-chunk",
        "model-end",
    ]
    start, chunk, end = events_for(events, "openai:gpt-4o")
    assert start.data == {"modelId": "openai:gpt-4o", "modelDisplay": "openai:gpt-4o", "cached": False}
    assert chunk.data == {"modelId": "openai:gpt-4o", "text": "ABC"}
    assert end.data == {"modelId": "openai:gpt-4o", "metrics": {"timeMs": 5, "length": 3}}

    bogus = events_for(events, "bogus:engine")
    assert [event.name for event in bogus] == ["model-start", "model-error"]
    assert bogus[1].data["message"] == "unsupported provider: bogus"

    assert events[-1].name == "done"
    assert events[-1].data == {"ok": True}
    assert sum(1 for event in events if event.name == "done") == 1


@pytest.mark.asyncio
async def test_stream_chunks_reassemble_full_text():
    text = "".join(chr(ord("a") + i % 26) for i in range(450))
    service = build_service(clients=[StubClient("openai", text=text)])

    events = await collect(service, "hi", ["openai:gpt-4o"])

    chunks = [event.data["text"] for event in events if event.name == "model-chunk"]
    assert [len(chunk) for chunk in chunks] == [200, 200, 50]
    assert "".join(chunks) == text
    assert events[-2].data["metrics"]["length"] == 450


@pytest.mark.asyncio
async def test_stream_empty_text_has_no_chunks():
    service = build_service(clients=[StubClient("openai", text="")])

    events = await collect(service, "hi", ["openai:gpt-4o"])

    assert [event.name for event in events] == ["model-start", "model-end", "done"]
    assert events[1].data["metrics"] == {"timeMs": 5, "length": 0}


@pytest.mark.asyncio
async def test_stream_replays_cache_hits():
    service = build_service()
    await service.gather("hi", ["openai:gpt-4o"])

    events = await collect(service, "hi", ["openai:gpt-4o"])

    assert events[0].name == "model-start"
    assert events[0].data["cached"] is True
    assert [event.name for event in events] == ["model-start", "model-chunk", "model-end", "done"]


@pytest.mark.asyncio
async def test_stream_skipped_model_emits_single_event():
    openai = StubClient("openai")
    service = build_service(clients=[openai])

    events = await collect(service, "hi", ["openai:gpt-3.5-turbo-deprecated", "openai:gpt-4o"])

    skipped = events_for(events, "openai:gpt-3.5-turbo-deprecated")
    assert len(skipped) == 1
    assert skipped[0].name == "model-skipped"
    assert skipped[0].data == {"modelId": "openai:gpt-3.5-turbo-deprecated", "reason": "deprecated"}
    assert openai.calls == [("gpt-4o", "hi")]
    assert events[-1].data == {"ok": True}


@pytest.mark.asyncio
async def test_stream_failing_model_does_not_leak_into_others():
    openai = StubClient("openai", errors={"gpt-4o": RuntimeError("boom")})
    service = build_service(clients=[openai, StubClient("anthropic")])

    events = await collect(service, "hi", ["openai:gpt-4o", "anthropic:claude-3-opus-20240229"])

    failing = events_for(events, "openai:gpt-4o")
    assert [event.name for event in failing] == ["model-start", "model-error"]
    assert failing[1].data == {"modelId": "openai:gpt-4o", "message": "boom"}

    healthy = events_for(events, "anthropic:claude-3-opus-20240229")
    assert [event.name for event in healthy] == ["model-start", "model-chunk", "model-end"]
    assert events[-1].data == {"ok": True}


@pytest.mark.asyncio
async def test_stream_error_event_carries_upstream_details():
    failure = InvocationFailure(message="Anthropic REST error 500", status=500, body="upstream down")
    service = build_service(clients=[StubClient("anthropic", failures={"claude": failure})])

    events = await collect(service, "hi", ["anthropic:claude"])

    assert events[1].data == {
        "modelId": "anthropic:claude",
        "message": "Anthropic REST error 500",
        "status": 500,
        "body": "upstream down",
    }


@pytest.mark.asyncio
async def test_stream_degrades_on_engine_level_failure():
    service = build_service()
    service._cache = ExplodingCache()

    events = await collect(service, "hi", ["openai:gpt-4o"])

    assert events[-2].name == "model-error"
    assert "modelId" not in events[-2].data
    assert events[-1].name == "done"
    assert events[-1].data == {"ok": False}


@pytest.mark.asyncio
async def test_closing_stream_early_cancels_pending_work():
    openai = StubClient("openai", delays={"slow": 30})
    service = build_service(clients=[openai], invocation_timeout=60)

    stream = service.stream("hi", ["openai:slow"])
    first = await stream.__anext__()
    await stream.aclose()
    await asyncio.sleep(0.01)

    assert first.name == "model-start"
    assert service.limiter.running == 0
