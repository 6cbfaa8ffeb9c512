#!/usr/bin/env python3
"""
Demo script for multi-model compare.

This script sends one query to several models and prints the stream of
lifecycle events as they arrive, then repeats the query to show cache hits.

Usage:
    python scripts/demo.py "What is a semantic cache?" openai:gpt-4o anthropic:claude-3-5-sonnet-20241022
"""

import argparse
import asyncio
import time

from llm_compare import DispatchService, ProviderInvoker
from llm_compare.config import settings
from llm_compare.entities import SuccessOutcome
from llm_compare.services import score_outcomes

DEFAULT_MODELS = ["openai:gpt-4o-mini", "anthropic:claude-3-5-haiku-20241022", "openai:gpt-3.5-turbo-deprecated"]


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def demo_stream(service: DispatchService, query: str, model_ids: list[str]) -> None:
    """Stream one query and print every event."""
    print_section("Streaming")

    start = time.time()
    async for event in service.stream(query, model_ids):
        model_id = event.model_id or "-"
        if event.name == "model-start":
            origin = "cache" if event.data["cached"] else "live"
            print(f"\n  ▶ {model_id} ({origin})")
        elif event.name == "model-chunk":
            print(f"    {event.data['text']!r}")
        elif event.name == "model-end":
            metrics = event.data["metrics"]
            print(f"  ✓ {model_id}: {metrics['length']} chars in {metrics['timeMs']}ms")
        elif event.name == "model-error":
            print(f"  ✗ {model_id}: {event.data['message']}")
        elif event.name == "model-skipped":
            print(f"  ⏭ {model_id}: {event.data['reason']}")
        elif event.name == "done":
            status = "ok" if event.data["ok"] else "failed"
            print(f"\n  done ({status}) after {(time.time() - start) * 1000:.0f}ms")


async def demo_gather(service: DispatchService, query: str, model_ids: list[str]) -> None:
    """Gather the same query again; successes now come from the cache."""
    print_section("Gather (second run)")

    outcomes = await service.gather(query, model_ids)
    for outcome in outcomes:
        if isinstance(outcome, SuccessOutcome):
            print(f"  {outcome.model_id}: cached={outcome.cached}")
        else:
            print(f"  {outcome.model_id}: {type(outcome).__name__}")

    print(f"\n  Recommended: {score_outcomes(outcomes)}")
    print(f"  Stats: {service.get_stats()['dispatch']}")


async def run(query: str, model_ids: list[str]) -> None:
    invoker = ProviderInvoker.create()
    service = DispatchService.create(invoker=invoker)
    try:
        await demo_stream(service, query, model_ids)
        await demo_gather(service, query, model_ids)
    finally:
        await invoker.aclose()


def main() -> None:
    """Run the demo."""
    parser = argparse.ArgumentParser(description="Compare one query across several LLM engines")
    parser.add_argument("query", nargs="?", default="Explain server-sent events in two sentences.")
    parser.add_argument("model_ids", nargs="*", default=DEFAULT_MODELS)
    args = parser.parse_args()

    print("\n🚀 LLM Compare Demo")
    print("=" * 70)
    print(f"Query: {args.query}")
    print(f"OPENAI_API_KEY set: {bool(settings.openai_api_key)}")
    print(f"ANTHROPIC_API_KEY set: {bool(settings.anthropic_api_key)}")

    asyncio.run(run(args.query, args.model_ids or DEFAULT_MODELS))

    print("\n" + "=" * 70)
    print("✅ Demo completed!")
    print("=" * 70)


if __name__ == "__main__":
    main()
