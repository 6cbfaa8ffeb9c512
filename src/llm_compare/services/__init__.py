"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from llm_compare.repositories import ProviderInvoker
    from llm_compare.services import DispatchService

    # Using factory method (recommended)
    dispatch = DispatchService.create(invoker=ProviderInvoker.create())

    # Or manual creation
    dispatch = DispatchService(
        invoker=invoker,
        cache=InMemoryResponseCache.create(),
        limiter=ConcurrencyLimiter(max_concurrency=3),
        deprecation_filter=DeprecationFilter(),
    )
    ```
"""

from .barrier import CompletionBarrier
from .deprecation import DeprecationFilter
from .dispatch_service import DispatchService
from .like_service import LikeService, score_outcomes
from .limiter import ConcurrencyLimiter

__all__ = [
    "CompletionBarrier",
    "ConcurrencyLimiter",
    "DeprecationFilter",
    "DispatchService",
    "LikeService",
    "score_outcomes",
]
