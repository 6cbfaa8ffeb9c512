"""LLM Compare - one query, several models, gathered or streamed.

This package provides a layered architecture for multi-model dispatch:

Layers:
    - protocols: Interface contracts (ModelInvoker, ProviderClient, ResponseStore, LikeStore)
    - repositories: Provider REST clients, response cache, like storage
    - services: Dispatch engine, concurrency limiter, completion barrier, likes
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from llm_compare.repositories import ProviderInvoker
    from llm_compare.services import DispatchService

    dispatch = DispatchService.create(invoker=ProviderInvoker.create())
    outcomes = await dispatch.gather("hi", ["openai:gpt-4o"])
    ```

For HTTP API:
    ```python
    from llm_compare.api.app import app
    ```
"""

from llm_compare.config import get_settings, settings
from llm_compare.dto import CompareRequest, LikeRequest
from llm_compare.entities import ErrorOutcome, ModelEvent, ModelResult, SkippedOutcome, SuccessOutcome
from llm_compare.handlers import CompareHandler, LikesHandler
from llm_compare.protocols import LikeStore, ModelInvoker, ProviderClient, ResponseStore
from llm_compare.repositories import InMemoryResponseCache, ProviderInvoker
from llm_compare.services import ConcurrencyLimiter, DeprecationFilter, DispatchService, LikeService

__all__ = [
    # Configuration
    "settings",
    "get_settings",
    # Protocols (interfaces)
    "LikeStore",
    "ModelInvoker",
    "ProviderClient",
    "ResponseStore",
    # Services (business logic)
    "ConcurrencyLimiter",
    "DeprecationFilter",
    "DispatchService",
    "LikeService",
    # Handlers (HTTP)
    "CompareHandler",
    "LikesHandler",
    # Repositories (data access)
    "InMemoryResponseCache",
    "ProviderInvoker",
    # Entities (domain models)
    "ErrorOutcome",
    "ModelEvent",
    "ModelResult",
    "SkippedOutcome",
    "SuccessOutcome",
    # DTOs (API contracts)
    "CompareRequest",
    "LikeRequest",
]
