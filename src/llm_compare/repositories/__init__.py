"""Repository layer for data access.

This layer abstracts external dependencies (provider REST APIs, the
response cache, like storage) behind protocol-based interfaces. This enables:
- Easy swapping of implementations (in-memory -> Redis, REST -> SDK, etc.)
- Unit testing with stub implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from llm_compare.protocols import LikeStore, ModelInvoker, ProviderClient, ResponseStore

from .anthropic_client import AnthropicClient
from .like_repository import InMemoryLikeRepository, JsonFileLikeRepository
from .memory_cache import InMemoryResponseCache, cache_key
from .openai_client import OpenAIClient
from .provider_invoker import ProviderInvoker

__all__ = [
    "AnthropicClient",
    "InMemoryLikeRepository",
    "InMemoryResponseCache",
    "JsonFileLikeRepository",
    "LikeStore",
    "ModelInvoker",
    "OpenAIClient",
    "ProviderClient",
    "ProviderInvoker",
    "ResponseStore",
    "cache_key",
]
