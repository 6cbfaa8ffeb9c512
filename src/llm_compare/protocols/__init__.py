"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (in-memory cache -> Redis, REST -> SDK, etc.)
- Unit testing with stub invokers
- Clear separation of concerns

Usage:
    ```python
    from llm_compare.protocols import ModelInvoker, ResponseStore

    invoker: ModelInvoker = ProviderInvoker.create()  # works
    invoker: ModelInvoker = StubInvoker()              # also works
    ```
"""

from .like_store import LikeStore
from .model_invoker import ModelInvoker, ProviderClient
from .response_store import ResponseStore

__all__ = [
    "LikeStore",
    "ModelInvoker",
    "ProviderClient",
    "ResponseStore",
]
