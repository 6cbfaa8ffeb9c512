"""Provider routing implementation of ModelInvoker."""

import logging

from llm_compare.config import settings
from llm_compare.entities import InvocationFailure, InvocationOptions, InvocationResult
from llm_compare.protocols import ProviderClient

from .anthropic_client import AnthropicClient
from .openai_client import OpenAIClient

logger = logging.getLogger(__name__)


class ProviderInvoker:
    """Route ``(provider, engine)`` pairs to the matching ProviderClient.

    This class satisfies the ModelInvoker protocol through structural
    typing. An unknown provider is an ordinary failure, not an exception.

    Example:
        ```python
        invoker = ProviderInvoker.create()
        result = await invoker.invoke("openai", "gpt-4o", "hi")
        ```
    """

    def __init__(
        self,
        clients: list[ProviderClient],
        default_options: InvocationOptions | None = None,
    ) -> None:
        """Initialize the invoker.

        Args:
            clients: Provider clients, keyed by their ``name``.
            default_options: Options used when a call passes none.
        """
        self._clients = {client.name: client for client in clients}
        self._default_options = default_options or InvocationOptions(
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
        )

    @classmethod
    def create(cls) -> "ProviderInvoker":
        """Factory method wiring the OpenAI and Anthropic clients from settings."""
        return cls(clients=[OpenAIClient.create(), AnthropicClient.create()])

    @property
    def providers(self) -> list[str]:
        """Names of the supported providers."""
        return sorted(self._clients)

    async def invoke(
        self,
        provider: str,
        engine: str,
        query: str,
        options: InvocationOptions | None = None,
    ) -> InvocationResult:
        client = self._clients.get(provider)
        if client is None:
            return InvocationFailure(message=f"unsupported provider: {provider}")

        return await client.complete(engine, query, options or self._default_options)

    async def aclose(self) -> None:
        """Close every provider client."""
        for client in self._clients.values():
            await client.aclose()
