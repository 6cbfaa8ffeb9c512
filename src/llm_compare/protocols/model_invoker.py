"""Model invocation protocols.

Two levels of contract:
- ProviderClient talks to one upstream provider (OpenAI, Anthropic, ...)
- ModelInvoker accepts any ``(provider, engine)`` pair and routes it

Neither raises for ordinary upstream failures: those come back as an
InvocationFailure. Only unexpected exceptions propagate.
"""

from typing import Protocol, runtime_checkable

from llm_compare.entities import InvocationOptions, InvocationResult


@runtime_checkable
class ProviderClient(Protocol):
    """Protocol for a single upstream provider."""

    @property
    def name(self) -> str:
        """Return the provider name used in model identifiers.

        Returns:
            Provider name (e.g., "openai")
        """
        ...

    async def complete(
        self,
        engine: str,
        query: str,
        options: InvocationOptions,
    ) -> InvocationResult:
        """Send one user message to ``engine`` and normalize the reply.

        Args:
            engine: Upstream model name
            query: The user text
            options: Generation options

        Returns:
            InvocationSuccess or InvocationFailure
        """
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...


@runtime_checkable
class ModelInvoker(Protocol):
    """Protocol for the model invocation collaborator used by dispatch."""

    async def invoke(
        self,
        provider: str,
        engine: str,
        query: str,
        options: InvocationOptions | None = None,
    ) -> InvocationResult:
        """Invoke ``provider:engine`` with ``query``.

        Args:
            provider: Provider name from the model identifier
            engine: Engine name from the model identifier
            query: The user text
            options: Generation options; implementation defaults when None

        Returns:
            InvocationSuccess or InvocationFailure
        """
        ...
