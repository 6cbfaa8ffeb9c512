"""OpenAI chat completions client.

Calls ``POST {base_url}/chat/completions`` with a single user message and
normalizes the reply. Upstream failures come back as InvocationFailure,
never as exceptions.
"""

import json
import logging
import time
from typing import Any

import httpx

from llm_compare.config import settings
from llm_compare.entities import InvocationFailure, InvocationOptions, InvocationResult, InvocationSuccess

from .http_utils import decode_body

logger = logging.getLogger(__name__)


class OpenAIClient:
    """OpenAI implementation of the ProviderClient protocol.

    Example:
        ```python
        client = OpenAIClient.create()
        result = await client.complete("gpt-4o", "hi", InvocationOptions())
        ```
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the OpenAI client.

        Args:
            api_key: API key. Defaults to settings.openai_api_key.
            base_url: REST base URL. Defaults to settings.openai_base_url.
            timeout: Request timeout in seconds. Defaults to settings.invocation_timeout.
            client: Preconfigured httpx client (tests pass a MockTransport client).
        """
        self._api_key = api_key if api_key is not None else settings.openai_api_key
        self._base_url = (base_url or settings.openai_base_url).rstrip("/")
        self._timeout = timeout or settings.invocation_timeout
        self._client = client

    @classmethod
    def create(cls, api_key: str | None = None, base_url: str | None = None) -> "OpenAIClient":
        """Factory method to create OpenAIClient with defaults from settings."""
        return cls(api_key=api_key, base_url=base_url)

    @property
    def name(self) -> str:
        return "openai"

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    async def complete(
        self,
        engine: str,
        query: str,
        options: InvocationOptions,
    ) -> InvocationResult:
        if not self._api_key:
            return InvocationFailure(message="OPENAI_API_KEY not set")

        payload = {
            "model": engine,
            "messages": [{"role": "user", "content": query}],
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}

        start_time = time.time()
        try:
            response = await self.client.post(
                f"{self._base_url}/chat/completions",
                json=payload,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.warning("OpenAI request failed", extra={"engine": engine, "error": str(e)})
            return InvocationFailure(message=str(e) or e.__class__.__name__)
        time_ms = int((time.time() - start_time) * 1000)

        if response.is_error:
            return InvocationFailure(
                message=f"OpenAI REST error {response.status_code}",
                status=response.status_code,
                body=decode_body(response),
                time_ms=time_ms,
            )

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("OpenAI returned a non-JSON body", extra={"engine": engine, "status": response.status_code})
            return InvocationFailure(
                message=f"OpenAI REST error {response.status_code}: invalid JSON",
                status=response.status_code,
                body=response.text,
                time_ms=time_ms,
            )
        return InvocationSuccess(text=extract_openai_text(data), time_ms=time_ms, raw=data)

    async def aclose(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def extract_openai_text(data: Any) -> str:
    """Pull the assistant text out of a chat completions payload."""
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        message = choices[0].get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if isinstance(content, str):
            return content
    output_text = data.get("output_text")
    return output_text if isinstance(output_text, str) else ""
