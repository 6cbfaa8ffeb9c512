"""Anthropic messages client.

Calls ``POST {base_url}/messages`` with the ``x-api-key`` and
``anthropic-version`` headers and normalizes the reply.
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


class AnthropicClient:
    """Anthropic implementation of the ProviderClient protocol."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        version: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Anthropic client.

        Args:
            api_key: API key. Defaults to settings.anthropic_api_key.
            base_url: REST base URL. Defaults to settings.anthropic_base_url.
            version: ``anthropic-version`` header. Defaults to settings.
            timeout: Request timeout in seconds. Defaults to settings.invocation_timeout.
            client: Preconfigured httpx client.
        """
        self._api_key = api_key if api_key is not None else settings.anthropic_api_key
        self._base_url = (base_url or settings.anthropic_base_url).rstrip("/")
        self._version = version or settings.anthropic_version
        self._timeout = timeout or settings.invocation_timeout
        self._client = client

    @classmethod
    def create(cls, api_key: str | None = None, base_url: str | None = None) -> "AnthropicClient":
        """Factory method to create AnthropicClient with defaults from settings."""
        return cls(api_key=api_key, base_url=base_url)

    @property
    def name(self) -> str:
        return "anthropic"

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
            return InvocationFailure(message="ANTHROPIC_API_KEY not set")

        payload = {
            "model": engine,
            "messages": [{"role": "user", "content": query}],
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
        }
        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": self._version,
        }

        start_time = time.time()
        try:
            response = await self.client.post(f"{self._base_url}/messages", json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Anthropic request failed", extra={"engine": engine, "error": str(e)})
            return InvocationFailure(message=str(e) or e.__class__.__name__)
        time_ms = int((time.time() - start_time) * 1000)

        if response.is_error:
            return InvocationFailure(
                message=f"Anthropic REST error {response.status_code}",
                status=response.status_code,
                body=decode_body(response),
                time_ms=time_ms,
            )

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Anthropic returned a non-JSON body", extra={"engine": engine, "status": response.status_code})
            return InvocationFailure(
                message=f"Anthropic REST error {response.status_code}: invalid JSON",
                status=response.status_code,
                body=response.text,
                time_ms=time_ms,
            )
        return InvocationSuccess(text=extract_anthropic_text(data), time_ms=time_ms, raw=data)

    async def aclose(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _join_blocks(blocks: list[Any]) -> str:
    parts = []
    for block in blocks:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and isinstance(block.get("text"), str):
            parts.append(block["text"])
    return "".join(parts)


def extract_anthropic_text(data: Any) -> str:
    """Extract text from the response shapes the Anthropic APIs have used.

    Handles, in order: a bare string, the legacy ``completion`` field,
    ``message.content`` as string or blocks, and the messages API
    ``content`` block list (text blocks only).
    """
    if not data:
        return ""
    if isinstance(data, str):
        return data
    if not isinstance(data, dict):
        return ""

    if isinstance(data.get("completion"), str):
        return data["completion"]

    message = data.get("message")
    if isinstance(message, dict) and message.get("content"):
        content = message["content"]
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            return _join_blocks(content)

    content = data.get("content")
    if isinstance(content, list):
        return "".join(
            block["text"]
            for block in content
            if isinstance(block, dict) and block.get("type") == "text" and isinstance(block.get("text"), str)
        )

    if isinstance(data.get("output"), str):
        return data["output"]
    return ""
