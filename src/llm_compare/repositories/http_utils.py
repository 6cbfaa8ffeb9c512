"""Shared helpers for provider REST clients."""

import json
from typing import Any

import httpx


def decode_body(response: httpx.Response) -> Any:
    """Decode an error response body as JSON, falling back to text."""
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text
