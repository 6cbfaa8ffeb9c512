"""Utility modules for the compare service."""

from .sse import encode_events, format_event

__all__ = [
    "encode_events",
    "format_event",
]
