"""Handler layer for HTTP endpoints.

This layer contains the HTTP request/response handlers.
Handlers depend on services (business logic), not directly on repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .compare_handler import CompareHandler, outcome_to_item
from .likes_handler import LikesHandler

__all__ = [
    "CompareHandler",
    "LikesHandler",
    "outcome_to_item",
]
