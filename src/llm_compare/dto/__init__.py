"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import CompareRequest, LikeRequest
from .responses import (
    CompareResponse,
    LikeAckResponse,
    LikeCountItem,
    LikesResponse,
    ModelMetricsItem,
    ModelResponseItem,
)

__all__ = [
    "CompareRequest",
    "LikeRequest",
    "CompareResponse",
    "LikeAckResponse",
    "LikeCountItem",
    "LikesResponse",
    "ModelMetricsItem",
    "ModelResponseItem",
]
