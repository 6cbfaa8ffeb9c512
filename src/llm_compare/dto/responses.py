"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ModelMetricsItem(BaseModel):
    """Timing and size of one response."""

    model_config = ConfigDict(populate_by_name=True)

    time_ms: int = Field(..., alias="timeMs", description="Upstream duration in milliseconds", ge=0)
    length: int = Field(..., description="Length of the response text", ge=0)


class ModelResponseItem(BaseModel):
    """Outcome for one model in a compare response.

    Successes carry text and metrics; errors and skips carry ``error``
    and ``message``. Skips additionally set ``skipped`` and ``reason``.
    """

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model_id: str = Field(..., alias="modelId")
    model_display: str | None = Field(None, alias="modelDisplay")
    text: str | None = None
    metrics: ModelMetricsItem | None = None
    raw: Any = None
    cached: bool | None = None
    error: bool | None = None
    message: str | None = None
    status: int | None = None
    body: Any = None
    skipped: bool | None = None
    reason: str | None = None


class CompareResponse(BaseModel):
    """Response DTO for the gathered compare operation."""

    responses: list[ModelResponseItem] = Field(
        default_factory=list,
        description="One item per processed model identifier, in request order",
    )
    recommended: str | None = Field(None, description="Recommended model identifier")


class LikeCountItem(BaseModel):
    """Likes for one model."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model_id: str = Field(..., alias="modelId")
    count: int = Field(..., ge=1)


class LikesResponse(BaseModel):
    """Response DTO for like counts of a query."""

    likes: list[LikeCountItem] = Field(default_factory=list, description="Sorted by count, highest first")
    recommended: str | None = Field(None, description="Most liked model identifier")


class LikeAckResponse(BaseModel):
    """Response DTO for a recorded like."""

    ok: bool = Field(..., description="Whether the like was stored")
