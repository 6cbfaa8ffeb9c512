"""Request DTOs for API endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class CompareRequest(BaseModel):
    """Request DTO for compare and stream.

    Only the first identifiers up to the per-request bound are processed;
    the rest are dropped without error.
    """

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    query: str = Field(..., description="The query sent to every model", min_length=1)
    model_ids: list[str] = Field(
        ...,
        alias="modelIds",
        description="Model identifiers in provider:engine form",
        min_length=1,
    )


class LikeRequest(BaseModel):
    """Request DTO for recording a like."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    query: str = Field(..., description="The query the liked answer was given for", min_length=1)
    model_id: str = Field(..., alias="modelId", description="The liked model identifier", min_length=1)
