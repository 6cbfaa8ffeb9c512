"""HTTP handlers for compare operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, streaming and error handling.
"""

import logging

from fastapi import HTTPException, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from llm_compare.dto import CompareRequest, CompareResponse, ModelMetricsItem, ModelResponseItem
from llm_compare.entities import ErrorOutcome, ModelOutcome, SkippedOutcome
from llm_compare.errors import DispatchError
from llm_compare.services import DispatchService, LikeService
from llm_compare.utils import encode_events

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def outcome_to_item(outcome: ModelOutcome) -> ModelResponseItem:
    """Convert a domain outcome to its response DTO."""
    if isinstance(outcome, SkippedOutcome):
        return ModelResponseItem(
            model_id=outcome.model_id,
            error=True,
            skipped=True,
            reason=outcome.reason,
            message=f"model {outcome.reason} or marked {outcome.reason}",
        )

    if isinstance(outcome, ErrorOutcome):
        return ModelResponseItem(
            model_id=outcome.model_id,
            model_display=outcome.model_display,
            error=True,
            message=outcome.message,
            status=outcome.status,
            body=outcome.body,
        )

    result = outcome.result
    metrics = result.metrics
    return ModelResponseItem(
        model_id=result.model_id,
        model_display=result.model_display,
        text=result.text,
        metrics=ModelMetricsItem(time_ms=metrics.time_ms, length=metrics.length),
        raw=result.raw,
        cached=outcome.cached,
    )


class CompareHandler:
    """HTTP handlers for compare operations.

    This handler delegates business logic to DispatchService and
    LikeService and handles HTTP-specific concerns like:
    - Converting outcomes to DTOs
    - Rendering the event stream
    - Error handling and responses
    """

    def __init__(self, dispatch_service: DispatchService, like_service: LikeService) -> None:
        """Initialize the compare handler.

        Args:
            dispatch_service: Fan-out service (required).
            like_service: Recommendation source (required).
        """
        self._dispatch = dispatch_service
        self._likes = like_service

    async def compare(self, request: CompareRequest) -> CompareResponse:
        """Handle POST /api/compare requests.

        Args:
            request: The compare request DTO

        Returns:
            CompareResponse with one item per processed model

        Raises:
            HTTPException: If a failure escaped per-model isolation
        """
        try:
            outcomes = await self._dispatch.gather(request.query, request.model_ids)
        except DispatchError as e:
            logger.exception("Compare failed")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to compare models: {e}",
            ) from e

        return CompareResponse(
            responses=[outcome_to_item(outcome) for outcome in outcomes],
            recommended=await run_in_threadpool(self._likes.recommend, request.query, outcomes),
        )

    def stream(self, request: CompareRequest) -> StreamingResponse:
        """Handle POST /api/stream requests.

        Args:
            request: The compare request DTO

        Returns:
            StreamingResponse carrying server-sent events
        """
        events = self._dispatch.stream(request.query, request.model_ids)
        return StreamingResponse(
            encode_events(events),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )
