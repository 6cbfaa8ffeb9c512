"""HTTP handlers for like operations."""

from fastapi import HTTPException, status
from fastapi.concurrency import run_in_threadpool

from llm_compare.dto import LikeAckResponse, LikeCountItem, LikeRequest, LikesResponse
from llm_compare.services import LikeService


class LikesHandler:
    """HTTP handlers for recording and reading likes."""

    def __init__(self, like_service: LikeService) -> None:
        self._likes = like_service

    async def add_like(self, request: LikeRequest) -> LikeAckResponse:
        """Handle POST /api/likes requests."""
        try:
            await run_in_threadpool(self._likes.add_like, request.query, request.model_id)
        except OSError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to store like: {e}",
            ) from e
        return LikeAckResponse(ok=True)

    async def get_likes(self, query: str) -> LikesResponse:
        """Handle GET /api/likes?query= requests."""
        rows = await run_in_threadpool(self._likes.tally, query)
        return LikesResponse(
            likes=[LikeCountItem(model_id=row.model_id, count=row.count) for row in rows],
            recommended=rows[0].model_id if rows else None,
        )
