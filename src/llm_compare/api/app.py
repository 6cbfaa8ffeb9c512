from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from llm_compare.api.dependencies import CompareHandlerDep, DispatchDep, LikesHandlerDep, lifespan
from llm_compare.config import settings
from llm_compare.dto import CompareRequest, CompareResponse, LikeAckResponse, LikeRequest, LikesResponse

app = FastAPI(
    title="LLM Compare API",
    description="Send one query to several LLM engines and compare the answers",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def invalid_input_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject malformed bodies before any dispatch work begins."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "invalid_input", "detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "method_not_allowed"},
            headers=exc.headers,
        )
    return await http_exception_handler(request, exc)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "LLM Compare API",
        "version": "0.1.0",
        "description": "Send one query to several LLM engines and compare the answers",
        "endpoints": {
            "compare": "/api/compare",
            "stream": "/api/stream",
            "likes": "/api/likes",
            "stats": "/stats",
            "health": "/healthz",
            "docs": "/docs",
        },
    }


@app.get("/healthz")
async def health() -> dict[str, bool]:
    """Health check endpoint."""
    return {"ok": True}


@app.post("/api/compare", response_model=CompareResponse, response_model_exclude_none=True)
async def compare(request: CompareRequest, handler: CompareHandlerDep) -> CompareResponse:
    """
    Run the query against up to three models and return every outcome at once.

    Args:
        request: Query and model identifiers.

    Returns:
        One response item per processed model, plus a recommendation.
    """
    return await handler.compare(request)


@app.post("/api/stream")
async def stream(request: CompareRequest, handler: CompareHandlerDep) -> StreamingResponse:
    """
    Run the query against up to three models and stream lifecycle events.

    Args:
        request: Query and model identifiers.

    Returns:
        A text/event-stream response ending with a ``done`` event.
    """
    return handler.stream(request)


@app.post("/api/likes", response_model=LikeAckResponse)
async def add_like(request: LikeRequest, handler: LikesHandlerDep) -> LikeAckResponse:
    """Record a like for one model's answer to a query."""
    return await handler.add_like(request)


@app.get("/api/likes", response_model=LikesResponse)
async def get_likes(handler: LikesHandlerDep, query: str | None = None):
    """Get like counts for a query, most liked first."""
    if not query:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "missing_query"})
    return await handler.get_likes(query)


@app.get("/stats", response_model=dict[str, Any])
async def get_stats(dispatch: DispatchDep) -> dict[str, Any]:
    """Get dispatch, cache and limiter statistics."""
    return dispatch.get_stats()


@app.delete("/api/cache", response_model=dict[str, Any])
async def clear_cache(dispatch: DispatchDep) -> dict[str, Any]:
    """Clear all cached responses."""
    count = dispatch.clear_cache()
    return {
        "success": True,
        "deleted_count": count,
        "message": "Cache cleared successfully",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "llm_compare.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
