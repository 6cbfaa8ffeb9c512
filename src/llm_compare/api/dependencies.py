"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - The response cache and concurrency limiter are process-wide: one
      instance each, shared by every request served by this app
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from llm_compare.config import settings
from llm_compare.handlers import CompareHandler, LikesHandler
from llm_compare.repositories import (
    InMemoryLikeRepository,
    InMemoryResponseCache,
    JsonFileLikeRepository,
    ProviderInvoker,
)
from llm_compare.services import ConcurrencyLimiter, DeprecationFilter, DispatchService, LikeService

logger = logging.getLogger(__name__)


def _from_state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not initialized. Check lifespan setup.")
    return value


def get_dispatch_service(request: Request) -> DispatchService:
    """Dependency injection for DispatchService from app.state.

    Raises:
        RuntimeError: If service is not initialized
    """
    return _from_state(request, "dispatch_service")


def get_compare_handler(request: Request) -> CompareHandler:
    """Dependency injection for CompareHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    return _from_state(request, "compare_handler")


def get_likes_handler(request: Request) -> LikesHandler:
    """Dependency injection for LikesHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    return _from_state(request, "likes_handler")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Repositories (provider clients, response cache, like store)
    2. Services (dispatch, likes)
    3. Handlers (HTTP endpoints)

    Cleanup:
        Closes provider HTTP clients and removes everything from app.state
    """
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Never log key values, only whether they are present
    logger.info("OPENAI_API_KEY present: %s", bool(settings.openai_api_key))
    logger.info("ANTHROPIC_API_KEY present: %s", bool(settings.anthropic_api_key))

    invoker = ProviderInvoker.create()
    dispatch_service = DispatchService(
        invoker=invoker,
        cache=InMemoryResponseCache.create(),
        limiter=ConcurrencyLimiter(max_concurrency=settings.max_concurrency),
        deprecation_filter=DeprecationFilter(),
    )

    if settings.likes_file:
        like_store = JsonFileLikeRepository(settings.likes_file)
    else:
        like_store = InMemoryLikeRepository()
    like_service = LikeService(store=like_store)

    app.state.invoker = invoker
    app.state.dispatch_service = dispatch_service
    app.state.like_service = like_service
    app.state.compare_handler = CompareHandler(dispatch_service=dispatch_service, like_service=like_service)
    app.state.likes_handler = LikesHandler(like_service=like_service)

    logger.info(
        "Compare service initialized",
        extra={
            "providers": invoker.providers,
            "max_concurrency": settings.max_concurrency,
            "cache_ttl": settings.cache_ttl,
        },
    )

    yield

    await invoker.aclose()
    del app.state.likes_handler
    del app.state.compare_handler
    del app.state.like_service
    del app.state.dispatch_service
    del app.state.invoker
    logger.info("Compare service shut down")


# Type aliases for cleaner dependency injection
CompareHandlerDep = Annotated[CompareHandler, Depends(get_compare_handler)]
LikesHandlerDep = Annotated[LikesHandler, Depends(get_likes_handler)]
DispatchDep = Annotated[DispatchService, Depends(get_dispatch_service)]
