"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.

Entities should have:
- No Pydantic validation
- No external dependencies
- Pure domain logic only
"""

from .dispatch_stats import DispatchStats
from .events import ModelEvent, chunk_text
from .invocation import InvocationFailure, InvocationOptions, InvocationResult, InvocationSuccess
from .like import LikeCount, LikeRecord
from .model_result import ModelMetrics, ModelResult
from .outcome import ErrorOutcome, ModelOutcome, SkippedOutcome, SuccessOutcome, parse_model_id

__all__ = [
    "DispatchStats",
    "ErrorOutcome",
    "InvocationFailure",
    "InvocationOptions",
    "InvocationResult",
    "InvocationSuccess",
    "LikeCount",
    "LikeRecord",
    "ModelEvent",
    "ModelMetrics",
    "ModelOutcome",
    "ModelResult",
    "SkippedOutcome",
    "SuccessOutcome",
    "chunk_text",
    "parse_model_id",
]
