"""Per-model outcomes.

Exactly one outcome is produced for every model identifier selected
for a request: it was skipped by policy, it failed, or it succeeded.
"""

from dataclasses import dataclass
from typing import Any

from .model_result import ModelResult


def parse_model_id(model_id: str) -> tuple[str, str]:
    """Split ``provider:engine`` on the first colon.

    Engines may themselves contain colons (fine-tuned model names do),
    so only the first separator is significant.

    Args:
        model_id: The identifier to split

    Returns:
        Tuple (provider, engine); engine is "" when the separator is missing
    """
    provider, _, engine = model_id.partition(":")
    return provider, engine


@dataclass(frozen=True)
class SkippedOutcome:
    """The model was not invoked because of a policy decision."""

    model_id: str
    reason: str


@dataclass(frozen=True)
class ErrorOutcome:
    """The model failed; scoped to this model only.

    Attributes:
        model_id: The requested identifier
        message: Failure description
        status: Upstream HTTP status, if any
        body: Upstream response body, if any
        model_display: Display name when the identifier could be parsed
    """

    model_id: str
    message: str
    status: int | None = None
    body: Any = None
    model_display: str | None = None


@dataclass(frozen=True)
class SuccessOutcome:
    """The model produced a result, freshly or from the cache."""

    result: ModelResult
    cached: bool = False

    @property
    def model_id(self) -> str:
        return self.result.model_id


ModelOutcome = SkippedOutcome | ErrorOutcome | SuccessOutcome
