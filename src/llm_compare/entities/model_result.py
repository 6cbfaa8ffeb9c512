"""Model result domain entity."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ModelMetrics:
    """Timing and size of one model response."""

    time_ms: int
    length: int

    def to_dict(self) -> dict[str, int]:
        return {"timeMs": self.time_ms, "length": self.length}


@dataclass(frozen=True)
class ModelResult:
    """A successful response from one model.

    This is the value stored in the response cache and replayed on hits.

    Attributes:
        model_id: The requested identifier (``provider:engine``)
        model_display: Display name, ``provider:engine``
        text: The generated text
        time_ms: Upstream duration in milliseconds
        raw: The provider payload
    """

    model_id: str
    model_display: str
    text: str
    time_ms: int = 0
    raw: Any = None

    @property
    def metrics(self) -> ModelMetrics:
        """Metrics for this result; ``length`` always tracks ``text``."""
        return ModelMetrics(time_ms=self.time_ms, length=len(self.text))
