"""Stream lifecycle events.

Per model the stream carries either a single ``model-skipped`` event, or
``model-start`` followed by ``model-chunk`` events and ``model-end``, or
``model-start`` followed by ``model-error``. A single ``done`` event closes
the stream once every model has reached a terminal event.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from .model_result import ModelMetrics

MODEL_START = "model-start"
MODEL_CHUNK = "model-chunk"
MODEL_END = "model-end"
MODEL_ERROR = "model-error"
MODEL_SKIPPED = "model-skipped"
DONE = "done"


def chunk_text(text: str, size: int) -> Iterator[str]:
    """Yield consecutive ``size``-character slices of ``text``.

    Empty text yields nothing.
    """
    if size < 1:
        raise ValueError("chunk size must be at least 1")
    for start in range(0, len(text), size):
        yield text[start : start + size]


@dataclass(frozen=True)
class ModelEvent:
    """A named event with a JSON-serializable payload."""

    name: str
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def model_id(self) -> str | None:
        return self.data.get("modelId")

    @property
    def is_terminal(self) -> bool:
        """True for the event that closes the whole stream."""
        return self.name == DONE

    @classmethod
    def start(cls, model_id: str, model_display: str, cached: bool) -> "ModelEvent":
        return cls(MODEL_START, {"modelId": model_id, "modelDisplay": model_display, "cached": cached})

    @classmethod
    def chunk(cls, model_id: str, text: str) -> "ModelEvent":
        return cls(MODEL_CHUNK, {"modelId": model_id, "text": text})

    @classmethod
    def end(cls, model_id: str, metrics: ModelMetrics) -> "ModelEvent":
        return cls(MODEL_END, {"modelId": model_id, "metrics": metrics.to_dict()})

    @classmethod
    def error(
        cls,
        model_id: str | None,
        message: str,
        status: int | None = None,
        body: Any = None,
    ) -> "ModelEvent":
        data: dict[str, Any] = {"message": message}
        if model_id is not None:
            data["modelId"] = model_id
        if status is not None:
            data["status"] = status
        if body is not None:
            data["body"] = body
        return cls(MODEL_ERROR, data)

    @classmethod
    def skipped(cls, model_id: str, reason: str) -> "ModelEvent":
        return cls(MODEL_SKIPPED, {"modelId": model_id, "reason": reason})

    @classmethod
    def done(cls, ok: bool = True) -> "ModelEvent":
        return cls(DONE, {"ok": ok})
