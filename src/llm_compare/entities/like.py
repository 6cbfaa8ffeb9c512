"""Like domain entities."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class LikeRecord:
    """A single like of one model's answer to one query.

    Attributes:
        id: Record identifier
        query: The query text the answer was given for
        model_id: The liked model identifier
        created_at: When the like was recorded (UTC)
    """

    id: str
    query: str
    model_id: str
    created_at: datetime


@dataclass(frozen=True)
class LikeCount:
    """Aggregated likes for one model on one query."""

    model_id: str
    count: int
