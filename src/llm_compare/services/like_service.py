"""Like tracking and recommendation."""

import logging
import uuid
from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timezone

from llm_compare.entities import LikeCount, LikeRecord, ModelOutcome, SuccessOutcome
from llm_compare.protocols import LikeStore

logger = logging.getLogger(__name__)

LENGTH_WEIGHT = 0.6
SPEED_WEIGHT = 0.4


def score_outcomes(outcomes: Sequence[ModelOutcome]) -> str | None:
    """Pick the model whose answer looks best without any likes.

    Successful outcomes are scored on relative length (longest = 1) and
    relative speed (fastest = 1). When nothing succeeded the first
    outcome's model wins; ties go to the earliest outcome.

    Args:
        outcomes: Outcomes of one request

    Returns:
        The recommended model id, or None for no outcomes
    """
    if not outcomes:
        return None

    successes = [outcome for outcome in outcomes if isinstance(outcome, SuccessOutcome)]
    if not successes:
        return outcomes[0].model_id

    max_length = max(outcome.result.metrics.length for outcome in successes) or 1
    min_time = min(outcome.result.metrics.time_ms for outcome in successes)

    def score(outcome: SuccessOutcome) -> float:
        metrics = outcome.result.metrics
        return LENGTH_WEIGHT * metrics.length / max_length + SPEED_WEIGHT * min_time / (metrics.time_ms or 1)

    return max(successes, key=score).model_id


class LikeService:
    """Record likes per query and derive a recommendation from them.

    Example:
        ```python
        likes = LikeService(store=InMemoryLikeRepository())
        likes.add_like("hi", "openai:gpt-4o")
        likes.tally("hi")       # [LikeCount(model_id="openai:gpt-4o", count=1)]
        likes.recommend("hi")   # "openai:gpt-4o"
        ```
    """

    def __init__(self, store: LikeStore) -> None:
        """Initialize the like service.

        Args:
            store: Like record storage (required).
        """
        self._store = store

    def add_like(self, query: str, model_id: str) -> LikeRecord:
        """Append a like for ``model_id`` on ``query``."""
        record = LikeRecord(
            id=uuid.uuid4().hex,
            query=query,
            model_id=model_id,
            created_at=datetime.now(timezone.utc),
        )
        self._store.add(record)
        logger.info("Like recorded", extra={"model_id": model_id})
        return record

    def tally(self, query: str) -> list[LikeCount]:
        """Count likes per model for ``query``, most liked first."""
        counts = Counter(record.model_id for record in self._store.list_by_query(query))
        rows = [LikeCount(model_id=model_id, count=count) for model_id, count in counts.items()]
        rows.sort(key=lambda row: (-row.count, row.model_id))
        return rows

    def recommend(self, query: str, outcomes: Sequence[ModelOutcome] = ()) -> str | None:
        """Recommend one model for ``query``.

        The most liked model wins, restricted to the models present in
        ``outcomes`` when any are given. Without a usable like, falls back
        to ``score_outcomes``.
        """
        candidates = {outcome.model_id for outcome in outcomes}
        for row in self.tally(query):
            if not candidates or row.model_id in candidates:
                return row.model_id
        return score_outcomes(outcomes)

    @property
    def store(self) -> LikeStore:
        """Get the underlying store (for testing)."""
        return self._store
