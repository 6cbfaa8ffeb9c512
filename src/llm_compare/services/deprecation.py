"""Deprecated model detection."""

import re
from collections.abc import Iterable

from llm_compare.config import settings

DEPRECATION_PATTERN = re.compile(
    r"deprecated|deprecat|end[\s-]?of[\s-]?life|eol|retired|obsolete",
    re.IGNORECASE,
)


class DeprecationFilter:
    """Decide whether a model identifier must be skipped before invocation.

    A model is deprecated when it is listed verbatim in the deny-set, or
    when its identifier carries a deprecation marker such as
    ``-deprecated``, ``eol`` or ``retired``.

    Example:
        ```python
        deprecation = DeprecationFilter.from_csv("anthropic:claude-2.1")
        deprecation.is_deprecated("anthropic:claude-2.1")        # True
        deprecation.is_deprecated("openai:gpt-4-obsolete")       # True
        deprecation.is_deprecated("openai:gpt-4o")               # False
        ```
    """

    def __init__(self, deny: Iterable[str] | None = None) -> None:
        """Initialize the filter.

        Args:
            deny: Exact identifiers to skip. Defaults to DEPRECATED_MODELS.
        """
        self._deny = frozenset(deny) if deny is not None else settings.deprecated_model_ids

    @classmethod
    def from_csv(cls, raw: str) -> "DeprecationFilter":
        """Build a filter from a comma-separated identifier list."""
        return cls(part.strip() for part in raw.split(",") if part.strip())

    @property
    def deny(self) -> frozenset[str]:
        return self._deny

    def is_deprecated(self, model_id: str) -> bool:
        if model_id in self._deny:
            return True
        return DEPRECATION_PATTERN.search(model_id) is not None
