"""Like storage protocol."""

from typing import Protocol, runtime_checkable

from llm_compare.entities import LikeRecord


@runtime_checkable
class LikeStore(Protocol):
    """Protocol for like record storage."""

    def add(self, record: LikeRecord) -> None:
        """Append a like record.

        Args:
            record: The record to store
        """
        ...

    def list_by_query(self, query: str) -> list[LikeRecord]:
        """Return every record for an exact query match.

        Args:
            query: The query text

        Returns:
            Records in insertion order
        """
        ...

    def count_all(self) -> int:
        """Count all stored records."""
        ...
