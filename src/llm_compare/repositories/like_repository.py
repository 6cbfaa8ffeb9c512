"""Like storage implementations.

Both satisfy the LikeStore protocol. The JSON file variant keeps every
record in one JSON array and rewrites the file on each append.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from llm_compare.entities import LikeRecord

logger = logging.getLogger(__name__)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp, including the ``Z`` suffix JavaScript writes.

    Naive values are taken as UTC.

    Raises:
        ValueError: If the value is not an ISO 8601 timestamp
        TypeError: If the value is not a string
    """
    if isinstance(value, str) and value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class InMemoryLikeRepository:
    """Ephemeral per-process like storage."""

    def __init__(self) -> None:
        self._records: list[LikeRecord] = []

    def add(self, record: LikeRecord) -> None:
        self._records.append(record)

    def list_by_query(self, query: str) -> list[LikeRecord]:
        return [record for record in self._records if record.query == query]

    def count_all(self) -> int:
        return len(self._records)


class JsonFileLikeRepository:
    """Like storage backed by a JSON array file."""

    def __init__(self, path: str | Path) -> None:
        """Initialize the repository, creating the file when missing.

        Args:
            path: Location of the JSON file
        """
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        if not self._path.exists():
            self._path.write_text("[]", encoding="utf-8")

    def _read(self) -> list[dict]:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Unreadable likes file, starting empty", extra={"path": str(self._path), "error": str(e)})
            return []
        return data if isinstance(data, list) else []

    def _write(self, rows: list[dict]) -> None:
        self._path.write_text(json.dumps(rows, indent=2), encoding="utf-8")

    def add(self, record: LikeRecord) -> None:
        rows = self._read()
        rows.append(
            {
                "id": record.id,
                "query": record.query,
                "modelId": record.model_id,
                "createdAt": record.created_at.isoformat(),
            }
        )
        self._write(rows)

    def list_by_query(self, query: str) -> list[LikeRecord]:
        records = []
        for row in self._read():
            if not isinstance(row, dict) or row.get("query") != query:
                continue
            try:
                records.append(
                    LikeRecord(
                        id=str(row.get("id", "")),
                        query=query,
                        model_id=str(row["modelId"]),
                        created_at=parse_timestamp(row["createdAt"]),
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed like row", extra={"path": str(self._path), "error": str(e)})
        return records

    def count_all(self) -> int:
        return len(self._read())
