"""Record store interface.

The orchestration core persists conversations and saved chain graphs
through a generic append/query surface. It only relies on the fields it
writes itself, so any backend implementing this protocol can be used.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

Record = dict[str, Any]


class RecordStore(Protocol):
    """Protocol for record storage operations."""

    async def insert(self, table: str, record: Record) -> Record:
        """Append a record to a table.

        Args:
            table: Table name
            record: JSON-serializable record

        Returns:
            Stored record, with ``id`` and ``created_at`` assigned when absent
        """
        ...

    async def select(
        self, table: str, filter: Optional[Record] = None, limit: Optional[int] = None
    ) -> list[Record]:
        """Query records of a table.

        Args:
            table: Table name
            filter: Top-level field values that must match exactly
            limit: Maximum number of records to return

        Returns:
            Matching records in insertion order
        """
        ...


def prepare_record(record: Record) -> Record:
    """Copy a record and assign ``id`` and ``created_at`` if missing."""
    prepared = dict(record)
    prepared.setdefault("id", str(uuid.uuid4()))
    prepared.setdefault("created_at", datetime.now(timezone.utc).isoformat())
    return prepared


def matches(record: Record, filter: Optional[Record]) -> bool:
    """Check a record against an equality filter."""
    if not filter:
        return True
    return all(record.get(key) == value for key, value in filter.items())
