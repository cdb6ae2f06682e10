"""In-memory record store.

Suitable for development, testing and single-instance deployments.
"""

import asyncio
import copy
from typing import Optional

from modelweave.storage.base import Record, matches, prepare_record


class InMemoryRecordStore:
    """Dictionary-backed implementation of RecordStore.

    Attributes:
        _tables: Mapping of table name to records in insertion order
        _lock: Asyncio lock for safe concurrent access
    """

    def __init__(self) -> None:
        self._tables: dict[str, list[Record]] = {}
        self._lock = asyncio.Lock()

    async def insert(self, table: str, record: Record) -> Record:
        stored = prepare_record(record)
        async with self._lock:
            self._tables.setdefault(table, []).append(stored)
        return copy.deepcopy(stored)

    async def select(
        self, table: str, filter: Optional[Record] = None, limit: Optional[int] = None
    ) -> list[Record]:
        async with self._lock:
            rows = [copy.deepcopy(r) for r in self._tables.get(table, []) if matches(r, filter)]
        return rows if limit is None else rows[:limit]

    async def count(self, table: str) -> int:
        """Number of records in a table."""
        async with self._lock:
            return len(self._tables.get(table, []))

    async def close(self) -> None:
        """Nothing to release; present for interface parity with the SQL store."""
