"""SQL-backed record store."""

import logging
from typing import Optional

from sqlalchemy import select

from modelweave.storage.base import Record, matches, prepare_record
from modelweave.storage.database import Database, DatabaseConfig
from modelweave.storage.models import RecordModel

logger = logging.getLogger(__name__)


class SqlRecordStore:
    """RecordStore implementation on top of SQLAlchemy async.

    Records are stored as JSON in one ``records`` table. Equality filters
    are applied after loading a table's rows, which keeps the store
    independent of the JSON operators of a particular database.

    Example:
        >>> store = SqlRecordStore.from_url("sqlite+aiosqlite:///./modelweave.db")
        >>> await store.create_tables()
        >>> await store.insert("chain_graphs", {"name": "summarize", "graph": {...}})
    """

    def __init__(self, database: Database):
        """Initialize store with a database.

        Args:
            database: Database providing engine and sessions
        """
        self.database = database

    @classmethod
    def from_url(cls, url: str, echo: bool = False) -> "SqlRecordStore":
        return cls(Database(DatabaseConfig(url=url, echo=echo)))

    async def create_tables(self) -> None:
        await self.database.create_tables()

    async def insert(self, table: str, record: Record) -> Record:
        stored = prepare_record(record)
        async with self.database.session() as session:
            session.add(
                RecordModel(record_id=str(stored["id"]), table_name=table, data=stored)
            )
            await session.flush()
        logger.debug("Inserted record %s into %s", stored["id"], table)
        return stored

    async def select(
        self, table: str, filter: Optional[Record] = None, limit: Optional[int] = None
    ) -> list[Record]:
        stmt = (
            select(RecordModel)
            .where(RecordModel.table_name == table)
            .order_by(RecordModel.seq)
        )
        async with self.database.session() as session:
            result = await session.execute(stmt)
            rows = [dict(model.data) for model in result.scalars().all()]

        matched = [row for row in rows if matches(row, filter)]
        return matched if limit is None else matched[:limit]

    async def close(self) -> None:
        await self.database.close()
