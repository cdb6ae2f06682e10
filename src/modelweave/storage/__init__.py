"""Storage layer: record stores and repositories."""

from modelweave.storage.base import RecordStore
from modelweave.storage.database import Database, DatabaseConfig
from modelweave.storage.memory import InMemoryRecordStore
from modelweave.storage.repositories import (
    CHAIN_GRAPHS_TABLE,
    CONVERSATIONS_TABLE,
    MESSAGES_TABLE,
    ChainGraphRepository,
    ConversationLog,
)
from modelweave.storage.sql_store import SqlRecordStore

__all__ = [
    "CHAIN_GRAPHS_TABLE",
    "CONVERSATIONS_TABLE",
    "ChainGraphRepository",
    "ConversationLog",
    "Database",
    "DatabaseConfig",
    "InMemoryRecordStore",
    "MESSAGES_TABLE",
    "RecordStore",
    "SqlRecordStore",
]
