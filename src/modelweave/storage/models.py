"""SQLAlchemy ORM models for the record store."""

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all modelweave ORM models."""

    pass


class RecordModel(Base):
    """ORM model for generic records.

    Every logical table (conversations, messages, chain_graphs, ...) shares
    this physical table; ``table_name`` partitions the rows and ``seq``
    preserves insertion order.

    Attributes:
        seq: Autoincrement primary key
        record_id: Record identifier (the record's ``id`` field)
        table_name: Logical table name (indexed)
        data: Full record as JSON
        created_at: Insertion timestamp
    """

    __tablename__ = "records"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    record_id: Mapped[str] = mapped_column(String(64), nullable=False)
    table_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    data: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (Index("idx_records_table_record", "table_name", "record_id"),)
