"""
Record Snapshot Models
Drafts and finalized saves share one table; the account's draft pointer
decides which is which.
"""

import uuid
from datetime import datetime, UTC
from sqlalchemy import Column, Integer, Text, String, DateTime, ForeignKey, Uuid, JSON, Index
from sqlalchemy.dialects.postgresql import JSONB

from app.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Snapshot(Base):
    """Timestamped set of row data (pbu_snapshot)"""
    __tablename__ = "pbu_snapshot"
    __table_args__ = (
        Index("ix_pbu_snapshot_account_created", "account_id", "created_at"),
    )

    snapshot_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    account_id = Column(
        Integer,
        ForeignKey("pbu_account.account_id", ondelete="CASCADE"),
        nullable=False,
    )
    highlight_rows = Column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=list,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self):
        return f"<Snapshot(snapshot_id='{self.snapshot_id}', account_id={self.account_id})>"


class RowEntry(Base):
    """One field_key/field_value fact of a snapshot (pbu_row_entry)"""
    __tablename__ = "pbu_row_entry"
    __table_args__ = (
        Index("ix_pbu_row_entry_snapshot_position", "snapshot_id", "position"),
    )

    entry_id = Column(Integer, primary_key=True, autoincrement=True)
    snapshot_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("pbu_snapshot.snapshot_id", ondelete="CASCADE"),
        nullable=False,
    )
    position = Column(Integer, nullable=False)  # order as supplied by the caller
    field_key = Column(String(32), nullable=False)
    field_value = Column(Text, nullable=False, default="")
