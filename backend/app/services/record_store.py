"""
Record Store

Transactional access to accounts, snapshots and row entries. One instance
wraps one AsyncSession (one request); every mutating service call runs inside
`transaction()` so a failure anywhere leaves nothing behind.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import AsyncIterator, Optional, Sequence
from uuid import UUID

from sqlalchemy import select, insert, update, delete, extract, Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import StorageFailure
from app.core.logging import get_logger, LogEvents
from app.models.account import Account
from app.models.snapshot import Snapshot, RowEntry
from app.services.row_codec import FieldEntry

logger = get_logger("RecordStore")


@dataclass
class SnapshotSummary:
    """Snapshot listing item"""
    snapshot_id: UUID
    created_at: datetime
    is_draft: bool = False


@dataclass
class SnapshotData:
    """Full snapshot contents"""
    snapshot_id: UUID
    created_at: datetime
    entries: list[FieldEntry] = field(default_factory=list)
    highlight_rows: list[int] = field(default_factory=list)
    is_draft: bool = False


class RecordStore:
    """SQLAlchemy-backed store for one session"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # Transactions
    # =========================================================================

    @asynccontextmanager
    async def transaction(self, operation: str) -> AsyncIterator["RecordStore"]:
        """
        All-or-nothing unit of work.

        SQLAlchemy errors are rolled back and re-raised as StorageFailure;
        any other exception is rolled back and propagated unchanged.
        """
        try:
            yield self
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(LogEvents.STORAGE_FAILURE, operation=operation, error=str(e))
            raise StorageFailure(
                f"Error during {operation}; no changes were saved.",
                operation=operation,
            ) from e
        except Exception:
            await self.db.rollback()
            raise

    @asynccontextmanager
    async def reading(self, operation: str) -> AsyncIterator["RecordStore"]:
        """Read-only scope; storage errors surface as StorageFailure"""
        try:
            yield self
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(LogEvents.STORAGE_FAILURE, operation=operation, error=str(e))
            raise StorageFailure(f"Error during {operation}.", operation=operation) from e

    # =========================================================================
    # Accounts
    # =========================================================================

    async def lock_account(self, account_id: int) -> Optional[Row]:
        """
        Lock the account row for the rest of the transaction.

        Returns (account_id, draft_snapshot_id) or None if the account is gone.
        """
        query = (
            select(Account.account_id, Account.draft_snapshot_id)
            .where(Account.account_id == account_id)
            .with_for_update()
        )
        result = await self.db.execute(query)
        return result.one_or_none()

    async def get_account(self, account_id: int) -> Optional[Account]:
        query = select(Account).where(Account.account_id == account_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def find_account(self, brand: str, role: str) -> Optional[Account]:
        query = select(Account).where(Account.brand == brand, Account.role == role)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def add_account(self, brand: str, role: str, password_hash: str) -> Account:
        account = Account(brand=brand, role=role, password_hash=password_hash)
        self.db.add(account)
        await self.db.flush()
        return account

    async def claim_draft_pointer(
        self,
        account_id: int,
        snapshot_id: UUID,
        expected: Optional[UUID],
    ) -> bool:
        """
        Compare-and-set the draft pointer.

        Returns False when the pointer no longer holds `expected`, i.e. another
        request changed it since it was read.
        """
        condition = (
            Account.draft_snapshot_id.is_(None)
            if expected is None
            else Account.draft_snapshot_id == expected
        )
        result = await self.db.execute(
            update(Account)
            .where(Account.account_id == account_id, condition)
            .values(draft_snapshot_id=snapshot_id)
        )
        return result.rowcount == 1

    async def clear_draft_pointer(self, account_id: int) -> None:
        await self.db.execute(
            update(Account)
            .where(Account.account_id == account_id)
            .values(draft_snapshot_id=None)
        )

    # =========================================================================
    # Snapshots
    # =========================================================================

    async def create_snapshot(self, account_id: int, highlight_rows: list[int]) -> Snapshot:
        """Insert a snapshot row and flush so its id is durable in this transaction"""
        snapshot = Snapshot(account_id=account_id, highlight_rows=list(highlight_rows))
        self.db.add(snapshot)
        await self.db.flush()
        return snapshot

    async def get_owned_snapshot(self, account_id: int, snapshot_id: UUID) -> Optional[Snapshot]:
        """Snapshot by id, only if it belongs to account_id"""
        query = (
            select(Snapshot)
            .where(Snapshot.snapshot_id == snapshot_id, Snapshot.account_id == account_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def set_highlights(self, snapshot_id: UUID, highlight_rows: list[int]) -> None:
        await self.db.execute(
            update(Snapshot)
            .where(Snapshot.snapshot_id == snapshot_id)
            .values(highlight_rows=list(highlight_rows))
        )

    async def delete_snapshot(self, snapshot_id: UUID) -> None:
        """Delete a snapshot; row entries go with it (ON DELETE CASCADE)"""
        await self.db.execute(delete(Snapshot).where(Snapshot.snapshot_id == snapshot_id))

    async def list_years(self, account_id: int, include_drafts: bool = True) -> list[int]:
        year = extract("year", Snapshot.created_at).label("year")
        query = (
            select(year)
            .where(Snapshot.account_id == account_id)
            .distinct()
            .order_by(year.desc())
        )
        if not include_drafts:
            query = query.where(self._not_draft(account_id))

        result = await self.db.execute(query)
        return [int(value) for value in result.scalars().all()]

    async def list_snapshots(
        self,
        account_id: int,
        year: Optional[int] = None,
        include_drafts: bool = True,
    ) -> list[SnapshotSummary]:
        """Snapshots of an account, newest first, optionally within one year"""
        query = select(Snapshot.snapshot_id, Snapshot.created_at).where(
            Snapshot.account_id == account_id
        )
        if year is not None:
            query = query.where(extract("year", Snapshot.created_at) == year)
        if not include_drafts:
            query = query.where(self._not_draft(account_id))
        query = query.order_by(Snapshot.created_at.desc(), Snapshot.snapshot_id)

        draft_id = await self.get_draft_pointer(account_id)
        result = await self.db.execute(query)
        return [
            SnapshotSummary(
                snapshot_id=row.snapshot_id,
                created_at=row.created_at,
                is_draft=row.snapshot_id == draft_id,
            )
            for row in result.all()
        ]

    async def get_draft_pointer(self, account_id: int) -> Optional[UUID]:
        query = select(Account.draft_snapshot_id).where(Account.account_id == account_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    def _not_draft(account_id: int):
        draft_ids = select(Account.draft_snapshot_id).where(
            Account.account_id == account_id,
            Account.draft_snapshot_id.is_not(None),
        )
        return Snapshot.snapshot_id.not_in(draft_ids)

    # =========================================================================
    # Row entries
    # =========================================================================

    async def insert_entries(self, snapshot_id: UUID, entries: Sequence[FieldEntry]) -> None:
        rows = [
            {
                "snapshot_id": snapshot_id,
                "position": position,
                "field_key": entry.field_key,
                "field_value": entry.field_value,
            }
            for position, entry in enumerate(entries)
        ]
        await self.db.execute(insert(RowEntry), rows)

    async def delete_entries(self, snapshot_id: UUID) -> None:
        await self.db.execute(
            delete(RowEntry)
            .where(RowEntry.snapshot_id == snapshot_id)
            .execution_options(synchronize_session=False)
        )

    async def fetch_entries(self, snapshot_id: UUID) -> list[FieldEntry]:
        query = (
            select(RowEntry.field_key, RowEntry.field_value)
            .where(RowEntry.snapshot_id == snapshot_id)
            .order_by(RowEntry.position)
        )
        result = await self.db.execute(query)
        return [FieldEntry(row.field_key, row.field_value) for row in result.all()]

    async def load_snapshot(self, snapshot: Snapshot, is_draft: bool = False) -> SnapshotData:
        entries = await self.fetch_entries(snapshot.snapshot_id)
        return SnapshotData(
            snapshot_id=snapshot.snapshot_id,
            created_at=snapshot.created_at,
            entries=entries,
            highlight_rows=list(snapshot.highlight_rows or []),
            is_draft=is_draft,
        )
