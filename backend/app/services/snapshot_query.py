"""
Snapshot Query Service

Read-side browsing of an account's snapshots: years, snapshots within a
year, and the full contents of one snapshot.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import NotFound
from app.services.record_store import RecordStore, SnapshotData, SnapshotSummary


class SnapshotQuery:
    """
    Read-only snapshot access for one request session.

    include_drafts controls whether the live draft shows up in year browsing
    (list_years / list_snapshots). Defaults to settings.YEARS_INCLUDE_DRAFTS.
    """

    def __init__(self, db: AsyncSession, include_drafts: Optional[bool] = None):
        self.store = RecordStore(db)
        self.include_drafts = (
            settings.YEARS_INCLUDE_DRAFTS if include_drafts is None else include_drafts
        )

    async def list_years(self, account_id: int) -> list[int]:
        """Distinct creation years, newest first"""
        async with self.store.reading("list_years") as store:
            return await store.list_years(account_id, include_drafts=self.include_drafts)

    async def list_snapshots(self, account_id: int, year: int) -> list[SnapshotSummary]:
        """
        Snapshots created in `year`, newest first.

        Raises:
            NotFound: nothing was saved that year
        """
        async with self.store.reading("list_snapshots") as store:
            snapshots = await store.list_snapshots(
                account_id, year=year, include_drafts=self.include_drafts
            )

        if not snapshots:
            raise NotFound(f"No records found for year {year}.")
        return snapshots

    async def list_all(self, account_id: int) -> list[SnapshotSummary]:
        """Every snapshot of the account (draft included and flagged)"""
        async with self.store.reading("list_all") as store:
            return await store.list_snapshots(account_id)

    async def get_snapshot(self, account_id: int, snapshot_id: UUID) -> SnapshotData:
        """
        Ordered rows and highlight set of one snapshot.

        Raises:
            NotFound: snapshot missing or owned by another account
        """
        async with self.store.reading("get_snapshot") as store:
            snapshot = await store.get_owned_snapshot(account_id, snapshot_id)
            if snapshot is None:
                raise NotFound(
                    f"No data found for snapshot {snapshot_id} or unauthorized access."
                )

            draft_id = await store.get_draft_pointer(account_id)
            return await store.load_snapshot(snapshot, is_draft=snapshot_id == draft_id)
