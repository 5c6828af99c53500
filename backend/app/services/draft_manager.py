"""
Draft Manager

Owns the one-draft-per-account rule:
- save_draft creates the account's draft once, then replaces its rows in place
- promote_draft writes a new finalized snapshot and tears the draft down
- get_draft / discard_draft read or drop the current draft

Every mutation locks the account row first, so concurrent requests for the
same account serialize on the draft pointer.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFound, StorageFailure
from app.core.logging import get_logger, LogEvents
from app.models.snapshot import Snapshot
from app.services.record_store import RecordStore, SnapshotData
from app.services.row_codec import FieldEntry, RowCodec, row_codec

logger = get_logger("DraftManager")


@dataclass
class SaveResult:
    """Outcome of save_draft / promote_draft"""
    snapshot_id: UUID
    created: bool
    entry_count: int


class DraftManager:
    """Draft lifecycle for one request session"""

    def __init__(self, db: AsyncSession, codec: RowCodec = row_codec):
        self.store = RecordStore(db)
        self.codec = codec

    async def save_draft(
        self,
        account_id: int,
        entries: Sequence[FieldEntry],
        highlight_rows: Optional[Iterable[int]] = None,
    ) -> SaveResult:
        """
        Create or fully replace the account's draft.

        The draft keeps its id and created_at across saves; its rows and
        highlight set are overwritten.

        Raises:
            InvalidInput: empty or malformed entries (before any storage access)
            NotFound: account does not exist
            StorageFailure: transaction failed or the draft pointer changed
                concurrently; nothing was written
        """
        entries = self.codec.validate(entries)
        highlights = self.codec.normalize_highlights(highlight_rows)

        with logger.timed_operation("save_draft"):
            async with self.store.transaction("save_draft") as store:
                account = await self._lock_account(store, account_id)
                draft = await self._current_draft(store, account_id, account.draft_snapshot_id)

                if draft is None:
                    draft = await store.create_snapshot(account_id, highlights)
                    claimed = await store.claim_draft_pointer(
                        account_id, draft.snapshot_id, expected=account.draft_snapshot_id
                    )
                    if not claimed:
                        logger.warning(LogEvents.DRAFT_POINTER_RACE, account_id=account_id)
                        raise StorageFailure(
                            "Draft was changed by another request; no changes were saved.",
                            operation="save_draft",
                        )
                    created = True
                else:
                    await store.delete_entries(draft.snapshot_id)
                    await store.set_highlights(draft.snapshot_id, highlights)
                    created = False

                await store.insert_entries(draft.snapshot_id, entries)
                snapshot_id = draft.snapshot_id

        logger.info(
            LogEvents.DRAFT_CREATED if created else LogEvents.DRAFT_REPLACED,
            account_id=account_id,
            snapshot_id=str(snapshot_id),
            entry_count=len(entries),
        )
        return SaveResult(snapshot_id=snapshot_id, created=created, entry_count=len(entries))

    async def promote_draft(
        self,
        account_id: int,
        entries: Sequence[FieldEntry],
        highlight_rows: Optional[Iterable[int]] = None,
    ) -> SaveResult:
        """
        Save a new finalized snapshot and consume the current draft.

        The new snapshot and its rows are flushed before the draft is deleted;
        both happen in one transaction.
        """
        entries = self.codec.validate(entries)
        highlights = self.codec.normalize_highlights(highlight_rows)

        with logger.timed_operation("promote_draft"):
            async with self.store.transaction("promote_draft") as store:
                account = await self._lock_account(store, account_id)

                snapshot = await store.create_snapshot(account_id, highlights)
                await store.insert_entries(snapshot.snapshot_id, entries)

                consumed = None
                if account.draft_snapshot_id is not None:
                    await store.clear_draft_pointer(account_id)
                    draft = await store.get_owned_snapshot(account_id, account.draft_snapshot_id)
                    if draft is not None:
                        await store.delete_snapshot(draft.snapshot_id)
                        consumed = draft.snapshot_id

                snapshot_id = snapshot.snapshot_id

        logger.info(
            LogEvents.SNAPSHOT_PROMOTED,
            account_id=account_id,
            snapshot_id=str(snapshot_id),
            consumed_draft_id=str(consumed) if consumed else None,
            entry_count=len(entries),
        )
        return SaveResult(snapshot_id=snapshot_id, created=True, entry_count=len(entries))

    async def get_draft(self, account_id: int) -> SnapshotData:
        """
        Current draft rows and highlights.

        Raises:
            NotFound: no draft pointer, or the pointer targets a missing or
                foreign snapshot
        """
        async with self.store.reading("get_draft") as store:
            pointer = await store.get_draft_pointer(account_id)
            if pointer is None:
                raise NotFound("No draft found.")

            draft = await self._current_draft(store, account_id, pointer)
            if draft is None:
                raise NotFound("Draft not found or unauthorized access.")

            return await store.load_snapshot(draft, is_draft=True)

    async def discard_draft(self, account_id: int) -> UUID:
        """Drop the current draft without saving it"""
        async with self.store.transaction("discard_draft") as store:
            account = await self._lock_account(store, account_id)
            draft = await self._current_draft(store, account_id, account.draft_snapshot_id)
            if draft is None:
                raise NotFound("No draft found.")

            await store.clear_draft_pointer(account_id)
            await store.delete_snapshot(draft.snapshot_id)
            snapshot_id = draft.snapshot_id

        logger.info(LogEvents.DRAFT_DISCARDED, account_id=account_id, snapshot_id=str(snapshot_id))
        return snapshot_id

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    async def _lock_account(store: RecordStore, account_id: int):
        account = await store.lock_account(account_id)
        if account is None:
            raise NotFound("User not found.")
        return account

    @staticmethod
    async def _current_draft(
        store: RecordStore,
        account_id: int,
        pointer: Optional[UUID],
    ) -> Optional[Snapshot]:
        """Resolve the draft pointer; a dangling or foreign pointer counts as no draft"""
        if pointer is None:
            return None

        draft = await store.get_owned_snapshot(account_id, pointer)
        if draft is None:
            logger.warning(
                LogEvents.DRAFT_POINTER_DANGLING,
                account_id=account_id,
                snapshot_id=str(pointer),
            )
        return draft
