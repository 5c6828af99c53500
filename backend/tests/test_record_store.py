"""
RecordStore / database helper tests
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from app.core.database import _async_database_url
from app.services.record_store import RecordStore
from app.services.row_codec import FieldEntry


class TestDatabaseUrl:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("postgresql://u:p@db/records", "postgresql+asyncpg://u:p@db/records"),
            ("postgres://u:p@db/records", "postgresql+asyncpg://u:p@db/records"),
            ("postgresql+asyncpg://u:p@db/records", "postgresql+asyncpg://u:p@db/records"),
            ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
        ],
    )
    def test_async_driver(self, url, expected):
        assert _async_database_url(url) == expected


@pytest.mark.asyncio
async def test_lock_account_selects_for_update():
    db = AsyncMock()
    db.execute.return_value = MagicMock()

    await RecordStore(db).lock_account(1)

    statement = db.execute.call_args.args[0]
    assert "FOR UPDATE" in str(statement.compile(dialect=postgresql.dialect()))


@pytest.mark.asyncio
class TestRecordStore:
    async def test_transaction_commits(self, db, session_factory, account_id):
        store = RecordStore(db)
        async with store.transaction("create") as tx:
            snapshot = await tx.create_snapshot(account_id, [2])
            await tx.insert_entries(snapshot.snapshot_id, [FieldEntry("R1C1", "a")])

        async with session_factory() as other:
            entries = await RecordStore(other).fetch_entries(snapshot.snapshot_id)
        assert entries == [FieldEntry("R1C1", "a")]

    async def test_transaction_rolls_back_on_error(self, db, account_id):
        store = RecordStore(db)
        with pytest.raises(RuntimeError):
            async with store.transaction("create") as tx:
                await tx.create_snapshot(account_id, [])
                raise RuntimeError("abort")

        assert await store.list_snapshots(account_id) == []

    async def test_claim_draft_pointer_compare_and_set(self, db, account_id):
        store = RecordStore(db)
        async with store.transaction("claim") as tx:
            first = await tx.create_snapshot(account_id, [])
            second = await tx.create_snapshot(account_id, [])

            assert await tx.claim_draft_pointer(account_id, first.snapshot_id, expected=None)
            assert not await tx.claim_draft_pointer(account_id, second.snapshot_id, expected=None)
            assert await tx.claim_draft_pointer(
                account_id, second.snapshot_id, expected=first.snapshot_id
            )

        assert await store.get_draft_pointer(account_id) == second.snapshot_id
