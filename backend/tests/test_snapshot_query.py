"""
SnapshotQuery tests

Year browsing, per-year listing, ownership checks and the draft inclusion
policy.
"""

import uuid
from datetime import datetime, UTC

import pytest

from app.core.exceptions import NotFound
from app.models import RowEntry, Snapshot
from app.services.draft_manager import DraftManager
from app.services.row_codec import FieldEntry
from app.services.snapshot_query import SnapshotQuery

pytestmark = pytest.mark.asyncio


async def add_snapshot(db, account_id, created_at, rows=(("R1C1", "x"),), highlights=()):
    snapshot = Snapshot(
        account_id=account_id,
        created_at=created_at,
        highlight_rows=list(highlights),
    )
    db.add(snapshot)
    await db.flush()
    for position, (key, value) in enumerate(rows):
        db.add(RowEntry(
            snapshot_id=snapshot.snapshot_id,
            position=position,
            field_key=key,
            field_value=value,
        ))
    await db.commit()
    return snapshot.snapshot_id


class TestListYears:
    async def test_years_descending_without_duplicates(self, db, account_id):
        for year, month in [(2024, 3), (2023, 7), (2025, 1), (2024, 11)]:
            await add_snapshot(db, account_id, datetime(year, month, 1, 12, tzinfo=UTC))

        years = await SnapshotQuery(db).list_years(account_id)

        assert years == [2025, 2024, 2023]

    async def test_no_snapshots(self, db, account_id):
        assert await SnapshotQuery(db).list_years(account_id) == []

    async def test_only_own_years(self, db, create_account):
        mine = await create_account("VW", "PBU")
        theirs = await create_account("Skoda", "PBU")
        await add_snapshot(db, mine, datetime(2024, 5, 1, tzinfo=UTC))
        await add_snapshot(db, theirs, datetime(2021, 5, 1, tzinfo=UTC))

        assert await SnapshotQuery(db).list_years(mine) == [2024]

    async def test_draft_year_policy(self, db, account_id):
        await add_snapshot(db, account_id, datetime(2022, 5, 1, tzinfo=UTC))
        await DraftManager(db).save_draft(account_id, [FieldEntry("R1C1", "draft")])
        current_year = datetime.now(UTC).year

        with_drafts = await SnapshotQuery(db, include_drafts=True).list_years(account_id)
        without_drafts = await SnapshotQuery(db, include_drafts=False).list_years(account_id)

        assert with_drafts == [current_year, 2022]
        assert without_drafts == [2022]


class TestListSnapshots:
    async def test_newest_first_within_year(self, db, account_id):
        older = await add_snapshot(db, account_id, datetime(2024, 2, 1, tzinfo=UTC))
        newer = await add_snapshot(db, account_id, datetime(2024, 9, 1, tzinfo=UTC))
        await add_snapshot(db, account_id, datetime(2023, 12, 31, tzinfo=UTC))

        items = await SnapshotQuery(db).list_snapshots(account_id, 2024)

        assert [item.snapshot_id for item in items] == [newer, older]
        assert all(item.created_at.year == 2024 for item in items)

    async def test_empty_year_is_not_found(self, db, account_id):
        await add_snapshot(db, account_id, datetime(2024, 2, 1, tzinfo=UTC))

        with pytest.raises(NotFound, match="2019"):
            await SnapshotQuery(db).list_snapshots(account_id, 2019)

    async def test_draft_flag_and_policy(self, db, account_id):
        current_year = datetime.now(UTC).year
        saved = await DraftManager(db).promote_draft(account_id, [FieldEntry("R1C1", "a")])
        draft = await DraftManager(db).save_draft(account_id, [FieldEntry("R1C1", "b")])

        items = await SnapshotQuery(db, include_drafts=True).list_snapshots(account_id, current_year)
        flags = {item.snapshot_id: item.is_draft for item in items}
        assert flags == {saved.snapshot_id: False, draft.snapshot_id: True}

        items = await SnapshotQuery(db, include_drafts=False).list_snapshots(account_id, current_year)
        assert [item.snapshot_id for item in items] == [saved.snapshot_id]

    async def test_list_all(self, db, account_id):
        assert await SnapshotQuery(db).list_all(account_id) == []

        await add_snapshot(db, account_id, datetime(2020, 1, 1, tzinfo=UTC))
        await add_snapshot(db, account_id, datetime(2024, 1, 1, tzinfo=UTC))

        items = await SnapshotQuery(db).list_all(account_id)
        assert [item.created_at.year for item in items] == [2024, 2020]


class TestGetSnapshot:
    async def test_rows_and_highlights(self, db, account_id):
        rows = (("R1C1", "Golf"), ("R1C2", ""), ("R2C1", "Polo"))
        snapshot_id = await add_snapshot(
            db, account_id, datetime(2024, 4, 1, tzinfo=UTC), rows=rows, highlights=[1]
        )

        data = await SnapshotQuery(db).get_snapshot(account_id, snapshot_id)

        assert data.snapshot_id == snapshot_id
        assert [(e.field_key, e.field_value) for e in data.entries] == list(rows)
        assert data.highlight_rows == [1]
        assert data.is_draft is False

    async def test_other_account_gets_not_found(self, db, create_account):
        owner = await create_account("VW", "PBU")
        other = await create_account("Audi", "PBU")
        snapshot_id = await add_snapshot(db, owner, datetime(2024, 4, 1, tzinfo=UTC))

        with pytest.raises(NotFound):
            await SnapshotQuery(db).get_snapshot(other, snapshot_id)

    async def test_missing_snapshot(self, db, account_id):
        with pytest.raises(NotFound):
            await SnapshotQuery(db).get_snapshot(account_id, uuid.uuid4())
