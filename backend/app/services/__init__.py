# Business Logic Services

from app.services.row_codec import (
    FieldEntry,
    RowCodec,
    row_codec,
    make_field_key,
    parse_field_key,
)
from app.services.record_store import (
    RecordStore,
    SnapshotData,
    SnapshotSummary,
)
from app.services.draft_manager import DraftManager, SaveResult
from app.services.snapshot_query import SnapshotQuery
from app.services.accounts import AccountService

__all__ = [
    # Row codec
    "FieldEntry",
    "RowCodec",
    "row_codec",
    "make_field_key",
    "parse_field_key",
    # Storage
    "RecordStore",
    "SnapshotData",
    "SnapshotSummary",
    # Drafts & snapshots
    "DraftManager",
    "SaveResult",
    "SnapshotQuery",
    # Accounts
    "AccountService",
]
