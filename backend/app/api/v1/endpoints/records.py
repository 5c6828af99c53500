"""
PBU Records API Endpoints
Drafts and saved snapshots of the authenticated account

Endpoints:
- PUT    /records/draft                     - draft save (create or replace)
- GET    /records/draft                     - current draft
- DELETE /records/draft                     - discard current draft
- POST   /records/snapshots                 - save as finalized snapshot (consumes draft)
- GET    /records/snapshots                 - all snapshots of the account
- GET    /records/snapshots/{snapshot_id}   - snapshot rows + highlights
- GET    /records/years                     - years with snapshots
- GET    /records/years/{year}/snapshots    - snapshots of one year
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.api.deps import get_current_account, get_draft_manager, get_snapshot_query
from app.core.security import AuthenticatedAccount
from app.schemas.snapshot import (
    DiscardDraftResponse,
    RowEntryResponse,
    SaveRecordsRequest,
    SaveRecordsResponse,
    SnapshotDataResponse,
    SnapshotListResponse,
    SnapshotSummaryResponse,
    YearsResponse,
)
from app.services.draft_manager import DraftManager
from app.services.record_store import SnapshotData, SnapshotSummary
from app.services.row_codec import row_codec
from app.services.snapshot_query import SnapshotQuery

router = APIRouter()


def snapshot_to_response(snapshot: SnapshotData) -> SnapshotDataResponse:
    """SnapshotData -> API response (entries plus decoded grid)"""
    return SnapshotDataResponse(
        snapshot_id=snapshot.snapshot_id,
        created_at=snapshot.created_at,
        is_draft=snapshot.is_draft,
        data=[
            RowEntryResponse(field_key=entry.field_key, field_value=entry.field_value)
            for entry in snapshot.entries
        ],
        grid=row_codec.decode(snapshot.entries),
        highlight_rows=snapshot.highlight_rows,
    )


def summaries_to_response(summaries: list[SnapshotSummary]) -> SnapshotListResponse:
    return SnapshotListResponse(
        total=len(summaries),
        items=[SnapshotSummaryResponse.model_validate(item) for item in summaries],
    )


@router.put("/draft", response_model=SaveRecordsResponse)
async def save_draft(
    request: SaveRecordsRequest,
    current: AuthenticatedAccount = Depends(get_current_account),
    drafts: DraftManager = Depends(get_draft_manager),
):
    """Create the account's draft, or replace its rows and highlights"""
    result = await drafts.save_draft(
        current.account_id,
        request.to_entries(row_codec),
        request.highlight_rows,
    )
    return SaveRecordsResponse(
        message="Draft saved successfully",
        snapshot_id=result.snapshot_id,
        created=result.created,
        entry_count=result.entry_count,
    )


@router.get("/draft", response_model=SnapshotDataResponse)
async def get_draft(
    current: AuthenticatedAccount = Depends(get_current_account),
    drafts: DraftManager = Depends(get_draft_manager),
):
    draft = await drafts.get_draft(current.account_id)
    return snapshot_to_response(draft)


@router.delete("/draft", response_model=DiscardDraftResponse)
async def discard_draft(
    current: AuthenticatedAccount = Depends(get_current_account),
    drafts: DraftManager = Depends(get_draft_manager),
):
    snapshot_id = await drafts.discard_draft(current.account_id)
    return DiscardDraftResponse(message="Draft discarded", snapshot_id=snapshot_id)


@router.post("/snapshots", response_model=SaveRecordsResponse, status_code=201)
async def save_snapshot(
    request: SaveRecordsRequest,
    current: AuthenticatedAccount = Depends(get_current_account),
    drafts: DraftManager = Depends(get_draft_manager),
):
    """Save rows as a new finalized snapshot; the current draft is consumed"""
    result = await drafts.promote_draft(
        current.account_id,
        request.to_entries(row_codec),
        request.highlight_rows,
    )
    return SaveRecordsResponse(
        message="File saved successfully",
        snapshot_id=result.snapshot_id,
        created=result.created,
        entry_count=result.entry_count,
    )


@router.get("/snapshots", response_model=SnapshotListResponse)
async def list_all_snapshots(
    current: AuthenticatedAccount = Depends(get_current_account),
    query: SnapshotQuery = Depends(get_snapshot_query),
):
    summaries = await query.list_all(current.account_id)
    return summaries_to_response(summaries)


@router.get("/snapshots/{snapshot_id}", response_model=SnapshotDataResponse)
async def get_snapshot(
    snapshot_id: UUID,
    current: AuthenticatedAccount = Depends(get_current_account),
    query: SnapshotQuery = Depends(get_snapshot_query),
):
    snapshot = await query.get_snapshot(current.account_id, snapshot_id)
    return snapshot_to_response(snapshot)


@router.get("/years", response_model=YearsResponse)
async def list_years(
    current: AuthenticatedAccount = Depends(get_current_account),
    query: SnapshotQuery = Depends(get_snapshot_query),
):
    years = await query.list_years(current.account_id)
    return YearsResponse(years=years)


@router.get("/years/{year}/snapshots", response_model=SnapshotListResponse)
async def list_snapshots_for_year(
    year: int = Path(..., ge=1, le=9999),
    current: AuthenticatedAccount = Depends(get_current_account),
    query: SnapshotQuery = Depends(get_snapshot_query),
):
    summaries = await query.list_snapshots(current.account_id, year)
    return summaries_to_response(summaries)
