"""
Record Snapshot Schemas
Request/response models for drafts and saved snapshots
"""

from datetime import datetime
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from app.services.row_codec import FieldEntry, RowCodec, cell_to_text

CellValue = Union[str, int, float, bool, None]


class RowEntryPayload(BaseModel):
    """One field_key/field_value pair"""
    field_key: str = Field(..., max_length=32, description="Cell position, e.g. R1C1")
    field_value: CellValue = ""


class SaveRecordsRequest(BaseModel):
    """
    Draft save / promotion body.

    Rows arrive as `data` (field entries), `grid` (rows of cell values) or
    `records` (ingestor rows keyed Column1, Column2, ...). The first one
    present wins, in that order.
    """
    data: list[RowEntryPayload] = Field(default_factory=list)
    grid: Optional[list[list[CellValue]]] = None
    records: Optional[list[dict[str, CellValue]]] = None
    highlight_rows: list[Any] = Field(default_factory=list, alias="highlightRows")

    class Config:
        populate_by_name = True

    def to_entries(self, codec: RowCodec) -> list[FieldEntry]:
        if self.data:
            return [FieldEntry(item.field_key, cell_to_text(item.field_value)) for item in self.data]
        if self.grid:
            return codec.encode(self.grid)
        if self.records:
            return codec.encode_records(self.records)
        return []


class SaveRecordsResponse(BaseModel):
    """Result of save_draft / promote_draft"""
    success: bool = True
    message: str
    snapshot_id: UUID
    created: bool
    entry_count: int


class RowEntryResponse(BaseModel):
    field_key: str
    field_value: str

    class Config:
        from_attributes = True


class SnapshotDataResponse(BaseModel):
    """Full snapshot contents (draft or finalized)"""
    snapshot_id: UUID
    created_at: datetime
    is_draft: bool
    data: list[RowEntryResponse]
    grid: list[list[str]]
    highlight_rows: list[int] = Field(default_factory=list, alias="highlightRows")

    class Config:
        populate_by_name = True


class SnapshotSummaryResponse(BaseModel):
    """Snapshot summary (listing)"""
    snapshot_id: UUID
    created_at: datetime
    is_draft: bool = False

    class Config:
        from_attributes = True


class SnapshotListResponse(BaseModel):
    total: int
    items: list[SnapshotSummaryResponse]


class YearsResponse(BaseModel):
    years: list[int]


class DiscardDraftResponse(BaseModel):
    success: bool = True
    message: str
    snapshot_id: UUID
