"""
Row Codec

Converts between the tabular grid produced by spreadsheet ingestion and the
flat (field_key, field_value) entries stored per snapshot.

field_key encodes the cell position as R{row}C{col}, both 1-based, so a
decoded grid has the same shape as the encoded one. Empty cells are stored
as "" and never dropped.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence

from app.core.exceptions import InvalidInput

FIELD_KEY_PATTERN = re.compile(r"^R([1-9]\d*)C([1-9]\d*)$")
RECORD_COLUMN_PATTERN = re.compile(r"^Column([1-9]\d*)$")


@dataclass(frozen=True)
class FieldEntry:
    """One cell-level fact"""
    field_key: str
    field_value: str


def make_field_key(row: int, col: int) -> str:
    """1-based row/col -> field key"""
    return f"R{row}C{col}"


def parse_field_key(field_key: str) -> tuple[int, int]:
    """field key -> 1-based (row, col); InvalidInput if malformed"""
    match = FIELD_KEY_PATTERN.match(field_key or "")
    if not match:
        raise InvalidInput(f"Malformed field_key: {field_key!r}")
    return int(match.group(1)), int(match.group(2))


def cell_to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class RowCodec:
    """Grid <-> field entry conversion"""

    def encode(self, grid: Sequence[Sequence[Any]]) -> list[FieldEntry]:
        """
        Flatten a grid row-major into field entries.

        Every cell is emitted, including empty ones, so that the width of each
        row survives a round trip.
        """
        entries = []
        for row_index, row in enumerate(grid, start=1):
            for col_index, value in enumerate(row, start=1):
                entries.append(
                    FieldEntry(make_field_key(row_index, col_index), cell_to_text(value))
                )
        return entries

    def encode_records(self, records: Iterable[Mapping[str, Any]]) -> list[FieldEntry]:
        """
        Encode ingestor rows shaped {"Column1": v, "Column2": v, ...}.

        Column order follows the column number, not dict order.
        """
        grid = []
        for record in records:
            cells: dict[int, Any] = {}
            for name, value in record.items():
                match = RECORD_COLUMN_PATTERN.match(name)
                if not match:
                    raise InvalidInput(f"Unexpected column name: {name!r}")
                cells[int(match.group(1))] = value

            width = max(cells, default=0)
            grid.append([cells.get(col, "") for col in range(1, width + 1)])

        return self.encode(grid)

    def decode(self, entries: Iterable[FieldEntry]) -> list[list[str]]:
        """
        Rebuild the grid from field entries.

        Each row is as wide as its highest column; gaps are filled with "".
        Rows that have no entries at all (below the last row) come back empty.
        Zero-width rows after the last non-empty row leave no entries behind,
        so they are not restored.
        """
        cells: dict[int, dict[int, str]] = {}
        for entry in entries:
            row, col = parse_field_key(entry.field_key)
            cells.setdefault(row, {})[col] = entry.field_value

        height = max(cells, default=0)
        grid = []
        for row in range(1, height + 1):
            row_cells = cells.get(row, {})
            width = max(row_cells, default=0)
            grid.append([row_cells.get(col, "") for col in range(1, width + 1)])
        return grid

    def validate(self, entries: Sequence[FieldEntry]) -> list[FieldEntry]:
        """
        Check entries before they reach storage.

        Raises:
            InvalidInput: empty input, malformed keys, duplicate keys
        """
        if not entries:
            raise InvalidInput("Invalid or empty data provided.")

        seen: set[str] = set()
        for entry in entries:
            parse_field_key(entry.field_key)
            if entry.field_key in seen:
                raise InvalidInput(f"Duplicate field_key: {entry.field_key!r}")
            if not isinstance(entry.field_value, str):
                raise InvalidInput(f"field_value for {entry.field_key!r} must be a string")
            seen.add(entry.field_key)

        return list(entries)

    @staticmethod
    def normalize_highlights(highlight_rows: Optional[Iterable[Any]]) -> list[int]:
        """Highlighted row indices as a sorted, duplicate-free list"""
        if highlight_rows is None:
            return []

        normalized = set()
        for row in highlight_rows:
            if isinstance(row, bool) or not isinstance(row, int) or row < 0:
                raise InvalidInput(f"Invalid highlighted row index: {row!r}")
            normalized.add(row)
        return sorted(normalized)


# Module-level codec (stateless)
row_codec = RowCodec()
