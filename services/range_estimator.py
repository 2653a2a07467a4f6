"""Decide which rows of the sheet a refresh needs to read."""

from __future__ import annotations

import re
from dataclasses import dataclass

FIRST_DATA_ROW = 2
FIRST_COLUMN = "A"
LAST_COLUMN = "C"

_PLAIN_SHEET_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
# Names such as "AB12" or "R1C1" would read as cell references.
_CELL_LIKE_NAME = re.compile(r"^(?:[A-Za-z]{1,3}\d+|[Rr]\d*[Cc]\d*)$")


def quote_sheet_name(sheet_name: str) -> str:
    """Quote a sheet name for use in an A1 reference when it needs it."""
    if _PLAIN_SHEET_NAME.match(sheet_name) and not _CELL_LIKE_NAME.match(sheet_name):
        return sheet_name
    return "'" + sheet_name.replace("'", "''") + "'"


def full_columns_range(sheet_name: str) -> str:
    """Every row of the three data columns, used to learn the row count."""
    return f"{quote_sheet_name(sheet_name)}!{FIRST_COLUMN}:{LAST_COLUMN}"


@dataclass(frozen=True, slots=True)
class RowRange:
    start_row: int
    end_row: int

    @property
    def is_empty(self) -> bool:
        return self.end_row < self.start_row

    @property
    def row_count(self) -> int:
        return 0 if self.is_empty else self.end_row - self.start_row + 1

    def to_a1(self, sheet_name: str) -> str:
        return (
            f"{quote_sheet_name(sheet_name)}!"
            f"{FIRST_COLUMN}{self.start_row}:{LAST_COLUMN}{self.end_row}"
        )


def estimate_range(total_rows: int, display_limit: int) -> RowRange:
    """Return the range holding at most ``display_limit`` most recent data rows.

    ``total_rows`` counts the header, so a sheet with ``total_rows <= 1`` has
    no data and yields an empty range.
    """
    if display_limit < 1:
        raise ValueError("display_limit must be at least 1.")
    start_row = max(FIRST_DATA_ROW, total_rows - display_limit + 1)
    return RowRange(start_row=start_row, end_row=total_rows)
