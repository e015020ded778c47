"""A1-style cell references: column letters, single cells and ranges.

Column letters use bijective base-26 numbering (``A``=1 ... ``Z``=26,
``AA``=27), exposed here as zero-based indexes.  Grids are plain
row-major 2-D sequences of raw cell strings.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Sequence

GridValues = Sequence[Sequence[str]]

_CELL_REF_RE = re.compile(r"^([A-Za-z]+)([0-9]+)$")


def col_letter_to_index(letters: str) -> int:
    """Convert column letter(s) to 0-based index.  A=0, B=1, ..., Z=25, AA=26."""
    idx = 0
    for ch in letters.upper():
        idx = idx * 26 + (ord(ch) - ord("A") + 1)
    return idx - 1


def index_to_col_letter(idx: int) -> str:
    """Convert 0-based column index to letter(s).  0=A, 25=Z, 26=AA."""
    result = ""
    n = idx + 1
    while n > 0:
        n, rem = divmod(n - 1, 26)
        result = chr(65 + rem) + result
    return result


class CellRef(NamedTuple):
    """Zero-based grid coordinate."""

    col: int
    row: int

    @property
    def addr(self) -> str:
        return f"{index_to_col_letter(self.col)}{self.row + 1}"


def parse_cell_ref(text: str) -> CellRef | None:
    """Parse ``"B3"`` into ``CellRef(col=1, row=2)``.

    Letters are case-insensitive.  Returns None when *text* is not a
    cell reference, which callers use to tell references from literals.
    """
    m = _CELL_REF_RE.match(text.strip())
    if not m:
        return None
    row = int(m.group(2)) - 1
    if row < 0:
        return None
    return CellRef(col=col_letter_to_index(m.group(1)), row=row)


def make_addr(row: int, col: int) -> str:
    """Build cell address from 0-based row/col."""
    return CellRef(col=col, row=row).addr


def cell_raw(grid: GridValues, ref: CellRef) -> str | None:
    """Raw text of the cell at *ref*, or None when it lies outside the grid."""
    if ref.row < 0 or ref.row >= len(grid):
        return None
    row = grid[ref.row]
    if ref.col < 0 or ref.col >= len(row):
        return None
    return row[ref.col]


def expand_range(text: str) -> list[CellRef]:
    """Expand ``"A1:C3"`` into its coordinates, row-major.

    Endpoints are normalised so the rectangle is inclusive whatever their
    order.  An unparseable endpoint yields an empty list.
    """
    parts = text.split(":")
    if len(parts) != 2:
        return []
    start = parse_cell_ref(parts[0])
    end = parse_cell_ref(parts[1])
    if start is None or end is None:
        return []
    r0, r1 = sorted((start.row, end.row))
    c0, c1 = sorted((start.col, end.col))
    return [CellRef(col=c, row=r) for r in range(r0, r1 + 1) for c in range(c0, c1 + 1)]


def parse_range(text: str, grid: GridValues, visited: frozenset[CellRef]) -> list[float]:
    """Numeric values of a range, row-major.

    Coordinates outside the grid and cells whose evaluated value is not
    numeric (including empty cells) are skipped, not zero-filled.
    """
    # Local import to avoid circular dependency
    from notegrid.formulas.coerce import resolve_cell, to_numeric

    values: list[float] = []
    for ref in expand_range(text):
        value = resolve_cell(grid, ref, visited)
        if value is None or value == "":
            continue
        num = to_numeric(value)
        if num is not None:
            values.append(num)
    return values


def parse_string_range(text: str, grid: GridValues, visited: frozenset[CellRef]) -> list[str]:
    """String values of every in-grid cell of a range, row-major."""
    from notegrid.formulas.coerce import format_value, resolve_cell

    values: list[str] = []
    for ref in expand_range(text):
        value = resolve_cell(grid, ref, visited)
        if value is not None:
            values.append(format_value(value))
    return values
