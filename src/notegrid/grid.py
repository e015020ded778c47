"""In-memory grid of raw cell strings and its serialised form.

The serialised blob is ``{"data": [[{"value": "..."}, ...], ...]}``,
row-major.  Grids are always rectangular and never smaller than 1x1.
"""

from __future__ import annotations

import json
from typing import Any

import polars as pl
from pydantic import BaseModel, ValidationError, field_validator, model_validator

from notegrid.formulas.evaluator import display_cell
from notegrid.formulas.refs import index_to_col_letter
from notegrid.logging.events import EventType, emit_info, emit_warning

DEFAULT_ROWS = 3
DEFAULT_COLS = 3


# ---------------------------------------------------------------------------
# Blob schema
# ---------------------------------------------------------------------------


class CellModel(BaseModel):
    """One serialised cell.  A bare string is accepted as its value."""

    value: str = ""

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_value(cls, data: Any) -> Any:
        if isinstance(data, (str, int, float)):
            return {"value": data}
        return data

    @field_validator("value", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> str:
        if v is None:
            return ""
        if isinstance(v, (dict, list)):
            raise ValueError("cell value must be a scalar")
        return str(v)


class GridBlob(BaseModel):
    """Serialised grid: a non-empty rectangular 2-D array of cells."""

    data: list[list[CellModel]]

    @model_validator(mode="after")
    def _check_rectangular(self) -> GridBlob:
        if not self.data or not self.data[0]:
            raise ValueError("grid must have at least one row and one column")
        width = len(self.data[0])
        if any(len(row) != width for row in self.data):
            raise ValueError("grid rows must all have the same length")
        return self


# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------


class Grid:
    """Rectangular 2-D array of raw cell strings.

    Parameters
    ----------
    values : list[list[str]]
        Row-major raw cell text.  Must be non-empty and rectangular.
    """

    def __init__(self, values: list[list[str]]) -> None:
        if not values or not values[0]:
            raise ValueError("grid must have at least one row and one column")
        width = len(values[0])
        if any(len(row) != width for row in values):
            raise ValueError("grid rows must all have the same length")
        self._values = [[str(v) for v in row] for row in values]

    @classmethod
    def empty(cls, rows: int = DEFAULT_ROWS, cols: int = DEFAULT_COLS) -> Grid:
        """Grid of *rows* x *cols* empty cells (at least 1x1)."""
        rows, cols = max(1, rows), max(1, cols)
        return cls([["" for _ in range(cols)] for _ in range(rows)])

    @classmethod
    def from_blob(
        cls,
        blob: str | bytes | dict[str, Any] | None,
        default_rows: int = DEFAULT_ROWS,
        default_cols: int = DEFAULT_COLS,
    ) -> Grid:
        """Deserialise a grid blob.

        Accepts a JSON string or bytes, an already-decoded dict, or None.
        Absent or malformed input yields an empty default grid.  Never
        raises.
        """
        if blob is None or blob == "" or blob == b"":
            return cls.empty(default_rows, default_cols)
        try:
            if isinstance(blob, (str, bytes, bytearray)):
                parsed = GridBlob.model_validate_json(blob)
            else:
                parsed = GridBlob.model_validate(blob)
        except (ValidationError, ValueError, TypeError) as exc:
            emit_warning(
                EventType.grid_load_fallback,
                "Malformed grid blob; using an empty grid",
                {"error": str(exc), "rows": default_rows, "cols": default_cols},
                error_code="grid_blob_invalid",
            )
            return cls.empty(default_rows, default_cols)
        grid = cls([[cell.value for cell in row] for row in parsed.data])
        emit_info(
            EventType.grid_loaded,
            "Grid loaded",
            {"rows": grid.n_rows, "cols": grid.n_cols},
        )
        return grid

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def values(self) -> list[list[str]]:
        """Live row-major raw values, as consumed by the formula engine."""
        return self._values

    @property
    def n_rows(self) -> int:
        return len(self._values)

    @property
    def n_cols(self) -> int:
        return len(self._values[0])

    def get(self, row: int, col: int) -> str | None:
        """Raw text at (*row*, *col*), or None outside the grid."""
        if 0 <= row < self.n_rows and 0 <= col < self.n_cols:
            return self._values[row][col]
        return None

    def set(self, row: int, col: int, value: str) -> None:
        """Replace the raw text at (*row*, *col*).

        Raises:
            IndexError: If the coordinate lies outside the grid.
        """
        if not (0 <= row < self.n_rows and 0 <= col < self.n_cols):
            raise IndexError(f"Cell ({row}, {col}) outside {self.n_rows}x{self.n_cols} grid")
        self._values[row][col] = str(value)

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def add_row(self) -> bool:
        self._values.append(["" for _ in range(self.n_cols)])
        return True

    def remove_row(self) -> bool:
        """Drop the last row.  A single remaining row is kept."""
        if self.n_rows <= 1:
            return False
        self._values.pop()
        return True

    def add_column(self) -> bool:
        for row in self._values:
            row.append("")
        return True

    def remove_column(self) -> bool:
        """Drop the last column.  A single remaining column is kept."""
        if self.n_cols <= 1:
            return False
        for row in self._values:
            row.pop()
        return True

    # ------------------------------------------------------------------
    # Serialisation and views
    # ------------------------------------------------------------------

    def to_blob(self) -> dict[str, Any]:
        return {"data": [[{"value": v} for v in row] for row in self._values]}

    def to_json(self) -> str:
        return json.dumps(self.to_blob())

    def display_values(self) -> list[list[str]]:
        """Display string of every cell, evaluated against this grid."""
        return [
            [display_cell(self._values, r, c) for c in range(self.n_cols)]
            for r in range(self.n_rows)
        ]

    def to_frame(self, display: bool = True) -> pl.DataFrame:
        """Grid as a DataFrame with columns ``A``, ``B``, ...

        Args:
            display: Use evaluated display values rather than raw text.
        """
        rows = self.display_values() if display else self._values
        return pl.DataFrame(
            {
                index_to_col_letter(c): [row[c] for row in rows]
                for c in range(self.n_cols)
            },
            schema={index_to_col_letter(c): pl.Utf8 for c in range(self.n_cols)},
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"Grid({self.n_rows}x{self.n_cols})"
