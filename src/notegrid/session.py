"""Host-facing grid session: display values, edit focus and mutators.

A note embeds one grid as an opaque blob.  The host creates a
``GridSession`` from that blob, reads display values for rendering and
receives the re-serialised blob through ``on_change`` after every
mutation.  Evaluation is whole-grid and uncached: every read recomputes.
"""

from __future__ import annotations

from typing import Any, Callable

from notegrid.formulas.coerce import is_formula
from notegrid.formulas.evaluator import display_cell
from notegrid.grid import DEFAULT_COLS, DEFAULT_ROWS, Grid
from notegrid.logging.events import EventType, emit_info, emit_warning

ChangeCallback = Callable[[dict[str, Any]], None]


class GridSession:
    """One grid being viewed or edited.

    Usage::

        session = GridSession(note.grid_blob, on_change=note.save_grid)
        session.set_cell(0, 0, "=SUM(A2:A5)")
        session.get_display_value(0, 0)
    """

    def __init__(
        self,
        blob: str | bytes | dict[str, Any] | None = None,
        on_change: ChangeCallback | None = None,
        default_rows: int | None = None,
        default_cols: int | None = None,
    ) -> None:
        self._grid = Grid.from_blob(
            blob,
            default_rows=default_rows or DEFAULT_ROWS,
            default_cols=default_cols or DEFAULT_COLS,
        )
        self._on_change = on_change
        self._focus: tuple[int, int] | None = None

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def focused(self) -> tuple[int, int] | None:
        return self._focus

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_raw_value(self, row: int, col: int) -> str:
        value = self._grid.get(row, col)
        return "" if value is None else value

    def get_display_value(self, row: int, col: int) -> str:
        """Text to render at (*row*, *col*).

        The focused cell shows its raw text so it can be edited; every
        other cell shows its evaluated value.
        """
        if self._grid.get(row, col) is None:
            return ""
        if self._focus == (row, col):
            return self.get_raw_value(row, col)
        return display_cell(self._grid.values, row, col)

    def is_formula(self, row: int, col: int) -> bool:
        return is_formula(self._grid.get(row, col))

    def display_grid(self) -> list[list[str]]:
        """Display value of every cell, honouring the edit focus."""
        return [
            [self.get_display_value(r, c) for c in range(self._grid.n_cols)]
            for r in range(self._grid.n_rows)
        ]

    def to_blob(self) -> dict[str, Any]:
        return self._grid.to_blob()

    # ------------------------------------------------------------------
    # Focus
    # ------------------------------------------------------------------

    def focus(self, row: int, col: int) -> None:
        """Put (*row*, *col*) under edit focus.  Out-of-grid focus is ignored."""
        if self._grid.get(row, col) is None:
            return
        self._focus = (row, col)

    def blur(self) -> None:
        self._focus = None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_cell(self, row: int, col: int, value: str) -> bool:
        """Set the raw text of a cell.  Out-of-grid writes are ignored."""
        if self._grid.get(row, col) is None:
            return False
        if self._grid.get(row, col) == value:
            return False
        self._grid.set(row, col, value)
        self._changed("set_cell", row=row, col=col)
        return True

    def add_row(self) -> bool:
        return self._apply(self._grid.add_row, "add_row")

    def remove_row(self) -> bool:
        return self._apply(self._grid.remove_row, "remove_row")

    def add_column(self) -> bool:
        return self._apply(self._grid.add_column, "add_column")

    def remove_column(self) -> bool:
        return self._apply(self._grid.remove_column, "remove_column")

    def _apply(self, mutation: Callable[[], bool], op: str) -> bool:
        if not mutation():
            return False
        if self._focus is not None and self._grid.get(*self._focus) is None:
            self._focus = None
        self._changed(op)
        return True

    def _changed(self, op: str, **context: Any) -> None:
        """Notify the host of the new blob.  Callback failures are logged."""
        emit_info(
            EventType.grid_changed,
            f"Grid {op}",
            {"op": op, "rows": self._grid.n_rows, "cols": self._grid.n_cols, **context},
        )
        if self._on_change is None:
            return
        try:
            self._on_change(self._grid.to_blob())
        except Exception as exc:
            emit_warning(
                EventType.callback_failed,
                f"on_change callback failed: {exc}",
                {"op": op},
                error_code="callback_raised",
            )
