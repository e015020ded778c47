"""Coercion of raw and evaluated cell values to numbers and display text."""

from __future__ import annotations

import math
import re
from typing import Any

from notegrid.formulas.errors import ERROR_REF, CircularReferenceError
from notegrid.formulas.refs import CellRef, GridValues, cell_raw

FORMULA_MARKER = "="

# Longest numeric prefix, as JavaScript's parseFloat reads it.
_FLOAT_PREFIX_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")

_DISPLAY_DECIMALS = 4


def is_formula(raw: Any) -> bool:
    """True if *raw* is a formula (starts with ``=``)."""
    return isinstance(raw, str) and raw.startswith(FORMULA_MARKER)


def parse_float(text: str) -> float | None:
    """Parse the leading number of *text*; None when there is none.

    ``"12abc"`` -> 12.0, ``"abc"`` -> None.
    """
    m = _FLOAT_PREFIX_RE.match(text)
    if not m:
        return None
    return float(m.group(1))


def parse_number(text: str) -> float | None:
    """Parse *text* only if the whole (stripped) string is a number."""
    s = text.strip()
    if not _NUMBER_RE.match(s):
        return None
    return float(s)


def to_numeric(value: Any) -> float | None:
    """Numeric view of an evaluated value, or None if it has none."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return parse_float(value)
    return None


def resolve_cell(grid: GridValues, ref: CellRef, visited: frozenset[CellRef]) -> Any:
    """Evaluated value of the cell at *ref*.

    Literals come back unchanged; formulas are evaluated with *ref*
    added to *visited*.  Returns None outside the grid.  A cycle that
    closes on *ref* itself makes its value ``#REF!`` for the caller,
    which then coerces it like any other text.

    Raises:
        CircularReferenceError: If *ref* is already on the evaluation path.
    """
    raw = cell_raw(grid, ref)
    if raw is None:
        return None
    if not is_formula(raw):
        return raw
    if ref in visited:
        raise CircularReferenceError(ref.addr)
    from notegrid.formulas.evaluator import evaluate_body

    try:
        return evaluate_body(raw, grid, visited | {ref})
    except CircularReferenceError as exc:
        if exc.addr != ref.addr:
            raise
        return ERROR_REF


def to_number(raw: str, grid: GridValues, visited: frozenset[CellRef]) -> float:
    """Coerce a raw cell string to a number; anything non-numeric is 0."""
    if not raw:
        return 0.0
    if is_formula(raw):
        from notegrid.formulas.evaluator import evaluate_body

        num = to_numeric(evaluate_body(raw, grid, visited))
    else:
        num = parse_float(raw)
    if num is None or math.isnan(num):
        return 0.0
    return num


def ref_to_number(grid: GridValues, ref: CellRef, visited: frozenset[CellRef]) -> float:
    """Coerce the cell at *ref* to a number, tracking it on the evaluation path.

    A cycle closing on *ref* reads as ``#REF!``, which coerces to 0.
    Cycles closing further up keep propagating.
    """
    if ref in visited:
        raise CircularReferenceError(ref.addr)
    try:
        return to_number(cell_raw(grid, ref) or "", grid, visited | {ref})
    except CircularReferenceError as exc:
        if exc.addr != ref.addr:
            raise
        return 0.0


def format_number(value: float) -> str:
    """Integers without a decimal point, others to 4 places, trailing zeros dropped."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if float(value).is_integer():
        return str(int(value))
    text = f"{value:.{_DISPLAY_DECIMALS}f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_value(value: Any) -> str:
    """Display string for an evaluated value."""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return format_number(value)
    if value is None:
        return ""
    return str(value)


def to_display_string(raw: str, grid: GridValues, visited: frozenset[CellRef] = frozenset()) -> str:
    """Display text for a raw cell value: formulas evaluated, literals unchanged."""
    if not is_formula(raw):
        return raw
    from notegrid.formulas.evaluator import evaluate_formula

    return format_value(evaluate_formula(raw, grid, visited))
