"""Lookup and grouping formula functions: UNIQUE, COUNTIF, SUMIF.

Criteria compare cell text for exact equality.
"""

from __future__ import annotations

from typing import Any

import polars as pl

from notegrid.formulas.args import get_arg_string, get_string_arg_values
from notegrid.formulas.coerce import parse_float
from notegrid.formulas.errors import FormulaFunctionError
from notegrid.formulas.refs import CellRef, GridValues


def _fn_unique(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> str:
    """UNIQUE(range, ...) — distinct non-empty values joined into one string.

    Values keep the order in which they are first seen.
    """
    values = [v for v in get_string_arg_values(args, grid, visited) if v != ""]
    if not values:
        return ""
    distinct = pl.Series(values, dtype=pl.Utf8).unique(maintain_order=True)
    return ", ".join(distinct.to_list())


def _fn_countif(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> int:
    """COUNTIF(range, criteria) — number of cells equal to criteria."""
    if len(args) != 2:
        raise FormulaFunctionError("COUNTIF", "COUNTIF requires exactly 2 arguments")
    cells = get_string_arg_values(args[:1], grid, visited)
    criteria = get_arg_string(args, 1, grid, visited)
    return sum(1 for v in cells if v == criteria)


def _fn_sumif(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> float:
    """SUMIF(range, criteria [, sum_range]).

    Sums the sum_range cell at the same position as each range cell equal
    to criteria.  Without sum_range the matching range cells are summed.
    """
    if len(args) < 2 or len(args) > 3:
        raise FormulaFunctionError("SUMIF", "SUMIF requires 2-3 arguments")
    cells = get_string_arg_values(args[:1], grid, visited)
    criteria = get_arg_string(args, 1, grid, visited)
    sum_cells = get_string_arg_values(args[2:3], grid, visited) if len(args) == 3 else cells

    total = 0.0
    for i, value in enumerate(cells):
        if value != criteria or i >= len(sum_cells):
            continue
        num = parse_float(sum_cells[i])
        if num is not None:
            total += num
    return total


LOOKUP_FUNCTIONS: dict[str, Any] = {
    "UNIQUE": _fn_unique,
    "COUNTIF": _fn_countif,
    "SUMIF": _fn_sumif,
}
