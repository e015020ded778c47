"""Registry of built-in formula functions, keyed by upper-case name."""

from __future__ import annotations

from typing import Any, Callable

from notegrid.formulas.fn_date import DATE_FUNCTIONS
from notegrid.formulas.fn_logical import LOGICAL_FUNCTIONS
from notegrid.formulas.fn_lookup import LOOKUP_FUNCTIONS
from notegrid.formulas.fn_math import MATH_FUNCTIONS
from notegrid.formulas.fn_other import OTHER_FUNCTIONS
from notegrid.formulas.fn_text import TEXT_FUNCTIONS
from notegrid.formulas.refs import CellRef, GridValues

FormulaFunction = Callable[[list[str], GridValues, frozenset[CellRef]], Any]

FUNCTIONS: dict[str, FormulaFunction] = {
    **MATH_FUNCTIONS,
    **LOGICAL_FUNCTIONS,
    **TEXT_FUNCTIONS,
    **LOOKUP_FUNCTIONS,
    **DATE_FUNCTIONS,
    **OTHER_FUNCTIONS,
}


def get_function(name: str) -> FormulaFunction | None:
    """Look up a function by name (case-insensitive); None if unknown."""
    return FUNCTIONS.get(name.upper())
