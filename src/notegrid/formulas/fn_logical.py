"""Logical formula functions: IF, AND, OR, NOT.

Conditions are coerced numerically: 0 is false, any other number true.
"""

from __future__ import annotations

from typing import Any

from notegrid.formulas.args import evaluate_argument, get_arg_values, strip_quotes
from notegrid.formulas.errors import FormulaFunctionError
from notegrid.formulas.refs import CellRef, GridValues


def _fn_if(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> Any:
    """IF(condition, then_value [, else_value]).

    The chosen branch yields its numeric value when it has one, a nested
    call's result, or else its own text with quotes stripped.  A false
    condition without an else branch gives FALSE.
    """
    if len(args) < 2 or len(args) > 3:
        raise FormulaFunctionError("IF", "IF requires 2-3 arguments")
    condition = get_arg_values(args[:1], grid, visited)
    index = 1 if condition and condition[0] != 0 else 2
    if index >= len(args):
        return False
    branch = args[index]
    nested = evaluate_argument(branch, grid, visited)
    if nested is not None:
        return nested
    values = get_arg_values([branch], grid, visited)
    if values:
        return values[0]
    return strip_quotes(branch)


def _fn_and(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> bool:
    return all(v != 0 for v in get_arg_values(args, grid, visited))


def _fn_or(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> bool:
    return any(v != 0 for v in get_arg_values(args, grid, visited))


def _fn_not(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> bool:
    """NOT(value) — TRUE for 0 (or no value), FALSE otherwise."""
    values = get_arg_values(args[:1], grid, visited)
    return not values or values[0] == 0


LOGICAL_FUNCTIONS: dict[str, Any] = {
    "IF": _fn_if,
    "AND": _fn_and,
    "OR": _fn_or,
    "NOT": _fn_not,
}
