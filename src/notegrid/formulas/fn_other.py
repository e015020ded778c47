"""Randomness and type-test formula functions."""

from __future__ import annotations

import math
import random
from typing import Any

from notegrid.formulas.args import get_arg_number, get_string_arg_values
from notegrid.formulas.coerce import parse_number
from notegrid.formulas.errors import FormulaFunctionError
from notegrid.formulas.refs import CellRef, GridValues


def _fn_rand(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> float:
    return random.random()


def _fn_randbetween(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> int:
    """RANDBETWEEN(low, high) — random integer, both bounds inclusive."""
    low = math.ceil(get_arg_number(args, 0, grid, visited, func_name="RANDBETWEEN"))
    high = math.floor(get_arg_number(args, 1, grid, visited, func_name="RANDBETWEEN"))
    if low > high:
        raise FormulaFunctionError("RANDBETWEEN", f"RANDBETWEEN: {low} is greater than {high}")
    return random.randint(low, high)


def _fn_isnumber(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> bool:
    """ISNUMBER(value) — TRUE if the value's text is a complete number."""
    values = get_string_arg_values(args[:1], grid, visited)
    return bool(values) and parse_number(values[0]) is not None


def _fn_isblank(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> bool:
    """ISBLANK(value) — TRUE if the extracted value is exactly empty."""
    values = get_string_arg_values(args[:1], grid, visited)
    return bool(values) and values[0] == ""


OTHER_FUNCTIONS: dict[str, Any] = {
    "RAND": _fn_rand,
    "RANDBETWEEN": _fn_randbetween,
    "ISNUMBER": _fn_isnumber,
    "ISBLANK": _fn_isblank,
}
