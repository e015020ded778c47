"""Math and aggregate formula functions."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any

import polars as pl

from notegrid.formulas.args import get_arg_number, get_arg_values, get_string_arg_values
from notegrid.formulas.errors import FormulaFunctionError
from notegrid.formulas.refs import CellRef, GridValues

# Significant decimal digits a double can carry.
_FLOAT_DIGITS = 17


def _numbers(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> list[float]:
    return get_arg_values(args, grid, visited)


def _fn_sum(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> float:
    """SUM(value1, ...) — total of all numeric arguments."""
    return sum(_numbers(args, grid, visited))


def _fn_average(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> float:
    """AVERAGE(value1, ...) — arithmetic mean; 0 when there are no numbers."""
    values = _numbers(args, grid, visited)
    if not values:
        return 0.0
    return sum(values) / len(values)


def _fn_count(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> int:
    return len(_numbers(args, grid, visited))


def _fn_counta(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> int:
    """COUNTA(value1, ...) — number of non-empty values."""
    return sum(1 for v in get_string_arg_values(args, grid, visited) if v != "")


def _fn_max(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> float:
    values = _numbers(args, grid, visited)
    return max(values) if values else 0.0


def _fn_min(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> float:
    values = _numbers(args, grid, visited)
    return min(values) if values else 0.0


def _fn_abs(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> float:
    return abs(get_arg_number(args, 0, grid, visited, func_name="ABS"))


def _fn_round(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> float:
    """ROUND(value [, decimals]) — round half away from zero, default 0 decimals."""
    value = get_arg_number(args, 0, grid, visited, func_name="ROUND")
    digits = int(get_arg_number(args, 1, grid, visited, default=0))
    if not math.isfinite(value):
        return value
    dec = Decimal(repr(value))
    # significant digits left after rounding
    kept = dec.adjusted() + 1 + digits
    if kept > _FLOAT_DIGITS:
        return value
    if kept < 0:
        return 0.0
    with localcontext() as ctx:
        ctx.prec = kept + 2
        quantum = Decimal(1).scaleb(-digits)
        return float(dec.quantize(quantum, rounding=ROUND_HALF_UP))


def _significance(args: list[str], grid: GridValues, visited: frozenset[CellRef], func_name: str) -> float:
    sig = get_arg_number(args, 1, grid, visited, default=1)
    if sig == 0:
        raise FormulaFunctionError(func_name, f"{func_name}: significance must be non-zero")
    return sig


def _fn_floor(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> float:
    """FLOOR(value [, significance]) — round down to a multiple of significance."""
    value = get_arg_number(args, 0, grid, visited, func_name="FLOOR")
    sig = _significance(args, grid, visited, "FLOOR")
    return math.floor(value / sig) * sig


def _fn_ceiling(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> float:
    """CEILING(value [, significance]) — round up to a multiple of significance."""
    value = get_arg_number(args, 0, grid, visited, func_name="CEILING")
    sig = _significance(args, grid, visited, "CEILING")
    return math.ceil(value / sig) * sig


def _fn_sqrt(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> float:
    value = get_arg_number(args, 0, grid, visited, func_name="SQRT")
    if value < 0:
        raise FormulaFunctionError("SQRT", "SQRT of a negative number")
    return math.sqrt(value)


def _fn_power(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> float:
    base = get_arg_number(args, 0, grid, visited, func_name="POWER")
    exp = get_arg_number(args, 1, grid, visited, func_name="POWER")
    return math.pow(base, exp)


def _fn_mod(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> float:
    """MOD(number, divisor) — remainder with the sign of the divisor."""
    number = get_arg_number(args, 0, grid, visited, func_name="MOD")
    divisor = get_arg_number(args, 1, grid, visited, func_name="MOD")
    if divisor == 0:
        raise FormulaFunctionError("MOD", "MOD by zero")
    return number % divisor


def _fn_product(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> float:
    values = _numbers(args, grid, visited)
    if not values:
        return 0.0
    return math.prod(values)


def _fn_median(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> float:
    """MEDIAN(value1, ...) — middle value; even counts average the middle pair."""
    values = _numbers(args, grid, visited)
    if not values:
        return 0.0
    return float(pl.Series(values, dtype=pl.Float64).median())


def _fn_stdev(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> float:
    """STDEV(value1, ...) — sample standard deviation (n-1); 0 below 2 values."""
    values = _numbers(args, grid, visited)
    if len(values) < 2:
        return 0.0
    return float(pl.Series(values, dtype=pl.Float64).std(ddof=1))


def _fn_var(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> float:
    """VAR(value1, ...) — sample variance (n-1); 0 below 2 values."""
    values = _numbers(args, grid, visited)
    if len(values) < 2:
        return 0.0
    return float(pl.Series(values, dtype=pl.Float64).var(ddof=1))


MATH_FUNCTIONS: dict[str, Any] = {
    "SUM": _fn_sum,
    "AVERAGE": _fn_average,
    "COUNT": _fn_count,
    "COUNTA": _fn_counta,
    "MAX": _fn_max,
    "MIN": _fn_min,
    "ABS": _fn_abs,
    "ROUND": _fn_round,
    "FLOOR": _fn_floor,
    "CEILING": _fn_ceiling,
    "SQRT": _fn_sqrt,
    "POWER": _fn_power,
    "MOD": _fn_mod,
    "PRODUCT": _fn_product,
    "MEDIAN": _fn_median,
    "STDEV": _fn_stdev,
    "VAR": _fn_var,
}
