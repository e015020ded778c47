"""Argument splitting and extraction for function calls.

Arguments arrive as raw text.  Extraction flattens them into numeric or
string value lists: ranges expand row-major, references resolve against
the current grid and nested calls are evaluated.  Arguments that cannot
be resolved are dropped rather than zero-filled.
"""

from __future__ import annotations

from typing import Any

from notegrid.formulas.coerce import (
    format_value,
    parse_float,
    ref_to_number,
    resolve_cell,
    to_numeric,
)
from notegrid.formulas.errors import FormulaFunctionError
from notegrid.formulas.refs import (
    CellRef,
    GridValues,
    cell_raw,
    parse_cell_ref,
    parse_range,
    parse_string_range,
)

_QUOTES = ("\"", "'")


def parse_arguments(args_text: str) -> list[str]:
    """Split an argument list on top-level commas.

    Commas inside nested parentheses or quoted strings do not split.  A
    string runs from an opening ``"`` or ``'`` to the next matching
    quote.  Each argument is trimmed and empty arguments are dropped.
    """
    args: list[str] = []
    current: list[str] = []
    depth = 0
    quote: str | None = None
    for ch in args_text:
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        elif ch == "," and depth == 0:
            args.append("".join(current))
            current = []
            continue
        current.append(ch)
    args.append("".join(current))
    return [a.strip() for a in args if a.strip()]


def strip_quotes(text: str) -> str:
    """Remove one layer of surrounding straight double or single quotes."""
    if len(text) >= 2 and text[0] == text[-1] and text[0] in _QUOTES:
        return text[1:-1]
    return text


def _is_quoted(text: str) -> bool:
    return len(text) >= 2 and text[0] == text[-1] and text[0] in _QUOTES


def evaluate_argument(arg: str, grid: GridValues, visited: frozenset[CellRef]) -> Any:
    """Evaluate *arg* if it is a nested expression; None otherwise."""
    from notegrid.formulas.evaluator import evaluate_body, is_expression

    if not is_expression(arg):
        return None
    return evaluate_body(arg, grid, visited)


def get_arg_values(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> list[float]:
    """Flatten *args* into numbers.

    Args:
        args: Raw argument texts from ``parse_arguments``.
        grid: Current grid snapshot.
        visited: Cells on the current evaluation path.

    Returns:
        Numbers in argument order; ranges contribute their numeric cells
        row-major.  Unresolvable arguments are omitted.
    """
    values: list[float] = []
    for arg in args:
        if _is_quoted(arg):
            continue
        nested = evaluate_argument(arg, grid, visited)
        if nested is not None:
            num = to_numeric(nested)
            if num is not None:
                values.append(num)
            continue
        if ":" in arg:
            values.extend(parse_range(arg, grid, visited))
            continue
        ref = parse_cell_ref(arg)
        if ref is not None:
            if cell_raw(grid, ref) is not None:
                values.append(ref_to_number(grid, ref, visited))
            continue
        num = parse_float(arg)
        if num is not None:
            values.append(num)
    return values


def get_string_arg_values(
    args: list[str], grid: GridValues, visited: frozenset[CellRef]
) -> list[str]:
    """Flatten *args* into strings.

    Ranges contribute every in-grid cell (empty ones included), references
    their evaluated text, and any other argument its own text with one
    layer of quotes stripped.
    """
    values: list[str] = []
    for arg in args:
        if _is_quoted(arg):
            values.append(strip_quotes(arg))
            continue
        nested = evaluate_argument(arg, grid, visited)
        if nested is not None:
            values.append(format_value(nested))
            continue
        if ":" in arg:
            values.extend(parse_string_range(arg, grid, visited))
            continue
        ref = parse_cell_ref(arg)
        if ref is not None:
            value = resolve_cell(grid, ref, visited)
            if value is not None:
                values.append(format_value(value))
            continue
        values.append(arg)
    return values


def get_arg_number(
    args: list[str],
    index: int,
    grid: GridValues,
    visited: frozenset[CellRef],
    default: float | None = None,
    func_name: str = "",
) -> float:
    """First numeric value of the argument at *index*.

    Raises:
        FormulaFunctionError: If the argument yields no number and there
            is no *default*.
    """
    values = get_arg_values(args[index:index + 1], grid, visited)
    if values:
        return values[0]
    if default is None:
        raise FormulaFunctionError(
            func_name, f"{func_name}: argument {index + 1} is missing or not numeric"
        )
    return default


def get_arg_string(
    args: list[str],
    index: int,
    grid: GridValues,
    visited: frozenset[CellRef],
    default: str = "",
) -> str:
    """First string value of the argument at *index*, or *default*."""
    values = get_string_arg_values(args[index:index + 1], grid, visited)
    return values[0] if values else default
