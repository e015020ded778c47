"""Formula evaluation over a grid of raw cell strings.

A formula body (the text after ``=``) is tried against five forms, in
order:

1. Function call spanning the whole body: ``SUM(A1:A3)``
2. A single cell reference: ``B2``
3. Simple arithmetic: ``A1 * B1`` or ``A1 / 2``
4. A numeric literal: ``42``
5. Anything else is ``#VALUE!``

Cells already on the evaluation path are tracked in an immutable
``visited`` set passed down each call.  Re-entering one of them makes
that cell read as ``#REF!``; a cell on the cycle itself displays ``#REF!``.
"""

from __future__ import annotations

import re
from typing import Any

from notegrid.formulas.args import parse_arguments
from notegrid.formulas.coerce import FORMULA_MARKER, format_value, parse_number, ref_to_number
from notegrid.formulas.errors import (
    ERROR_DIV0,
    ERROR_GENERIC,
    ERROR_NAME,
    ERROR_REF,
    ERROR_VALUE,
    CircularReferenceError,
)
from notegrid.formulas.functions import get_function
from notegrid.formulas.refs import CellRef, GridValues, cell_raw, parse_cell_ref
from notegrid.logging.events import EventType, emit_info, emit_warning

_FUNC_CALL_RE = re.compile(r"^([A-Z]+)\((.*)\)$", re.IGNORECASE | re.DOTALL)
_ARITHMETIC_RE = re.compile(
    r"^([A-Z]+[0-9]+)\s*([-+*/])\s*([A-Z]+[0-9]+|-?[0-9]+(?:\.[0-9]+)?)$",
    re.IGNORECASE,
)


def is_expression(text: str) -> bool:
    """True if *text* is a function call or simple arithmetic expression."""
    body = text.strip()
    return bool(_FUNC_CALL_RE.match(body) or _ARITHMETIC_RE.match(body))


def evaluate_formula(
    formula: str,
    grid: GridValues,
    visited: frozenset[CellRef] = frozenset(),
) -> Any:
    """Evaluate a formula string against *grid*.

    Args:
        formula: Formula text, with or without the leading ``=``.
        grid: Row-major 2-D sequence of raw cell strings.
        visited: Cells already on the evaluation path.

    Returns:
        A number, a string, a bool, or one of the error sentinels.
        Never raises.
    """
    try:
        return evaluate_body(formula, grid, visited)
    except CircularReferenceError as exc:
        emit_info(
            EventType.circular_reference,
            str(exc),
            {"addr": exc.addr, "formula": formula},
        )
        return ERROR_REF
    except RecursionError:
        emit_warning(
            EventType.function_error,
            "Reference chain too deep to evaluate",
            {"formula": formula},
        )
        return ERROR_GENERIC


def evaluate_cell(grid: GridValues, row: int, col: int) -> Any:
    """Evaluate the cell at (*row*, *col*).

    The cell's own coordinate starts the evaluation path, so a formula
    that reaches back to it evaluates to ``#REF!``.  Literals are
    returned unchanged and out-of-grid coordinates give ``""``.
    """
    ref = CellRef(col=col, row=row)
    raw = cell_raw(grid, ref)
    if raw is None:
        return ""
    if not raw.startswith(FORMULA_MARKER):
        return raw
    return evaluate_formula(raw, grid, frozenset({ref}))


def display_cell(grid: GridValues, row: int, col: int) -> str:
    """Display string of the cell at (*row*, *col*)."""
    return format_value(evaluate_cell(grid, row, col))


def evaluate_body(formula: str, grid: GridValues, visited: frozenset[CellRef]) -> Any:
    """Evaluate *formula*, letting ``CircularReferenceError`` propagate.

    Used for nested evaluation so that a cycle anywhere below aborts the
    whole top-level evaluation.
    """
    body = formula[len(FORMULA_MARKER):] if formula.startswith(FORMULA_MARKER) else formula
    body = body.strip()

    m = _FUNC_CALL_RE.match(body)
    if m:
        return _eval_func(m.group(1).upper(), m.group(2), grid, visited)

    ref = parse_cell_ref(body)
    if ref is not None:
        return ref_to_number(grid, ref, visited)

    m = _ARITHMETIC_RE.match(body)
    if m:
        return _eval_arithmetic(m.group(1), m.group(2), m.group(3), grid, visited)

    num = parse_number(body)
    if num is not None:
        return num

    return ERROR_VALUE


def _eval_func(name: str, args_text: str, grid: GridValues, visited: frozenset[CellRef]) -> Any:
    """Look up and invoke a registered function."""
    fn = get_function(name)
    if fn is None:
        return ERROR_NAME
    args = parse_arguments(args_text)
    try:
        return fn(args, grid, visited)
    except CircularReferenceError:
        raise
    except RecursionError:
        raise
    except Exception as exc:
        emit_warning(
            EventType.function_error,
            f"{name} failed: {exc}",
            {"function": name, "args": args},
            error_code="function_raised",
        )
        return ERROR_GENERIC


def _eval_arithmetic(
    left_text: str,
    op: str,
    right_text: str,
    grid: GridValues,
    visited: frozenset[CellRef],
) -> Any:
    """Evaluate ``<ref> <op> <ref-or-number>``."""
    left_ref = parse_cell_ref(left_text)
    if left_ref is None:
        return ERROR_VALUE
    left = ref_to_number(grid, left_ref, visited)

    right_ref = parse_cell_ref(right_text)
    if right_ref is not None:
        right = ref_to_number(grid, right_ref, visited)
    else:
        right = float(right_text)

    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if right == 0:
        return ERROR_DIV0
    return left / right
