"""Text formula functions.

Positions follow spreadsheet convention: MID's start of 1 is the first
character.
"""

from __future__ import annotations

import math
import re
from typing import Any

from notegrid.formulas.args import get_arg_number, get_arg_string, get_string_arg_values
from notegrid.formulas.errors import FormulaFunctionError
from notegrid.formulas.refs import CellRef, GridValues

_WORD_RE = re.compile(r"\S+")

# Longest text a cell may hold.
MAX_TEXT_LENGTH = 32767


def _text(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> str:
    return get_arg_string(args, 0, grid, visited)


def _count(args: list[str], index: int, grid: GridValues, visited: frozenset[CellRef], func_name: str) -> int:
    n = int(get_arg_number(args, index, grid, visited, default=1, func_name=func_name))
    if n < 0:
        raise FormulaFunctionError(func_name, f"{func_name}: character count must be >= 0")
    return n


def _fn_concat(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> str:
    return "".join(get_string_arg_values(args, grid, visited))


def _fn_upper(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> str:
    return _text(args, grid, visited).upper()


def _fn_lower(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> str:
    return _text(args, grid, visited).lower()


def _fn_proper(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> str:
    """PROPER(text) — capitalise each whitespace-delimited word."""
    return _WORD_RE.sub(
        lambda m: m.group(0)[:1].upper() + m.group(0)[1:].lower(),
        _text(args, grid, visited),
    )


def _fn_trim(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> str:
    """TRIM(text) — strip both ends and collapse inner whitespace runs."""
    return " ".join(_text(args, grid, visited).split())


def _fn_len(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> int:
    return len(_text(args, grid, visited))


def _fn_left(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> str:
    """LEFT(text [, n]) — first n characters (default 1)."""
    return _text(args, grid, visited)[:_count(args, 1, grid, visited, "LEFT")]


def _fn_right(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> str:
    """RIGHT(text [, n]) — last n characters (default 1)."""
    text = _text(args, grid, visited)
    n = _count(args, 1, grid, visited, "RIGHT")
    return text[len(text) - n:] if n < len(text) else text


def _fn_mid(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> str:
    """MID(text, start, length) — substring from a 1-based start."""
    text = _text(args, grid, visited)
    start = int(get_arg_number(args, 1, grid, visited, func_name="MID"))
    length = int(get_arg_number(args, 2, grid, visited, func_name="MID"))
    if start < 1 or length < 0:
        raise FormulaFunctionError("MID", "MID: start must be >= 1 and length >= 0")
    return text[start - 1:start - 1 + length]


def _fn_substitute(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> str:
    """SUBSTITUTE(text, old, new) — replace every occurrence of old."""
    if len(args) < 3:
        raise FormulaFunctionError("SUBSTITUTE", "SUBSTITUTE requires 3 arguments")
    text = get_arg_string(args, 0, grid, visited)
    old = get_arg_string(args, 1, grid, visited)
    new = get_arg_string(args, 2, grid, visited)
    if not old:
        return text
    return text.replace(old, new)


def _fn_rept(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> str:
    """REPT(text, n) — text repeated n times; n is clamped to a whole number >= 0."""
    text = _text(args, grid, visited)
    times = max(0, math.floor(get_arg_number(args, 1, grid, visited, func_name="REPT")))
    if len(text) * times > MAX_TEXT_LENGTH:
        raise FormulaFunctionError("REPT", f"REPT: result longer than {MAX_TEXT_LENGTH} characters")
    return text * times


TEXT_FUNCTIONS: dict[str, Any] = {
    "CONCAT": _fn_concat,
    "CONCATENATE": _fn_concat,
    "UPPER": _fn_upper,
    "LOWER": _fn_lower,
    "PROPER": _fn_proper,
    "TRIM": _fn_trim,
    "LEN": _fn_len,
    "LEFT": _fn_left,
    "RIGHT": _fn_right,
    "MID": _fn_mid,
    "SUBSTITUTE": _fn_substitute,
    "REPT": _fn_rept,
}
