"""Date formula functions: TODAY, NOW, YEAR, MONTH, DAY."""

from __future__ import annotations

import datetime
from typing import Any

from notegrid.formulas.args import get_arg_string
from notegrid.formulas.refs import CellRef, GridValues

_DATE_FORMATS = ("%m/%d/%Y", "%Y/%m/%d")


def _now() -> datetime.datetime:
    """Evaluation-time clock."""
    return datetime.datetime.now()


def _coerce_date(text: str) -> datetime.date | None:
    """Parse a date string; None when it is not a recognised date.

    Accepts ISO dates (``YYYY-MM-DD``), ISO date-times and ``MM/DD/YYYY``.
    """
    s = text.strip()
    if not s:
        return None
    try:
        return datetime.date.fromisoformat(s)
    except ValueError:
        pass
    try:
        return datetime.datetime.fromisoformat(s).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def _date_arg(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> datetime.date:
    """Date from the first argument, falling back to today."""
    return _coerce_date(get_arg_string(args, 0, grid, visited)) or _now().date()


def _fn_today(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> str:
    """TODAY() — current date as ``YYYY-MM-DD``."""
    return _now().date().isoformat()


def _fn_now(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> str:
    """NOW() — current date and time, to the second."""
    return _now().strftime("%Y-%m-%d %H:%M:%S")


def _fn_year(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> int:
    return _date_arg(args, grid, visited).year


def _fn_month(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> int:
    return _date_arg(args, grid, visited).month


def _fn_day(args: list[str], grid: GridValues, visited: frozenset[CellRef]) -> int:
    return _date_arg(args, grid, visited).day


DATE_FUNCTIONS: dict[str, Any] = {
    "TODAY": _fn_today,
    "NOW": _fn_now,
    "YEAR": _fn_year,
    "MONTH": _fn_month,
    "DAY": _fn_day,
}
