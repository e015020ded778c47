"""Error sentinels and internal exception types for formula evaluation.

Sentinels are the display strings shown in place of a value.  The
exceptions are internal: the evaluator's public functions convert them
into sentinels so that nothing raises past the evaluator boundary.
"""

from __future__ import annotations

from typing import Any

ERROR_GENERIC = "#ERROR!"
ERROR_NAME = "#NAME?"
ERROR_REF = "#REF!"
ERROR_VALUE = "#VALUE!"
ERROR_DIV0 = "#DIV/0!"

ERROR_SENTINELS: frozenset[str] = frozenset(
    {ERROR_GENERIC, ERROR_NAME, ERROR_REF, ERROR_VALUE, ERROR_DIV0}
)


def is_error(value: Any) -> bool:
    """Return True if *value* is one of the error sentinels."""
    return isinstance(value, str) and value in ERROR_SENTINELS


class FormulaError(Exception):
    """Base class for all formula-related errors."""


class FormulaFunctionError(FormulaError):
    """A built-in function could not compute a result.

    Attributes:
        func_name: The function that caused the error.
    """

    def __init__(self, func_name: str, message: str | None = None) -> None:
        self.func_name = func_name
        msg = message or f"Function {func_name!r} failed"
        super().__init__(msg)


class CircularReferenceError(FormulaError):
    """A reference re-entered a cell already on the evaluation path.

    Attributes:
        addr: A1-style address of the re-entered cell.
    """

    def __init__(self, addr: str) -> None:
        self.addr = addr
        super().__init__(f"Circular cell reference at {addr}")
