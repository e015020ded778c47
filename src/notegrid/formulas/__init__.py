"""Cell-reference formula evaluation.

Public API::

    from notegrid.formulas import evaluate_formula, evaluate_cell, display_cell
"""

from notegrid.formulas.coerce import (
    FORMULA_MARKER,
    format_value,
    is_formula,
    to_display_string,
    to_number,
)
from notegrid.formulas.errors import (
    ERROR_DIV0,
    ERROR_GENERIC,
    ERROR_NAME,
    ERROR_REF,
    ERROR_SENTINELS,
    ERROR_VALUE,
    CircularReferenceError,
    FormulaError,
    FormulaFunctionError,
    is_error,
)
from notegrid.formulas.evaluator import display_cell, evaluate_cell, evaluate_formula
from notegrid.formulas.functions import FUNCTIONS, get_function
from notegrid.formulas.refs import (
    CellRef,
    col_letter_to_index,
    expand_range,
    index_to_col_letter,
    make_addr,
    parse_cell_ref,
)

__all__ = [
    "CellRef",
    "CircularReferenceError",
    "ERROR_DIV0",
    "ERROR_GENERIC",
    "ERROR_NAME",
    "ERROR_REF",
    "ERROR_SENTINELS",
    "ERROR_VALUE",
    "FORMULA_MARKER",
    "FUNCTIONS",
    "FormulaError",
    "FormulaFunctionError",
    "col_letter_to_index",
    "display_cell",
    "evaluate_cell",
    "evaluate_formula",
    "expand_range",
    "format_value",
    "get_function",
    "index_to_col_letter",
    "is_error",
    "is_formula",
    "make_addr",
    "parse_cell_ref",
    "to_display_string",
    "to_number",
]
