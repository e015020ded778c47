"""Tests for the built-in function library: math, logical, text, lookup, date, other."""

from __future__ import annotations

import datetime
from typing import Any
from unittest.mock import patch

import pytest

from notegrid.formulas import ERROR_GENERIC, ERROR_NAME, FUNCTIONS, evaluate_formula, get_function


# ────────────────────────────────────────────────────────────────
# Helpers
# ────────────────────────────────────────────────────────────────


def _eval(formula: str, grid: list[list[str]] | None = None) -> Any:
    """Evaluate a formula string against *grid*."""
    return evaluate_formula(formula, grid or [[""]])


def _column(*values: str) -> list[list[str]]:
    """Single-column grid, one value per row."""
    return [[v] for v in values]


# ────────────────────────────────────────────────────────────────
# Registry
# ────────────────────────────────────────────────────────────────


class TestRegistry:
    def test_keys_are_upper_case(self) -> None:
        assert all(name == name.upper() for name in FUNCTIONS)

    def test_lookup_is_case_insensitive(self) -> None:
        assert get_function("sum") is FUNCTIONS["SUM"]

    def test_unknown(self) -> None:
        assert get_function("FAKE") is None
        assert _eval("=FAKE(1,2)") == ERROR_NAME

    def test_expected_functions_registered(self) -> None:
        expected = {
            "SUM", "AVERAGE", "COUNT", "COUNTA", "MAX", "MIN", "ABS", "ROUND", "FLOOR",
            "CEILING", "SQRT", "POWER", "MOD", "PRODUCT", "MEDIAN", "STDEV", "VAR",
            "IF", "AND", "OR", "NOT",
            "CONCAT", "CONCATENATE", "UPPER", "LOWER", "PROPER", "TRIM", "LEN", "LEFT",
            "RIGHT", "MID", "SUBSTITUTE", "REPT",
            "UNIQUE", "COUNTIF", "SUMIF",
            "TODAY", "NOW", "YEAR", "MONTH", "DAY",
            "RAND", "RANDBETWEEN", "ISNUMBER", "ISBLANK",
        }
        assert expected <= set(FUNCTIONS)


# ────────────────────────────────────────────────────────────────
# Math / aggregate
# ────────────────────────────────────────────────────────────────


class TestMath:
    def test_sum_range(self) -> None:
        assert _eval("=SUM(A1:A3)", _column("1", "2", "3")) == 6

    def test_sum_lowercase(self) -> None:
        assert _eval("=sum(a1:a3)", _column("1", "2", "3")) == 6

    def test_sum_nested(self) -> None:
        assert _eval("=SUM(MAX(A1,A2),10)", _column("3", "7")) == 17

    def test_average(self) -> None:
        assert _eval("=AVERAGE(A1:A4)", _column("2", "4", "x", "")) == 3

    def test_average_empty_is_zero(self) -> None:
        assert _eval("=AVERAGE(A1:A2)", _column("", "")) == 0

    def test_count_and_counta(self) -> None:
        grid = _column("1", "2", "x", "")
        assert _eval("=COUNT(A1:A4)", grid) == 2
        assert _eval("=COUNTA(A1:A4)", grid) == 3

    def test_max_min(self) -> None:
        grid = _column("5", "-2", "9")
        assert _eval("=MAX(A1:A3)", grid) == 9
        assert _eval("=MIN(A1:A3)", grid) == -2
        assert _eval("=MAX(B1:B3)", grid) == 0

    def test_abs(self) -> None:
        assert _eval("=ABS(-3)") == 3

    def test_abs_without_argument_errors(self) -> None:
        assert _eval("=ABS()") == ERROR_GENERIC

    @pytest.mark.parametrize(
        "formula,expected",
        [
            ("=ROUND(2.345, 2)", 2.35),
            ("=ROUND(2.5)", 3),
            ("=ROUND(-2.5)", -3),
            ("=ROUND(1234, -2)", 1200),
            ("=ROUND(3.14159, 3)", 3.142),
        ],
    )
    def test_round(self, formula: str, expected: float) -> None:
        assert _eval(formula) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "formula,expected",
        [
            ("=ROUND(1.5, 40)", 1.5),
            ("=ROUND(123456789012345678901234567890, 2)", 123456789012345678901234567890.0),
            ("=ROUND(0.000001, 2)", 0.0),
            ("=ROUND(9.96, 1)", 10.0),
            ("=ROUND(0.5)", 1.0),
        ],
    )
    def test_round_extreme_precision(self, formula: str, expected: float) -> None:
        assert _eval(formula) == expected

    def test_floor_ceiling(self) -> None:
        assert _eval("=FLOOR(2.7)") == 2
        assert _eval("=CEILING(2.1)") == 3
        assert _eval("=FLOOR(7, 5)") == 5
        assert _eval("=CEILING(7, 5)") == 10
        assert _eval("=FLOOR(7, 0)") == ERROR_GENERIC

    def test_sqrt(self) -> None:
        assert _eval("=SQRT(16)") == 4
        assert _eval("=SQRT(-4)") == ERROR_GENERIC

    def test_power(self) -> None:
        assert _eval("=POWER(2, 10)") == 1024

    def test_mod(self) -> None:
        assert _eval("=MOD(7, 3)") == 1
        assert _eval("=MOD(-3, 5)") == 2
        assert _eval("=MOD(1, 0)") == ERROR_GENERIC

    def test_product(self) -> None:
        assert _eval("=PRODUCT(2, 3, 4)") == 24
        assert _eval("=PRODUCT()") == 0

    def test_median(self) -> None:
        assert _eval("=MEDIAN(1, 3, 2)") == 2
        assert _eval("=MEDIAN(4, 1, 3, 2)") == 2.5
        assert _eval("=MEDIAN()") == 0

    def test_stdev_var_sample(self) -> None:
        args = "2,4,4,4,5,5,7,9"
        assert _eval(f"=VAR({args})") == pytest.approx(32 / 7)
        assert _eval(f"=STDEV({args})") == pytest.approx((32 / 7) ** 0.5)

    def test_stdev_var_below_two_values(self) -> None:
        assert _eval("=STDEV(5)") == 0
        assert _eval("=VAR()") == 0


# ────────────────────────────────────────────────────────────────
# Logical
# ────────────────────────────────────────────────────────────────


class TestLogical:
    def test_if_truthy_string_branch(self) -> None:
        assert _eval('=IF(A1,"yes","no")', [["5"]]) == "yes"

    def test_if_falsy_string_branch(self) -> None:
        assert _eval('=IF(A1,"yes","no")', [["0"]]) == "no"

    def test_if_numeric_branch(self) -> None:
        assert _eval("=IF(A1, 10, 20)", [["1"]]) == 10

    def test_if_without_else(self) -> None:
        assert _eval("=IF(0, 1)") is False

    def test_if_nested_branch(self) -> None:
        assert _eval('=IF(1, UPPER("abc"), "x")') == "ABC"

    def test_if_arity(self) -> None:
        assert _eval("=IF(1)") == ERROR_GENERIC

    def test_and_or_not(self) -> None:
        assert _eval("=AND(1, 2)") is True
        assert _eval("=AND(1, 0)") is False
        assert _eval("=OR(0, 0)") is False
        assert _eval("=OR(0, 2)") is True
        assert _eval("=NOT(0)") is True
        assert _eval("=NOT(3)") is False

    def test_if_on_logical_result(self) -> None:
        assert _eval('=IF(AND(A1, A2), "both", "not both")', _column("1", "0")) == "not both"


# ────────────────────────────────────────────────────────────────
# Text
# ────────────────────────────────────────────────────────────────


class TestText:
    def test_concat(self) -> None:
        assert _eval('=CONCAT("a", "b", A1)', [["c"]]) == "abc"
        assert _eval('=CONCATENATE(A1:A2, "!")', _column("x", "y")) == "xy!"
        assert _eval("=CONCAT('a,b', \"c\")") == "a,bc"

    def test_case(self) -> None:
        assert _eval('=UPPER("abc")') == "ABC"
        assert _eval('=LOWER("AbC")') == "abc"
        assert _eval('=PROPER("hello wORLD")') == "Hello World"

    def test_trim(self) -> None:
        assert _eval('=TRIM("  a   b ")') == "a b"

    def test_len(self) -> None:
        assert _eval('=LEN("hello")') == 5
        assert _eval("=LEN(A1)", [["abc"]]) == 3

    def test_left_right(self) -> None:
        assert _eval('=LEFT("hello", 2)') == "he"
        assert _eval('=LEFT("hello")') == "h"
        assert _eval('=RIGHT("hello", 3)') == "llo"
        assert _eval('=RIGHT("hi", 0)') == ""
        assert _eval('=RIGHT("hi", 5)') == "hi"

    def test_mid_is_one_based(self) -> None:
        assert _eval('=MID("hello", 1, 2)') == "he"
        assert _eval('=MID("hello", 2, 3)') == "ell"
        assert _eval('=MID("hello", 0, 3)') == ERROR_GENERIC

    def test_substitute(self) -> None:
        assert _eval('=SUBSTITUTE("a-b-c", "-", "+")') == "a+b+c"

    def test_rept_clamps_count(self) -> None:
        assert _eval('=REPT("ab", 2.7)') == "abab"
        assert _eval('=REPT("ab", -1)') == ""

    def test_rept_result_length_capped(self) -> None:
        assert _eval('=REPT("ab", 1e9)') == ERROR_GENERIC
        assert len(_eval('=REPT("a", 32767)')) == 32767
        assert _eval('=REPT("", 1e9)') == ""


# ────────────────────────────────────────────────────────────────
# Lookup / grouping
# ────────────────────────────────────────────────────────────────


class TestLookup:
    def test_unique(self) -> None:
        assert _eval("=UNIQUE(A1:A4)", _column("a", "b", "a", "")) == "a, b"

    def test_unique_empty(self) -> None:
        assert _eval("=UNIQUE(A1:A2)", _column("", "")) == ""

    def test_countif(self) -> None:
        assert _eval('=COUNTIF(A1:A4, "a")', _column("a", "b", "a", "")) == 2

    def test_countif_arity(self) -> None:
        assert _eval("=COUNTIF(A1:A4)", _column("a")) == ERROR_GENERIC

    def test_sumif_with_sum_range(self) -> None:
        grid = [["x", "1"], ["y", "2"], ["x", "3"]]
        assert _eval('=SUMIF(A1:A3, "x", B1:B3)', grid) == 4

    def test_sumif_same_range(self) -> None:
        assert _eval('=SUMIF(A1:A3, "5")', _column("5", "3", "5")) == 10


# ────────────────────────────────────────────────────────────────
# Date
# ────────────────────────────────────────────────────────────────


_FIXED_NOW = datetime.datetime(2024, 3, 15, 10, 30, 45, 123456)


class TestDate:
    @pytest.fixture(autouse=True)
    def _fixed_clock(self):
        with patch("notegrid.formulas.fn_date._now", return_value=_FIXED_NOW):
            yield

    def test_today(self) -> None:
        assert _eval("=TODAY()") == "2024-03-15"

    def test_now_to_seconds(self) -> None:
        assert _eval("=NOW()") == "2024-03-15 10:30:45"

    def test_parts_of_explicit_date(self) -> None:
        assert _eval('=YEAR("2023-07-04")') == 2023
        assert _eval('=MONTH("07/04/2023")') == 7
        assert _eval("=DAY(A1)", [["2023-12-25"]]) == 25

    def test_parts_fall_back_to_today(self) -> None:
        assert _eval("=DAY()") == 15
        assert _eval('=YEAR("garbage")') == 2024

    def test_nested_today(self) -> None:
        assert _eval("=MONTH(TODAY())") == 3


# ────────────────────────────────────────────────────────────────
# Other
# ────────────────────────────────────────────────────────────────


class TestOther:
    def test_rand(self) -> None:
        value = _eval("=RAND()")
        assert 0 <= value < 1

    def test_randbetween_inclusive(self) -> None:
        seen = {_eval("=RANDBETWEEN(1, 3)") for _ in range(200)}
        assert seen <= {1, 2, 3}
        assert _eval("=RANDBETWEEN(5, 5)") == 5

    def test_randbetween_bounds_reversed(self) -> None:
        assert _eval("=RANDBETWEEN(5, 1)") == ERROR_GENERIC

    def test_isnumber(self) -> None:
        assert _eval("=ISNUMBER(A1)", [["12"]]) is True
        assert _eval("=ISNUMBER(A1)", [["abc"]]) is False
        assert _eval("=ISNUMBER(5)") is True

    def test_isblank(self) -> None:
        assert _eval("=ISBLANK(A1)", [[""]]) is True
        assert _eval("=ISBLANK(A1)", [["x"]]) is False
