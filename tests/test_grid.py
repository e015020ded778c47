"""Tests for the grid model and its serialised blob."""

from __future__ import annotations

import json
import random

import polars as pl
import pytest

from notegrid.grid import DEFAULT_COLS, DEFAULT_ROWS, Grid


def _blob(rows: list[list[str]]) -> dict:
    return {"data": [[{"value": v} for v in row] for row in rows]}


# ────────────────────────────────────────────────────────────────
# Construction and deserialisation
# ────────────────────────────────────────────────────────────────


class TestFromBlob:
    def test_dict_blob(self) -> None:
        grid = Grid.from_blob(_blob([["1", "=A1*2"], ["x", ""]]))
        assert grid.values == [["1", "=A1*2"], ["x", ""]]
        assert (grid.n_rows, grid.n_cols) == (2, 2)

    def test_json_blob(self) -> None:
        grid = Grid.from_blob(json.dumps(_blob([["a", "b", "c"]])))
        assert grid.values == [["a", "b", "c"]]

    def test_missing_value_and_scalars(self) -> None:
        grid = Grid.from_blob({"data": [[{}, {"value": 5}, "bare", {"value": None}]]})
        assert grid.values == [["", "5", "bare", ""]]

    @pytest.mark.parametrize(
        "blob",
        [
            None,
            "",
            "not json",
            "[1, 2]",
            {},
            {"data": []},
            {"data": [[]]},
            {"data": [[{"value": "a"}], [{"value": "b"}, {"value": "c"}]]},
            {"data": [[{"value": {"nested": 1}}]]},
            {"data": "oops"},
            42,
        ],
    )
    def test_malformed_falls_back_to_default(self, blob) -> None:
        grid = Grid.from_blob(blob)
        assert grid == Grid.empty(DEFAULT_ROWS, DEFAULT_COLS)

    def test_custom_default_size(self) -> None:
        grid = Grid.from_blob("garbage", default_rows=5, default_cols=2)
        assert (grid.n_rows, grid.n_cols) == (5, 2)

    def test_constructor_rejects_ragged(self) -> None:
        with pytest.raises(ValueError):
            Grid([["a"], ["b", "c"]])
        with pytest.raises(ValueError):
            Grid([])

    def test_round_trip(self) -> None:
        grid = Grid([["1", "=SUM(A1:A1)"], ["", "text"]])
        assert Grid.from_blob(grid.to_json()) == grid
        assert Grid.from_blob(grid.to_blob()) == grid


# ────────────────────────────────────────────────────────────────
# Access
# ────────────────────────────────────────────────────────────────


class TestAccess:
    def test_get_set(self) -> None:
        grid = Grid.empty(2, 2)
        grid.set(1, 0, "=A1")
        assert grid.get(1, 0) == "=A1"
        assert grid.get(2, 0) is None
        assert grid.get(-1, 0) is None

    def test_set_outside_raises(self) -> None:
        with pytest.raises(IndexError):
            Grid.empty(1, 1).set(0, 1, "x")


# ────────────────────────────────────────────────────────────────
# Structure
# ────────────────────────────────────────────────────────────────


class TestStructure:
    def test_add_and_remove(self) -> None:
        grid = Grid([["a", "b"]])
        assert grid.add_row()
        assert grid.values == [["a", "b"], ["", ""]]
        assert grid.add_column()
        assert grid.values == [["a", "b", ""], ["", "", ""]]
        assert grid.remove_row()
        assert grid.remove_column()
        assert grid.values == [["a", "b"]]

    def test_never_below_one_by_one(self) -> None:
        grid = Grid.empty(1, 1)
        assert not grid.remove_row()
        assert not grid.remove_column()
        assert (grid.n_rows, grid.n_cols) == (1, 1)

    def test_rectangular_after_any_sequence(self) -> None:
        rng = random.Random(1234)
        grid = Grid.empty(2, 2)
        ops = [grid.add_row, grid.remove_row, grid.add_column, grid.remove_column]
        for _ in range(500):
            rng.choice(ops)()
            widths = {len(row) for row in grid.values}
            assert len(widths) == 1
            assert grid.n_rows >= 1 and grid.n_cols >= 1


# ────────────────────────────────────────────────────────────────
# Views
# ────────────────────────────────────────────────────────────────


class TestViews:
    def test_display_values(self) -> None:
        grid = Grid([["1", "2", "=SUM(A1:B1)"]])
        assert grid.display_values() == [["1", "2", "3"]]

    def test_to_frame(self) -> None:
        grid = Grid([["1", "=A1*2"], ["x", ""]])
        df = grid.to_frame()
        assert df.columns == ["A", "B"]
        assert df["B"].to_list() == ["2", ""]
        assert df.schema["A"] == pl.Utf8

    def test_to_frame_raw(self) -> None:
        grid = Grid([["1", "=A1*2"]])
        assert grid.to_frame(display=False)["B"].to_list() == ["=A1*2"]
