import math

import pytest

from tableview.engine.dataset import EMPTY, cell_text, load
from tableview.errors import EmptyDatasetError


def test_positional_rows_use_first_row_as_header():
    ds = load([["a", "b"], ["1", "2"], ["3", "4"], ["5", "6"]])
    assert ds.columns == ("a", "b")
    assert len(ds) == 3
    assert ds.rows[1] == {"a": "3", "b": "4"}


def test_header_only_is_valid_and_empty():
    ds = load([["a", "b"]])
    assert ds.columns == ("a", "b")
    assert len(ds) == 0


def test_zero_rows_raises():
    with pytest.raises(EmptyDatasetError):
        load([])


def test_mapping_rows_union_columns_in_first_seen_order():
    ds = load([{"name": "Bob", "age": 30}, {"city": "Oslo", "name": "Ann"}])
    assert ds.columns == ("name", "age", "city")
    # missing cells become the empty sentinel
    assert ds.rows[0]["city"] is EMPTY
    assert ds.rows[1]["age"] is EMPTY


def test_short_and_long_positional_rows_align_to_header():
    ds = load([["a", "b", "c"], ["1"], ["1", "2", "3", "4"]])
    assert ds.rows[0] == {"a": "1", "b": EMPTY, "c": EMPTY}
    assert ds.rows[1] == {"a": "1", "b": "2", "c": "3"}


def test_duplicate_header_collapses_first_wins():
    ds = load([["a", "a", "b"], ["1", "2", "3"]])
    assert ds.columns == ("a", "b")
    assert ds.rows[0] == {"a": "1", "b": "3"}


def test_known_columns_override_derivation():
    ds = load([{"x": 1, "y": 2, "z": 3}], known_columns=["z", "x", "z"])
    assert ds.columns == ("z", "x")
    assert ds.rows[0] == {"z": 3, "x": 1}


def test_nan_is_empty():
    ds = load([{"a": math.nan, "b": None}])
    assert ds.rows[0] == {"a": EMPTY, "b": EMPTY}


@pytest.mark.parametrize(
    "value,expected",
    [(None, ""), (30, "30"), (30.0, "30"), (2.5, "2.5"), (True, "true"), ("Ann", "Ann")],
)
def test_cell_text(value, expected):
    assert cell_text(value) == expected


def test_columns_stable_across_reads():
    ds = load([{"b": 1, "a": 2}, {"c": 3}])
    assert ds.columns == ds.columns == ("b", "a", "c")
