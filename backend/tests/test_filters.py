from tableview.engine.dataset import load
from tableview.engine.filters import apply_filters, distinct_values


def _people():
    return load(
        [
            {"name": "Alice", "city": "Oslo", "age": 31},
            {"name": "Bob", "city": "Bergen", "age": 45},
            {"name": "alina", "city": "oslo", "age": None},
            {"name": "Carl", "city": "Trondheim", "age": 31},
        ]
    )


def test_empty_filter_set_passes_every_row_in_order():
    ds = _people()
    assert apply_filters(ds, {}) == list(ds.rows)
    assert apply_filters(ds, {"name": ""}) == list(ds.rows)
    assert apply_filters(ds, None) == list(ds.rows)


def test_substring_case_insensitive():
    ds = _people()
    out = apply_filters(ds, {"name": "AL"})
    assert [r["name"] for r in out] == ["Alice", "alina"]


def test_numbers_match_on_text_form():
    ds = _people()
    out = apply_filters(ds, {"age": "31"})
    assert [r["name"] for r in out] == ["Alice", "Carl"]


def test_missing_cell_only_matches_empty_filter():
    ds = _people()
    out = apply_filters(ds, {"age": "1"})
    assert "alina" not in [r["name"] for r in out]


def test_and_composition_narrows():
    ds = _people()
    f1 = {"city": "oslo"}
    f2 = {"city": "oslo", "name": "ice"}
    r1 = apply_filters(ds, f1)
    r2 = apply_filters(ds, f2)
    assert all(row in r1 for row in r2)
    assert [r["name"] for r in r2] == ["Alice"]


def test_relaxing_a_filter_restores_rows():
    ds = _people()
    narrowed = apply_filters(ds, {"city": "oslo", "name": "ice"})
    assert len(narrowed) == 1
    relaxed = apply_filters(ds, {"city": "oslo"})
    assert [r["name"] for r in relaxed] == ["Alice", "alina"]


def test_unknown_column_is_ignored():
    ds = _people()
    assert apply_filters(ds, {"nope": "x"}) == list(ds.rows)


def test_distinct_values_sorted_without_empty():
    ds = _people()
    assert distinct_values(ds, "age") == ["31", "45"]
    assert distinct_values(ds, "missing") == []
