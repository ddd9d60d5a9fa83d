from __future__ import annotations

from typing import Mapping

from .dataset import Dataset, Row, cell_text

FilterSet = Mapping[str, str]


def active_constraints(dataset: Dataset, filter_set: FilterSet | None) -> dict[str, str]:
    """Non-empty constraints on known columns, lower-cased once up front."""
    if not filter_set:
        return {}
    out: dict[str, str] = {}
    for column, value in filter_set.items():
        if not value or not dataset.has_column(column):
            continue
        out[column] = str(value).lower()
    return out


def row_matches(row: Row, constraints: Mapping[str, str]) -> bool:
    for column, needle in constraints.items():
        if needle not in cell_text(row.get(column)).lower():
            return False
    return True


def apply_filters(dataset: Dataset, filter_set: FilterSet | None) -> list[Row]:
    """Rows of the dataset passing every active constraint, in dataset order.

    Always evaluated against ``dataset.rows`` so relaxing one constraint brings
    back rows the remaining constraints allow.
    """
    constraints = active_constraints(dataset, filter_set)
    if not constraints:
        return list(dataset.rows)
    return [row for row in dataset.rows if row_matches(row, constraints)]


def distinct_values(dataset: Dataset, column: str) -> list[str]:
    """Sorted distinct non-empty cell texts of a column."""
    if not dataset.has_column(column):
        return []
    values = {cell_text(row.get(column)) for row in dataset.rows}
    values.discard("")
    return sorted(values)
