from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from .dataset import Row, cell_text


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortSpec:
    column: str | None = None
    direction: SortDirection = SortDirection.ASC

    @property
    def active(self) -> bool:
        return self.column is not None

    def toggle(self, column: str) -> "SortSpec":
        """Same column flips direction, a different column starts ascending."""
        if column == self.column:
            flipped = SortDirection.DESC if self.direction == SortDirection.ASC else SortDirection.ASC
            return SortSpec(column=column, direction=flipped)
        return SortSpec(column=column, direction=SortDirection.ASC)


def sort_key(column: str):
    def _key(row: Row) -> str:
        return cell_text(row.get(column)).lower()

    return _key


def apply_sort(
    rows: Sequence[Row], sort_spec: SortSpec | None, columns: Sequence[str] | None = None
) -> list[Row]:
    """Stable ordering of rows by the lower-cased text of one column.

    Comparison is lexicographic on the text form, numbers included.
    An inactive spec, or one naming a column outside ``columns``, passes rows through.
    """
    if sort_spec is None or not sort_spec.active:
        return list(rows)
    if columns is not None and sort_spec.column not in columns:
        return list(rows)
    # sorted() keeps equal keys in input order for reverse=True as well
    return sorted(
        rows,
        key=sort_key(sort_spec.column),
        reverse=sort_spec.direction == SortDirection.DESC,
    )
