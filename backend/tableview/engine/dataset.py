from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Iterable

from ..errors import EmptyDatasetError

Row = dict[str, Any]

# sentinel for an absent / null cell
EMPTY = None


def normalize_cell(value: Any) -> Any:
    """Collapse None and NaN into the EMPTY sentinel, leave anything else alone."""
    if value is None:
        return EMPTY
    if isinstance(value, float) and math.isnan(value):
        return EMPTY
    return value


def cell_text(value: Any) -> str:
    """String form of a cell used for matching, ordering and width estimates."""
    value = normalize_cell(value)
    if value is EMPTY:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _dedupe(names: Iterable[Any]) -> tuple[str, ...]:
    seen: set[str] = set()
    out: list[str] = []
    for name in names:
        key = "" if name is None else str(name)
        if key in seen:
            continue
        seen.add(key)
        out.append(key)
    return tuple(out)


def _is_positional(rows: Sequence[Any]) -> bool:
    first = rows[0]
    return not isinstance(first, Mapping) and isinstance(first, (list, tuple))


@dataclass(frozen=True)
class Dataset:
    rows: tuple[Row, ...]
    columns: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.rows)

    def has_column(self, column: str | None) -> bool:
        return column is not None and column in self.columns


def load(
    rows: Sequence[Mapping[str, Any]] | Sequence[Sequence[Any]],
    known_columns: Sequence[str] | None = None,
) -> Dataset:
    """Build a Dataset from decoded rows.

    Mapping rows: columns are the union of keys in first-seen order.
    Positional rows: row 0 is the header, later rows align to it by position;
    a header-only source yields a valid Dataset with no rows.
    """
    if rows is None or len(rows) == 0:
        raise EmptyDatasetError("The source contains no rows.")

    if _is_positional(rows):
        header = [normalize_cell(h) for h in rows[0]]
        body = rows[1:]
        records: list[Row] = []
        for raw in body:
            record: Row = {}
            for idx, name in enumerate(header):
                key = "" if name is None else str(name)
                if key in record:
                    # duplicate header: first position wins
                    continue
                record[key] = normalize_cell(raw[idx]) if idx < len(raw) else EMPTY
            records.append(record)
        derived = _dedupe(header)
    else:
        records = []
        seen_keys: list[str] = []
        for raw in rows:
            if not isinstance(raw, Mapping):
                raise TypeError(f"Expected a mapping row, got {type(raw).__name__}")
            record = {str(k): normalize_cell(v) for k, v in raw.items()}
            seen_keys.extend(record.keys())
            records.append(record)
        derived = _dedupe(seen_keys)

    columns = _dedupe(known_columns) if known_columns is not None else derived
    projected = tuple({c: r.get(c, EMPTY) for c in columns} for r in records)
    return Dataset(rows=projected, columns=columns)
