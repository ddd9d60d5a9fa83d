from __future__ import annotations

from .dataset import Dataset, cell_text

SCALE = 10
MIN_WIDTH = 100
MAX_WIDTH = 300


def width_for(
    column: str,
    dataset: Dataset,
    *,
    scale: int = SCALE,
    min_width: int = MIN_WIDTH,
    max_width: int = MAX_WIDTH,
) -> int:
    """Display width in pixels for a column, from its header and every cell.

    Uses the unfiltered rows so widths stay put while filters and paging change.
    """
    longest = len(column)
    for row in dataset.rows:
        longest = max(longest, len(cell_text(row.get(column))))
    return min(max(longest * scale, min_width), max_width)


def column_widths(dataset: Dataset, **kwargs) -> dict[str, int]:
    return {c: width_for(c, dataset, **kwargs) for c in dataset.columns}
