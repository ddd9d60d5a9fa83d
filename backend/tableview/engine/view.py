from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from . import dataset as dataset_mod
from .dataset import Dataset, Row
from .exporter import export_rows
from .filters import apply_filters, distinct_values
from .pager import PageResult, PageState, normalize_page_size, paginate, paginate_remote
from .sorting import SortSpec, apply_sort
from .widths import MAX_WIDTH, MIN_WIDTH, SCALE, column_widths

logger = logging.getLogger(__name__)


class ViewController:
    """One view session over one Dataset.

    Pipeline: dataset -> filters -> sort -> pager. Columns, widths and filter
    choices are recomputed on dataset change only; the filter+sort result is
    recomputed on filter/sort change only.
    """

    def __init__(
        self,
        page_size: int = 10,
        *,
        choices_max: int = 5,
        width_scale: int = SCALE,
        width_min: int = MIN_WIDTH,
        width_max: int = MAX_WIDTH,
    ):
        self.choices_max = choices_max
        self._width_opts = {"scale": width_scale, "min_width": width_min, "max_width": width_max}

        self.dataset: Dataset = Dataset(rows=(), columns=())
        self.filters: dict[str, str] = {}
        self.sort: SortSpec = SortSpec()
        self.page_state = PageState(page_size=normalize_page_size(page_size))

        self.remote = False
        self.loaded_page = 1
        self.loaded_page_size = self.page_state.page_size
        self._remote_total = 1

        self._widths: dict[str, int] = {}
        self._choices: dict[str, list[str]] = {}
        self._visible: list[Row] = []

    # -- loading -------------------------------------------------------------

    def load(self, rows: Sequence[Any], known_columns: Sequence[str] | None = None) -> Dataset:
        """Replace the dataset with a locally held one; filters and sort are cleared."""
        return self.load_dataset(dataset_mod.load(rows, known_columns))

    def load_dataset(self, ds: Dataset) -> Dataset:
        self.remote = False
        self.filters = {}
        self.sort = SortSpec()
        self._set_dataset(ds)
        self.page_state = PageState(page_size=self.page_state.page_size)
        self._refresh()
        logger.debug("Loaded dataset: %d rows, %d columns", len(ds), len(ds.columns))
        return ds

    def load_remote_page(
        self,
        rows: Sequence[Mapping[str, Any]],
        page: int,
        total_pages: int | None,
        *,
        page_size: int | None = None,
        new_source: bool = False,
    ) -> Dataset:
        """Install one server-side page as the dataset.

        Filters and sort carry over between pages of the same source and are
        re-applied to the new window; ``new_source`` clears them.
        """
        ds = dataset_mod.load(rows) if rows else Dataset(rows=(), columns=())
        if new_source or not self.remote:
            self.filters = {}
            self.sort = SortSpec()
        self.remote = True
        self._remote_total = max(1, int(total_pages or 1))
        self._set_dataset(ds)
        result = paginate_remote(ds.rows, page, self._remote_total)
        size = self.page_state.page_size if page_size is None else normalize_page_size(page_size)
        self.loaded_page = result.current_page
        self.loaded_page_size = size
        self.page_state = PageState(size, result.current_page, result.total_pages)
        self._refresh()
        return ds

    def _set_dataset(self, ds: Dataset) -> None:
        self.dataset = ds
        self._widths = column_widths(ds, **self._width_opts)
        self._choices = {}
        for column in ds.columns:
            values = distinct_values(ds, column)
            if 0 < len(values) <= self.choices_max:
                self._choices[column] = values

    # -- filters / sort ------------------------------------------------------

    def set_filter(self, column: str, value: str | None) -> None:
        if not self.dataset.has_column(column):
            return
        if value:
            self.filters[column] = value
        else:
            self.filters.pop(column, None)
        self._refresh(reset_page=True)

    def clear_filter(self, column: str) -> None:
        self.set_filter(column, None)

    def clear_filters(self) -> None:
        self.filters = {}
        self._refresh(reset_page=True)

    def sort_by(self, column: str) -> SortSpec:
        if not self.dataset.has_column(column):
            return self.sort
        self.sort = self.sort.toggle(column)
        self._refresh(reset_page=True)
        return self.sort

    def set_sort(self, spec: SortSpec) -> None:
        if spec.active and not self.dataset.has_column(spec.column):
            return
        if spec == self.sort:
            return
        self.sort = spec
        self._refresh(reset_page=True)

    def clear_sort(self) -> None:
        if not self.sort.active:
            return
        self.sort = SortSpec()
        self._refresh(reset_page=True)

    # -- paging --------------------------------------------------------------

    def set_page(self, page: int) -> int:
        self.page_state = self.page_state.with_page(page)
        return self.page_state.current_page

    def next_page(self) -> int:
        return self.set_page(self.page_state.current_page + 1)

    def prev_page(self) -> int:
        return self.set_page(self.page_state.current_page - 1)

    def set_page_size(self, page_size: int) -> None:
        size = normalize_page_size(page_size)
        self.page_state = PageState(page_size=size, current_page=1, total_pages=self.page_state.total_pages)
        self._update_total()

    @property
    def needs_fetch(self) -> bool:
        """Remote mode only: the requested page is not the one loaded."""
        if not self.remote:
            return False
        return (
            self.page_state.current_page != self.loaded_page
            or self.page_state.page_size != self.loaded_page_size
        )

    # -- derived views -------------------------------------------------------

    def _refresh(self, reset_page: bool = False) -> None:
        visible = apply_filters(self.dataset, self.filters)
        self._visible = apply_sort(visible, self.sort, self.dataset.columns)
        if reset_page:
            self.page_state = PageState(self.page_state.page_size, 1, self.page_state.total_pages)
        self._update_total()

    def _update_total(self) -> None:
        if self.remote:
            total = self._remote_total
        else:
            total = paginate(self._visible, self.page_state).total_pages
        self.page_state = self.page_state.with_total(total)

    @property
    def columns(self) -> tuple[str, ...]:
        return self.dataset.columns

    @property
    def widths(self) -> dict[str, int]:
        return dict(self._widths)

    @property
    def filter_choices(self) -> dict[str, list[str]]:
        return {c: list(v) for c, v in self._choices.items()}

    @property
    def filtered_rows(self) -> list[Row]:
        return list(self._visible)

    def current_page(self) -> PageResult:
        if self.remote:
            return paginate_remote(self._visible, self.page_state.current_page, self._remote_total)
        return paginate(self._visible, self.page_state)

    @property
    def page_rows(self) -> list[Row]:
        return self.current_page().page_rows

    def export(self) -> bytes:
        """xlsx bytes of every filtered+sorted row, not just the current page."""
        return export_rows(self.columns, self._visible)
