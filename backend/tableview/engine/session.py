from __future__ import annotations

import asyncio
import itertools
import logging

from .. import decoders
from ..errors import FetchError, ParseError
from ..remote import RemotePageSupplier
from .dataset import Dataset
from .sorting import SortSpec
from .view import ViewController

logger = logging.getLogger(__name__)


class ViewSession:
    """Async loading around a ViewController.

    Every load (file or remote page) takes a request id; when it completes
    and a newer load has been issued meanwhile, its result is dropped and the
    current dataset stays on screen.
    """

    def __init__(self, controller: ViewController, supplier: RemotePageSupplier | None = None):
        self.controller = controller
        self.supplier = supplier
        self._ids = itertools.count(1)
        self._latest = 0
        self.dropped = 0

    def _issue(self) -> int:
        self._latest = next(self._ids)
        return self._latest

    def _is_stale(self, request_id: int, what: str) -> bool:
        if request_id == self._latest:
            return False
        self.dropped += 1
        logger.info("Dropping superseded %s (request %d, latest %d)", what, request_id, self._latest)
        return True

    async def load_file(self, filename: str, content: bytes) -> Dataset | None:
        """Decode and install a local file. Returns None when superseded."""
        request_id = self._issue()
        # decoding is CPU-bound; keep the event loop free
        try:
            rows = await asyncio.to_thread(decoders.decode, filename, content)
        except ParseError as e:
            if self._is_stale(request_id, f"file load {filename!r} failure ({e})"):
                return None
            raise
        if self._is_stale(request_id, f"file load {filename!r}"):
            return None
        return self.controller.load(rows)

    async def fetch_page(
        self, page: int | None = None, limit: int | None = None, *, new_source: bool = False
    ) -> Dataset | None:
        """Fetch one server page into the controller. Returns None when superseded."""
        if self.supplier is None:
            raise RuntimeError("ViewSession has no remote page supplier")
        state = self.controller.page_state
        page = state.current_page if page is None else page
        limit = state.page_size if limit is None else limit

        request_id = self._issue()
        try:
            result = await self.supplier.fetch_page(page, limit)
        except FetchError as e:
            if self._is_stale(request_id, f"page {page} failure ({e})"):
                return None
            raise
        if self._is_stale(request_id, f"page {page}"):
            return None
        return self.controller.load_remote_page(
            result.data, page, result.total_pages, page_size=limit, new_source=new_source
        )

    async def _sync(self) -> None:
        if self.controller.needs_fetch:
            await self.fetch_page()

    # -- remote-aware wrappers ----------------------------------------------

    async def set_page(self, page: int) -> int:
        self.controller.set_page(page)
        await self._sync()
        return self.controller.page_state.current_page

    async def set_page_size(self, page_size: int) -> None:
        self.controller.set_page_size(page_size)
        await self._sync()

    async def set_filter(self, column: str, value: str | None) -> None:
        self.controller.set_filter(column, value)
        await self._sync()

    async def clear_filters(self) -> None:
        self.controller.clear_filters()
        await self._sync()

    async def sort_by(self, column: str) -> SortSpec:
        spec = self.controller.sort_by(column)
        await self._sync()
        return spec
