from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from .config import settings
from .errors import FetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemotePage:
    data: list[dict[str, Any]] = field(default_factory=list)
    total_pages: int = 1


def unwrap_record(record: Any) -> dict[str, Any]:
    """Stored records arrive as {"_id": ..., "data": {...}}; plain mappings pass through."""
    if not isinstance(record, Mapping):
        raise FetchError(f"Expected a record object, got {type(record).__name__}")
    inner = record.get("data")
    if isinstance(inner, Mapping):
        return dict(inner)
    return dict(record)


def parse_page(payload: Any) -> RemotePage:
    if not isinstance(payload, Mapping):
        raise FetchError("Page response is not a JSON object")
    data = payload.get("data") or []
    if not isinstance(data, list):
        raise FetchError("Page response 'data' is not a list")
    try:
        total = max(1, int(payload.get("totalPages") or 1))
    except (TypeError, ValueError):
        raise FetchError(f"Bad totalPages value: {payload.get('totalPages')!r}")
    return RemotePage(data=[unwrap_record(r) for r in data], total_pages=total)


class RemotePageSupplier:
    """Fetches one page of rows from a `{page, limit}` -> `{data, totalPages}` endpoint.

    ``limit=0`` asks the server for every row. No retries: failures surface as
    FetchError and the caller decides whether to ask again.
    """

    def __init__(
        self,
        base_url: str | None = None,
        path: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        params: Mapping[str, Any] | None = None,
    ):
        self.base_url = (base_url or settings.API_URL).rstrip("/")
        self.path = path or settings.REMOTE_PAGE_PATH
        self.timeout = settings.REMOTE_TIMEOUT if timeout is None else timeout
        self.transport = transport
        self.params = dict(params or {})

    async def fetch_page(self, page: int, limit: int) -> RemotePage:
        query = {**self.params, "page": int(page), "limit": max(0, int(limit))}
        url = f"{self.base_url}{self.path}"
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                r = await client.get(url, params=query)
                r.raise_for_status()
                payload = r.json()
        except httpx.HTTPStatusError as e:
            logger.warning("Page request failed: %s", e)
            raise FetchError(f"Server answered {e.response.status_code} for page {page}")
        except httpx.HTTPError as e:
            logger.warning("Page request failed: %s", e)
            raise FetchError(f"Error fetching page {page}: {e}")
        except ValueError as e:
            raise FetchError(f"Page response is not valid JSON: {e}")
        return parse_page(payload)
