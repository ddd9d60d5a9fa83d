import asyncio

import httpx
import pytest

from tableview.engine.session import ViewSession
from tableview.engine.view import ViewController
from tableview.errors import FetchError, ParseError
from tableview.remote import RemotePage, RemotePageSupplier, parse_page


def _supplier(handler) -> RemotePageSupplier:
    return RemotePageSupplier(
        base_url="http://remote.test", path="/api/csv-data", transport=httpx.MockTransport(handler)
    )


@pytest.mark.asyncio
async def test_fetch_page_sends_page_and_limit_and_unwraps_records():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.url.params)
        return httpx.Response(
            200,
            json={
                "data": [{"_id": "1", "data": {"a": "x"}}, {"a": "y"}],
                "totalPages": 7,
            },
        )

    page = await _supplier(handler).fetch_page(2, 50)
    assert seen == {"page": "2", "limit": "50"}
    assert page == RemotePage(data=[{"a": "x"}, {"a": "y"}], total_pages=7)


@pytest.mark.asyncio
async def test_http_error_is_fetch_error():
    supplier = _supplier(lambda request: httpx.Response(500, json={"message": "boom"}))
    with pytest.raises(FetchError):
        await supplier.fetch_page(1, 10)


@pytest.mark.asyncio
async def test_transport_error_is_fetch_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(FetchError):
        await _supplier(handler).fetch_page(1, 10)


@pytest.mark.asyncio
async def test_non_json_is_fetch_error():
    supplier = _supplier(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(FetchError):
        await supplier.fetch_page(1, 10)


def test_parse_page_defaults_and_validation():
    assert parse_page({"data": []}) == RemotePage(data=[], total_pages=1)
    with pytest.raises(FetchError):
        parse_page({"data": {"a": 1}})
    with pytest.raises(FetchError):
        parse_page(["not", "an", "object"])


class _GatedSupplier:
    """Answers each page only when the test releases it."""

    def __init__(self):
        self.gates: dict[int, asyncio.Event] = {}
        self.failing: set[int] = set()

    async def fetch_page(self, page, limit):
        gate = self.gates.setdefault(page, asyncio.Event())
        await gate.wait()
        if page in self.failing:
            raise FetchError(f"page {page} failed")
        return RemotePage(data=[{"page": page}], total_pages=5)


@pytest.mark.asyncio
async def test_superseded_response_is_dropped():
    supplier = _GatedSupplier()
    session = ViewSession(ViewController(page_size=10), supplier)

    slow = asyncio.create_task(session.fetch_page(1))
    await asyncio.sleep(0)
    fast = asyncio.create_task(session.fetch_page(2))
    await asyncio.sleep(0)

    supplier.gates[2].set()
    assert await fast is not None
    supplier.gates[1].set()
    assert await slow is None

    assert session.dropped == 1
    assert session.controller.page_rows == [{"page": 2}]
    assert session.controller.page_state.current_page == 2


@pytest.mark.asyncio
async def test_session_refetches_when_page_changes():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        limit = int(request.url.params["limit"])
        calls.append((page, limit))
        return httpx.Response(200, json={"data": [{"n": f"p{page}"}], "totalPages": 3})

    session = ViewSession(ViewController(page_size=10), _supplier(handler))
    await session.fetch_page(1, new_source=True)
    assert await session.set_page(9) == 3
    await session.set_filter("n", "p")
    await session.set_page_size(0)
    assert calls == [(1, 10), (3, 10), (1, 10), (1, 0)]
    assert session.controller.filters == {"n": "p"}


@pytest.mark.asyncio
async def test_load_file_errors_keep_previous_dataset():
    session = ViewSession(ViewController())
    await session.load_file("t.csv", b"a,b\n1,2\n")
    with pytest.raises(ParseError):
        await session.load_file("t.csv", b"   ")
    assert session.controller.columns == ("a", "b")
    assert len(session.controller.dataset) == 1


@pytest.mark.asyncio
async def test_superseded_failure_is_dropped():
    supplier = _GatedSupplier()
    supplier.failing.add(1)
    session = ViewSession(ViewController(page_size=10), supplier)

    slow = asyncio.create_task(session.fetch_page(1))
    await asyncio.sleep(0)
    fast = asyncio.create_task(session.fetch_page(2))
    await asyncio.sleep(0)

    supplier.gates[2].set()
    await fast
    supplier.gates[1].set()
    assert await slow is None
    assert session.dropped == 1
    assert session.controller.page_rows == [{"page": 2}]


@pytest.mark.asyncio
async def test_latest_failure_still_raises():
    supplier = _GatedSupplier()
    supplier.failing.add(3)
    supplier.gates[3] = asyncio.Event()
    supplier.gates[3].set()
    session = ViewSession(ViewController(page_size=10), supplier)
    with pytest.raises(FetchError):
        await session.fetch_page(3)
    assert session.dropped == 0
