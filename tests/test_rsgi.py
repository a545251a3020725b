import json

import httpx
import pytest
from conftest import MockHTTPProtocol, MockHTTPScope, mock_scope

from rtx.router import Router
from rtx.rsgi import RSGIApp, to_request
from rtx.types import HandlerContext


@pytest.mark.asyncio
async def test_dispatch() -> None:
    router = Router().get("/", lambda ctx: httpx.Response(200, text="Welcome home"))
    proto = MockHTTPProtocol()

    await RSGIApp(router).__rsgi__(mock_scope("/", "GET"), proto)

    assert proto.response_status == 200
    assert proto.response_body == b"Welcome home"
    assert proto.response_headers is not None
    assert ("content-type", "text/plain; charset=utf-8") in proto.response_headers


@pytest.mark.asyncio
async def test_request_conversion() -> None:
    captured: list[HandlerContext] = []

    async def handler(ctx: HandlerContext) -> httpx.Response:
        captured.append(ctx)
        body = json.loads(await ctx.request.aread())
        return httpx.Response(200, json={"updatedId": ctx.params["id"], "data": body})

    router = Router().put("/items/:id", handler)
    proto = MockHTTPProtocol(body=b'{"name":"updated"}')
    scope = mock_scope(
        "/items/789",
        "PUT",
        headers={"content-type": "application/json", "x-test": "1"},
        query_string="dry=1",
    )

    await RSGIApp(router).__rsgi__(scope, proto)

    assert proto.response_status == 200
    assert json.loads(proto.response_body or b"") == {
        "updatedId": "789",
        "data": {"name": "updated"},
    }
    ctx = captured[0]
    assert ctx.request.method == "PUT"
    assert str(ctx.url) == "http://localhost:8000/items/789?dry=1"
    assert ctx.request.headers["x-test"] == "1"


@pytest.mark.asyncio
async def test_authority_preferred_for_host() -> None:
    scope = MockHTTPScope(path="/x", authority="example.com", scheme="https")
    request = await to_request(scope, MockHTTPProtocol())
    assert str(request.url) == "https://example.com/x"
    assert request.content == b""


@pytest.mark.asyncio
async def test_empty_body() -> None:
    router = Router().delete("/items/:id", lambda ctx: httpx.Response(204))
    proto = MockHTTPProtocol()

    await RSGIApp(router).__rsgi__(mock_scope("/items/1", "DELETE"), proto)

    assert proto.response_status == 204
    assert proto.response_body == b""


@pytest.mark.asyncio
async def test_not_found() -> None:
    proto = MockHTTPProtocol()
    await RSGIApp(Router()).__rsgi__(mock_scope("/missing"), proto)
    assert proto.response_status == 404
    assert proto.response_body == b"Not found"


@pytest.mark.asyncio
async def test_unhandled_error_is_500(caplog: pytest.LogCaptureFixture) -> None:
    def boom(ctx: HandlerContext) -> httpx.Response:
        raise RuntimeError("boom")

    proto = MockHTTPProtocol()
    with caplog.at_level("ERROR", logger="rtx.rsgi"):
        await RSGIApp(Router().get("/", boom)).__rsgi__(mock_scope("/"), proto)

    assert proto.response_status == 500
    assert "unhandled error for GET" in caplog.text


@pytest.mark.asyncio
async def test_websocket_rejected() -> None:
    scope = MockHTTPScope(proto="ws")
    with pytest.raises(ValueError, match="unsupported RSGI protocol"):
        await RSGIApp(Router()).__rsgi__(scope, MockHTTPProtocol())  # ty: ignore[invalid-argument-type]


@pytest.mark.asyncio
async def test_body_read_error_is_500(caplog: pytest.LogCaptureFixture) -> None:
    class BrokenProtocol(MockHTTPProtocol):
        async def __call__(self) -> bytes:
            raise ConnectionResetError("client went away")

    proto = BrokenProtocol()
    router = Router().post("/", lambda ctx: httpx.Response(200))
    with caplog.at_level("ERROR", logger="rtx.rsgi"):
        await RSGIApp(router).__rsgi__(mock_scope("/", "POST"), proto)

    assert proto.response_status == 500
    assert "unhandled error for POST /" in caplog.text
