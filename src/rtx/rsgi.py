"""RSGI interface types and an adapter serving a Router over RSGI (e.g. granian).

    server = Server(RSGIApp(router), address="127.0.0.1", port=8000)
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from typing import Literal, Protocol

import httpx

from rtx.errors import NotFound
from rtx.router import Router

logger = logging.getLogger(__name__)


# --- RSGI protocol ------------------------------------------------------------
class HTTPScope(Protocol):
    proto: Literal["http"]
    http_version: Literal["1", "1.1", "2"]
    rsgi_version: str
    server: str
    client: str
    scheme: str
    method: str
    path: str
    query_string: str
    headers: Mapping[str, str]
    authority: str | None


class WebsocketScope(Protocol):
    proto: Literal["ws"]
    http_version: Literal["1", "1.1", "2"]
    rsgi_version: str
    server: str
    client: str
    scheme: str
    method: str
    path: str
    query_string: str
    headers: Mapping[str, str]
    authority: str | None


class HTTPStreamTransport(Protocol):
    async def send_bytes(self, data: bytes) -> None: ...
    async def send_str(self, data: str) -> None: ...


class HTTPProtocol(Protocol):
    async def __call__(self) -> bytes: ...
    def __aiter__(self) -> AsyncIterator[bytes]: ...
    async def client_disconnect(self) -> None: ...
    def response_empty(self, status: int, headers: list[tuple[str, str]]) -> None: ...
    def response_str(
        self, status: int, headers: list[tuple[str, str]], body: str
    ) -> None: ...
    def response_bytes(
        self, status: int, headers: list[tuple[str, str]], body: bytes
    ) -> None: ...
    def response_file(
        self, status: int, headers: list[tuple[str, str]], file: str
    ) -> None: ...
    def response_stream(
        self, status: int, headers: list[tuple[str, str]]
    ) -> HTTPStreamTransport: ...


# --- IMPLEMENTATION -----------------------------------------------------------
_TEXT = [("content-type", "text/plain; charset=utf-8")]


class RSGIApp:
    """Serves router over RSGI.

    Each HTTP request is read into an httpx.Request and dispatched with
    router.fetch. NotFound is answered with a 404 and any other error with
    a logged 500. Websocket connections are not supported.
    """

    __slots__ = ("router",)

    def __init__(self, router: Router) -> None:
        self.router = router

    async def __rsgi__(
        self, scope: HTTPScope | WebsocketScope, proto: HTTPProtocol
    ) -> None:
        if scope.proto != "http":
            msg = f"unsupported RSGI protocol {scope.proto!r}"
            raise ValueError(msg)

        try:
            request = await to_request(scope, proto)  # ty: ignore[invalid-argument-type]
            response = await self.router.fetch(request)
        except NotFound:
            proto.response_str(404, _TEXT, "Not found")
            return
        except Exception:  # noqa: BLE001
            logger.exception("unhandled error for %s %s", scope.method, scope.path)
            proto.response_str(500, _TEXT, "Internal server error")
            return

        await write_response(response, proto)


async def to_request(scope: HTTPScope, proto: HTTPProtocol) -> httpx.Request:
    """Builds an httpx.Request from an RSGI scope, reading the full body."""
    host = scope.authority or scope.headers.get("host") or scope.server
    url = f"{scope.scheme}://{host}{scope.path}"
    if scope.query_string:
        url += f"?{scope.query_string}"
    body = await proto()
    return httpx.Request(
        scope.method,
        url,
        headers=list(scope.headers.items()),
        content=body or None,
    )


async def write_response(response: httpx.Response, proto: HTTPProtocol) -> None:
    """Sends an httpx.Response over an RSGI protocol."""
    headers = response.headers.multi_items()
    body = await response.aread()
    if body:
        proto.response_bytes(response.status_code, headers, body)
    else:
        proto.response_empty(response.status_code, headers)
