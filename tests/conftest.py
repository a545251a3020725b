from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

import httpx

from rtx.rsgi import HTTPScope

BASE_URL = "http://localhost:8000"


def make_request(
    method: str = "GET",
    path: str = "/",
    **kwargs: object,
) -> httpx.Request:
    return httpx.Request(method, BASE_URL + path, **kwargs)  # ty: ignore[invalid-argument-type]


@dataclass
class MockHTTPScope:
    proto: Literal["http", "ws"] = "http"
    http_version: Literal["1", "1.1", "2"] = "1.1"
    rsgi_version: str = "1.0"
    server: str = "localhost:8000"
    client: str = "127.0.0.1"
    scheme: str = "http"
    method: str = "GET"
    path: str = "/"
    query_string: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    authority: str | None = None


class MockHTTPProtocol:
    """Mock protocol that feeds a request body and captures response data."""

    def __init__(self, body: bytes = b"") -> None:
        self.body = body
        self.response_status: int | None = None
        self.response_headers: list[tuple[str, str]] | None = None
        self.response_body: bytes | None = None

    async def __call__(self) -> bytes:
        return self.body

    def __aiter__(self) -> bytes:
        raise NotImplementedError

    async def client_disconnect(self) -> None:
        raise NotImplementedError

    def response_empty(self, status: int, headers: list[tuple[str, str]]) -> None:
        self.response_status = status
        self.response_headers = headers
        self.response_body = b""

    def response_str(
        self, status: int, headers: list[tuple[str, str]], body: str
    ) -> None:
        self.response_status = status
        self.response_headers = headers
        self.response_body = body.encode("utf-8")

    def response_bytes(
        self, status: int, headers: list[tuple[str, str]], body: bytes
    ) -> None:
        self.response_status = status
        self.response_headers = headers
        self.response_body = body

    def response_file(
        self, status: int, headers: list[tuple[str, str]], file: str
    ) -> None:
        raise NotImplementedError

    def response_stream(self, status: int, headers: list[tuple[str, str]]) -> None:
        raise NotImplementedError


def mock_scope(
    path: str = "/",
    method: str = "GET",
    headers: dict[str, str] | None = None,
    query_string: str = "",
) -> HTTPScope:
    return MockHTTPScope(
        path=path, method=method, headers=headers or {}, query_string=query_string
    )
