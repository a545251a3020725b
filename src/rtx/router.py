"""Ordered request router.

Handlers are tried in registration order and the first one whose match
applies handles the request. There is no reordering by specificity.
A handler can await `ctx.next()` to run the rest of the chain and look
at (or replace) the downstream response, which is how middleware works.

Routers are meant to be built once and then served: composing more
handlers into a router that is already dispatching requests is not
supported, and no locking is done.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Self, overload

import httpx

from rtx._invoke import invoke
from rtx.errors import InvalidComposition, NextMisuse, NotFound
from rtx.matcher import evaluate, route
from rtx.types import (
    METHODS,
    ErrorHandle,
    Handle,
    HandlerContext,
    HandlerEntry,
    HTTPMethod,
    Match,
    Predicate,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Continuation:
    """Resumes dispatch of request on router from index."""

    router: Router
    request: httpx.Request
    index: int

    async def __call__(self) -> httpx.Response:
        return await self.router.fetch(self.request, start=self.index)


async def _exhausted() -> httpx.Response:
    msg = "next() called from the default handler, there is nothing to delegate to"
    raise NextMisuse(msg)


class Router:
    __slots__ = ("default_handler", "error_handler", "handlers")
    handlers: list[HandlerEntry]
    default_handler: Handle | None
    error_handler: ErrorHandle | None

    def __init__(
        self,
        *,
        default: Handle | None = None,
        error: ErrorHandle | None = None,
    ) -> None:
        self.handlers = []
        self.default_handler = default
        self.error_handler = error

    def __len__(self) -> int:
        return len(self.handlers)

    def __iter__(self) -> Iterator[HandlerEntry]:
        return iter(self.handlers)

    async def fetch(self, request: httpx.Request, start: int = 0) -> httpx.Response:
        """Dispatches request to the first applicable handler at or after start.

        Raises NotFound if no handler applies and there is no default handler.
        Exceptions from a handle go to the error handler if one is set,
        otherwise they propagate unchanged.
        """
        url = request.url
        for i in range(start, len(self.handlers)):
            entry = self.handlers[i]
            result = await evaluate(entry, request, url)
            if not result.applies:
                continue

            ctx = HandlerContext(
                request=request,
                url=url,
                params=result.params,
                next=Continuation(self, request, i + 1),
            )
            try:
                return await invoke(entry.handle, ctx)
            except Exception as e:
                if self.error_handler is None:
                    raise
                logger.debug("error handler called for %s %s: %r", request.method, url, e)
                return await invoke(self.error_handler, e, ctx)

        if self.default_handler is None:
            msg = f"no handler for {request.method} {url}"
            raise NotFound(msg)

        logger.debug("default handler called for %s %s", request.method, url)
        ctx = HandlerContext(request=request, url=url, params={}, next=_exhausted)
        return await invoke(self.default_handler, ctx)

    @overload
    def with_(self, handle: Handle, /) -> Self: ...
    @overload
    def with_(self, match: Match | Predicate, handle: Handle, /) -> Self: ...
    def with_(
        self, match_or_handle: Match | Predicate | Handle, handle: Handle | None = None, /
    ) -> Self:
        """Appends a handler, optionally gated by a match.

        Without a match the handler applies to every request that reaches it.
        A plain callable match is treated as a predicate.
        """
        if handle is None:
            self.handlers.append(HandlerEntry(handle=match_or_handle))  # ty: ignore[invalid-argument-type]
        else:
            self.handlers.append(HandlerEntry(handle=handle, match=match_or_handle))  # ty: ignore[invalid-argument-type]
        return self

    def use(self, handlers: Router | Sequence[HandlerEntry]) -> Self:
        """Appends a list of handler entries, or all of another router's entries.

        A merged router only contributes its handler sequence; its default
        and error handlers are ignored.
        """
        if isinstance(handlers, Router):
            entries = list(handlers.handlers)
        elif isinstance(handlers, list | tuple):
            entries = list(handlers)
            for entry in entries:
                if not isinstance(entry, HandlerEntry):
                    msg = f"expected HandlerEntry, got {entry!r}"
                    raise InvalidComposition(msg)
        else:
            msg = f"expected a Router or a list of HandlerEntry, got {handlers!r}"
            raise InvalidComposition(msg)
        self.handlers.extend(entries)
        return self

    def fallback(self, handler: Handle | None) -> Self:
        """Sets (or clears, with None) the handler used when nothing matches."""
        self.default_handler = handler
        return self

    def default(self, handler: Handle | None) -> Self:
        """Alias of fallback."""
        return self.fallback(handler)

    def error(self, handler: ErrorHandle | None) -> Self:
        """Sets (or clears, with None) the handler used when a handle raises.

        It is called with the exception and the failing handler's context,
        and its return value becomes the response.
        """
        self.error_handler = handler
        return self

    def method(self, method: HTTPMethod, pattern: str, handle: Handle) -> Self:
        """Appends a handler for method on the path template pattern."""
        if method not in METHODS:
            msg = f"unknown HTTP method {method!r}"
            raise ValueError(msg)
        return self.with_(route(pattern, method), handle)

    def connect(self, pattern: str, handle: Handle) -> Self:
        """Appends a CONNECT handler for pattern."""
        return self.method("CONNECT", pattern, handle)

    def delete(self, pattern: str, handle: Handle) -> Self:
        """Appends a DELETE handler for pattern."""
        return self.method("DELETE", pattern, handle)

    def get(self, pattern: str, handle: Handle) -> Self:
        """Appends a GET handler for pattern."""
        return self.method("GET", pattern, handle)

    def head(self, pattern: str, handle: Handle) -> Self:
        """Appends a HEAD handler for pattern."""
        return self.method("HEAD", pattern, handle)

    def options(self, pattern: str, handle: Handle) -> Self:
        """Appends an OPTIONS handler for pattern."""
        return self.method("OPTIONS", pattern, handle)

    def patch(self, pattern: str, handle: Handle) -> Self:
        """Appends a PATCH handler for pattern."""
        return self.method("PATCH", pattern, handle)

    def post(self, pattern: str, handle: Handle) -> Self:
        """Appends a POST handler for pattern."""
        return self.method("POST", pattern, handle)

    def put(self, pattern: str, handle: Handle) -> Self:
        """Appends a PUT handler for pattern."""
        return self.method("PUT", pattern, handle)

    def trace(self, pattern: str, handle: Handle) -> Self:
        """Appends a TRACE handler for pattern."""
        return self.method("TRACE", pattern, handle)


def create_router() -> Router:
    return Router()
