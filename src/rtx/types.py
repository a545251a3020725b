from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal

import httpx

from rtx.pattern import Pattern

type HTTPMethod = Literal[
    "CONNECT", "DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT", "TRACE"
]

METHODS: tuple[HTTPMethod, ...] = (
    "CONNECT",  # Establish a connection to the server.
    "DELETE",  # Remove the target.
    "GET",  # Retrieve the target.
    "HEAD",  # Same as GET, but only retrieve status line and header section.
    "OPTIONS",  # Describe the communication options for the target.
    "PATCH",  # Apply partial modifications to a target.
    "POST",  # Perform target-specific processing with the request payload.
    "PUT",  # Replace the target with the request payload.
    "TRACE",  # Perform a message loop-back test along the path to the target.
)

type Next = Callable[[], Awaitable[httpx.Response]]
type Handle = Callable[[HandlerContext], Awaitable[httpx.Response] | httpx.Response]
type ErrorHandle = Callable[
    [Exception, HandlerContext], Awaitable[httpx.Response] | httpx.Response
]
type Predicate = Callable[[MatchDetail], Awaitable[bool] | bool]
type Match = PredicateMatch | RouteMatch


@dataclass(frozen=True, slots=True)
class MatchDetail:
    """What a predicate gets to look at."""

    request: httpx.Request
    url: httpx.URL


@dataclass(frozen=True, slots=True)
class PredicateMatch:
    """Applies when the predicate returns true. The predicate may be async."""

    predicate: Predicate


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Structural filter on pattern and/or method. Unset fields are unconstrained."""

    pattern: Pattern | None = None
    method: HTTPMethod | None = None


@dataclass(frozen=True, slots=True)
class HandlerContext:
    """Passed to every handle.

    `next` resumes dispatch after the current handler and returns the
    downstream response, so middleware can inspect or replace it.
    """

    request: httpx.Request
    url: httpx.URL
    params: dict[str, str]
    next: Next


@dataclass(frozen=True, slots=True)
class HandlerEntry:
    """One registered handle. No match means it applies to every request."""

    handle: Handle
    match: Match | None = None

    def __post_init__(self) -> None:
        if self.match is None or isinstance(self.match, PredicateMatch | RouteMatch):
            return
        if not callable(self.match):
            msg = f"match must be a PredicateMatch, RouteMatch or callable, got {self.match!r}"
            raise TypeError(msg)
        object.__setattr__(self, "match", PredicateMatch(self.match))
