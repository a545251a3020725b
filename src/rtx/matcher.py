"""Decides whether one handler entry applies to a request.

Structural matches follow these rules:

    * no pattern: the method decides (unset method matches everything)
    * pattern set and matching: applies, whatever the method
    * pattern set and not matching: never applies

So a GET `/users/:id` entry is also reached by `POST /users/42`, and a
method-only entry matches every path for its method.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx

from rtx._invoke import invoke
from rtx.pattern import Pattern, compile_pattern
from rtx.types import HandlerEntry, HTTPMethod, MatchDetail, PredicateMatch, RouteMatch


@dataclass(frozen=True, slots=True)
class MatchResult:
    applies: bool
    params: dict[str, str] = field(default_factory=dict)


def route(
    pattern: str | Pattern | None = None, method: HTTPMethod | None = None
) -> RouteMatch:
    """Build a structural match, compiling pattern if it is a template string."""
    if isinstance(pattern, str):
        pattern = compile_pattern(pattern)
    return RouteMatch(pattern=pattern, method=method)


async def evaluate(
    entry: HandlerEntry, request: httpx.Request, url: httpx.URL
) -> MatchResult:
    """Evaluate entry's match against request, extracting path params on success."""
    match entry.match:
        case None:
            return MatchResult(applies=True)
        case PredicateMatch(predicate=predicate):
            applies = await invoke(predicate, MatchDetail(request=request, url=url))
            return MatchResult(applies=bool(applies))
        case RouteMatch(pattern=None, method=method):
            return MatchResult(applies=method is None or method == request.method)
        case RouteMatch(pattern=Pattern() as pattern):
            groups = pattern.exec(url)
            if groups is None:
                return MatchResult(applies=False)
            # pattern success alone satisfies the match
            params = {k: v for k, v in groups.items() if v is not None}
            return MatchResult(applies=True, params=params)
        case _:
            msg = f"unsupported match {entry.match!r}"
            raise TypeError(msg)
