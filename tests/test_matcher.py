import httpx
import pytest
from conftest import make_request

from rtx.matcher import evaluate, route
from rtx.types import HandlerEntry, MatchDetail, PredicateMatch, RouteMatch


def handle(ctx: object) -> httpx.Response:
    return httpx.Response(200)


async def check(entry: HandlerEntry, method: str, path: str) -> tuple[bool, dict]:
    request = make_request(method, path)
    result = await evaluate(entry, request, request.url)
    return result.applies, result.params


@pytest.mark.asyncio
async def test_no_match_always_applies() -> None:
    entry = HandlerEntry(handle=handle)
    assert await check(entry, "DELETE", "/anything") == (True, {})


@pytest.mark.asyncio
async def test_async_predicate() -> None:
    seen: list[MatchDetail] = []

    async def has_token(detail: MatchDetail) -> bool:
        seen.append(detail)
        return detail.request.headers.get("x-token") == "secret"

    entry = HandlerEntry(handle=handle, match=PredicateMatch(has_token))

    request = make_request("GET", "/", headers={"x-token": "secret"})
    result = await evaluate(entry, request, request.url)
    assert result.applies
    assert result.params == {}
    assert seen[0].url.path == "/"

    assert await check(entry, "GET", "/") == (False, {})


@pytest.mark.asyncio
async def test_plain_callable_is_wrapped_as_predicate() -> None:
    entry = HandlerEntry(handle=handle, match=lambda d: d.url.path.startswith("/api"))
    assert isinstance(entry.match, PredicateMatch)
    assert await check(entry, "GET", "/api/x") == (True, {})
    assert await check(entry, "GET", "/web") == (False, {})


def test_invalid_match_rejected() -> None:
    with pytest.raises(TypeError):
        HandlerEntry(handle=handle, match="GET")  # ty: ignore[invalid-argument-type]


@pytest.mark.asyncio
async def test_empty_route_match_applies() -> None:
    entry = HandlerEntry(handle=handle, match=RouteMatch())
    assert await check(entry, "PATCH", "/x") == (True, {})


@pytest.mark.asyncio
async def test_method_only_matches_every_path() -> None:
    entry = HandlerEntry(handle=handle, match=route(method="POST"))
    assert await check(entry, "POST", "/") == (True, {})
    assert await check(entry, "POST", "/deep/path") == (True, {})
    assert await check(entry, "GET", "/") == (False, {})


@pytest.mark.asyncio
async def test_pattern_only() -> None:
    entry = HandlerEntry(handle=handle, match=route("/users/:id"))
    assert await check(entry, "GET", "/users/7") == (True, {"id": "7"})
    assert await check(entry, "PUT", "/users/7") == (True, {"id": "7"})
    assert await check(entry, "GET", "/users") == (False, {})


@pytest.mark.asyncio
async def test_pattern_success_is_enough_whatever_the_method() -> None:
    entry = HandlerEntry(handle=handle, match=route("/users/:id", "GET"))
    assert await check(entry, "POST", "/users/42") == (True, {"id": "42"})


@pytest.mark.asyncio
async def test_failed_pattern_is_not_rescued_by_method() -> None:
    entry = HandlerEntry(handle=handle, match=route("/", "GET"))
    assert await check(entry, "GET", "/bar") == (False, {})


@pytest.mark.asyncio
async def test_absent_optional_captures_are_dropped() -> None:
    entry = HandlerEntry(handle=handle, match=route("/posts/:slug?", "GET"))
    assert await check(entry, "GET", "/posts") == (True, {})
    assert await check(entry, "GET", "/posts/hi") == (True, {"slug": "hi"})
