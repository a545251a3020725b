"""Declarative router trees.

Each function returns a core Router built through its public API, so a
tree reads like the routes it serves:

    router = Router(
        Get("/", lambda ctx: httpx.Response(200, text="Hello, World!")),
        Get("/users/:id", get_user),
        [Post("/users", create_user), Delete("/users/:id", delete_user)],
        default=lambda ctx: httpx.Response(404, text="Not found"),
    )
"""

from __future__ import annotations

from collections.abc import Iterator

from rtx.errors import InvalidComposition
from rtx.router import Router as _Router
from rtx.types import ErrorHandle, Handle, HandlerEntry, Match, Predicate


def Router(  # noqa: N802
    *children: _Router | list | tuple,
    default: Handle | None = None,
    error: ErrorHandle | None = None,
) -> _Router:
    """Merges children, in order, into a new router.

    Children may be routers or (nested) lists of routers.
    """
    router = _Router(default=default, error=error)
    for child in _flatten(children):
        if not isinstance(child, _Router):
            msg = f"invalid child of Router: {child!r}"
            raise InvalidComposition(msg)
        router.use(child)
    return router


def _flatten(children: tuple | list) -> Iterator[object]:
    for child in children:
        if isinstance(child, list | tuple):
            yield from _flatten(child)
        else:
            yield child


def Route(handle: Handle, match: Match | Predicate | None = None) -> _Router:  # noqa: N802
    """A single handler, optionally gated by match."""
    return _Router().use([HandlerEntry(handle=handle, match=match)])


def Connect(pattern: str, handle: Handle) -> _Router:  # noqa: N802
    return _Router().connect(pattern, handle)


def Delete(pattern: str, handle: Handle) -> _Router:  # noqa: N802
    return _Router().delete(pattern, handle)


def Get(pattern: str, handle: Handle) -> _Router:  # noqa: N802
    return _Router().get(pattern, handle)


def Head(pattern: str, handle: Handle) -> _Router:  # noqa: N802
    return _Router().head(pattern, handle)


def Options(pattern: str, handle: Handle) -> _Router:  # noqa: N802
    return _Router().options(pattern, handle)


def Patch(pattern: str, handle: Handle) -> _Router:  # noqa: N802
    return _Router().patch(pattern, handle)


def Post(pattern: str, handle: Handle) -> _Router:  # noqa: N802
    return _Router().post(pattern, handle)


def Put(pattern: str, handle: Handle) -> _Router:  # noqa: N802
    return _Router().put(pattern, handle)


def Trace(pattern: str, handle: Handle) -> _Router:  # noqa: N802
    return _Router().trace(pattern, handle)
