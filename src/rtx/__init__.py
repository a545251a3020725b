from importlib.metadata import version

from .errors import InvalidComposition, InvalidPattern, NextMisuse, NotFound, RtxError
from .matcher import MatchResult, evaluate, route
from .pattern import Pattern, compile_pattern
from .router import Continuation, Router, create_router
from .transport import RouterTransport
from .types import (
    METHODS,
    HandlerContext,
    HandlerEntry,
    HTTPMethod,
    MatchDetail,
    PredicateMatch,
    RouteMatch,
)

__all__ = [
    "METHODS",
    "Continuation",
    "HTTPMethod",
    "HandlerContext",
    "HandlerEntry",
    "InvalidComposition",
    "InvalidPattern",
    "MatchDetail",
    "MatchResult",
    "NextMisuse",
    "NotFound",
    "Pattern",
    "PredicateMatch",
    "RouteMatch",
    "Router",
    "RouterTransport",
    "RtxError",
    "__version__",
    "compile_pattern",
    "create_router",
    "evaluate",
    "route",
]

__version__ = version("rtx")
