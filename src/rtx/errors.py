"""Exceptions raised by the router and its collaborators."""


class RtxError(Exception):
    """Base for all rtx errors."""


class NotFound(RtxError, LookupError):  # noqa: N818
    """No handler applied and the router has no default handler."""


class InvalidComposition(RtxError, TypeError):
    """A value that is neither a Router nor a list of handler entries was composed."""


class NextMisuse(RtxError, RuntimeError):
    """`next()` was called where there is nothing left to delegate to."""


class InvalidPattern(RtxError, ValueError):
    """A path template could not be compiled."""
