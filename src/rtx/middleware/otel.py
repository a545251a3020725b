"""OpenTelemetry tracing middleware.

Creates an HTTP server span, with semantic convention attributes, around
everything dispatched after it.

Install with: uv add "rtx[otel]"
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from rtx.types import Handle, HandlerContext

try:
    from opentelemetry import trace
    from opentelemetry.propagate import extract
    from opentelemetry.trace import SpanKind, StatusCode, TracerProvider
except ImportError as e:
    msg = (
        "OpenTelemetry middleware requires the 'otel' extra. "
        "Install with: uv add 'rtx[otel]'"
    )
    raise ImportError(msg) from e


def tracing(*, tracer_provider: TracerProvider | None = None) -> Handle:
    """Create OpenTelemetry tracing middleware.

    Register it without a match, ahead of the handlers it should cover.
    Extracts trace context from incoming request headers (e.g. ``traceparent``)
    for distributed tracing. Only depends on ``opentelemetry-api``; users bring
    their own SDK and exporters.

    Args:
        tracer_provider: Optional TracerProvider. If None, uses the global provider.

    Returns:
        Handle that wraps the rest of the dispatch in a server span.

    Example:
        router.with_(tracing())
        router.get("/", home)
    """
    tracer = trace.get_tracer("rtx", tracer_provider=tracer_provider)

    async def traced(ctx: HandlerContext) -> httpx.Response:
        request, url = ctx.request, ctx.url
        parent = extract(dict(request.headers))

        attributes: dict[str, str | int] = {
            "http.request.method": request.method,
            "url.path": url.path,
            "url.scheme": url.scheme,
            "server.address": url.host,
        }
        if url.query:
            attributes["url.query"] = url.query.decode("ascii")
        user_agent = request.headers.get("user-agent")
        if user_agent is not None:
            attributes["user_agent.original"] = user_agent

        with tracer.start_as_current_span(
            request.method,
            context=parent,
            kind=SpanKind.SERVER,
            attributes=attributes,
            record_exception=True,
            set_status_on_exception=True,
        ) as span:
            response = await ctx.next()
            span.set_attribute("http.response.status_code", response.status_code)
            if response.status_code >= 500:
                span.set_status(StatusCode.ERROR)
            return response

    return traced
