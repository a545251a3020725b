# /// script
# requires-python = ">=3.12"
# dependencies = [
#     "rtx[otel]",
#     "opentelemetry-sdk>=1.39.1,<2.0.0",
# ]
#
# [tool.uv.sources]
# rtx = { path = "../", editable = true }
# ///
"""OpenTelemetry tracing middleware demo.

Shows usage of the tracing middleware with an in-memory exporter so traces
can be printed to the console without needing an external collector.
Requests go through RouterTransport, so no server is started.
"""

import asyncio
import sys

import httpx
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from rtx import HandlerContext, Router, RouterTransport
from rtx.middleware.otel import tracing


# --- handlers ---
def hello(ctx: HandlerContext) -> httpx.Response:
    return httpx.Response(200, text="hello world")


def greet(ctx: HandlerContext) -> httpx.Response:
    return httpx.Response(200, text=f"hello {ctx.params['name']}")


def not_found(ctx: HandlerContext) -> httpx.Response:
    return httpx.Response(404, text="not found")


# --- app setup ---
exporter = InMemorySpanExporter()
provider = TracerProvider()
provider.add_span_processor(SimpleSpanProcessor(exporter))

# NOTE: health checks are registered before the middleware, so they are not traced.
router = (
    Router(default=not_found)
    .get("/health", lambda ctx: httpx.Response(204))
    .with_(tracing(tracer_provider=provider))
    .get("/", hello)
    .get("/greet/:name", greet)
)


# --- run ---
async def main() -> None:
    transport = RouterTransport(router)
    async with httpx.AsyncClient(transport=transport, base_url="http://farm") as client:
        for path in ("/health", "/", "/greet/world", "/greet/rtx", "/nonexistent"):
            print(f"--- GET {path} ---", file=sys.stderr)
            await client.get(path)

    print("--- Collected spans ---", file=sys.stderr)
    for span in exporter.get_finished_spans():
        attrs = span.attributes or {}
        print(
            f"  {span.name:<10} "
            f"status={attrs['http.response.status_code']:<4} "
            f"path={attrs['url.path']}",
            file=sys.stderr,
        )
    provider.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
