# /// script
# requires-python = ">=3.12"
# dependencies = [
#     "rtx",
# ]
#
# [tool.uv.sources]
# rtx = { path = "../", editable = true }
# ///
"""Declarative router tree, exercised in-process through an httpx client."""

import asyncio

import httpx

from rtx.components import Get, Put, Router
from rtx.transport import RouterTransport
from rtx.types import HandlerContext


async def update(ctx: HandlerContext) -> httpx.Response:
    if ctx.request.method != "PUT":
        return await ctx.next()
    data = (await ctx.request.aread()).decode()
    return httpx.Response(200, json={"updatedId": ctx.params["id"], "data": data})


def show(ctx: HandlerContext) -> httpx.Response:
    return httpx.Response(200, text=f"Animal ID: {ctx.params['id']}")


router = Router(
    Get(
        "/favicon.ico",
        lambda ctx: httpx.Response(
            302, headers={"Location": "https://www.python.org/favicon.ico"}
        ),
    ),
    Get("/", lambda ctx: httpx.Response(200, text="Hello, World!")),
    # first match wins regardless of method, so the write route goes first
    [
        Put("/animals/:id", update),
        Get("/animals/:id", show),
    ],
    default=lambda ctx: httpx.Response(404, text="Not found"),
)


async def main() -> None:
    transport = RouterTransport(router)
    async with httpx.AsyncClient(transport=transport, base_url="http://farm") as client:
        for path in ("/", "/animals/7", "/nowhere"):
            response = await client.get(path)
            print(f"GET {path} -> {response.status_code} {response.text}")
        response = await client.put("/animals/7", content=b"goat")
        print(f"PUT /animals/7 -> {response.status_code} {response.text}")


if __name__ == "__main__":
    asyncio.run(main())
