# /// script
# requires-python = ">=3.12"
# dependencies = [
#     "rtx[server]",
# ]
#
# [tool.uv.sources]
# rtx = { path = "../", editable = true }
# ///
"""RSGI server demo.

Fully functional web server using Granian + rtx Router.
"""

import asyncio
import json
import logging
import sqlite3
from json.decoder import JSONDecodeError

import httpx
from granian.server.embed import Server

from rtx import HandlerContext, Router
from rtx.rsgi import RSGIApp
from rtx.types import Handle, MatchDetail

ADDRESS = "127.0.0.1"
PORT = 8000

_db = sqlite3.connect(":memory:")
_db.cursor().executescript("""
CREATE TABLE IF NOT EXISTS animal (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL
);
""")


async def main() -> None:
    logging.basicConfig(level=logging.INFO)

    router = (
        Router(default=not_found)
        .with_(log_requests)
        .get("/", home)
        .use(animal_router(_db))
    )

    server = Server(RSGIApp(router), address=ADDRESS, port=PORT, log_access=True)
    try:
        await server.serve()
    except asyncio.CancelledError:
        pass


def not_found(ctx: HandlerContext) -> httpx.Response:
    return httpx.Response(404, text="Not found")


async def log_requests(ctx: HandlerContext) -> httpx.Response:
    response = await ctx.next()
    logging.info("%s %s -> %d", ctx.request.method, ctx.url.path, response.status_code)
    return response


def home(ctx: HandlerContext) -> httpx.Response:
    return httpx.Response(200, text="Welcome to the farm")


def animal_router(db: sqlite3.Connection) -> Router:
    return (
        Router()
        # a matching pattern ignores the method, so creation goes first behind a predicate
        .with_(is_create, create_animal(db))
        .get("/animals", get_animals(db))
        .get("/animals/:id(\\d+)", get_animal(db))
    )


def is_create(detail: MatchDetail) -> bool:
    return detail.request.method == "POST" and detail.url.path == "/animals"


# closure over handler to inject dependencies
def get_animals(db: sqlite3.Connection) -> Handle:
    def handler(ctx: HandlerContext) -> httpx.Response:
        cur = db.cursor()
        cur.execute("SELECT * FROM animal")
        return httpx.Response(
            200, json=[{"id": row[0], "name": row[1]} for row in cur.fetchall()]
        )

    return handler


def get_animal(db: sqlite3.Connection) -> Handle:
    async def handler(ctx: HandlerContext) -> httpx.Response:
        cur = db.cursor()
        cur.execute("SELECT * FROM animal WHERE id = ?", (int(ctx.params["id"]),))
        result = cur.fetchone()
        if result is None:
            return await ctx.next()
        return httpx.Response(200, json={"id": result[0], "name": result[1]})

    return handler


def create_animal(db: sqlite3.Connection) -> Handle:
    async def handler(ctx: HandlerContext) -> httpx.Response:
        try:
            payload = json.loads(await ctx.request.aread())
        except JSONDecodeError:
            return httpx.Response(422, text="Invalid json")
        try:
            name = payload["name"]
        except KeyError:
            return httpx.Response(422, text="Missing name")
        cur = db.cursor()
        cur.execute("INSERT INTO animal (name) VALUES (?) RETURNING *", (name,))
        result = cur.fetchone()
        return httpx.Response(201, json={"id": result[0], "name": result[1]})

    return handler


if __name__ == "__main__":
    asyncio.run(main())
