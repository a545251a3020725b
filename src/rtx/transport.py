"""httpx transport that sends requests straight into a router.

    client = httpx.AsyncClient(transport=RouterTransport(router), base_url="http://app")
    response = await client.get("/users/42")
"""

import httpx

from rtx.errors import NotFound
from rtx.router import Router


class RouterTransport(httpx.AsyncBaseTransport):
    """Dispatches every request to router.fetch.

    NotFound becomes a plain text 404; any other error propagates to the caller.
    """

    def __init__(self, router: Router) -> None:
        self.router = router

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        try:
            response = await self.router.fetch(request)
        except NotFound:
            return httpx.Response(404, text="Not Found", request=request)
        return response
