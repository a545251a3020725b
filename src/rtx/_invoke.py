import inspect
from typing import Any


async def invoke(fn: Any, *args: Any) -> Any:
    """Call a plain or async function, awaiting the result if needed."""
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result
