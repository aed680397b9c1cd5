"""Invoke helpers — call sync or async handler units uniformly.

Handler units can be ``def`` or ``async def``. The route walk awaits
each unit before starting the next one, so only one unit is ever active
per request regardless of which kind it is.

Usage::

    from wren._internal.invoke import invoke

    await invoke(unit, request, response, next)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any) -> Any:
    """Call a handler and await the result if it is awaitable.

    Works with both sync and async callables::

        def logger(request, response, next):
            print(request.method, request.path)
            next()

        async def load_user(request, response, next):
            response.locals["user"] = await users.get(request.params["id"])
            next()
    """
    result = handler(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def positional_arity(func: Any) -> int | None:
    """Number of positional parameters *func* takes, ``None`` if variadic or unknown."""
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return None
    count = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
    return count
