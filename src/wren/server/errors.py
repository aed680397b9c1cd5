"""Error responses for the top of the dispatch.

Maps an error that escaped the app (raised, or passed to the app's
continuation) to a finished ServerResponse, using a handler registered
with ``@app.error()`` when there is one.
"""

import inspect
import logging
import traceback
from collections.abc import Callable
from typing import Any

from wren._internal.invoke import positional_arity
from wren.errors import HTTPError
from wren.http.request import Request
from wren.http.response import ServerResponse

logger = logging.getLogger("wren.server")

type ErrorHandlers = dict[int | type[BaseException], Callable[..., Any]]


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    response: ServerResponse,
    exc: BaseException,
) -> None:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept up to three positional arguments
    ``(request, response, exc)``; they get as many as they declare.
    A non-``None`` return value is sent as the body. Sync and async
    handlers are both supported.
    """
    arity = positional_arity(handler)
    args: tuple[Any, ...] = (request, response, exc)
    if arity is not None:
        args = args[:arity]

    result = handler(*args)
    if inspect.isawaitable(result):
        result = await result

    if response.finished:
        return
    if result is not None:
        response.send(result)
    else:
        response.end()


def _prepare(response: ServerResponse, status: int) -> None:
    response.status_code = status
    response.remove_header("Content-Type")


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    response: ServerResponse,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> None:
    """Finish *response* for an ``HTTPError`` (404s included)."""
    logger.debug("%d %s %s - %s", exc.status, request.method, request.path, exc.detail)

    _prepare(response, exc.status)
    for name, value in exc.headers:
        response.set_header(name, value)

    # Try exact exception type, then status code
    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        await call_error_handler(handler, request, response, exc)
        return

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"
    response.set_header("Content-Type", "text/plain; charset=utf-8")
    response.end(detail)


async def handle_internal_error(
    exc: BaseException,
    request: Request,
    response: ServerResponse,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> None:
    """Finish *response* as a 500 for any other error."""
    logger.error(
        "500 %s %s",
        request.method,
        request.path,
        exc_info=(type(exc), exc, exc.__traceback__),
    )

    _prepare(response, 500)
    handler = error_handlers.get(type(exc)) or error_handlers.get(500)
    if handler is not None:
        await call_error_handler(handler, request, response, exc)
        return

    response.set_header("Content-Type", "text/plain; charset=utf-8")
    if debug:
        response.end("".join(traceback.format_exception(exc)))
    else:
        response.end("Internal Server Error")


async def handle_error(
    exc: BaseException,
    request: Request,
    response: ServerResponse,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> None:
    if isinstance(exc, HTTPError):
        await handle_http_error(exc, request, response, error_handlers, debug)
    else:
        await handle_internal_error(exc, request, response, error_handlers, debug)
