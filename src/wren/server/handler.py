"""ASGI handler: translates ASGI scope/messages to wren types.

The only component that touches raw ASGI directly. Converts the scope to
a Request, runs the app with a fresh ServerResponse, maps whatever comes
back out of the app (an error, a bare ``next()``, or nothing) to a final
response, and sends it through ASGI ``send()``.
"""

from __future__ import annotations

import logging
from contextvars import Token
from typing import TYPE_CHECKING

from wren._internal.asgi import Receive, Scope, Send
from wren.context import request_var
from wren.errors import HTTPError, NotFound
from wren.http.request import Request
from wren.http.response import Response, ServerResponse
from wren.middleware.protocol import Continuation
from wren.server.errors import ErrorHandlers, handle_error, handle_internal_error
from wren.server.sender import send_response

if TYPE_CHECKING:
    from wren.app import App

logger = logging.getLogger("wren.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    app: App,
    error_handlers: ErrorHandlers,
    debug: bool,
    max_content_length: int,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    response = ServerResponse()

    # Set request context var (reset after dispatch)
    token: Token[Request] = request_var.set(request)
    try:
        await dispatch(
            app,
            request,
            response,
            error_handlers=error_handlers,
            debug=debug,
            max_content_length=max_content_length,
        )
    finally:
        request_var.reset(token)

    try:
        snapshot = response.to_response()
    except UnicodeEncodeError:
        logger.exception("%s %s: response headers are not latin-1", request.method, request.path)
        snapshot = Response(
            status=500,
            body=b"Internal Server Error",
            headers=(("content-type", "text/plain; charset=utf-8"),),
        )

    await send_response(snapshot, send, head=request.method == "HEAD")


async def dispatch(
    app: App,
    request: Request,
    response: ServerResponse,
    *,
    error_handlers: ErrorHandlers,
    debug: bool,
    max_content_length: int,
) -> None:
    """Run *app* for one request and finish the response whatever happens.

    - the app's continuation called without an error: 404
    - called with an error, or an exception raised: the error's status
      (``HTTPError``) or 500, through ``@app.error()`` handlers
    - neither: the response is ended as the handlers left it
    """
    length = request.content_length
    if length is not None and length > max_content_length:
        exc = HTTPError(status=413, detail="Request body too large")
        await _finish_error(exc, request, response, error_handlers, debug)
        return

    if app.settings.x_powered_by:
        response.set_header("X-Powered-By", "wren")

    cont = Continuation()
    error: BaseException | None
    try:
        await app.handle(None, request, response, cont)
    except Exception as exc:
        error = exc
    else:
        if not cont.called:
            if not response.finished:
                logger.warning(
                    "%s %s: no handler ended the response or called next()",
                    request.method,
                    request.path,
                )
                response.end()
            return
        error = cont.error or NotFound()

    if response.headers_sent:
        # Too late to replace status and headers
        logger.error(
            "%s %s: %r after the response was started",
            request.method,
            request.path,
            error,
        )
        response.end()
        return

    await _finish_error(error, request, response, error_handlers, debug)


async def _finish_error(
    error: BaseException,
    request: Request,
    response: ServerResponse,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> None:
    """Map *error* to a response; a failing ``@app.error`` handler gets the plain 500."""
    try:
        await handle_error(error, request, response, error_handlers, debug)
    except Exception as handler_exc:
        logger.exception("%s %s: error handler failed", request.method, request.path)
        if response.headers_sent:
            response.end()
            return
        await handle_internal_error(handler_exc, request, response, {}, debug)
