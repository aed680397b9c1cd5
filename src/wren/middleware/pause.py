"""Pause middleware: delay every request, optionally failing afterwards.

Handy for simulating slow backends during development::

    app.use(pause(250))
    app.use("/flaky", pause(100, HTTPError(status=503)))
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from wren.middleware.protocol import Middleware, Next

if TYPE_CHECKING:
    from wren.http.request import Request
    from wren.http.response import ServerResponse


def pause(ms: int, error: BaseException | None = None) -> Middleware:
    """Wait *ms* milliseconds, then raise *error* or continue."""

    async def paused(request: Request, response: ServerResponse, next: Next) -> None:
        await asyncio.sleep(ms / 1000)
        if error is not None:
            raise error
        next()

    return paused
