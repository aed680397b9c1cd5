"""Middleware — handler units and the built-in glue middleware.

A plain unit is any callable matching::

    def mw(request, response, next) -> None

an error unit takes the pending error first::

    def on_error(error, request, response, next) -> None

Built-in middleware:
    body_parser -- json/text/raw/urlencoded body parsing
    cors -- Access-Control-Allow-* headers and OPTIONS handling
    pause -- Artificial latency, optionally followed by an error
"""

from wren.middleware import body_parser
from wren.middleware.cors import CORSConfig, CORSMiddleware, cors
from wren.middleware.pause import pause
from wren.middleware.protocol import (
    Continuation,
    ErrorMiddleware,
    HandlerUnit,
    Middleware,
    MiddlewareObject,
    Next,
    UnitKind,
)

__all__ = [
    "CORSConfig",
    "CORSMiddleware",
    "Continuation",
    "ErrorMiddleware",
    "HandlerUnit",
    "Middleware",
    "MiddlewareObject",
    "Next",
    "UnitKind",
    "body_parser",
    "cors",
    "pause",
]
