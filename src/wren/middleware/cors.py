"""CORS middleware.

Adds the ``Access-Control-Allow-*`` headers to every response and can
answer ``OPTIONS`` preflight requests itself.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from wren.middleware.protocol import Next

if TYPE_CHECKING:
    from wren.http.request import Request
    from wren.http.response import ServerResponse

DEFAULT_METHODS = ("GET", "HEAD", "POST", "DELETE", "OPTIONS", "PUT", "PATCH")
DEFAULT_HEADERS = ("Accept", "Content-Type")


@dataclass(frozen=True, slots=True)
class CORSConfig:
    """CORS middleware configuration.

    Only the origin is required::

        CORSConfig(allow_origin="https://example.com", handle_options=True)
    """

    allow_origin: str
    allow_headers: tuple[str, ...] = DEFAULT_HEADERS
    allow_methods: tuple[str, ...] = DEFAULT_METHODS
    handle_options: bool = False


class CORSMiddleware:
    """Plain handler unit that sets CORS headers, then continues.

    With ``handle_options`` an ``OPTIONS`` request is answered with
    ``200`` and an ``Allow`` header instead of being passed on.
    """

    __slots__ = ("config",)

    def __init__(self, config: CORSConfig) -> None:
        self.config = config

    def __call__(self, request: Request, response: ServerResponse, next: Next) -> None:
        cfg = self.config
        methods = ",".join(cfg.allow_methods)

        response.set_header("Access-Control-Allow-Origin", cfg.allow_origin)
        response.set_header("Access-Control-Allow-Headers", ", ".join(cfg.allow_headers))
        response.set_header("Access-Control-Allow-Methods", methods)

        if request.method == "OPTIONS" and cfg.handle_options:
            response.set_header("Allow", methods)
            response.write_head(200)
            response.end()
            return
        next()

    def __repr__(self) -> str:
        return f"<CORSMiddleware {self.config.allow_origin}>"


def cors(
    allow_origin: str,
    allow_headers: Sequence[str] | None = None,
    allow_methods: Sequence[str] | None = None,
    handle_options: bool = False,
) -> CORSMiddleware:
    """Build a CORS middleware.

    Usage::

        app.use(cors("*", handle_options=True))
    """
    return CORSMiddleware(
        CORSConfig(
            allow_origin=allow_origin,
            allow_headers=tuple(allow_headers) if allow_headers is not None else DEFAULT_HEADERS,
            allow_methods=tuple(allow_methods) if allow_methods is not None else DEFAULT_METHODS,
            handle_options=handle_options,
        )
    )
