"""Body parser middleware.

Each parser reads the request body once, when the Content-Type fits and
no earlier parser has claimed the request, and stores a ``Body`` on it::

    from wren.middleware import body_parser

    app.use(body_parser.json())
    app.use(body_parser.urlencoded())

    @app.route("/users", methods=["POST"])
    def create_user(request, response, next):
        body = request.parsed_body
        if body.kind is BodyKind.JSON:
            ...
"""

from __future__ import annotations

import json as json_module
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from wren.errors import HTTPError
from wren.http.content import type_is
from wren.http.query import QueryParams
from wren.middleware.protocol import Middleware, Next

if TYPE_CHECKING:
    from wren.http.request import Request
    from wren.http.response import ServerResponse

logger = logging.getLogger("wren.middleware")

DEFAULT_LIMIT = 100 * 1024


class BodyKind(Enum):
    """What a body parser made of the request body."""

    NOT_PARSED = "not_parsed"
    NO_BODY = "no_body"
    JSON = "json"
    TEXT = "text"
    RAW = "raw"
    URL_ENCODED = "url_encoded"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Body:
    """A parsed request body tagged with its kind."""

    kind: BodyKind
    value: Any = None

    @classmethod
    def not_parsed(cls) -> Body:
        return cls(BodyKind.NOT_PARSED)

    @classmethod
    def no_body(cls) -> Body:
        return cls(BodyKind.NO_BODY)

    @classmethod
    def failed(cls, error: BaseException) -> Body:
        return cls(BodyKind.ERROR, error)

    @property
    def json(self) -> Any:
        """The decoded JSON value, ``None`` for other kinds."""
        return self.value if self.kind is BodyKind.JSON else None

    @property
    def text(self) -> str | None:
        return self.value if self.kind is BodyKind.TEXT else None

    @property
    def raw(self) -> bytes | None:
        return self.value if self.kind is BodyKind.RAW else None

    @property
    def error(self) -> BaseException | None:
        return self.value if self.kind is BodyKind.ERROR else None

    def get(self, key: str, default: Any = None) -> Any:
        """Look up *key* in a form body or a JSON object body."""
        if self.kind is BodyKind.URL_ENCODED:
            return self.value.get(key, default)
        if self.kind is BodyKind.JSON and isinstance(self.value, dict):
            return self.value.get(key, default)
        return default

    def get_str(self, key: str) -> str:
        """Value for *key* as a string; ``""`` when missing."""
        value = self.get(key)
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def get_int(self, key: str) -> int | None:
        """Value for *key* as an int, ``None`` when missing or not numeric."""
        value = self.get(key)
        if value is None:
            return None
        if isinstance(value, bool):
            return int(value)
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    def __getitem__(self, key: str) -> Any:
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value


async def _read(request: Request, limit: int) -> bytes:
    length = request.content_length
    if length is not None and length > limit:
        msg = f"Request body exceeds {limit} bytes"
        raise HTTPError(status=413, detail=msg)
    data = await request.body()
    if len(data) > limit:
        msg = f"Request body exceeds {limit} bytes"
        raise HTTPError(status=413, detail=msg)
    return data


def _unclaimed(request: Request) -> bool:
    return request.parsed_body.kind is BodyKind.NOT_PARSED


def json(*, limit: int = DEFAULT_LIMIT) -> Middleware:
    """Parse ``*json*`` bodies into ``BodyKind.JSON``.

    An empty body becomes ``NO_BODY``, undecodable JSON becomes ``ERROR``.
    """

    async def parse_json(request: Request, response: ServerResponse, next: Next) -> None:
        if type_is(request.content_type, ("json",)) is None or not _unclaimed(request):
            next()
            return
        data = await _read(request, limit)
        if not data.strip():
            request.store_parsed_body(Body.no_body())
        else:
            try:
                request.store_parsed_body(Body(BodyKind.JSON, json_module.loads(data)))
            except ValueError as exc:
                logger.debug("Invalid JSON body: %s", exc)
                request.store_parsed_body(Body.failed(exc))
        next()

    return parse_json


def text(*, limit: int = DEFAULT_LIMIT) -> Middleware:
    """Decode ``text/*`` bodies as UTF-8 into ``BodyKind.TEXT``."""

    async def parse_text(request: Request, response: ServerResponse, next: Next) -> None:
        if type_is(request.content_type, ("text",)) is None or not _unclaimed(request):
            next()
            return
        data = await _read(request, limit)
        try:
            request.store_parsed_body(Body(BodyKind.TEXT, data.decode("utf-8")))
        except UnicodeDecodeError as exc:
            logger.debug("Text body is not UTF-8: %s", exc)
            request.store_parsed_body(Body.failed(exc))
        next()

    return parse_text


def raw(*, limit: int = DEFAULT_LIMIT) -> Middleware:
    """Store any unclaimed body as bytes in ``BodyKind.RAW``."""

    async def parse_raw(request: Request, response: ServerResponse, next: Next) -> None:
        if not _unclaimed(request):
            next()
            return
        request.store_parsed_body(Body(BodyKind.RAW, await _read(request, limit)))
        next()

    return parse_raw


def urlencoded(*, limit: int = DEFAULT_LIMIT) -> Middleware:
    """Parse ``application/x-www-form-urlencoded`` bodies into ``QueryParams``."""

    async def parse_urlencoded(request: Request, response: ServerResponse, next: Next) -> None:
        content_types = ("application/x-www-form-urlencoded",)
        if type_is(request.content_type, content_types) is None or not _unclaimed(request):
            next()
            return
        data = await _read(request, limit)
        try:
            decoded = data.decode("utf-8")
        except UnicodeDecodeError:
            logger.error("Could not decode form body as UTF-8")
            next()
            return
        request.store_parsed_body(Body(BodyKind.URL_ENCODED, QueryParams(decoded)))
        next()

    return parse_urlencoded
