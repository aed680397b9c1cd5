"""HTTP request.

Frozen metadata with async body access, plus the ``RequestContext`` a
dispatch attaches for its duration (active app, route, params, base URL).
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from wren._internal.asgi import Receive
from wren.context import RequestContext
from wren.http.content import type_is
from wren.http.headers import Headers
from wren.http.query import QueryParams

if TYPE_CHECKING:
    from wren.middleware.body_parser import Body


@dataclass(frozen=True, slots=True)
class Request:
    """An HTTP request.

    Metadata (method, path, headers, etc.) is frozen at creation.
    Body is accessed asynchronously via ``.body()``, ``.json()``, ``.text()``.
    ``context`` is mutable dispatch state managed by routes and apps.
    """

    method: str
    path: str
    raw_path: str
    headers: Headers
    query: QueryParams
    http_version: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    context: RequestContext = field(default_factory=RequestContext, compare=False)

    # Private: mutable cache for the body and body-parser results
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Dispatch context --

    @property
    def params(self) -> dict[str, str]:
        """Path variables bound by the matching routes (``/users/:id``)."""
        return self.context.params

    @property
    def base_url(self) -> str | None:
        """Escaped path prefix consumed by the enclosing routes, if any."""
        return self.context.base_url

    @property
    def route(self) -> Any:
        """The Route currently running handlers for this request."""
        return self.context.route

    @property
    def app(self) -> Any:
        """The App currently dispatching this request."""
        return self.context.app

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        """The Content-Length header as int."""
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    @property
    def url(self) -> str:
        """Escaped request URL (path + query string)."""
        if self.query.raw:
            return f"{self.raw_path}?{self.query.raw}"
        return self.raw_path

    @property
    def xhr(self) -> bool:
        """True if the request was sent by ``XMLHttpRequest``."""
        return "XMLHttpRequest" in (self.headers.get("x-requested-with") or "")

    def accepts(self, mime_type: str) -> str | None:
        """Return the first ``Accept`` entry containing *mime_type*, if any."""
        accept = self.headers.get("accept")
        if not accept:
            return None
        wanted = mime_type.lower()
        for entry in accept.split(","):
            entry = entry.strip()
            if wanted in entry.lower():
                return entry
        return None

    def is_type(self, pattern: str) -> bool:
        """Check whether the request Content-Type matches *pattern*.

        Example::

            def handler(request, response, next):
                if not request.is_type("json"):
                    return next()
        """
        return type_is(self.content_type, (pattern,)) is not None

    # -- Body parser result --

    @property
    def parsed_body(self) -> Body:
        """Result of the body parser middleware (``Body.NOT_PARSED`` if none ran)."""
        from wren.middleware.body_parser import Body

        return self._cache.get("_parsed_body", Body.not_parsed())

    def store_parsed_body(self, body: Body) -> None:
        """Attach a body parser result to this request."""
        self._cache["_parsed_body"] = body

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached — the ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        import json as json_module

        raw = await self.body()
        return json_module.loads(raw)

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        raw = await self.body()
        return raw.decode("utf-8")

    # -- Factories --

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        raw_path = scope.get("raw_path") or b""
        escaped = raw_path.decode("latin-1") if raw_path else quote(scope["path"])
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            raw_path=escaped.split("?", 1)[0],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
        )

    @classmethod
    def build(
        cls,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
    ) -> Request:
        """Create a standalone Request, e.g. to drive a Router directly.

        *url* is an escaped path with an optional query string.
        """
        from urllib.parse import unquote

        path_part, _, query_string = url.partition("?")
        sent = False

        async def receive() -> dict[str, Any]:
            nonlocal sent
            if sent:
                return {"type": "http.disconnect"}
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}

        return cls(
            method=method.upper(),
            path=unquote(path_part),
            raw_path=path_part,
            headers=Headers.from_mapping(headers),
            query=QueryParams(query_string),
            http_version="1.1",
            server=None,
            client=None,
            _receive=receive,
        )
