"""HTTP response.

``ServerResponse`` is what handler units receive: a mutable response that
is filled in step by step (status, headers, body chunks) and finished with
``end()``. The body is buffered and sent by the server once the dispatch
returns.

``Response`` is the frozen snapshot of a finished ``ServerResponse``,
returned by the test client.
"""

from __future__ import annotations

import json as json_module
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Self

from wren.errors import NoApplicationActive, ResponseError
from wren.http.headers import ResponseHeaders

if TYPE_CHECKING:
    from wren.app import App
    from wren.http.request import Request

logger = logging.getLogger("wren.server")

JSON_TYPE = "application/json; charset=utf-8"


def _encode(chunk: str | bytes) -> bytes:
    if isinstance(chunk, bytes):
        return chunk
    return chunk.encode("utf-8")


class ServerResponse:
    """A response under construction.

    Handlers either finish it (``send``, ``json``, ``end``, ``render``) and
    return without calling ``next``, or leave it alone and call ``next``::

        def show_user(request, response, next):
            response.status(200).json({"id": request.params["id"]})
    """

    __slots__ = (
        "_chunks",
        "app",
        "finished",
        "headers",
        "headers_sent",
        "locals",
        "request",
        "status_code",
    )

    def __init__(self) -> None:
        self.status_code = 200
        self.headers = ResponseHeaders()
        self.headers_sent = False
        self.finished = False
        self.locals: dict[str, Any] = {}
        # Installed by the App for the duration of its dispatch
        self.app: App | None = None
        self.request: Request | None = None
        self._chunks: list[bytes] = []

    # -- Headers --

    def set_header(self, name: str, value: Any) -> None:
        if self.headers_sent:
            msg = f"Cannot set header {name!r}: headers already sent."
            raise ResponseError(msg)
        values = value if isinstance(value, (list, tuple)) else (value,)
        try:
            name.encode("latin-1")
            for item in values:
                str(item).encode("latin-1")
        except UnicodeEncodeError as exc:
            msg = f"Header {name!r} must be latin-1 encodable, got {value!r}."
            raise ResponseError(msg) from exc
        self.headers[name] = value

    def get_header(self, name: str) -> Any:
        return self.headers.get(name)

    def remove_header(self, name: str) -> None:
        if self.headers_sent:
            msg = f"Cannot remove header {name!r}: headers already sent."
            raise ResponseError(msg)
        self.headers.pop(name, None)

    def set(self, name: str, value: Any) -> None:
        """Set a header, or remove it when *value* is ``None``."""
        if value is None:
            self.remove_header(name)
        else:
            self.set_header(name, value)

    @property
    def content_type(self) -> str | None:
        return self.get_header("Content-Type")

    @property
    def can_assign_content_type(self) -> bool:
        return not self.headers_sent and self.get_header("Content-Type") is None

    # -- Body --

    def write_head(self, status: int, headers: Mapping[str, Any] | None = None) -> None:
        """Set status and headers, then freeze the headers."""
        self.status_code = status
        for name, value in (headers or {}).items():
            self.set_header(name, value)
        self.headers_sent = True

    def write(self, chunk: str | bytes) -> None:
        if self.finished:
            msg = "Cannot write: response already ended."
            raise ResponseError(msg)
        self.headers_sent = True
        self._chunks.append(_encode(chunk))

    def end(self, chunk: str | bytes | None = None) -> None:
        """Finish the response, optionally writing a last chunk."""
        if self.finished:
            logger.debug("end() called on a finished response; ignoring")
            return
        if chunk is not None:
            self.write(chunk)
        self.headers_sent = True
        self.finished = True

    @property
    def body(self) -> bytes:
        """Everything written so far."""
        return b"".join(self._chunks)

    # -- Express-style helpers --

    def status(self, code: int) -> Self:
        """Set the status code; chainable."""
        self.status_code = code
        return self

    def send(self, body: str | bytes | Mapping[str, Any] | list[Any]) -> None:
        """Send *body* and end the response.

        Strings default to ``text/html`` when they start with ``<html`` and
        ``text/plain`` otherwise, bytes to ``application/octet-stream``,
        mappings and lists are sent as JSON. An explicit Content-Type wins.
        """
        if isinstance(body, (Mapping, list)):
            self.json(body)
            return
        if self.can_assign_content_type:
            if isinstance(body, bytes):
                self.set_header("Content-Type", "application/octet-stream")
            else:
                kind = "text/html" if body.startswith("<html") else "text/plain"
                self.set_header("Content-Type", f"{kind}; charset=utf-8")
        self.end(body)

    def send_status(self, code: int) -> None:
        self.status_code = code
        self.send(f"HTTP status {code}")

    def json(self, obj: Any) -> None:
        """Serialize *obj* as JSON and end the response."""
        if self.can_assign_content_type:
            self.set_header("Content-Type", JSON_TYPE)
        self.end(json_module.dumps(obj, default=str))

    def format(self, handlers: Mapping[str, Callable[[], Any]]) -> None:
        """Call the handler for the first ``Accept``-ed type, else ``"default"``.

        Example::

            response.format({
                "text/html": lambda: response.render("user", {"user": user}),
                "application/json": lambda: response.json(user),
                "default": lambda: response.send_status(406),
            })
        """
        request = self.request
        if request is not None:
            for key, handler in handlers.items():
                if key == "default":
                    continue
                mime_type = request.accepts(key)
                if mime_type is not None:
                    if self.can_assign_content_type:
                        self.set_header("Content-Type", mime_type)
                    handler()
                    return
        default = handlers.get("default")
        if default is not None:
            default()

    def render(self, template: str, options: Mapping[str, Any] | None = None) -> None:
        """Render *template* through the app currently dispatching this response."""
        if self.app is None:
            raise NoApplicationActive
        self.app.render(template, options, self)

    # -- Snapshot --

    def to_response(self) -> Response:
        """Freeze the current state into a ``Response``."""
        return Response(
            status=self.status_code,
            body=self.body,
            headers=tuple(
                (name.decode("latin-1"), value.decode("latin-1"))
                for name, value in self.headers.to_raw()
            ),
        )

    def __repr__(self) -> str:
        state = "finished" if self.finished else "open"
        return f"<ServerResponse {self.status_code} {state}>"


@dataclass(frozen=True, slots=True)
class Response:
    """A finished response as seen by a client."""

    status: int
    body: bytes = b""
    headers: tuple[tuple[str, str], ...] = ()

    @property
    def text(self) -> str:
        """Body decoded as UTF-8."""
        return self.body.decode("utf-8")

    @property
    def content_type(self) -> str | None:
        return self.header("content-type")

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first header named *name* (case-insensitive)."""
        lowered = name.lower()
        for key, value in self.headers:
            if key == lowered:
                return value
        return default

    def json(self) -> Any:
        return json_module.loads(self.body)
