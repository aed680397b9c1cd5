"""Wren exception hierarchy.

Shared across Route, Router, App, the final handler, and middleware so
every module raises and catches the same types.
"""

from dataclasses import dataclass
from typing import Any


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when app configuration is invalid."""


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raised by handlers or passed to ``next()``. The final handler maps
    it to a response, or to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — nothing in the handler chain finalized the response."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class NextValueError(WrenError):
    """A continuation was called with a value that is not an exception.

    ``next("boom")`` and ``next(42)`` both abort the chain like
    ``next(error)`` does; the original value is kept on ``value``.
    """

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"next() called with non-error value {value!r}")


class RenderError(WrenError):
    """Base for template rendering setup errors."""


class NoApplicationActive(RenderError):  # noqa: N818
    """``response.render()`` was called outside of an app dispatch."""

    def __init__(self) -> None:
        super().__init__("No application is active for this response.")


class UnsupportedViewEngine(RenderError):  # noqa: N818
    """The configured ``view engine`` has no registered template engine."""

    def __init__(self, engine: str) -> None:
        self.engine = engine
        super().__init__(f"Unsupported view engine: {engine!r}")


class ResponseError(WrenError):
    """A response was modified after its headers were sent, or given an unsendable header."""
