"""Per-request dispatch context.

Provides:
- ``RequestContext``: the typed state a dispatch attaches to a request
  (active app, active route, path params, mount base URL).
- ``request_var``: The current ``Request`` for this task.

Routes and apps install their values with ``RequestContext.push()`` and
get the previous values back when the block exits, so nested (mounted)
apps never leak state into sibling dispatches.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from wren.http.request import Request

_UNSET: Any = object()


@dataclass(slots=True)
class RequestContext:
    """Dispatch state owned by one request for the duration of one dispatch."""

    app: Any = None
    route: Any = None
    params: dict[str, str] = field(default_factory=dict)
    base_url: str | None = None

    @contextmanager
    def push(
        self,
        *,
        app: Any = _UNSET,
        route: Any = _UNSET,
        params: dict[str, str] | None = None,
        base_url: str | None = _UNSET,
    ) -> Iterator[RequestContext]:
        """Install new values and restore the previous ones on exit.

        Only the keywords that are passed are changed::

            with request.context.push(route=self, params=merged):
                ...
        """
        saved = (self.app, self.route, self.params, self.base_url)
        if app is not _UNSET:
            self.app = app
        if route is not _UNSET:
            self.route = route
        if params is not None:
            self.params = params
        if base_url is not _UNSET:
            self.base_url = base_url
        try:
            yield self
        finally:
            self.app, self.route, self.params, self.base_url = saved


# -- Request context --

request_var: ContextVar[Request] = ContextVar("wren_request")
"""The current request. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()
