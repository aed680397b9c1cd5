"""Handler units and the continuation protocol.

A handler unit is one step of a route's chain. It comes in exactly three
kinds:

    def plain(request, response, next): ...            # skipped while an error is pending
    def on_error(error, request, response, next): ...  # runs only while an error is pending
    class Obj:                                         # always runs; Route, Router, App
        async def handle(self, error, request, response, next): ...

Every unit must eventually do one of three things: call ``next()`` to
proceed, call ``next(error)`` to abort towards the nearest error handler,
or finish the response and return without calling ``next`` at all.
Raising an exception is the same as ``next(exc)``.

Units may be ``def`` or ``async def``. ``next`` itself is a plain
callable; it records the decision and returns immediately.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from wren._internal.invoke import invoke, positional_arity
from wren.errors import NextValueError

if TYPE_CHECKING:
    from wren.http.request import Request
    from wren.http.response import ServerResponse

logger = logging.getLogger("wren.routing")

# The continuation handed to every unit
type Next = Callable[..., None]

# Plain and error handler shapes
type Middleware = Callable[[Request, ServerResponse, Next], Any]
type ErrorMiddleware = Callable[[BaseException, Request, ServerResponse, Next], Any]


@runtime_checkable
class MiddlewareObject(Protocol):
    """Anything with the full ``handle(error, request, response, next)`` contract.

    Route, Router and App implement it, which is what lets one be nested
    inside another (sub-routers, mounted apps).
    """

    async def handle(
        self,
        error: BaseException | None,
        request: Request,
        response: ServerResponse,
        next: Next,
    ) -> None: ...


class UnitKind(Enum):
    """The closed set of handler unit kinds."""

    PLAIN = "plain"
    ERROR = "error"
    OBJECT = "object"


@dataclass(frozen=True, slots=True)
class HandlerUnit:
    """A handler unit tagged with its kind.

    Prefer the explicit constructors when inference could guess wrong::

        route = Route(pattern="/x", units=[HandlerUnit.error(my_handler)])
    """

    kind: UnitKind
    target: Any

    @classmethod
    def plain(cls, func: Middleware) -> HandlerUnit:
        return cls(UnitKind.PLAIN, func)

    @classmethod
    def error(cls, func: ErrorMiddleware) -> HandlerUnit:
        return cls(UnitKind.ERROR, func)

    @classmethod
    def object(cls, obj: MiddlewareObject) -> HandlerUnit:
        return cls(UnitKind.OBJECT, obj)

    def applies_to(self, error: BaseException | None) -> bool:
        """Whether this unit runs given the pending error state."""
        match self.kind:
            case UnitKind.PLAIN:
                return error is None
            case UnitKind.ERROR:
                return error is not None
            case UnitKind.OBJECT:
                return True

    async def run(
        self,
        error: BaseException | None,
        request: Request,
        response: ServerResponse,
        next: Next,
    ) -> None:
        """Invoke the unit with the argument list its kind expects."""
        match self.kind:
            case UnitKind.PLAIN:
                await invoke(self.target, request, response, next)
            case UnitKind.ERROR:
                await invoke(self.target, error, request, response, next)
            case UnitKind.OBJECT:
                await invoke(self.target.handle, error, request, response, next)

    def __repr__(self) -> str:
        name = getattr(self.target, "__qualname__", None) or repr(self.target)
        return f"<{self.kind.value} {name}>"


def as_unit(value: Any) -> HandlerUnit:
    """Classify a registration argument as a handler unit.

    - ``HandlerUnit`` instances pass through unchanged.
    - Objects with a callable ``handle`` attribute are ``OBJECT`` units.
    - Callables taking four positional parameters are ``ERROR`` units.
    - Any other callable is a ``PLAIN`` unit.
    """
    if isinstance(value, HandlerUnit):
        return value
    if callable(getattr(value, "handle", None)):
        return HandlerUnit.object(value)
    if not callable(value):
        msg = f"Handler must be callable or have a handle() method, got {value!r}"
        raise TypeError(msg)
    if positional_arity(value) == 4:
        return HandlerUnit.error(value)
    return HandlerUnit.plain(value)


class Continuation:
    """The ``next`` callable handed to one unit for one visit.

    Records whether it was called and with what. ``next()`` proceeds,
    ``next(exc)`` signals an error, ``next(value)`` with any other value
    signals ``NextValueError(value)``. Only the first call counts.
    """

    __slots__ = ("called", "error")

    def __init__(self) -> None:
        self.called = False
        self.error: BaseException | None = None

    def __call__(self, error: Any = None) -> None:
        if self.called:
            logger.debug("next() called more than once; ignoring %r", error)
            return
        self.called = True
        self.error = to_error(error)

    def __repr__(self) -> str:
        state = "pending" if not self.called else f"called error={self.error!r}"
        return f"<Continuation {state}>"


def to_error(value: Any) -> BaseException | None:
    """Normalize a ``next()`` argument to an exception (or ``None``)."""
    if value is None:
        return None
    if isinstance(value, BaseException):
        return value
    return NextValueError(value)
