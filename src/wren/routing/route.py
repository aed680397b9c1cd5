"""Route: a guarded, ordered chain of handler units.

A route filters on method and path pattern, then walks its units in
registration order while threading a single pending-error slot through
them. Routes are themselves middleware objects, so a route can be a unit
of another route, and routers and apps nest the same way.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from wren.middleware.protocol import Continuation, HandlerUnit, Next, UnitKind, as_unit
from wren.routing.keeper import RouteKeeper
from wren.routing.pattern import (
    Pattern,
    PatternMatch,
    compile_pattern,
    format_pattern,
    match_path,
)

if TYPE_CHECKING:
    from wren.http.request import Request
    from wren.http.response import ServerResponse

logger = logging.getLogger("wren.routing")


class Route(RouteKeeper):
    """A method/pattern guard in front of a list of handler units.

    ``methods=None`` accepts every method, ``pattern=None`` (or ``"*"``)
    accepts every path. A route with no units is a pass-through::

        route = Route("/users/:id", methods={"GET"}, units=[load_user, show_user])
    """

    __slots__ = ("id", "methods", "pattern", "units")

    def __init__(
        self,
        pattern: str | Pattern | None = None,
        *,
        methods: Iterable[str] | None = None,
        units: Iterable[Any] = (),
        id: str | None = None,
    ) -> None:
        self.id = id
        self.methods: frozenset[str] | None = (
            frozenset(m.upper() for m in methods) if methods is not None else None
        )
        self.pattern: Pattern | None = (
            compile_pattern(pattern) if isinstance(pattern, str) else pattern
        )
        self.units: list[HandlerUnit] = [as_unit(unit) for unit in units]

    # -- RouteKeeper --

    def add(self, route: Route) -> None:
        """Append *route* as an object unit of this route."""
        self.units.append(HandlerUnit.object(route))

    # -- Matching --

    def match(self, request: Request) -> PatternMatch | None:
        """Match the request path, or only the part below the current base URL."""
        base = request.base_url
        path = request.raw_path
        if base is not None:
            path = path[len(base) :]
        return match_path(self.pattern, path)

    # -- Dispatch --

    async def handle(
        self,
        error: BaseException | None,
        request: Request,
        response: ServerResponse,
        next: Next,
    ) -> None:
        """Run this route's units for *request*, then continue or raise.

        A miss on method or path, or a route without units, passes the
        pending error straight to *next*. Otherwise the route context
        (route, params, base URL) is pushed for the walk and restored
        afterwards, however the walk ends.
        """
        if self.methods is not None and request.method not in self.methods:
            logger.debug("%r: method %s does not match", self, request.method)
            next(error)
            return

        changes: dict[str, Any] = {"route": self}
        if self.pattern is not None:
            found = self.match(request)
            if found is None:
                logger.debug("%r: path %s does not match", self, request.raw_path)
                next(error)
                return
            changes["params"] = {**request.params, **found.params}
            changes["base_url"] = (request.base_url or "") + found.path

        if not self.units:
            logger.debug("%r: no handler units", self)
            next(error)
            return

        pending = error
        with request.context.push(**changes):
            for unit in tuple(self.units):
                if not unit.applies_to(pending):
                    continue
                cont = Continuation()
                try:
                    await unit.run(pending, request, response, cont)
                except Exception as exc:
                    logger.debug("%r: %r raised %r", self, unit, exc)
                    pending = exc
                    continue
                if not cont.called:
                    logger.debug("%r: %r finished the request", self, unit)
                    return
                pending = cont.error

        if pending is not None:
            raise pending
        next()

    # -- Diagnostics --

    def __repr__(self) -> str:
        parts = ["<Route:"]
        if self.id:
            parts.append(f"[{self.id}]")
        if self.methods:
            parts.append(",".join(sorted(self.methods)))
        if self.pattern is not None:
            parts.append(format_pattern(self.pattern))
        if not self.methods and self.pattern is None:
            parts.append("*")
        if not self.units:
            parts.append("NO-units")
        elif len(self.units) > 1:
            parts.append(f"#units={len(self.units)}")
        else:
            unit = self.units[0]
            if unit.kind is UnitKind.OBJECT:
                parts.append(repr(unit.target))
            else:
                parts.append("mw" if unit.kind is UnitKind.PLAIN else "errmw")
        return " ".join(parts) + ">"
