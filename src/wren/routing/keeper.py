"""Registration helpers shared by everything that keeps routes.

``RouteKeeper`` turns ``use``/``all``/``get``/``post``/... calls into
``Route`` objects and hands them to ``add()``. Router, Route and App
implement ``add()``; the helpers are identical for all three.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, Self

from wren.middleware.protocol import HandlerUnit, as_unit

if TYPE_CHECKING:
    from wren.routing.route import Route


def _prefix_pattern(prefix: str) -> str:
    """``use("/admin")`` matches ``/admin`` and everything below it."""
    if prefix == "*":
        return prefix
    return prefix.rstrip("/") + "/*"


class RouteKeeper:
    """Mixin providing the Express-style registration verbs.

    Every verb takes an optional pattern followed by handler units::

        router.use(logger)
        router.use("/static", serve_static)
        router.get("/users/:id", load_user, show_user)

    Called with a pattern and no handlers, a verb returns a decorator::

        @router.post("/users")
        async def create_user(request, response, next): ...
    """

    __slots__ = ()

    def add(self, route: Route) -> None:
        raise NotImplementedError

    def _attach(self, child: Any, pattern: str | None) -> None:
        """Hook called for every handler registered through a verb."""

    # -- Verbs --

    def use(self, *args: Any) -> Self:
        """Register middleware for every method, optionally under a path prefix."""
        if args and isinstance(args[0], str):
            self._register(None, _prefix_pattern(args[0]), args[1:], mount_at=args[0])
        else:
            self._register(None, None, args)
        return self

    def all(self, pattern: str, *handlers: Any) -> Any:
        """Register handlers for *pattern* regardless of the method."""
        return self._verb(None, pattern, handlers)

    def get(self, pattern: str, *handlers: Any) -> Any:
        return self._verb(frozenset({"GET"}), pattern, handlers)

    def post(self, pattern: str, *handlers: Any) -> Any:
        return self._verb(frozenset({"POST"}), pattern, handlers)

    def head(self, pattern: str, *handlers: Any) -> Any:
        return self._verb(frozenset({"HEAD"}), pattern, handlers)

    def put(self, pattern: str, *handlers: Any) -> Any:
        return self._verb(frozenset({"PUT"}), pattern, handlers)

    def delete(self, pattern: str, *handlers: Any) -> Any:
        return self._verb(frozenset({"DELETE"}), pattern, handlers)

    def patch(self, pattern: str, *handlers: Any) -> Any:
        return self._verb(frozenset({"PATCH"}), pattern, handlers)

    def options(self, pattern: str, *handlers: Any) -> Any:
        return self._verb(frozenset({"OPTIONS"}), pattern, handlers)

    def route(
        self,
        pattern: str,
        *,
        methods: Iterable[str] | None = ("GET",),
        id: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form that works the same on Router, Route and App.

        ``methods=None`` accepts every method::

            @app.route("/users/:id", methods=["GET", "HEAD"])
            def show_user(request, response, next):
                response.send(request.params["id"])
        """
        method_set = frozenset(m.upper() for m in methods) if methods is not None else None

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._register(method_set, pattern, (func,), id=id)
            return func

        return decorator

    # -- Internals --

    def _verb(
        self,
        methods: frozenset[str] | None,
        pattern: str,
        handlers: tuple[Any, ...],
    ) -> Any:
        if not handlers:

            def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
                self._register(methods, pattern, (func,))
                return func

            return decorator
        self._register(methods, pattern, handlers)
        return self

    def _register(
        self,
        methods: frozenset[str] | None,
        pattern: str | None,
        handlers: tuple[Any, ...],
        *,
        mount_at: str | None = None,
        id: str | None = None,
    ) -> None:
        from wren.routing.route import Route

        units: list[HandlerUnit] = []
        for handler in handlers:
            self._attach(handler, mount_at if mount_at is not None else pattern)
            units.append(as_unit(handler))
        self.add(Route(pattern=pattern, methods=methods, units=units, id=id))
