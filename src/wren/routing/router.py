"""Router: an ordered list of routes tried in insertion order.

There is no lookup structure: every request walks the routes in the order
they were added, and each route decides for itself whether it applies.
That keeps middleware, routes and mounted sub-applications in a single
sequence.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from wren.middleware.protocol import Continuation, Next
from wren.routing.keeper import RouteKeeper
from wren.routing.route import Route

if TYPE_CHECKING:
    from wren.http.request import Request
    from wren.http.response import ServerResponse

logger = logging.getLogger("wren.routing")


class Router(RouteKeeper):
    """Ordered, append-only route list.

    Usage::

        router = Router()
        router.use(log_requests)
        router.get("/users/:id", show_user)

        app.use("/api", router)

    ``Router(*handlers)`` starts with one catch-all route holding *handlers*.
    """

    __slots__ = ("routes",)

    def __init__(self, *handlers: Any) -> None:
        self.routes: list[Route] = []
        if handlers:
            self.routes.append(Route(units=handlers))

    def add(self, route: Route) -> None:
        """Append *route*; it is tried after every route added before it."""
        self.routes.append(route)

    async def handle(
        self,
        error: BaseException | None,
        request: Request,
        response: ServerResponse,
        next: Next,
    ) -> None:
        """Offer the request to each route in turn.

        The error a route passes through is handed to the route after it.
        A route that does not continue ends the walk. Exceptions propagate.
        """
        if not self.routes:
            next(error)
            return

        current = error
        for route in tuple(self.routes):
            cont = Continuation()
            await route.handle(current, request, response, cont)
            if not cont.called:
                return
            current = cont.error

        next(current)

    def __len__(self) -> int:
        return len(self.routes)

    def __repr__(self) -> str:
        return f"<Router: #routes={len(self.routes)}>"
