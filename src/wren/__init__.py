"""Wren — Express-style middleware chaining for Python web apps.

Requests flow through an ordered list of routes; each route runs its
handler units in turn, and every unit either finishes the response,
calls ``next()`` to continue, or calls ``next(error)`` to jump to the
nearest error handler.

Basic usage::

    from wren import App

    app = App()

    def log_request(request, response, next):
        print(request.method, request.path)
        next()

    def show_user(request, response, next):
        response.json({"id": request.params["id"]})

    app.use(log_request)
    app.get("/users/:id", show_user)

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "HTTPError",
    "HandlerUnit",
    "Next",
    "NextValueError",
    "NotFound",
    "Request",
    "Response",
    "Route",
    "Router",
    "ServerResponse",
    "WrenError",
    "get_request",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wren.app import App

        return App

    if name == "AppConfig":
        from wren.config import AppConfig

        return AppConfig

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name in ("Response", "ServerResponse"):
        from wren.http import response as _resp

        return getattr(_resp, name)

    if name in ("Route", "Router"):
        from wren import routing as _routing

        return getattr(_routing, name)

    if name in ("HandlerUnit", "Next"):
        from wren.middleware import protocol as _mw

        return getattr(_mw, name)

    if name == "get_request":
        from wren.context import get_request

        return get_request

    if name in ("ConfigurationError", "HTTPError", "NextValueError", "NotFound", "WrenError"):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
