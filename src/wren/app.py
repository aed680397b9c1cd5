"""Wren application class.

An App is a Router plus settings, template engines and mount bookkeeping.
It is itself a middleware object, so an App can be mounted inside another
App (``app.use("/admin", admin)``) and dispatched like any other unit.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any, Self

from wren._internal.asgi import Receive, Scope, Send
from wren.config import AppConfig
from wren.errors import ConfigurationError
from wren.http.request import Request
from wren.http.response import ServerResponse
from wren.middleware.protocol import Next
from wren.routing.keeper import RouteKeeper
from wren.routing.route import Route
from wren.routing.router import Router
from wren.server.errors import ErrorHandlers
from wren.server.handler import handle_request
from wren.settings import Settings
from wren.templating.engines import TemplateEngine, default_engines
from wren.templating.render import render_view

logger = logging.getLogger("wren.server")

type MountListener = Callable[[App], Any]


class App(RouteKeeper):
    """The wren application.

    Usage::

        app = App(AppConfig(views_dir="views"))

        @app.route("/")
        def index(request, response, next):
            response.render("index", {"title": "Hello"})

        admin = App()
        admin.get("/", lambda request, response, next: response.send("admin"))
        app.use("/admin", admin)

        app.run()
    """

    __slots__ = (
        "_error_handlers",
        "_mount_listeners",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
        "engines",
        "id",
        "mount_path",
        "router",
        "settings",
    )

    def __init__(self, config: AppConfig | None = None, *, id: str | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self.id = id
        self.router = Router()
        self.settings = Settings.from_config(self.config)
        self.engines: dict[str, TemplateEngine] = default_engines(self.config)
        self.mount_path: list[str] = []
        self._mount_listeners: list[MountListener] = []
        self._error_handlers: ErrorHandlers = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []

    # -- RouteKeeper --

    def add(self, route: Route) -> None:
        self.router.add(route)

    def _attach(self, child: Any, pattern: str | None) -> None:
        if isinstance(child, App):
            at = pattern if pattern and pattern != "*" else "/"
            child.mount(at, parent=self)

    def get(self, pattern: str, *handlers: Any) -> Any:  # type: ignore[override]
        """Register GET handlers, or read a setting when called with one argument.

        ``app.get("view engine")`` returns the setting; use ``app.route()``
        for the decorator form of GET routes.
        """
        if not handlers:
            return self.settings.get(pattern)
        return super().get(pattern, *handlers)

    # -- Settings --

    def set(self, key: str, value: Any) -> Self:
        """Set a setting; ``None`` removes it."""
        self.settings[key] = value
        return self

    def enable(self, key: str) -> Self:
        return self.set(key, True)

    def disable(self, key: str) -> Self:
        return self.set(key, False)

    # -- Templates --

    def engine(self, ext: str, engine: TemplateEngine) -> Self:
        """Register *engine* for template files ending in ``.{ext}``."""
        if not callable(engine):
            msg = f"Template engine for {ext!r} must be callable, got {engine!r}."
            raise ConfigurationError(msg)
        self.engines[ext] = engine
        return self

    def render(
        self,
        template: str,
        options: Mapping[str, Any] | None,
        response: ServerResponse,
    ) -> None:
        """Render *template* into *response*; see ``wren.templating.render``."""
        render_view(self, template, options, response)

    # -- Mounting --

    def on_mount(self, listener: MountListener) -> MountListener:
        """Register a listener called with the parent app on every mount.

        Usage::

            @admin.on_mount
            def mounted(parent):
                print("admin mounted at", admin.mount_path)
        """
        self._mount_listeners.append(listener)
        return listener

    def mount(self, at: str, parent: App) -> None:
        """Record a mount under *parent* at *at* and notify listeners."""
        self.mount_path.append(at)
        logger.debug("%r mounted at %s", self, at)
        for listener in self._mount_listeners:
            listener(parent)

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[BaseException],
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a final error handler via decorator.

        Only the app that receives the request from the server consults
        its error handlers. Handlers take up to ``(request, response, exc)``::

            @app.error(404)
            def not_found(request, response):
                response.render("404")
        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup.
        """
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._shutdown_hooks.append(func)
        return func

    # -- Dispatch --

    async def handle(
        self,
        error: BaseException | None,
        request: Request,
        response: ServerResponse,
        next: Next,
    ) -> None:
        """Dispatch through the router with this app installed as the active app.

        The previously active app (when mounted) and the response's request
        are restored afterwards, however the dispatch ends.
        """
        old_app = response.app
        old_request = response.request
        response.app = self
        response.request = request
        try:
            with request.context.push(app=self):
                await self.router.handle(error, request, response, next)
        finally:
            response.app = old_app
            response.request = old_request

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start a pounce server for this app (requires ``wren[server]``)."""
        from wren.server.dev import run_dev_server

        run_dev_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
            reload_include=self.config.reload_include,
            reload_dirs=self.config.reload_dirs,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        await handle_request(
            scope,
            receive,
            send,
            app=self,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
            max_content_length=self.config.max_content_length,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol with the registered hooks."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Diagnostics --

    def __repr__(self) -> str:
        parts = [f"<{type(self).__name__}:"]
        if self.id:
            parts.append(f"[{self.id}]")
        count = len(self.router)
        if count == 0:
            parts.append("no-routes")
        elif count == 1:
            parts.append("route")
        else:
            parts.append(f"#routes={count}")
        if len(self.mount_path) == 1:
            parts.append(f"mounted={self.mount_path[0]}")
        elif self.mount_path:
            parts.append(f"mounted=[{','.join(self.mount_path)}]")
        if self.engines:
            parts.append(f"engines={','.join(self.engines)}")
        parts.extend(f"'{key}'='{value}'" for key, value in self.settings.items())
        return " ".join(parts) + ">"
