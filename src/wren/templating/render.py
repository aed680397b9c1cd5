"""View lookup and rendering into a ServerResponse.

``render_view`` resolves a template name against the app's views
directory, picks the engine registered for the file it finds, and writes
the result (or a 404/500/204) to the response.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from wren.errors import UnsupportedViewEngine
from wren.http.content import DIRECTORY_TYPE, detect_content_type

if TYPE_CHECKING:
    from wren.app import App
    from wren.http.response import ServerResponse

logger = logging.getLogger("wren.templating")

VIEWS_ENV = "WREN_VIEWS"


def view_directory(app: App) -> str:
    """The ``views`` setting, else ``$WREN_VIEWS``, else the working directory."""
    views = app.settings.get("views")
    if views:
        return str(views)
    return os.environ.get(VIEWS_ENV) or os.getcwd()


def lookup_template(
    views: str,
    template: str,
    extensions: Iterable[str],
) -> tuple[str, str] | None:
    """Find the first ``{views}/{template}.{ext}`` that is a regular file.

    Returns ``(path, ext)`` or ``None``.
    """
    for ext in extensions:
        candidate = Path(views) / f"{template}.{ext}"
        if candidate.is_file():
            return str(candidate), ext
        logger.debug("No template at %s", candidate)
    return None


def _lookup_order(preferred: str, registered: Iterable[str]) -> list[str]:
    order = [preferred]
    order.extend(ext for ext in registered if ext != preferred)
    return order


def render_view(
    app: App,
    template: str,
    options: Mapping[str, Any] | None,
    response: ServerResponse,
) -> None:
    """Render *template* with *options* into *response* and end it.

    Raises ``UnsupportedViewEngine`` when the ``view engine`` setting names
    no registered engine. Every other failure becomes a response status:
    404 when no template file exists, 500 when the engine reports an error,
    204 when it produces nothing.

    The file found is rendered by the engine registered for its own
    extension; ``view engine`` only decides which extension is tried first.
    """
    view_engine = str(app.settings.get("view engine") or app.config.view_engine)
    if view_engine not in app.engines:
        raise UnsupportedViewEngine(view_engine)

    views = view_directory(app)
    if options is None:
        options = app.settings.get("view options") or {}

    found = lookup_template(views, template, _lookup_order(view_engine, app.engines))
    if found is None:
        logger.error("Did not find template %r in %s", template, views)
        response.write_head(404)
        response.end()
        return

    path, ext = found
    engine = app.engines[ext]

    def done(error: BaseException | None, result: Any) -> None:
        if error is not None:
            logger.error("Template error in %s: %s", path, error)
            response.write_head(500)
            response.end()
            return
        if result is None:
            logger.warning("Template %s returned no content", path)
            response.write_head(204)
            response.end()
            return
        if not isinstance(result, str):
            logger.warning("Template %s returned %s, converting to str", path, type(result).__name__)
            result = str(result)

        current = response.get_header("Content-Type")
        if current is None or str(current) == DIRECTORY_TYPE:
            response.set_header("Content-Type", detect_content_type(result))
        response.write_head(200)
        response.write(result)
        response.end()

    engine(path, options, done)
