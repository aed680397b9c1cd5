"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation. It seeds the
mutable settings map of an ``App``; runtime changes go through
``app.set()``.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3000, views_dir="templates")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Reload (development mode, requires debug=True)
    reload_include: tuple[str, ...] = ()  # Extra extensions to watch (e.g. ".html")
    reload_dirs: tuple[str, ...] = ()  # Extra directories to watch alongside cwd

    # Seeded into the settings map ("env", "view engine", "views", "x-powered-by")
    env: str = "development"
    view_engine: str = "html"
    views_dir: str | Path | None = None
    x_powered_by: bool = True

    # Templates (kida engine)
    autoescape: bool = True

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB
