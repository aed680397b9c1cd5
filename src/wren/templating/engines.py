"""Template engines.

A template engine is any callable ``engine(path, options, done)``: it
renders the file at *path* with *options* and reports back through
``done(error, result)``. Apps register engines per file extension with
``app.engine(ext, engine)``.

The default engine renders kida templates. One kida ``Environment`` is
created per views directory and reused for every render from it.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from typing import Any

from kida import Environment, FileSystemLoader

from wren.config import AppConfig

logger = logging.getLogger("wren.templating")

type Done = Callable[[BaseException | None, Any], None]
type TemplateEngine = Callable[[str, Mapping[str, Any], Done], None]


class KidaEngine:
    """Render kida templates by file path.

    Usage::

        app.engine("kida", KidaEngine(autoescape=True))
    """

    __slots__ = ("_environments", "auto_reload", "autoescape")

    def __init__(self, *, autoescape: bool = True, auto_reload: bool = False) -> None:
        self.autoescape = autoescape
        self.auto_reload = auto_reload
        self._environments: dict[str, Environment] = {}

    @classmethod
    def from_config(cls, config: AppConfig) -> KidaEngine:
        return cls(autoescape=config.autoescape, auto_reload=config.debug)

    def environment(self, directory: str) -> Environment:
        """Return the environment for *directory*, creating it on first use."""
        env = self._environments.get(directory)
        if env is None:
            env = Environment(
                loader=FileSystemLoader(directory),
                autoescape=self.autoescape,
                auto_reload=self.auto_reload,
            )
            self._environments[directory] = env
        return env

    def __call__(self, path: str, options: Mapping[str, Any], done: Done) -> None:
        directory, name = os.path.split(path)
        try:
            template = self.environment(directory).get_template(name)
            result = template.render(dict(options))
        except Exception as exc:
            done(exc, None)
            return
        done(None, result)

    def __repr__(self) -> str:
        return f"<KidaEngine: #environments={len(self._environments)}>"


def default_engines(config: AppConfig) -> dict[str, TemplateEngine]:
    """Engines every app starts with: kida for ``.html`` and ``.kida`` files."""
    kida = KidaEngine.from_config(config)
    return {"html": kida, "kida": kida}
