"""Application settings.

A flat string-keyed map with Express semantics: last write wins, setting
a key to ``None`` removes it, and nothing is inherited from a parent app.
"""

from collections.abc import Iterator, MutableMapping
from typing import Any

from wren.config import AppConfig

_FALSE_STRINGS = frozenset({"no", "false", "0", "disable"})


def as_bool(value: Any) -> bool:
    """Loose truthiness for setting values.

    Strings ``no``, ``false``, ``0`` and ``disable`` (any case) are false,
    every other string is true.
    """
    if isinstance(value, str):
        return value.lower() not in _FALSE_STRINGS
    return bool(value)


class Settings(MutableMapping[str, Any]):
    """Mutable settings map with typed accessors for well-known keys."""

    __slots__ = ("_store",)

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._store: dict[str, Any] = {}
        for key, value in (initial or {}).items():
            self[key] = value

    @classmethod
    def from_config(cls, config: AppConfig) -> "Settings":
        """Seed ``env``, ``view engine``, ``views`` and ``x-powered-by``."""
        return cls(
            {
                "env": config.env,
                "view engine": config.view_engine,
                "views": str(config.views_dir) if config.views_dir is not None else None,
                "x-powered-by": config.x_powered_by,
            }
        )

    def __getitem__(self, key: str) -> Any:
        return self._store[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if value is None:
            self._store.pop(key, None)
        else:
            self._store[key] = value

    def __delitem__(self, key: str) -> None:
        del self._store[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return f"Settings({self._store!r})"

    @property
    def env(self) -> str:
        """Deployment environment name; ``"development"`` when unset."""
        value = self._store.get("env")
        return value if isinstance(value, str) else "development"

    @property
    def x_powered_by(self) -> bool:
        """Whether to send ``X-Powered-By``; true when unset."""
        if "x-powered-by" not in self._store:
            return True
        return as_bool(self._store["x-powered-by"])
