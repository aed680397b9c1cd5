"""Case-insensitive HTTP headers.

``Headers`` is the immutable request side: raw byte pairs from the ASGI
scope, decoded on access. ``ResponseHeaders`` is the mutable response side
that handlers set, read, and remove until the response is finished.
"""

from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive request headers.

    ``__getitem__`` returns the first matching value.
    ``get_list`` returns all values for a header.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        object.__setattr__(self, "_raw", raw)

    @classmethod
    def from_mapping(cls, headers: Mapping[str, str] | None) -> "Headers":
        """Build headers from a plain ``{name: value}`` mapping."""
        raw = tuple(
            (name.lower().encode("latin-1"), str(value).encode("latin-1"))
            for name, value in (headers or {}).items()
        )
        return cls(raw)

    def __getitem__(self, key: str) -> str:
        key_lower = key.lower().encode("latin-1")
        for name, value in self._raw:
            if name.lower() == key_lower:
                return value.decode("latin-1")
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        key_lower = key.lower().encode("latin-1")
        return any(name.lower() == key_lower for name, _ in self._raw)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._raw:
            key = name.decode("latin-1").lower()
            if key not in seen:
                seen.add(key)
                yield key

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Headers({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        key_lower = key.lower().encode("latin-1")
        return [value.decode("latin-1") for name, value in self._raw if name.lower() == key_lower]

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """Access raw header byte pairs for ASGI compatibility."""
        return self._raw


class ResponseHeaders(MutableMapping[str, Any]):
    """Mutable, case-insensitive response headers.

    Keeps the spelling of the name as it was last set, so
    ``set("Content-Type", ...)`` is sent as ``Content-Type``.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: dict[str, tuple[str, Any]] = {}

    def __getitem__(self, key: str) -> Any:
        return self._items[key.lower()][1]

    def __setitem__(self, key: str, value: Any) -> None:
        self._items[key.lower()] = (key, value)

    def __delitem__(self, key: str) -> None:
        del self._items[key.lower()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._items

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        items = ", ".join(f"{name!r}: {value!r}" for name, value in self._items.values())
        return f"ResponseHeaders({{{items}}})"

    def to_raw(self) -> list[tuple[bytes, bytes]]:
        """Encode as ASGI header pairs; list values become repeated headers."""
        raw: list[tuple[bytes, bytes]] = []
        for name, value in self._items.values():
            values = value if isinstance(value, (list, tuple)) else (value,)
            raw.extend(
                (name.lower().encode("latin-1"), str(v).encode("latin-1")) for v in values
            )
        return raw
