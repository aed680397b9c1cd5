"""Route patterns: compile a pattern string, match it against a path.

Pattern syntax, one rule per ``/``-separated component::

    "*"         anything at all (the whole pattern compiles to ``None``)
    ""          leading empty component, i.e. the pattern starts with "/"
    "*"         exactly one arbitrary component
    ":name"     one arbitrary component, bound to ``params["name"]``
    "*.html"    a component ending with ".html"
    "img*"      a component starting with "img"
    "*admin*"   a component containing "admin"
    "users"     exactly "users"

Matching compares against the percent-decoded component but reports the
consumed prefix in its escaped form, so ``%2F`` inside a component never
splits it and mount prefixes round-trip unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import unquote


@dataclass(frozen=True, slots=True)
class Root:
    """Matches only the empty component in front of a leading ``/``."""

    def matches(self, component: str) -> bool:
        return component == ""

    def __str__(self) -> str:
        return ""


@dataclass(frozen=True, slots=True)
class Literal:
    """Matches one component equal to ``text``."""

    text: str

    def matches(self, component: str) -> bool:
        return component == self.text

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class Variable:
    """Matches any one component and binds it to ``name``."""

    name: str

    def matches(self, component: str) -> bool:
        return True

    def __str__(self) -> str:
        return f":{self.name}"


@dataclass(frozen=True, slots=True)
class Wildcard:
    """Matches any one component. Trailing, it also allows extra components."""

    def matches(self, component: str) -> bool:
        return True

    def __str__(self) -> str:
        return "*"


@dataclass(frozen=True, slots=True)
class Prefix:
    """Wildcard prefix (``*.html``): the component must end with ``text``."""

    text: str

    def matches(self, component: str) -> bool:
        return component.endswith(self.text)

    def __str__(self) -> str:
        return f"*{self.text}"


@dataclass(frozen=True, slots=True)
class Suffix:
    """Wildcard suffix (``img*``): the component must start with ``text``."""

    text: str

    def matches(self, component: str) -> bool:
        return component.startswith(self.text)

    def __str__(self) -> str:
        return f"{self.text}*"


@dataclass(frozen=True, slots=True)
class Contains:
    """Wildcards on both sides (``*admin*``): ``text`` must occur in the component."""

    text: str

    def matches(self, component: str) -> bool:
        return self.text in component

    def __str__(self) -> str:
        return f"*{self.text}*"


type Segment = Root | Literal | Variable | Wildcard | Prefix | Suffix | Contains
type Pattern = tuple[Segment, ...]

WILDCARD = Wildcard()
ROOT = Root()


@dataclass(frozen=True, slots=True)
class PatternMatch:
    """Result of a successful match.

    ``path`` is the escaped prefix consumed by the pattern, without any
    trailing wildcard. Routes use it to extend the request's base URL.
    """

    path: str
    params: dict[str, str] = field(default_factory=dict)


def split_path(path: str) -> list[str]:
    """Split an escaped path into components.

    A single trailing empty component is dropped unless it is the only one,
    so ``"/users/"`` and ``"/users"`` split the same way::

        split_path("/")          -> [""]
        split_path("/users/")    -> ["", "users"]
        split_path("a/b")        -> ["a", "b"]
    """
    parts = path.split("/")
    if len(parts) > 1 and parts[-1] == "":
        parts.pop()
    return parts


def compile_segment(component: str, *, first: bool = False) -> Segment:
    """Compile one pattern component into a segment."""
    if first and component == "":
        return ROOT
    if component == "*":
        return WILDCARD
    if component.startswith(":"):
        return Variable(component[1:])
    starts = component.startswith("*")
    ends = component.endswith("*")
    if starts and ends and len(component) > 1:
        return Contains(component[1:-1])
    if starts:
        return Prefix(component[1:])
    if ends:
        return Suffix(component[:-1])
    return Literal(component)


def compile_pattern(pattern: str) -> Pattern | None:
    """Compile a pattern string. ``"*"`` compiles to ``None`` (match anything).

    Examples::

        compile_pattern("/users/:id")
            -> (Root(), Literal("users"), Variable("id"))
        compile_pattern("/admin/*")
            -> (Root(), Literal("admin"), Wildcard())
    """
    if pattern == "*":
        return None
    return tuple(
        compile_segment(component, first=index == 0)
        for index, component in enumerate(split_path(pattern))
    )


def format_pattern(pattern: Pattern | None) -> str:
    """Render a compiled pattern back to its string form."""
    if pattern is None:
        return "*"
    text = "/".join(str(segment) for segment in pattern)
    return text or "/"


def match_pattern(pattern: Pattern | None, components: list[str]) -> PatternMatch | None:
    """Match escaped path components against a compiled pattern.

    Returns ``None`` on a miss. Matching walks pattern and components
    pairwise without backtracking; components left over after the pattern
    is exhausted are only accepted when the last segment was a wildcard.
    """
    if pattern is None:
        return PatternMatch(path="")

    segments = list(pattern)
    if len(components) + 1 == len(segments) and isinstance(segments[-1], Wildcard):
        segments.pop()
    if len(components) < len(segments):
        return None

    params: dict[str, str] = {}
    consumed: list[str] = []
    for index, segment in enumerate(segments):
        component = components[index]
        decoded = unquote(component)
        if not segment.matches(decoded):
            return None
        if isinstance(segment, Variable):
            params[segment.name] = decoded
        trailing = index == len(segments) - 1 and isinstance(segment, Wildcard)
        if not trailing:
            consumed.append(component)

    if len(components) > len(segments) and not (
        segments and isinstance(segments[-1], Wildcard)
    ):
        return None

    return PatternMatch(path="/".join(consumed), params=params)


def match_path(pattern: Pattern | None, path: str) -> PatternMatch | None:
    """Convenience wrapper: split *path* and match it."""
    return match_pattern(pattern, split_path(path))
