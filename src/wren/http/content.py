"""Content-type helpers.

``type_is`` is the loose content-type test the body parsers guard on;
``detect_content_type`` sniffs rendered template output.
"""

from collections.abc import Iterable

HTML = "text/html; charset=utf-8"

# Checked in order; first matching prefix wins.
TYPE_PREFIXES: tuple[tuple[str, str], ...] = (
    ("<!DOCTYPE html", HTML),
    ("<html", HTML),
    ("<?xml", "text/xml; charset=utf-8"),
    ("BEGIN:VCALENDAR", "text/calendar; charset=utf-8"),
    ("BEGIN:VCARD", "text/vcard; charset=utf-8"),
)

# Content type some hosts preset for directory requests; rendering may replace it.
DIRECTORY_TYPE = "httpd/unix-directory"


def detect_content_type(body: str, default: str = HTML) -> str:
    """Guess a content type from the start of a rendered body."""
    for prefix, content_type in TYPE_PREFIXES:
        if body.startswith(prefix):
            return content_type
    return default


def type_is(content_type: str | None, types: Iterable[str]) -> str | None:
    """Return the first entry of *types* that *content_type* matches.

    Matching is loose: exact (case-insensitive), ``text/*`` style prefix,
    or substring (``"json"`` matches ``application/json; charset=utf-8``).
    """
    if not content_type:
        return None
    lowered = content_type.lower()
    for candidate in types:
        if _type_matches(lowered, candidate.lower()):
            return candidate
    return None


def _type_matches(content_type: str, pattern: str) -> bool:
    if content_type == pattern:
        return True
    if pattern.endswith("*"):
        return content_type.startswith(pattern[:-1])
    return pattern in content_type
