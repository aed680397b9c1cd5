"""Routing — ordered routes, path patterns, registration verbs.

Routes are tried strictly in the order they were added; the first route
that finishes the response ends the request.
"""

from wren.routing.pattern import PatternMatch, compile_pattern, match_pattern, split_path
from wren.routing.route import Route
from wren.routing.router import Router

__all__ = [
    "PatternMatch",
    "Route",
    "Router",
    "compile_pattern",
    "match_pattern",
    "split_path",
]
