"""Routing — segmented route tables compiled once at startup.

Routes are registered on a ``Routes`` builder and compiled into an
immutable ``Router`` before the first dispatch.
"""

from switchyard.routing.matcher import compile_pattern, has_path_parameters, match_path, normalize_path
from switchyard.routing.route import CompiledRoute, KeyMatch, RouteEntry, RouteMatch
from switchyard.routing.router import DEFAULT_KEY, Router, Routes

__all__ = [
    "DEFAULT_KEY",
    "CompiledRoute",
    "KeyMatch",
    "RouteEntry",
    "RouteMatch",
    "Router",
    "Routes",
    "compile_pattern",
    "has_path_parameters",
    "match_path",
    "normalize_path",
]
