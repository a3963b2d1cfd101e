"""Route pattern compilation and path matching.

Patterns use ``{name}`` placeholders::

    "/users"                      -> literal
    "/users/{id}"                 -> one parameter
    "/users/{userId}/posts/{id}"  -> two parameters, declaration order
    "/files/{name}.json"          -> inline parameter inside a segment

A parameter captures one or more characters excluding ``/``. Literal text
is matched verbatim (regex metacharacters are escaped). Matches are always
anchored to the full path, never a prefix.
"""

import re
from dataclasses import dataclass
from functools import lru_cache

from switchyard.errors import ConfigurationError

_PARAM_RE = re.compile(r"\{(\w+)\}")
_FLASK_PARAM_RE = re.compile(r"<[^>]+>")

# Regex fragment for a single parameter value
PARAM_PATTERN = r"[^/]+"


def normalize_path(path: str | None) -> str:
    """Enforce a leading slash and strip trailing slashes (root excepted).

    Examples::

        normalize_path("")        -> "/"
        normalize_path("a/")      -> "/a"
        normalize_path("/a/b/")   -> "/a/b"
    """
    if not path:
        return "/"
    normalized = path if path.startswith("/") else f"/{path}"
    return normalized.rstrip("/") or "/"


def has_path_parameters(pattern: str) -> bool:
    """True if *pattern* contains at least one ``{name}`` placeholder."""
    return _PARAM_RE.search(pattern) is not None


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """A route pattern compiled to an anchored regex."""

    pattern: str
    regex: re.Pattern[str]
    param_names: tuple[str, ...]

    @property
    def is_literal(self) -> bool:
        return not self.param_names

    def match(self, path: str) -> dict[str, str] | None:
        """Return extracted parameters, or ``None`` if *path* doesn't match."""
        normalized = normalize_path(path)
        if self.is_literal:
            return {} if normalized == self.pattern else None
        found = self.regex.match(normalized)
        if found is None:
            return None
        return dict(zip(self.param_names, found.groups(), strict=True))


def compile_pattern(pattern: str) -> CompiledPattern:
    """Compile a route pattern.

    Raises ``ConfigurationError`` for Flask-style ``<param>`` placeholders
    and for parameter names used more than once.
    """
    if _FLASK_PARAM_RE.search(pattern):
        msg = (
            f"Route pattern {pattern!r} uses <param> syntax. "
            "Use {param} placeholders instead, e.g. /users/{id}."
        )
        raise ConfigurationError(msg)

    normalized = normalize_path(pattern)
    names: list[str] = []
    parts: list[str] = []
    cursor = 0
    for found in _PARAM_RE.finditer(normalized):
        name = found.group(1)
        if name in names:
            msg = f"Duplicate parameter {name!r} in route pattern {pattern!r}."
            raise ConfigurationError(msg)
        names.append(name)
        parts.append(re.escape(normalized[cursor : found.start()]))
        parts.append(f"({PARAM_PATTERN})")
        cursor = found.end()
    parts.append(re.escape(normalized[cursor:]))

    return CompiledPattern(
        pattern=normalized,
        regex=re.compile(f"^{''.join(parts)}$"),
        param_names=tuple(names),
    )


@lru_cache(maxsize=256)
def _cached_compile(pattern: str) -> CompiledPattern:
    return compile_pattern(pattern)


def match_path(pattern: str, path: str) -> dict[str, str] | None:
    """Match *path* against *pattern* and return its parameters.

    Convenience for ad-hoc matching. The router compiles its patterns once
    when the table is built and never goes through here per request.
    """
    return _cached_compile(pattern).match(path)
