"""Header normalization.

Gateways deliver headers with whatever casing the client sent. Everything
past the normalizer sees lowercase keys.
"""

from collections.abc import Mapping
from typing import Any


def normalize_headers(headers: Mapping[str, Any] | None) -> dict[str, str]:
    """Lowercase header names and drop ``None`` values."""
    if not headers:
        return {}
    return {str(name).lower(): str(value) for name, value in headers.items() if value is not None}


def get_header(headers: Mapping[str, Any] | None, name: str) -> str | None:
    """Return a header value case-insensitively, or ``None``."""
    if not headers:
        return None
    wanted = name.lower()
    for key, value in headers.items():
        if str(key).lower() == wanted and value is not None:
            return str(value)
    return None
