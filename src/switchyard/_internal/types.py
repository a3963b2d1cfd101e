"""Shared type aliases used across switchyard modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Business handler: receives a CanonicalRequest, returns anything
Handler: TypeAlias = Callable[..., Any]

# Raw trigger payload as delivered by the host runtime
RawEvent: TypeAlias = dict[str, Any]
