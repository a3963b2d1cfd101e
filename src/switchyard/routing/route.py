"""Route entries and match results — frozen dataclasses."""

from dataclasses import dataclass, field
from typing import Any

from switchyard._internal.types import Handler
from switchyard.routing.matcher import CompiledPattern
from switchyard.triggers import Segment, Trigger


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """A handler plus the middleware that runs only for it."""

    handler: Handler
    middleware: tuple[Any, ...] = ()


@dataclass(frozen=True, slots=True)
class CompiledRoute:
    """An HTTP route with its pattern compiled. Built once at ``compile()``."""

    method: str
    segment: Segment
    compiled: CompiledPattern
    entry: RouteEntry

    @property
    def pattern(self) -> str:
        return self.compiled.pattern


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful HTTP route resolution."""

    route: CompiledRoute
    params: dict[str, str]
    middleware: tuple[Any, ...] = ()

    @property
    def handler(self) -> Handler:
        return self.route.entry.handler

    @property
    def segment(self) -> Segment:
        return self.route.segment

    @property
    def route_middleware(self) -> tuple[Any, ...]:
        return self.route.entry.middleware


@dataclass(frozen=True, slots=True)
class KeyMatch:
    """Result of a keyed (non-HTTP) resolution."""

    trigger: Trigger
    key: str
    entry: RouteEntry
    fallback: bool = field(default=False)

    @property
    def handler(self) -> Handler:
        return self.entry.handler
