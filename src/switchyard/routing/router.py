"""Route table builder and compiled router.

Routes are registered during setup on a mutable ``Routes`` builder and
compiled into an immutable ``Router`` once, at startup. Every accepted
table shape (decorators, flat mapping, segmented mapping, segmented with
middleware) ends up in the same internal representation::

    segment -> verb -> tuple[CompiledRoute, ...]

so nothing is shape-sniffed per request.

Usage::

    routes = Routes()

    @routes.get("/users/{id}")
    async def get_user(request): ...

    @routes.post("/orders", segment=Segment.PRIVATE, middleware=[crm_guard])
    async def create_order(request): ...

    routes.use(Segment.PRIVATE, tenant_guard)

    @routes.event("user.created")
    async def on_user_created(request): ...

    router = routes.compile()
    match = router.resolve("GET", "/users/42")
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from switchyard._internal.types import Handler
from switchyard.errors import ConfigurationError
from switchyard.routing.matcher import compile_pattern, normalize_path
from switchyard.routing.route import CompiledRoute, KeyMatch, RouteEntry, RouteMatch
from switchyard.triggers import SEGMENT_PRECEDENCE, Segment, Trigger

logger = logging.getLogger("switchyard.routing")

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"})

DEFAULT_KEY = "default"

# Top-level keys of a mapping-style table, per trigger
_TRIGGER_KEYS: dict[str, Trigger] = {
    "apigateway": Trigger.HTTP,
    "eventbridge": Trigger.EVENT_BUS,
    "sqs": Trigger.QUEUE,
    "lambda": Trigger.DIRECT,
}


def _coerce_entry(value: Any, where: str) -> RouteEntry:
    """Accept a handler, a ``{"handler": ..., "middleware": [...]}`` mapping,
    or a ready ``RouteEntry``."""
    if isinstance(value, RouteEntry):
        return value
    if isinstance(value, Mapping):
        handler = value.get("handler")
        if not callable(handler):
            msg = f"Route {where} has no callable 'handler'."
            raise ConfigurationError(msg)
        return RouteEntry(handler=handler, middleware=tuple(value.get("middleware") or ()))
    if callable(value):
        return RouteEntry(handler=value)
    msg = f"Route {where} must be a handler, a mapping with 'handler', or a RouteEntry."
    raise ConfigurationError(msg)


def _normalize_method(method: str) -> str:
    verb = method.upper()
    if verb not in HTTP_METHODS:
        msg = f"Unsupported HTTP method {method!r}. Expected one of {sorted(HTTP_METHODS)}."
        raise ConfigurationError(msg)
    return verb


class _VerbTable:
    """Compiled routes for one segment and verb. Read-only after build."""

    __slots__ = ("by_pattern", "literals", "ordered")

    def __init__(self, routes: Iterable[CompiledRoute]) -> None:
        self.ordered: tuple[CompiledRoute, ...] = tuple(routes)
        self.by_pattern: dict[str, CompiledRoute] = {r.pattern: r for r in self.ordered}
        self.literals: dict[str, CompiledRoute] = {
            r.pattern: r for r in self.ordered if r.compiled.is_literal
        }

    def find(self, route_key: str | None, path: str) -> tuple[CompiledRoute, dict[str, str]] | None:
        # 1. The gateway's own route template, looked up verbatim
        if route_key is not None:
            route = self.by_pattern.get(route_key)
            if route is not None:
                return route, route.compiled.match(path) or {}

        # 2. Literal patterns before parametric ones
        route = self.literals.get(path)
        if route is not None:
            return route, {}

        # 3. Declaration order
        for route in self.ordered:
            if route.compiled.is_literal:
                continue
            params = route.compiled.match(path)
            if params is not None:
                return route, params
        return None


class Router:
    """Immutable, compiled route table.

    Built by ``Routes.compile()``. Safe to share across concurrent
    dispatches: nothing is mutated after construction.
    """

    __slots__ = ("_http", "_keyed", "_segment_middleware")

    def __init__(
        self,
        http: Mapping[Segment, Mapping[str, Iterable[CompiledRoute]]],
        keyed: Mapping[Trigger, Mapping[str, RouteEntry]],
        segment_middleware: Mapping[Segment, Iterable[Any]],
    ) -> None:
        self._http: dict[Segment, dict[str, _VerbTable]] = {
            segment: {verb: _VerbTable(routes) for verb, routes in verbs.items()}
            for segment, verbs in http.items()
        }
        self._keyed: dict[Trigger, dict[str, RouteEntry]] = {
            trigger: dict(entries) for trigger, entries in keyed.items()
        }
        self._segment_middleware: dict[Segment, tuple[Any, ...]] = {
            segment: tuple(mw) for segment, mw in segment_middleware.items()
        }

    @property
    def routes(self) -> list[CompiledRoute]:
        """All HTTP routes, in segment precedence then declaration order."""
        result: list[CompiledRoute] = []
        for segment in SEGMENT_PRECEDENCE:
            for table in self._http.get(segment, {}).values():
                result.extend(table.ordered)
        return result

    def segment_middleware(self, segment: Segment) -> tuple[Any, ...]:
        return self._segment_middleware.get(segment, ())

    def resolve(
        self,
        method: str,
        path: str | None,
        route_key: str | None = None,
        upstream_params: Mapping[str, str] | None = None,
    ) -> RouteMatch | None:
        """Resolve an HTTP request to a route.

        Segments are probed in precedence order and the first segment with
        a match wins, even if a later segment would also match. Within a
        segment the gateway's *route_key* is looked up before literal
        patterns, so a parametric template named by the gateway beats a
        literal route for the same concrete path. Parameters
        extracted here override same-named *upstream_params*; upstream-only
        keys are kept.

        Returns ``None`` when nothing matches.
        """
        verb = method.upper()
        concrete = normalize_path(path)
        key = normalize_path(route_key) if route_key else None

        for segment in SEGMENT_PRECEDENCE:
            table = self._http.get(segment, {}).get(verb)
            if table is None:
                continue
            found = table.find(key, concrete)
            if found is None:
                continue
            route, params = found
            merged = {**(upstream_params or {}), **params}
            logger.debug("Matched %s %s -> %s [%s]", verb, concrete, route.pattern, segment)
            return RouteMatch(
                route=route,
                params=merged,
                middleware=self.segment_middleware(segment),
            )
        return None

    def resolve_key(self, trigger: Trigger, key: str | None) -> KeyMatch | None:
        """Resolve a keyed trigger (event bus operation, queue name).

        Unmatched keys fall back to the ``default`` handler. Direct
        invocations only ever use ``default``.
        """
        table = self._keyed.get(trigger, {})
        if trigger is not Trigger.DIRECT and key and key in table:
            return KeyMatch(trigger=trigger, key=key, entry=table[key])
        default = table.get(DEFAULT_KEY)
        if default is None:
            return None
        return KeyMatch(trigger=trigger, key=key or DEFAULT_KEY, entry=default, fallback=True)


class Routes:
    """Mutable route table builder. Call ``compile()`` to get a ``Router``."""

    __slots__ = ("_compiled", "_http", "_keyed", "_segment_middleware")

    def __init__(self) -> None:
        self._http: list[tuple[Segment, str, str, RouteEntry]] = []
        self._keyed: dict[Trigger, dict[str, RouteEntry]] = {}
        self._segment_middleware: dict[Segment, list[Any]] = {}
        self._compiled = False

    def _check_open(self) -> None:
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

    # -- HTTP --

    def add(
        self,
        method: str,
        pattern: str,
        handler: Handler | RouteEntry | Mapping[str, Any],
        *,
        segment: Segment | str = Segment.PUBLIC,
        middleware: Iterable[Any] = (),
    ) -> None:
        """Register an HTTP route."""
        self._check_open()
        verb = _normalize_method(method)
        seg = Segment(segment)
        entry = _coerce_entry(handler, f"{verb} {pattern}")
        if middleware:
            entry = RouteEntry(entry.handler, (*entry.middleware, *middleware))
        self._http.append((seg, verb, pattern, entry))

    def route(
        self,
        pattern: str,
        *,
        methods: Iterable[str] = ("GET",),
        segment: Segment | str = Segment.PUBLIC,
        middleware: Iterable[Any] = (),
    ) -> Callable[[Handler], Handler]:
        """Decorator form of ``add()`` for one or more methods."""
        mw = tuple(middleware)

        def decorator(func: Handler) -> Handler:
            for method in methods:
                self.add(method, pattern, func, segment=segment, middleware=mw)
            return func

        return decorator

    def get(self, pattern: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        return self.route(pattern, methods=("GET",), **kwargs)

    def post(self, pattern: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        return self.route(pattern, methods=("POST",), **kwargs)

    def put(self, pattern: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        return self.route(pattern, methods=("PUT",), **kwargs)

    def patch(self, pattern: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        return self.route(pattern, methods=("PATCH",), **kwargs)

    def delete(self, pattern: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        return self.route(pattern, methods=("DELETE",), **kwargs)

    def use(self, segment: Segment | str, *middleware: Any) -> None:
        """Append middleware to a segment's bundle."""
        self._check_open()
        self._segment_middleware.setdefault(Segment(segment), []).extend(middleware)

    # -- Keyed triggers --

    def _add_keyed(self, trigger: Trigger, key: str, handler: Any, middleware: Iterable[Any] = ()) -> None:
        self._check_open()
        entry = _coerce_entry(handler, f"{trigger}:{key}")
        if middleware:
            entry = RouteEntry(entry.handler, (*entry.middleware, *middleware))
        self._keyed.setdefault(trigger, {})[key] = entry

    def event(
        self, operation: str = DEFAULT_KEY, *, middleware: Iterable[Any] = ()
    ) -> Callable[[Handler], Handler]:
        """Register an event-bus handler for an operation name."""
        mw = tuple(middleware)

        def decorator(func: Handler) -> Handler:
            self._add_keyed(Trigger.EVENT_BUS, operation, func, mw)
            return func

        return decorator

    def queue(self, name: str = DEFAULT_KEY, *, middleware: Iterable[Any] = ()) -> Callable[[Handler], Handler]:
        """Register a queue handler for a source queue name."""
        mw = tuple(middleware)

        def decorator(func: Handler) -> Handler:
            self._add_keyed(Trigger.QUEUE, name, func, mw)
            return func

        return decorator

    def direct(self, func: Handler) -> Handler:
        """Register the direct-invocation handler (decorator)."""
        self._add_keyed(Trigger.DIRECT, DEFAULT_KEY, func)
        return func

    # -- Mapping tables --

    @classmethod
    def from_mapping(cls, table: Mapping[str, Any]) -> "Routes":
        """Build from a mapping keyed by trigger::

            {
                "apigateway": {...},          # flat or segmented
                "eventbridge": {"user.created": handler, "default": handler},
                "sqs": {"notification-queue": handler},
                "lambda": {"default": handler},
            }
        """
        routes = cls()
        for name, value in table.items():
            trigger = _TRIGGER_KEYS.get(name)
            if trigger is None:
                msg = f"Unknown trigger table {name!r}. Expected one of {sorted(_TRIGGER_KEYS)}."
                raise ConfigurationError(msg)
            if value is None:
                continue
            if trigger is Trigger.HTTP:
                routes.add_http_mapping(value)
            elif trigger is Trigger.DIRECT:
                if DEFAULT_KEY in value:
                    routes._add_keyed(Trigger.DIRECT, DEFAULT_KEY, value[DEFAULT_KEY])
            else:
                for key, handler in value.items():
                    routes._add_keyed(trigger, key, handler)
        return routes

    def add_http_mapping(self, table: Mapping[str, Any]) -> None:
        """Register an HTTP table in flat or segmented shape."""
        segment_names = {s.value for s in Segment}
        keys = {k.lower() for k in table}
        segment_keys = keys & segment_names
        if not segment_keys:
            self._add_verb_mapping(Segment.PUBLIC, table)
            return
        if segment_keys != keys:
            msg = (
                f"HTTP route table mixes segment keys {sorted(segment_keys)} with "
                f"other keys {sorted(keys - segment_keys)}."
            )
            raise ConfigurationError(msg)
        for name, value in table.items():
            segment = Segment(name.lower())
            if value is None:
                continue
            if isinstance(value, Mapping) and "routes" in value:
                self._add_verb_mapping(segment, value["routes"] or {})
                if value.get("middleware"):
                    self.use(segment, *value["middleware"])
            else:
                self._add_verb_mapping(segment, value)

    def _add_verb_mapping(self, segment: Segment, table: Mapping[str, Any]) -> None:
        for method, patterns in table.items():
            for pattern, handler in (patterns or {}).items():
                self.add(method, pattern, handler, segment=segment)

    # -- Compile --

    def compile(self) -> Router:
        """Compile every pattern once and freeze the table."""
        http: dict[Segment, dict[str, list[CompiledRoute]]] = {}
        seen: set[tuple[Segment, str, str]] = set()
        for segment, verb, pattern, entry in self._http:
            compiled = compile_pattern(pattern)
            ident = (segment, verb, compiled.pattern)
            if ident in seen:
                msg = f"Route {verb} {compiled.pattern} registered twice in segment {segment!r}."
                raise ConfigurationError(msg)
            seen.add(ident)
            route = CompiledRoute(method=verb, segment=segment, compiled=compiled, entry=entry)
            http.setdefault(segment, {}).setdefault(verb, []).append(route)

        self._compiled = True
        router = Router(http, self._keyed, self._segment_middleware)
        logger.debug("Compiled %d HTTP routes", len(router.routes))
        return router
