"""Dispatcher — routes one raw trigger event to one handler.

The only component that sees raw events end to end. Fixed step order:

1. detect the trigger
2. HTTP ``OPTIONS`` → preflight response, before routing
3. resolve the route (not found is terminal)
4. normalize into a ``CanonicalRequest``
5. HTTP, non-public segment with an expected issuer → validate it
6. global → segment → route middleware
7. call the handler
8. HTTP results get CORS headers merged in

The first of {handler result, halt, not found, issuer mismatch, unknown
trigger} ends the dispatch. Exceptions from middleware and handlers are
not caught here: add a global middleware if you want them shaped.

Each dispatch runs inside its own tenant scope, so a tenant bound by
middleware is gone once ``dispatch()`` returns and never leaks into
another dispatch running concurrently.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

import anyio

from switchyard._internal.invoke import invoke
from switchyard._internal.types import Handler, RawEvent
from switchyard.config import DispatcherConfig
from switchyard.http import response
from switchyard.http.cors import apply_cors, preflight_response
from switchyard.http.headers import get_header
from switchyard.identity import validate_issuer
from switchyard.middleware.protocol import Halt, run_pipeline
from switchyard.normalize import (
    event_bus_operation,
    http_method,
    http_path,
    http_route_key,
    normalize_direct,
    normalize_event_bus,
    normalize_http,
    normalize_queue,
    queue_name,
)
from switchyard.request import CanonicalRequest
from switchyard.routing.router import Router, Routes
from switchyard.tenant import context as tenant_context
from switchyard.triggers import Trigger, detect_trigger

logger = logging.getLogger("switchyard.dispatch")

_KEYED_LABELS: dict[Trigger, str] = {
    Trigger.EVENT_BUS: "EventBridge",
    Trigger.QUEUE: "SQS",
    Trigger.DIRECT: "Lambda",
}


class Dispatcher:
    """Dispatch raw trigger events through a compiled ``Router``.

    Usage::

        dispatcher = Dispatcher(routes, DispatcherConfig(
            issuers={Segment.PRIVATE: "us-east-1_abc"},
            global_middleware=(init_tenant_context,),
        ))

        # Lambda entrypoint
        handler = dispatcher.lambda_handler
    """

    __slots__ = ("config", "router")

    def __init__(
        self,
        routes: Router | Routes | Mapping[str, Any],
        config: DispatcherConfig | None = None,
    ) -> None:
        if isinstance(routes, Routes):
            routes = routes.compile()
        elif not isinstance(routes, Router):
            routes = Routes.from_mapping(routes).compile()
        self.router: Router = routes
        self.config = config or DispatcherConfig()

    # -- Entry points --

    async def dispatch(self, event: RawEvent, invocation: Any = None) -> Any:
        """Route *event* to its handler and return the (decorated) result."""
        trigger = detect_trigger(event)
        logger.debug("Detected trigger %s", trigger)
        if self.config.debug:
            logger.debug("Event received: %s", json.dumps(event, default=str))

        with tenant_context.bind():
            if trigger is Trigger.HTTP:
                return await self._dispatch_http(event, invocation)
            if trigger is Trigger.EVENT_BUS:
                return await self._dispatch_keyed(trigger, event_bus_operation(event), event, invocation)
            if trigger is Trigger.QUEUE:
                return await self._dispatch_keyed(trigger, queue_name(event), event, invocation)
            if trigger is Trigger.DIRECT:
                return await self._dispatch_keyed(trigger, None, event, invocation)

        logger.debug("Unknown event type")
        return self._bad_request("Unknown event type")

    def lambda_handler(self, event: RawEvent, context: Any = None) -> Any:
        """Synchronous entrypoint for the Lambda Python runtime."""
        return anyio.run(self.dispatch, event, context)

    # -- HTTP --

    async def _dispatch_http(self, event: RawEvent, invocation: Any) -> Any:
        cors = self.config.cors
        origin = get_header(event.get("headers"), "origin")
        method = http_method(event)
        if method == "OPTIONS":
            logger.debug("Handling OPTIONS preflight request")
            return preflight_response(cors, origin)

        path = http_path(event)
        route_key = http_route_key(event)
        upstream = event.get("pathParameters")
        match = self.router.resolve(
            method,
            path,
            route_key=route_key,
            upstream_params={k: str(v) for k, v in upstream.items() if v is not None}
            if isinstance(upstream, Mapping)
            else None,
        )
        if match is None:
            logger.debug("No route found for %s %s", method, route_key or path)
            not_found = self._not_found(f"Route not found: {method} {route_key or path}")
            return apply_cors(not_found, cors, origin)

        request = normalize_http(
            event,
            match.segment,
            match.params,
            auto_extract_identity=self.config.auto_extract_identity,
            invocation=invocation,
        )

        expected = self.config.expected_issuer(match.segment)
        if expected and not validate_issuer(request.identity, expected):
            logger.debug("Issuer validation failed for segment %s", match.segment)
            return apply_cors(
                self._forbidden("Access denied: Invalid token issuer", response.INVALID_TOKEN_ISSUER),
                cors,
                origin,
            )

        result = await self._run(
            request,
            (*self.config.global_middleware, *match.middleware, *match.route_middleware),
            match.handler,
        )
        return apply_cors(result, cors, origin)

    # -- Keyed triggers --

    async def _dispatch_keyed(
        self,
        trigger: Trigger,
        key: str | None,
        event: RawEvent,
        invocation: Any,
    ) -> Any:
        match = self.router.resolve_key(trigger, key)
        if match is None:
            logger.debug("No %s handler for %r", trigger, key)
            return {"statusCode": 404, "body": f"{_KEYED_LABELS[trigger]} handler not found"}

        if trigger is Trigger.EVENT_BUS:
            request = normalize_event_bus(event, invocation=invocation)
        elif trigger is Trigger.QUEUE:
            request = normalize_queue(event, invocation=invocation)
        else:
            request = normalize_direct(event, invocation=invocation)

        return await self._run(
            request,
            (*self.config.global_middleware, *match.entry.middleware),
            match.handler,
        )

    # -- Pipeline --

    async def _run(self, request: CanonicalRequest, middleware: Iterable[Any], handler: Handler) -> Any:
        outcome = await run_pipeline(middleware, request)
        if isinstance(outcome, Halt):
            logger.debug("Pipeline halted for request %s", request.request_id)
            return outcome.result
        return await invoke(handler, outcome)

    # -- Outcome responses --

    def _not_found(self, message: str) -> Any:
        override = self.config.responses.not_found
        return override(message) if override else response.not_found(message)

    def _forbidden(self, message: str, code: str) -> Any:
        override = self.config.responses.forbidden
        return override(message, code) if override else response.forbidden(message, code)

    def _bad_request(self, message: str) -> Any:
        override = self.config.responses.bad_request
        return override(message) if override else response.bad_request(message)


def create_dispatcher(
    routes: Router | Routes | Mapping[str, Any],
    config: DispatcherConfig | None = None,
) -> Dispatcher:
    """Build a ``Dispatcher``, reading configuration from the environment
    when *config* is not given."""
    return Dispatcher(routes, config or DispatcherConfig.from_env())
