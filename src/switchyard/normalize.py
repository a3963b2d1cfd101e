"""Per-trigger event normalizers.

One pure, total function per trigger kind. None of them raise on
malformed payloads: missing pieces degrade to empty values.

Also home to the small readers the dispatcher uses before a request
exists (HTTP verb and paths, event-bus operation, source queue name).
"""

from collections.abc import Mapping
from typing import Any

from switchyard.http.body import parse_json_body, parse_query_params, parse_record_body
from switchyard.http.headers import normalize_headers
from switchyard.identity import extract_identity
from switchyard.request import CanonicalRequest, RequestContext
from switchyard.triggers import Segment, Trigger


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


# -- HTTP readers (REST API v1 and HTTP API v2 payloads) --


def http_method(event: Mapping[str, Any]) -> str:
    method = event.get("httpMethod") or _mapping(_mapping(event.get("requestContext")).get("http")).get("method")
    return str(method or "").upper()


def http_path(event: Mapping[str, Any]) -> str | None:
    """The concrete request path."""
    http = _mapping(_mapping(event.get("requestContext")).get("http"))
    return event.get("path") or event.get("rawPath") or http.get("path") or http_route_key(event)


def http_route_key(event: Mapping[str, Any]) -> str | None:
    """The gateway's route template (``/users/{id}``), when it sent one."""
    if event.get("resource"):
        return event["resource"]
    route_key = event.get("routeKey")
    if isinstance(route_key, str) and " " in route_key:
        return route_key.split(" ", 1)[1]
    return None


def event_bus_operation(event: Mapping[str, Any]) -> str | None:
    operation = _mapping(event.get("detail")).get("operationName")
    return operation if isinstance(operation, str) and operation else None


def queue_name(event: Mapping[str, Any]) -> str | None:
    """Source queue name: trailing segment of the first record's ARN."""
    records = event.get("Records") or []
    first = _mapping(records[0]) if records else {}
    arn = first.get("eventSourceARN")
    if not isinstance(arn, str) or not arn:
        return None
    return arn.rsplit(":", 1)[-1] or None


# -- Normalizers --


def normalize_http(
    event: Mapping[str, Any],
    segment: Segment,
    params: Mapping[str, str],
    *,
    auto_extract_identity: bool = False,
    invocation: Any = None,
) -> CanonicalRequest:
    """Normalize an API Gateway event.

    *params* are the router's merged path parameters (upstream
    ``pathParameters`` already folded in).
    """
    request_context = _mapping(event.get("requestContext"))
    return CanonicalRequest(
        trigger=Trigger.HTTP,
        raw=event,
        context=RequestContext(
            segment=segment,
            identity=extract_identity(event, auto_extract_identity),
            request_id=request_context.get("requestId"),
        ),
        body=parse_json_body(event.get("body"), bool(event.get("isBase64Encoded"))),
        path_params=dict(params),
        query=parse_query_params(
            _mapping(event.get("queryStringParameters")),
            _mapping(event.get("multiValueQueryStringParameters")),
        ),
        headers=normalize_headers(_mapping(event.get("headers"))),
        method=http_method(event),
        path=http_path(event),
        route=http_route_key(event),
        invocation=invocation,
    )


def normalize_event_bus(event: Mapping[str, Any], *, invocation: Any = None) -> CanonicalRequest:
    detail = event.get("detail")
    return CanonicalRequest(
        trigger=Trigger.EVENT_BUS,
        raw=event,
        context=RequestContext(segment=Segment.INTERNAL, request_id=event.get("id")),
        body=detail if detail is not None else {},
        invocation=invocation,
    )


def normalize_queue(event: Mapping[str, Any], *, invocation: Any = None) -> CanonicalRequest:
    records = [_mapping(r) for r in event.get("Records") or []]
    bodies = tuple(parse_record_body(r.get("body")) for r in records)
    return CanonicalRequest(
        trigger=Trigger.QUEUE,
        raw=event,
        context=RequestContext(
            segment=Segment.INTERNAL,
            request_id=records[0].get("messageId") if records else None,
        ),
        body=bodies[0] if bodies else {},
        records=bodies,
        invocation=invocation,
    )


def normalize_direct(event: Mapping[str, Any], *, invocation: Any = None) -> CanonicalRequest:
    return CanonicalRequest(
        trigger=Trigger.DIRECT,
        raw=event,
        context=RequestContext(
            segment=Segment.INTERNAL,
            request_id=event.get("awsRequestId") or getattr(invocation, "aws_request_id", None),
        ),
        body=event,
        invocation=invocation,
    )
