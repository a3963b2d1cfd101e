"""Trigger detection and the route segment enum.

A raw event is classified by a fixed sequence of structural predicates.
The first predicate that matches wins, so the order below is part of the
contract: event bus, HTTP, queue, direct invocation, then unknown.
"""

from collections.abc import Callable
from enum import StrEnum
from typing import Any


class Trigger(StrEnum):
    """Upstream event source kind."""

    EVENT_BUS = "eventbridge"
    HTTP = "apigateway"
    QUEUE = "sqs"
    DIRECT = "lambda"
    UNKNOWN = "unknown"


class Segment(StrEnum):
    """Security classification of a route.

    Declaration order is the probing precedence used by the router.
    """

    PUBLIC = "public"
    PRIVATE = "private"
    BACKOFFICE = "backoffice"
    INTERNAL = "internal"


SEGMENT_PRECEDENCE: tuple[Segment, ...] = tuple(Segment)

EVENT_BUS_SOURCE = "EVENT_BRIDGE"
QUEUE_EVENT_SOURCE = "aws:sqs"


def is_event_bus(event: dict[str, Any]) -> bool:
    if event.get("source") == EVENT_BUS_SOURCE:
        return True
    # Native EventBridge envelope
    return "detail-type" in event and isinstance(event.get("detail"), dict)


def is_http(event: dict[str, Any]) -> bool:
    request_context = event.get("requestContext")
    if not isinstance(request_context, dict):
        return False
    if event.get("httpMethod"):
        return True
    # HTTP API (payload format 2.0)
    http = request_context.get("http")
    return isinstance(http, dict) and bool(http.get("method"))


def is_queue(event: dict[str, Any]) -> bool:
    records = event.get("Records")
    if not isinstance(records, list) or not records:
        return False
    first = records[0]
    return isinstance(first, dict) and first.get("eventSource") == QUEUE_EVENT_SOURCE


def is_direct(event: dict[str, Any]) -> bool:
    return "awsRequestId" in event


_DETECTORS: tuple[tuple[Trigger, Callable[[dict[str, Any]], bool]], ...] = (
    (Trigger.EVENT_BUS, is_event_bus),
    (Trigger.HTTP, is_http),
    (Trigger.QUEUE, is_queue),
    (Trigger.DIRECT, is_direct),
)


def detect_trigger(event: Any) -> Trigger:
    """Classify a raw event. Never raises; unrecognized shapes are ``UNKNOWN``."""
    if not isinstance(event, dict):
        return Trigger.UNKNOWN
    for trigger, predicate in _DETECTORS:
        if predicate(event):
            return trigger
    return Trigger.UNKNOWN
