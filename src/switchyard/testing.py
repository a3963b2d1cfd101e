"""Test utilities — raw trigger event factories.

Builds events in the shapes the host delivers, so tests can exercise the
whole dispatcher without hand-writing gateway payloads::

    from switchyard.testing import http_event, queue_event

    result = await dispatcher.dispatch(http_event("GET", "/users/42", resource="/users/{id}"))
"""

import base64
import json
import uuid
from collections.abc import Mapping
from typing import Any


def http_event(
    method: str,
    path: str,
    *,
    resource: str | None = None,
    headers: Mapping[str, str] | None = None,
    query: Mapping[str, Any] | None = None,
    body: Any = None,
    base64_body: bool = False,
    path_params: Mapping[str, str] | None = None,
    authorizer: Mapping[str, Any] | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    """An API Gateway REST (v1) proxy event."""
    raw_body: str | None
    if body is None:
        raw_body = None
    elif isinstance(body, str):
        raw_body = body
    else:
        raw_body = json.dumps(body)
    if raw_body is not None and base64_body:
        raw_body = base64.b64encode(raw_body.encode("utf-8")).decode("ascii")

    request_context: dict[str, Any] = {"requestId": request_id or str(uuid.uuid4())}
    if authorizer is not None:
        request_context["authorizer"] = dict(authorizer)

    return {
        "httpMethod": method.upper(),
        "resource": resource or path,
        "path": path,
        "headers": dict(headers or {}),
        "queryStringParameters": dict(query) if query else None,
        "pathParameters": dict(path_params) if path_params else None,
        "body": raw_body,
        "isBase64Encoded": base64_body,
        "requestContext": request_context,
    }


def http_v2_event(
    method: str,
    path: str,
    *,
    route: str | None = None,
    headers: Mapping[str, str] | None = None,
    body: Any = None,
    authorizer: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """An API Gateway HTTP API (payload format 2.0) event."""
    request_context: dict[str, Any] = {
        "requestId": str(uuid.uuid4()),
        "http": {"method": method.upper(), "path": path},
    }
    if authorizer is not None:
        request_context["authorizer"] = dict(authorizer)
    return {
        "version": "2.0",
        "routeKey": f"{method.upper()} {route or path}",
        "rawPath": path,
        "headers": dict(headers or {}),
        "body": None if body is None else json.dumps(body),
        "isBase64Encoded": False,
        "requestContext": request_context,
    }


def event_bus_event(operation: str | None, detail: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """An event-bus notification routed by ``detail.operationName``."""
    payload = dict(detail or {})
    if operation is not None:
        payload.setdefault("operationName", operation)
    return {"id": str(uuid.uuid4()), "source": "EVENT_BRIDGE", "detail": payload}


def queue_event(queue: str, *bodies: Any, region: str = "us-east-1", account: str = "123456789012") -> dict[str, Any]:
    """A queue batch; non-string bodies are JSON-encoded."""
    arn = f"arn:aws:sqs:{region}:{account}:{queue}"
    return {
        "Records": [
            {
                "messageId": str(uuid.uuid4()),
                "eventSource": "aws:sqs",
                "eventSourceARN": arn,
                "body": body if isinstance(body, str) else json.dumps(body),
            }
            for body in bodies
        ]
    }


def direct_event(payload: Mapping[str, Any] | None = None, request_id: str | None = None) -> dict[str, Any]:
    """A direct invocation payload."""
    return {"awsRequestId": request_id or str(uuid.uuid4()), **(payload or {})}


def unsigned_token(claims: Mapping[str, Any]) -> str:
    """A JWT-shaped string carrying *claims*, with a dummy signature."""

    def segment(data: Mapping[str, Any]) -> str:
        return base64.urlsafe_b64encode(json.dumps(data).encode("utf-8")).rstrip(b"=").decode("ascii")

    return f"{segment({'alg': 'none', 'typ': 'JWT'})}.{segment(claims)}.signature"


def issuer_for(pool_id: str, region: str = "us-east-1") -> str:
    return f"https://cognito-idp.{region}.amazonaws.com/{pool_id}"
