"""Lambda proxy response builders.

Responses are plain dicts in the shape API Gateway expects::

    {"statusCode": 404, "headers": {...}, "body": "{...json...}"}

The JSON body is a small envelope with a stable ``code`` discriminator::

    {"status": 403, "code": "TENANT_CONTEXT_MISSING", "message": "..."}
"""

import json
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

# Stable response codes
SUCCESS = "SUCCESS"
CREATED = "CREATED"
BAD_REQUEST = "BAD_REQUEST"
UNAUTHORIZED = "UNAUTHORIZED"
FORBIDDEN = "FORBIDDEN"
NOT_FOUND = "NOT_FOUND"
CONFLICT = "CONFLICT"
VALIDATION_ERROR = "VALIDATION_ERROR"
INTERNAL_ERROR = "INTERNAL_ERROR"

# Forbidden discriminators produced by the dispatcher and built-in guards
TENANT_CONTEXT_MISSING = "TENANT_CONTEXT_MISSING"
CRM_ACCESS_DENIED = "CRM_ACCESS_DENIED"
INVALID_TOKEN_ISSUER = "INVALID_TOKEN_ISSUER"

_DEFAULT_CODES: dict[int, str] = {
    HTTPStatus.OK: SUCCESS,
    HTTPStatus.CREATED: CREATED,
    HTTPStatus.BAD_REQUEST: BAD_REQUEST,
    HTTPStatus.UNAUTHORIZED: UNAUTHORIZED,
    HTTPStatus.FORBIDDEN: FORBIDDEN,
    HTTPStatus.NOT_FOUND: NOT_FOUND,
    HTTPStatus.CONFLICT: CONFLICT,
    HTTPStatus.UNPROCESSABLE_ENTITY: VALIDATION_ERROR,
}


def json_response(
    status: int,
    data: Any = None,
    code: str | None = None,
    message: str | None = None,
    headers: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Build a proxy response with the standard JSON envelope."""
    body: dict[str, Any] = {"status": status, "code": code or _DEFAULT_CODES.get(status, INTERNAL_ERROR)}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json", **(headers or {})},
        "body": json.dumps(body),
    }


def success(data: Any = None, code: str = SUCCESS) -> dict[str, Any]:
    return json_response(HTTPStatus.OK, data, code)


def created(data: Any = None, code: str = CREATED) -> dict[str, Any]:
    return json_response(HTTPStatus.CREATED, data, code)


def bad_request(message: str = "Bad request", code: str = BAD_REQUEST) -> dict[str, Any]:
    return json_response(HTTPStatus.BAD_REQUEST, code=code, message=message)


def forbidden(message: str = "Forbidden", code: str = FORBIDDEN) -> dict[str, Any]:
    return json_response(HTTPStatus.FORBIDDEN, code=code, message=message)


def not_found(message: str = "Not found", code: str = NOT_FOUND) -> dict[str, Any]:
    return json_response(HTTPStatus.NOT_FOUND, code=code, message=message)


def response_code(response: Mapping[str, Any]) -> str | None:
    """Read the ``code`` discriminator back out of a JSON envelope response."""
    try:
        return json.loads(response["body"]).get("code")
    except (KeyError, TypeError, ValueError, AttributeError):
        return None
