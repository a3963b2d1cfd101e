"""CORS decoration for HTTP results.

Handles:
- Preflight ``OPTIONS`` requests (204 with CORS headers, before routing)
- Every other HTTP result (CORS headers merged in, handler values win)

``Access-Control-Allow-Origin`` holds one origin. With several allowed
origins the request's ``Origin`` is echoed when it is in the list, along
with ``Vary: Origin``.
"""

from collections.abc import Mapping
from typing import Any

from switchyard.config import CORSConfig


def cors_headers(config: CORSConfig, *, origin: str | None = None, preflight: bool = False) -> dict[str, str]:
    """Build the CORS header set for *config* and the request *origin*."""
    headers: dict[str, str] = {}
    allow_origin = config.allow_origin_for(origin)
    if allow_origin is not None:
        headers["Access-Control-Allow-Origin"] = allow_origin
        if allow_origin != "*":
            headers["Vary"] = "Origin"
    headers["Access-Control-Allow-Headers"] = ",".join(config.allow_headers)
    headers["Access-Control-Allow-Methods"] = ",".join(config.allow_methods)
    if config.allow_credentials:
        headers["Access-Control-Allow-Credentials"] = "true"
    if config.expose_headers:
        headers["Access-Control-Expose-Headers"] = ",".join(config.expose_headers)
    if preflight:
        headers["Access-Control-Max-Age"] = str(config.max_age)
    return headers


def preflight_response(config: CORSConfig, origin: str | None = None) -> dict[str, Any]:
    """Response for an ``OPTIONS`` preflight request."""
    return {"statusCode": 204, "headers": cors_headers(config, origin=origin, preflight=True), "body": ""}


def apply_cors(response: Any, config: CORSConfig, origin: str | None = None) -> Any:
    """Merge CORS headers into a proxy response.

    Headers the handler already set take precedence. Non-dict results are
    returned untouched.
    """
    if not isinstance(response, Mapping):
        return response
    existing = response.get("headers") or {}
    taken = {str(name).lower() for name in existing}
    merged = {k: v for k, v in cors_headers(config, origin=origin).items() if k.lower() not in taken}
    return {**response, "headers": {**merged, **existing}}
