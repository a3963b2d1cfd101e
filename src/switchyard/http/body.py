"""Best-effort body and query decoding.

Gateways legitimately send empty, untyped, or malformed payloads, so none
of these functions raise. Anything that can't be decoded becomes an empty
mapping.
"""

import base64
import json
from collections.abc import Mapping
from typing import Any


def parse_json_body(body: Any, is_base64_encoded: bool = False) -> Any:
    """Decode a (possibly base64) JSON body string.

    Returns ``{}`` for absent, empty, or malformed bodies. A body that is
    already a mapping is returned as is.
    """
    if body is None or body == "":
        return {}
    if isinstance(body, Mapping):
        return dict(body)
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if not isinstance(body, str):
        return {}

    text = body
    if is_base64_encoded:
        try:
            text = base64.b64decode(body, validate=False).decode("utf-8")
        except ValueError:
            # Also raised for non-ASCII text; binascii.Error subclasses it
            return {}

    try:
        parsed = json.loads(text)
    except ValueError:
        return {}
    return {} if parsed is None else parsed


def parse_record_body(body: Any) -> Any:
    """Decode a queue record body.

    Unlike HTTP bodies, undecodable text is kept under ``rawBody`` instead of
    being dropped.
    """
    if isinstance(body, Mapping):
        return dict(body)
    if not isinstance(body, str):
        return {}
    try:
        return json.loads(body)
    except ValueError:
        return {"rawBody": body}


def parse_query_params(
    params: Mapping[str, Any] | None,
    multi_value_params: Mapping[str, Any] | None = None,
) -> dict[str, str]:
    """Collapse query parameters to a single value per key.

    Multi-valued entries keep their last value; ``None`` entries are dropped.
    """
    result: dict[str, str] = {}
    for source in (multi_value_params, params):
        if not source:
            continue
        for key, value in source.items():
            if isinstance(value, list | tuple):
                values = [v for v in value if v is not None]
                if not values:
                    continue
                value = values[-1]
            if value is None:
                continue
            result[key] = str(value)
    return result
