"""Identity extraction from upstream authorizer payloads.

Supports the authorizer shapes API Gateway produces, probed in order:

1. REST API + Cognito user pool authorizer: ``authorizer.claims``
2. HTTP API + JWT authorizer: ``authorizer.jwt.claims``
3. HTTP API + Lambda authorizer: ``authorizer.lambda``
4. REST API + custom Lambda authorizer: claims flat on ``authorizer``

A shape is accepted only if it is a mapping carrying at least one
recognized identity key. When none matches and ``auto_extract`` is on,
the bearer token's payload segment is decoded *without* verifying its
signature, only to read claims. Signature verification belongs to the
authorizer, so ``auto_extract`` defaults to off.
"""

import base64
import binascii
import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from switchyard.http.headers import get_header

logger = logging.getLogger("switchyard.identity")

IDENTITY_KEYS: tuple[str, ...] = ("sub", "userId", "user_id", "email", "cognito:username", "iss", "aud")


@dataclass(frozen=True, slots=True)
class Identity:
    """The authenticated principal behind a request."""

    user_id: str | None = None
    email: str | None = None
    groups: tuple[str, ...] = ()
    issuer: str | None = None
    claims: Mapping[str, Any] = field(default_factory=dict)


def _plausible(candidate: Any) -> Mapping[str, Any] | None:
    if isinstance(candidate, Mapping) and any(key in candidate for key in IDENTITY_KEYS):
        return candidate
    return None


def extract_claims(authorizer: Any) -> Mapping[str, Any] | None:
    """Pick the claims mapping out of an authorizer payload, or ``None``."""
    if not isinstance(authorizer, Mapping):
        return None
    jwt = authorizer.get("jwt")
    candidates = (
        authorizer.get("claims"),
        jwt.get("claims") if isinstance(jwt, Mapping) else None,
        authorizer.get("lambda"),
        authorizer,
    )
    for candidate in candidates:
        claims = _plausible(candidate)
        if claims is not None:
            return claims
    return None


def decode_bearer_claims(header: str) -> dict[str, Any] | None:
    """Decode a JWT's payload segment without verifying it.

    Returns ``None`` for anything that isn't a three-part token with a
    JSON object payload.
    """
    token = header[7:] if header[:7].lower() == "bearer " else header
    parts = token.strip().split(".")
    if len(parts) != 3:
        return None
    payload = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(payload).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        logger.warning("Could not decode bearer token payload: %s", exc)
        return None
    return claims if isinstance(claims, dict) else None


def parse_groups(groups: Any) -> tuple[str, ...]:
    """Normalize group claims (list or comma-separated string)."""
    if not groups:
        return ()
    if isinstance(groups, str):
        items: Iterable[Any] = groups.split(",")
    elif isinstance(groups, Iterable):
        items = groups
    else:
        return ()
    return tuple(text for text in (str(g).strip() for g in items) if text)


def identity_from_claims(claims: Mapping[str, Any]) -> Identity:
    user_id = claims.get("sub") or claims.get("cognito:username") or claims.get("userId") or claims.get("user_id")
    return Identity(
        user_id=user_id,
        email=claims.get("email"),
        groups=parse_groups(claims.get("cognito:groups") or claims.get("groups")),
        issuer=claims.get("iss"),
        claims=dict(claims),
    )


def extract_identity(event: Mapping[str, Any], auto_extract: bool = False) -> Identity | None:
    """Derive the principal from a raw HTTP event, or ``None`` if anonymous."""
    request_context = event.get("requestContext")
    authorizer = request_context.get("authorizer") if isinstance(request_context, Mapping) else None
    claims = extract_claims(authorizer)

    if claims is None and auto_extract:
        header = get_header(event.get("headers"), "authorization")
        if header:
            claims = decode_bearer_claims(header)

    if claims is None:
        return None
    return identity_from_claims(claims)


def extract_pool_id(issuer: object) -> str | None:
    """Return the trailing path segment of an issuer URL.

    ``https://cognito-idp.us-east-1.amazonaws.com/us-east-1_abc`` -> ``us-east-1_abc``
    """
    if not isinstance(issuer, str) or not issuer:
        return None
    return issuer.rstrip("/").rsplit("/", 1)[-1] or None


def validate_issuer(identity: Identity | None, expected_pool_id: str) -> bool:
    """True if the token issuer's pool id equals *expected_pool_id*.

    Never raises; a missing identity or issuer is simply not valid.
    """
    if identity is None or not identity.issuer:
        return False
    return extract_pool_id(identity.issuer) == expected_pool_id


def has_any_group(identity: Identity | None, groups: Iterable[str]) -> bool:
    """True if the principal belongs to at least one of *groups*."""
    if identity is None or not identity.groups:
        return False
    held = set(identity.groups)
    return any(group in held for group in groups)


def has_all_groups(identity: Identity | None, groups: Iterable[str]) -> bool:
    """True if the principal belongs to every one of *groups*.

    An empty identity never passes, even for an empty requirement.
    """
    if identity is None or not identity.groups:
        return False
    return set(groups) <= set(identity.groups)
