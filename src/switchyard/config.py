"""Dispatcher configuration.

All three configs are frozen dataclasses built once at cold start. With
the defaults no issuer is checked and the unverified bearer-token
fallback stays off.

Both configs can also be read from the function's environment::

    config = DispatcherConfig.from_env(global_middleware=(init_tenant_context,))
"""

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from switchyard.triggers import Segment

_TRUTHY = frozenset({"1", "true", "yes", "on"})

DEFAULT_ALLOW_HEADERS: tuple[str, ...] = (
    "Content-Type",
    "Authorization",
    "X-Amz-Date",
    "X-Api-Key",
    "X-Amz-Security-Token",
)
DEFAULT_ALLOW_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")


def _split(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _flag(value: str | None) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY


@dataclass(frozen=True, slots=True)
class CORSConfig:
    """Cross-origin headers merged into every HTTP result.

    Override what you need::

        CORSConfig(allow_origins=("https://example.com",), allow_credentials=True)
    """

    allow_origins: tuple[str, ...] = ("*",)
    allow_methods: tuple[str, ...] = DEFAULT_ALLOW_METHODS
    allow_headers: tuple[str, ...] = DEFAULT_ALLOW_HEADERS
    expose_headers: tuple[str, ...] = ()
    allow_credentials: bool = False
    max_age: int = 600  # 10 minutes

    def allow_origin_for(self, origin: str | None) -> str | None:
        """The ``Access-Control-Allow-Origin`` value for a request *origin*.

        The header carries a single origin, so an allowed request origin is
        echoed back. ``None`` means the header is omitted.
        """
        if not self.allow_origins or "*" in self.allow_origins:
            if self.allow_credentials and origin:
                return origin
            return "*"
        if origin in self.allow_origins:
            return origin
        # No (or a foreign) Origin header: a lone configured origin is still sent
        if len(self.allow_origins) == 1:
            return self.allow_origins[0]
        return None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CORSConfig":
        """Read ``CORS_ALLOWED_ORIGINS``, ``CORS_ALLOWED_HEADERS``,
        ``CORS_ALLOWED_METHODS`` and ``CORS_MAX_AGE``."""
        env = os.environ if environ is None else environ
        default = cls()
        max_age = env.get("CORS_MAX_AGE", "")
        return cls(
            allow_origins=_split(env.get("CORS_ALLOWED_ORIGINS", "")) or default.allow_origins,
            allow_methods=_split(env.get("CORS_ALLOWED_METHODS", "")) or default.allow_methods,
            allow_headers=_split(env.get("CORS_ALLOWED_HEADERS", "")) or default.allow_headers,
            allow_credentials=_flag(env.get("CORS_ALLOW_CREDENTIALS")),
            max_age=int(max_age) if max_age.isdigit() else default.max_age,
        )


@dataclass(frozen=True, slots=True)
class ResponseOverrides:
    """Replacements for the dispatcher's built-in outcome responses.

    ``not_found(message)``, ``forbidden(message, code)`` and
    ``bad_request(message)`` each return the result to hand back.
    """

    not_found: Callable[[str], Any] | None = None
    forbidden: Callable[[str, str], Any] | None = None
    bad_request: Callable[[str], Any] | None = None


@dataclass(frozen=True, slots=True)
class DispatcherConfig:
    """Dispatcher configuration. Immutable after creation."""

    # Expected token issuer (user pool id) per segment; public is never checked
    issuers: Mapping[Segment, str] = field(default_factory=dict)

    # Runs before segment and route middleware, for every trigger
    global_middleware: tuple[Any, ...] = ()

    responses: ResponseOverrides = field(default_factory=ResponseOverrides)

    cors: CORSConfig = field(default_factory=CORSConfig)

    # Decode the bearer token (no signature check) when no authorizer ran
    auto_extract_identity: bool = False

    # Log every raw event at DEBUG
    debug: bool = False

    def expected_issuer(self, segment: Segment) -> str | None:
        if segment is Segment.PUBLIC:
            return None
        return self.issuers.get(segment) or None

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> "DispatcherConfig":
        """Read ``SWITCHYARD_USER_POOL_<SEGMENT>``,
        ``SWITCHYARD_AUTO_EXTRACT_IDENTITY``, ``SWITCHYARD_DEBUG`` and the
        CORS variables. Keyword arguments win over the environment."""
        env = os.environ if environ is None else environ
        issuers = {
            segment: env[f"SWITCHYARD_USER_POOL_{segment.name}"]
            for segment in Segment
            if segment is not Segment.PUBLIC and env.get(f"SWITCHYARD_USER_POOL_{segment.name}")
        }
        values: dict[str, Any] = {
            "issuers": issuers,
            "cors": CORSConfig.from_env(env),
            "auto_extract_identity": _flag(env.get("SWITCHYARD_AUTO_EXTRACT_IDENTITY")),
            "debug": _flag(env.get("SWITCHYARD_DEBUG")),
        }
        values.update(overrides)
        return cls(**values)
