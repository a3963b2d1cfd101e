"""Canonical request — the one shape every trigger is normalized into.

Frozen. Middleware never mutates a request; it returns a new one built
with ``with_context()`` / ``with_tenant()``, which supersedes the previous
value for the rest of the pipeline.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from switchyard.identity import Identity
from switchyard.tenant.types import TenantInfo
from switchyard.triggers import Segment, Trigger


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Security and correlation data attached to a request."""

    segment: Segment
    identity: Identity | None = None
    request_id: str | None = None
    tenant: TenantInfo | None = None


@dataclass(frozen=True, slots=True)
class CanonicalRequest:
    """A normalized inbound event.

    ``body`` is the decoded HTTP body, the event-bus ``detail``, the first
    queue record's body, or the whole direct-invocation payload.
    ``records`` holds every decoded queue record body, in order.
    """

    trigger: Trigger
    raw: Mapping[str, Any]
    context: RequestContext
    body: Any = field(default_factory=dict)
    path_params: dict[str, str] = field(default_factory=dict)
    query: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    method: str | None = None
    path: str | None = None
    route: str | None = None
    records: tuple[Any, ...] = ()

    # Host invocation context (e.g. the Lambda context object), if given
    invocation: Any = field(default=None, repr=False, compare=False)

    # -- Computed properties --

    @property
    def segment(self) -> Segment:
        return self.context.segment

    @property
    def identity(self) -> Identity | None:
        return self.context.identity

    @property
    def tenant(self) -> TenantInfo | None:
        return self.context.tenant

    @property
    def request_id(self) -> str | None:
        return self.context.request_id

    # -- Derived copies --

    def with_context(self, **changes: Any) -> "CanonicalRequest":
        """Return a copy with ``context`` fields replaced."""
        return replace(self, context=replace(self.context, **changes))

    def with_tenant(self, tenant: TenantInfo | None) -> "CanonicalRequest":
        return self.with_context(tenant=tenant)
