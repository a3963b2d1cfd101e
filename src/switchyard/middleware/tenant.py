"""Tenant middleware: context initialization and the tenant guard.

Typical wiring::

    config = DispatcherConfig(global_middleware=(init_tenant_context,))
    routes.use(Segment.PRIVATE, tenant_guard)
    routes.use(Segment.BACKOFFICE, tenant_guard)

``init_tenant_context`` never rejects: public routes may run without a
tenant. ``tenant_guard`` is where a tenant becomes mandatory.
"""

import logging

from switchyard.http.response import TENANT_CONTEXT_MISSING, forbidden
from switchyard.identity import Identity, has_any_group
from switchyard.middleware.protocol import Halt
from switchyard.request import CanonicalRequest
from switchyard.tenant import context
from switchyard.tenant.resolve import tenant_from_claims, tenant_from_headers
from switchyard.tenant.types import TenantInfo

logger = logging.getLogger("switchyard.middleware")

# Roles that may operate across tenants
CROSS_TENANT_ROLES: tuple[str, ...] = ("PLATFORM_ADMIN",)

_TENANT_REQUIRED = "Tenant context required. Ensure you are authenticated with a valid tenant."


def resolve_tenant(request: CanonicalRequest) -> TenantInfo | None:
    """Token claims first, then propagation headers, else ``None``."""
    tenant: TenantInfo | None = None
    identity = request.identity
    if identity is not None and identity.claims:
        tenant = tenant_from_claims(identity.claims)
    if tenant is None and request.headers:
        tenant = tenant_from_headers(request.headers)
    return tenant


async def init_tenant_context(request: CanonicalRequest) -> CanonicalRequest | None:
    """Resolve the tenant, bind it for the request, and attach it to the context."""
    tenant = resolve_tenant(request)
    if tenant is None:
        return None
    context.set_current(tenant)
    return request.with_tenant(tenant)


def tenant_rejection(identity: Identity | None, tenant: TenantInfo | None) -> str | None:
    """Return a rejection message, or ``None`` if the request may proceed.

    A bound tenant with a blank id is rejected for every caller. The
    cross-tenant bypass only covers requests with no tenant at all.
    """
    if tenant is not None:
        return None if tenant.tenant_id.strip() else _TENANT_REQUIRED
    if has_any_group(identity, CROSS_TENANT_ROLES):
        return None
    return _TENANT_REQUIRED


async def tenant_guard(request: CanonicalRequest) -> Halt | None:
    """Fail closed unless a tenant is present or the caller is cross-tenant."""
    message = tenant_rejection(request.identity, request.tenant)
    if message is None:
        return None
    logger.debug("Tenant guard rejected request %s", request.request_id)
    return Halt(forbidden(message, TENANT_CONTEXT_MISSING))
