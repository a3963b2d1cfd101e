"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: CanonicalRequest) -> CanonicalRequest | Halt | None

Built-in middleware:
    init_tenant_context -- Resolve the tenant and bind it for the request
    tenant_guard -- Reject requests without a tenant (cross-tenant roles excepted)
    FeatureGuard / crm_guard -- Reject tenants lacking a plan feature
"""

from switchyard.middleware.features import FeatureGuard, crm_guard, feature_guard, has_feature_access
from switchyard.middleware.protocol import Halt, Middleware, run_pipeline
from switchyard.middleware.tenant import init_tenant_context, resolve_tenant, tenant_guard

__all__ = [
    "FeatureGuard",
    "Halt",
    "Middleware",
    "crm_guard",
    "feature_guard",
    "has_feature_access",
    "init_tenant_context",
    "resolve_tenant",
    "run_pipeline",
    "tenant_guard",
]
