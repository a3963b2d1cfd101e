"""Multi-tenant request context.

Usage::

    from switchyard import tenant

    await tenant.run(info, handler)     # explicit scope
    info = tenant.current()             # fail-closed read
"""

from switchyard.tenant.context import bind, current, current_optional, is_active, run, set_current
from switchyard.tenant.resolve import (
    claim,
    propagation_headers,
    tenant_from_claims,
    tenant_from_headers,
    tenant_to_headers,
)
from switchyard.tenant.types import (
    FEATURE_CRM,
    FEATURE_WHITE_LABEL,
    Plan,
    TenantInfo,
    TenantKind,
)

__all__ = [
    "FEATURE_CRM",
    "FEATURE_WHITE_LABEL",
    "Plan",
    "TenantInfo",
    "TenantKind",
    "bind",
    "claim",
    "current",
    "current_optional",
    "is_active",
    "propagation_headers",
    "run",
    "set_current",
    "tenant_from_claims",
    "tenant_from_headers",
    "tenant_to_headers",
]
