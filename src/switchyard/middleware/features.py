"""Feature guards — gate routes on a tenant's plan features.

A feature guard reads ``request.tenant``, so it must run after
``init_tenant_context``; placed before it, it always rejects. Put it on
the route, after the segment's ``tenant_guard``::

    @routes.get("/crm/leads", segment=Segment.PRIVATE, middleware=[crm_guard])
    async def list_leads(request): ...
"""

from collections.abc import Iterable

from switchyard.http.response import CRM_ACCESS_DENIED, forbidden
from switchyard.identity import Identity, has_any_group
from switchyard.middleware.protocol import Halt
from switchyard.request import CanonicalRequest
from switchyard.tenant.types import FEATURE_CRM, TenantInfo

FEATURE_BYPASS_ROLES: tuple[str, ...] = ("PLATFORM_ADMIN",)


def has_feature_access(
    identity: Identity | None,
    tenant: TenantInfo | None,
    feature: str,
    bypass_roles: Iterable[str] = FEATURE_BYPASS_ROLES,
) -> bool:
    if has_any_group(identity, bypass_roles):
        return True
    return tenant is not None and tenant.has_feature(feature)


class FeatureGuard:
    """Reject requests whose tenant lacks *feature*."""

    __slots__ = ("bypass_roles", "code", "feature", "message")

    def __init__(
        self,
        feature: str,
        *,
        code: str,
        message: str,
        bypass_roles: Iterable[str] = FEATURE_BYPASS_ROLES,
    ) -> None:
        self.feature = feature
        self.code = code
        self.message = message
        self.bypass_roles = tuple(bypass_roles)

    async def __call__(self, request: CanonicalRequest) -> Halt | None:
        if has_feature_access(request.identity, request.tenant, self.feature, self.bypass_roles):
            return None
        return Halt(forbidden(self.message, self.code))

    def __repr__(self) -> str:
        return f"FeatureGuard({self.feature!r})"


def feature_guard(feature: str, *, code: str, message: str) -> FeatureGuard:
    return FeatureGuard(feature, code=code, message=message)


crm_guard = FeatureGuard(
    FEATURE_CRM,
    code=CRM_ACCESS_DENIED,
    message="CRM access requires a paid plan. Please upgrade your subscription.",
)
