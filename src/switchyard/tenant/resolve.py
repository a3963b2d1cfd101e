"""Build ``TenantInfo`` from token claims or propagation headers."""

from collections.abc import Mapping
from typing import Any

from switchyard.http.headers import get_header
from switchyard.tenant import context
from switchyard.tenant.types import (
    COUNTRY_CODE_HEADER,
    FEATURE_CRM,
    FEATURE_WHITE_LABEL,
    ORG_PROFILE_ID_HEADER,
    PERSON_PROFILE_ID_HEADER,
    TENANT_ID_HEADER,
    TENANT_TYPE_HEADER,
    USER_ID_HEADER,
    TenantInfo,
    parse_plan,
    parse_tenant_kind,
)

CLAIM_PREFIX = "custom:"

# Boolean claims that switch on a feature flag
_FEATURE_CLAIMS: dict[str, str] = {
    "hasCRM": FEATURE_CRM,
    "hasWhiteLabel": FEATURE_WHITE_LABEL,
}


def claim(claims: Mapping[str, Any], name: str) -> Any:
    """Read a logical claim, preferring ``custom:<name>`` over ``<name>``."""
    value = claims.get(f"{CLAIM_PREFIX}{name}")
    if value in (None, ""):
        value = claims.get(name)
    return value


def _truthy_claim(value: Any) -> bool:
    # Cognito custom attributes only carry strings
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


def tenant_from_claims(claims: Mapping[str, Any] | None) -> TenantInfo | None:
    """Resolve a tenant from token claims.

    Returns ``None`` when tenant id, tenant type, user id or country code
    is missing, or the tenant type is not recognized.
    """
    if not claims:
        return None
    tenant_id = claim(claims, "tenantId")
    kind = parse_tenant_kind(claim(claims, "tenantType"))
    user_id = claim(claims, "userId") or claims.get("sub")
    country_code = claim(claims, "countryCode")
    if not tenant_id or kind is None or not user_id or not country_code:
        return None

    features = frozenset(
        feature for name, feature in _FEATURE_CLAIMS.items() if _truthy_claim(claim(claims, name))
    )
    return TenantInfo(
        tenant_id=str(tenant_id),
        tenant_kind=kind,
        user_id=str(user_id),
        country_code=str(country_code),
        person_profile_id=claim(claims, "personProfileId") or None,
        org_profile_id=claim(claims, "orgProfileId") or None,
        plan=parse_plan(claim(claims, "plan")),
        features=features,
    )


def tenant_from_headers(headers: Mapping[str, Any] | None) -> TenantInfo | None:
    """Resolve a tenant from ``x-tenant-*`` propagation headers.

    Only trusted invocation-to-invocation calls should carry these. Plan
    and features are never taken from headers.
    """
    if not headers:
        return None
    tenant_id = get_header(headers, TENANT_ID_HEADER)
    kind = parse_tenant_kind(get_header(headers, TENANT_TYPE_HEADER))
    user_id = get_header(headers, USER_ID_HEADER)
    country_code = get_header(headers, COUNTRY_CODE_HEADER)
    if not tenant_id or kind is None or not user_id or not country_code:
        return None
    return TenantInfo(
        tenant_id=tenant_id,
        tenant_kind=kind,
        user_id=user_id,
        country_code=country_code,
        person_profile_id=get_header(headers, PERSON_PROFILE_ID_HEADER) or None,
        org_profile_id=get_header(headers, ORG_PROFILE_ID_HEADER) or None,
    )


def tenant_to_headers(tenant: TenantInfo) -> dict[str, str]:
    """Serialize a tenant for propagation to another invocation."""
    headers = {
        TENANT_ID_HEADER: tenant.tenant_id,
        TENANT_TYPE_HEADER: tenant.tenant_kind.value,
        USER_ID_HEADER: tenant.user_id,
        COUNTRY_CODE_HEADER: tenant.country_code,
    }
    if tenant.person_profile_id:
        headers[PERSON_PROFILE_ID_HEADER] = tenant.person_profile_id
    if tenant.org_profile_id:
        headers[ORG_PROFILE_ID_HEADER] = tenant.org_profile_id
    return headers


def propagation_headers() -> dict[str, str]:
    """Headers for the currently bound tenant, or ``{}`` when unbound."""
    tenant = context.current_optional()
    return tenant_to_headers(tenant) if tenant is not None else {}
