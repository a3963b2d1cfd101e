"""Tenant types for the multi-tenant request context."""

from dataclasses import dataclass
from enum import StrEnum


class TenantKind(StrEnum):
    """ORG: organization (tenant id = org profile). PERSON: individual."""

    ORG = "ORG"
    PERSON = "PERSON"


class Plan(StrEnum):
    FREE = "FREE"
    BASIC = "BASIC"
    PRO = "PRO"
    ENTERPRISE = "ENTERPRISE"


# Feature flag names carried on TenantInfo.features
FEATURE_CRM = "crm"
FEATURE_WHITE_LABEL = "white_label"


@dataclass(frozen=True, slots=True)
class TenantInfo:
    """Tenant data resolved for one request.

    Recomputed per request from token claims or propagation headers.
    Never authoritative state.
    """

    tenant_id: str
    tenant_kind: TenantKind
    user_id: str
    country_code: str
    person_profile_id: str | None = None
    org_profile_id: str | None = None
    plan: Plan | None = None
    features: frozenset[str] = frozenset()

    @property
    def has_crm(self) -> bool:
        return FEATURE_CRM in self.features

    def has_feature(self, feature: str) -> bool:
        return feature in self.features


# Headers used to propagate a tenant on invocation-to-invocation calls
TENANT_ID_HEADER = "x-tenant-id"
TENANT_TYPE_HEADER = "x-tenant-type"
USER_ID_HEADER = "x-user-id"
COUNTRY_CODE_HEADER = "x-country-code"
PERSON_PROFILE_ID_HEADER = "x-person-profile-id"
ORG_PROFILE_ID_HEADER = "x-org-profile-id"


def parse_tenant_kind(value: object) -> TenantKind | None:
    try:
        return TenantKind(value)
    except ValueError:
        return None


def parse_plan(value: object) -> Plan | None:
    try:
        return Plan(value)
    except ValueError:
        return None
