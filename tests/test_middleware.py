"""Tests for the middleware pipeline and built-in guards."""

import json

import pytest

from switchyard import tenant
from switchyard.middleware import (
    FeatureGuard,
    Halt,
    crm_guard,
    feature_guard,
    has_feature_access,
    init_tenant_context,
    resolve_tenant,
    run_pipeline,
    tenant_guard,
)
from switchyard.normalize import normalize_http
from switchyard.request import CanonicalRequest
from switchyard.tenant import TenantInfo, TenantKind
from switchyard.testing import http_event
from switchyard.triggers import Segment

TENANT_CLAIMS = {
    "sub": "u-1",
    "custom:tenantId": "org-1",
    "custom:tenantType": "ORG",
    "custom:countryCode": "US",
}


def _request(
    claims: dict | None = None,
    headers: dict | None = None,
    segment: Segment = Segment.PRIVATE,
) -> CanonicalRequest:
    authorizer = {"claims": claims} if claims is not None else None
    event = http_event("GET", "/things", headers=headers, authorizer=authorizer, request_id="req-1")
    return normalize_http(event, segment, {})


def _body(result: dict) -> dict:
    return json.loads(result["body"])


class TestRunPipeline:
    async def test_runs_in_order(self) -> None:
        calls: list[str] = []

        def first(request):
            calls.append("first")

        async def second(request):
            calls.append("second")

        result = await run_pipeline([first, second], _request())
        assert calls == ["first", "second"]
        assert isinstance(result, CanonicalRequest)

    async def test_replacement_flows_forward(self) -> None:
        async def stamp(request):
            return request.with_context(request_id="stamped")

        seen: list[str | None] = []

        async def read(request):
            seen.append(request.request_id)

        result = await run_pipeline([stamp, read], _request())
        assert seen == ["stamped"]
        assert result.request_id == "stamped"

    async def test_halt_stops_pipeline(self) -> None:
        calls: list[str] = []

        async def stop(request):
            calls.append("stop")
            return Halt({"statusCode": 418})

        async def never(request):
            calls.append("never")

        result = await run_pipeline([stop, never], _request())
        assert result == Halt({"statusCode": 418})
        assert calls == ["stop"]

    async def test_empty_pipeline(self) -> None:
        request = _request()
        assert await run_pipeline([], request) is request

    async def test_invalid_return_type(self) -> None:
        def bad(request):
            return {"statusCode": 200}

        with pytest.raises(TypeError, match="expected CanonicalRequest, Halt, or None"):
            await run_pipeline([bad], _request())

    async def test_exceptions_propagate(self) -> None:
        async def boom(request):
            raise RuntimeError("middleware failed")

        with pytest.raises(RuntimeError, match="middleware failed"):
            await run_pipeline([boom], _request())


class TestInitTenantContext:
    async def test_from_claims(self) -> None:
        with tenant.bind():
            result = await init_tenant_context(_request(TENANT_CLAIMS))
            assert isinstance(result, CanonicalRequest)
            assert result.tenant is not None
            assert result.tenant.tenant_id == "org-1"
            assert tenant.current().tenant_id == "org-1"

    async def test_from_headers(self) -> None:
        headers = {
            "x-tenant-id": "org-h",
            "x-tenant-type": "ORG",
            "x-user-id": "u-h",
            "x-country-code": "US",
        }
        with tenant.bind():
            result = await init_tenant_context(_request(headers=headers))
            assert result is not None
            assert result.tenant.tenant_id == "org-h"

    async def test_claims_win_over_headers(self) -> None:
        headers = {"x-tenant-id": "org-h", "x-tenant-type": "ORG", "x-user-id": "u", "x-country-code": "US"}
        request = _request(TENANT_CLAIMS, headers)
        assert resolve_tenant(request).tenant_id == "org-1"

    async def test_no_tenant_continues_unchanged(self) -> None:
        with tenant.bind():
            assert await init_tenant_context(_request({"sub": "anon"})) is None
            assert tenant.is_active() is False


class TestTenantGuard:
    async def test_rejects_without_tenant(self) -> None:
        result = await tenant_guard(_request({"sub": "u"}))
        assert isinstance(result, Halt)
        assert result.result["statusCode"] == 403
        assert _body(result.result)["code"] == "TENANT_CONTEXT_MISSING"

    async def test_allows_with_tenant(self) -> None:
        request = _request(TENANT_CLAIMS)
        request = request.with_tenant(resolve_tenant(request))
        assert await tenant_guard(request) is None

    async def test_rejects_blank_tenant_id(self) -> None:
        blank = TenantInfo(tenant_id="  ", tenant_kind=TenantKind.ORG, user_id="u", country_code="US")
        result = await tenant_guard(_request({"sub": "u"}).with_tenant(blank))
        assert isinstance(result, Halt)

    async def test_platform_admin_bypasses(self) -> None:
        request = _request({"sub": "admin", "cognito:groups": ["PLATFORM_ADMIN"]})
        assert await tenant_guard(request) is None

    async def test_platform_admin_with_blank_tenant_rejected(self) -> None:
        blank = TenantInfo(tenant_id="   ", tenant_kind=TenantKind.ORG, user_id="admin", country_code="US")
        request = _request({"sub": "admin", "cognito:groups": ["PLATFORM_ADMIN"]}).with_tenant(blank)
        result = await tenant_guard(request)
        assert isinstance(result, Halt)
        assert _body(result.result)["code"] == "TENANT_CONTEXT_MISSING"


class TestFeatureGuards:
    def test_has_feature_access(self) -> None:
        info = TenantInfo(
            tenant_id="t",
            tenant_kind=TenantKind.ORG,
            user_id="u",
            country_code="US",
            features=frozenset({"crm"}),
        )
        assert has_feature_access(None, info, "crm") is True
        assert has_feature_access(None, info, "white_label") is False
        assert has_feature_access(None, None, "crm") is False

    async def test_crm_guard_rejects_before_tenant_init(self) -> None:
        claims = {**TENANT_CLAIMS, "custom:hasCRM": "true"}
        result = await crm_guard(_request(claims))
        assert isinstance(result, Halt)
        body = _body(result.result)
        assert body["code"] == "CRM_ACCESS_DENIED"
        assert body["message"] == "CRM access requires a paid plan. Please upgrade your subscription."

    async def test_crm_guard_allows_after_tenant_init(self) -> None:
        claims = {**TENANT_CLAIMS, "custom:hasCRM": "true"}
        with tenant.bind():
            result = await run_pipeline([init_tenant_context, crm_guard], _request(claims))
        assert isinstance(result, CanonicalRequest)

    async def test_crm_guard_rejects_without_flag(self) -> None:
        with tenant.bind():
            result = await run_pipeline([init_tenant_context, crm_guard], _request(TENANT_CLAIMS))
        assert isinstance(result, Halt)

    async def test_crm_guard_admin_bypass(self) -> None:
        request = _request({"sub": "admin", "groups": "PLATFORM_ADMIN"})
        assert await crm_guard(request) is None

    async def test_custom_feature_guard(self) -> None:
        guard = feature_guard("white_label", code="WHITE_LABEL_DENIED", message="No white label")
        assert isinstance(guard, FeatureGuard)
        assert repr(guard) == "FeatureGuard('white_label')"
        result = await guard(_request(TENANT_CLAIMS))
        assert isinstance(result, Halt)
        assert _body(result.result)["code"] == "WHITE_LABEL_DENIED"
