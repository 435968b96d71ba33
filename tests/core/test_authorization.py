# tests/core/test_authorization.py

"""
라우터 게이트(인증 → authorize(<모듈>) → admin_only) 통합 테스트.
"""

from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from httpx import AsyncClient

from app.core.authorization import authorize
from app.core.permissions import AdminRoleResolver, PermissionCache
from app.core.security import Identity
from app.domains.usr import models as usr_models


@pytest.mark.asyncio
async def test_missing_token_is_unauthenticated(client: AsyncClient):
    response = await client.get("/api/cylinders")

    assert response.status_code == 401
    assert response.json() == {"error": "Missing Authorization header"}


@pytest.mark.asyncio
async def test_malformed_header_reports_error_id(client: AsyncClient):
    response = await client.get("/api/cylinders", headers={"Authorization": "Token abc.def"})

    body = response.json()
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert body["error"] == "Invalid Authorization header format"
    assert body["errorId"]
    assert "abc.def" not in body.get("details", "")


@pytest.mark.asyncio
async def test_garbage_token_is_rejected(client: AsyncClient):
    response = await client.get("/api/cylinders", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid or expired token"}


@pytest.mark.asyncio
async def test_admin_passes_without_module_mappings(admin_client: AsyncClient):
    for path in ("/api/roles", "/api/role_modules", "/api/cylinders", "/api/workorder_headers"):
        response = await admin_client.get(path)
        assert response.status_code == 200, path


@pytest.mark.asyncio
async def test_granted_module_is_allowed(employee_client: AsyncClient):
    response = await employee_client.get("/api/cylinders")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_module_without_grant_is_forbidden(employee_client: AsyncClient):
    response = await employee_client.get("/api/roles")

    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden"}


@pytest.mark.asyncio
async def test_inactive_mapping_does_not_grant(
    authorized_client_factory, user_factory, customer_role, company_a, grant_modules
):
    await grant_modules(customer_role, "cylinders", active=False)
    user = await user_factory("inactive grant", "pass1234", customer_role, company_id=company_a.id)

    async with authorized_client_factory(user, "pass1234") as customer:
        response = await customer.get("/api/cylinders")

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_unknown_module_name_is_forbidden(authorized_client_factory, user_factory, employee_role, db_session):
    # 'cylinders' 모듈 행이 없으면 authorize("cylinders") 는 모듈 ID 를 찾지 못합니다.
    user = await user_factory("no modules", "pass1234", employee_role)

    async with authorized_client_factory(user, "pass1234") as employee:
        response = await employee.get("/api/cylinders")

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_role_module_change_via_api_refreshes_cache(
    admin_client: AsyncClient, employee_client: AsyncClient, employee_role, api_modules
):
    assert (await employee_client.get("/api/roles")).status_code == 403

    response = await admin_client.post(
        "/api/role_modules", json={"role_id": employee_role.id, "module_id": api_modules["roles"].id}
    )
    assert response.status_code == 201

    assert (await employee_client.get("/api/roles")).status_code == 200


@pytest.mark.asyncio
async def test_direct_database_change_waits_for_cache_clear(
    employee_client: AsyncClient, employee_role, api_modules, db_session, app_caches
):
    assert (await employee_client.get("/api/roles")).status_code == 403

    db_session.add(usr_models.RoleModule(role_id=employee_role.id, module_id=api_modules["roles"].id))
    await db_session.commit()
    assert (await employee_client.get("/api/roles")).status_code == 403

    app_caches.permission_cache.clear()
    assert (await employee_client.get("/api/roles")).status_code == 200


@pytest.mark.asyncio
async def test_role_mutation_requires_admin(employee_client: AsyncClient, employee_role, grant_modules):
    await grant_modules(employee_role, "roles")

    assert (await employee_client.get("/api/roles")).status_code == 200
    response = await employee_client.post("/api/roles", json={"name": "Auditor"})

    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden"}


@pytest.mark.asyncio
async def test_role_change_is_picked_up_on_next_request(
    employee_client: AsyncClient, employee_user, admin_role, db_session
):
    # 토큰은 그대로지만 인증 단계가 사용자 레코드를 다시 읽으므로 새 역할이 즉시 적용됩니다.
    assert (await employee_client.get("/api/roles")).status_code == 403

    employee_user.role_id = admin_role.id
    db_session.add(employee_user)
    await db_session.commit()

    assert (await employee_client.get("/api/roles")).status_code == 200


# =============================================================================
# 저장소 오류 시 거부 쪽 판정 (의존성 함수 직접 호출)
# =============================================================================
class StubPermissions:
    def __init__(self, module_id=5, permissions=None, resolve_error=None, permissions_error=None):
        self.module_id = module_id
        self.permissions = {5} if permissions is None else permissions
        self.resolve_error = resolve_error
        self.permissions_error = permissions_error

    async def resolve_module_identifier(self, db, identifier):
        if self.resolve_error:
            raise self.resolve_error
        return self.module_id

    async def get_role_permissions(self, db, role_id):
        if self.permissions_error:
            raise self.permissions_error
        return set(self.permissions)


class StubAdminRoles:
    def __init__(self, is_admin=False, error=None):
        self.is_admin = is_admin
        self.error = error
        self.calls = 0

    async def is_admin_role(self, db, role_id):
        self.calls += 1
        if self.error:
            raise self.error
        return self.is_admin


def _request(identity=None):
    return SimpleNamespace(state=SimpleNamespace(identity=identity))


async def _run_gate(identity, permissions, admin_roles):
    await authorize("cylinders")(_request(identity), None, permissions, admin_roles)


@pytest.mark.asyncio
async def test_gate_without_identity_is_unauthenticated():
    with pytest.raises(HTTPException) as exc_info:
        await _run_gate(None, StubPermissions(), StubAdminRoles())

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Unauthenticated"


@pytest.mark.asyncio
async def test_gate_without_role_is_forbidden_before_admin_check():
    admin_roles = StubAdminRoles(is_admin=True)

    with pytest.raises(HTTPException) as exc_info:
        await _run_gate(Identity(user_id=1, role_id=None), StubPermissions(), admin_roles)

    assert exc_info.value.status_code == 403
    assert admin_roles.calls == 0


@pytest.mark.asyncio
async def test_gate_admin_check_error_falls_through_to_module_grant():
    # 관리자 확인이 실패해도 모듈 권한이 있으면 통과합니다.
    await _run_gate(
        Identity(user_id=1, role_id=2), StubPermissions(), StubAdminRoles(error=RuntimeError("db down"))
    )


@pytest.mark.asyncio
async def test_gate_admin_check_error_without_grant_is_forbidden():
    with pytest.raises(HTTPException) as exc_info:
        await _run_gate(
            Identity(user_id=1, role_id=2),
            StubPermissions(permissions=set()),
            StubAdminRoles(error=RuntimeError("db down")),
        )

    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "permissions",
    [
        StubPermissions(resolve_error=RuntimeError("db down")),
        StubPermissions(module_id=None),
        StubPermissions(permissions_error=RuntimeError("db down")),
        StubPermissions(permissions={7}),
    ],
    ids=["resolve-error", "unknown-module", "permission-error", "not-granted"],
)
async def test_gate_denies_when_grant_cannot_be_confirmed(permissions):
    with pytest.raises(HTTPException) as exc_info:
        await _run_gate(Identity(user_id=1, role_id=2), permissions, StubAdminRoles())

    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == "Forbidden"


@pytest.mark.asyncio
async def test_gate_admin_skips_module_lookup():
    permissions = StubPermissions(resolve_error=RuntimeError("must not be called"))
    await _run_gate(Identity(user_id=1, role_id=1), permissions, StubAdminRoles(is_admin=True))


@pytest.mark.asyncio
async def test_storage_failure_during_request_is_forbidden_not_500(employee_client: AsyncClient, app_caches):
    async def failing_fetch(db, *args):
        raise RuntimeError("relation does not exist")

    app_caches.permission_cache = PermissionCache(failing_fetch)
    app_caches.admin_role_resolver = AdminRoleResolver(failing_fetch)

    response = await employee_client.get("/api/cylinders")

    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden"}
