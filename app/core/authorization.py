# app/core/authorization.py

"""
요청 단위 권한 검사(authorize / admin_only) 의존성 팩토리 모듈입니다.

authorize(module_identifier) 의 판정 순서:
  1. 인증 정보 없음                         → 401 Unauthenticated
  2. role_id 없음                           → 403 Forbidden
  3. 관리자 역할                            → 통과 (모듈 매핑과 무관)
  4. 모듈 식별자 해석 (ID 또는 모듈명)
  5. 해석 실패                              → 403 Forbidden
  6. 역할의 모듈 권한 집합 조회
  7. 집합에 포함되면 통과, 아니면           → 403 Forbidden

각 단계의 저장소/캐시 오류는 로그만 남기고 '거부' 쪽으로 처리합니다.
"""

import logging
from typing import Any

from fastapi import Depends, HTTPException, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.core.permissions import AdminRoleResolver, PermissionCache

logger = logging.getLogger(__name__)


def _forbidden() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


async def _is_admin(resolver: AdminRoleResolver, db: AsyncSession, role_id: Any) -> bool:
    try:
        return await resolver.is_admin_role(db, role_id)
    except Exception:
        logger.error("Admin check failed for role_id=%s", role_id, exc_info=True)
        return False


def authorize(module_identifier: Any):
    """
    라우터 등록 시점에 고정된 모듈 식별자(모듈 ID 또는 모듈명)에 대한 접근 권한을 검사하는
    의존성을 반환합니다.
    """
    async def _authorize(
        request: Request,
        db: AsyncSession = Depends(deps.get_db_session),
        permission_cache: PermissionCache = Depends(deps.get_permission_cache),
        admin_roles: AdminRoleResolver = Depends(deps.get_admin_role_resolver),
    ) -> None:
        identity = deps.get_request_identity(request)
        role_id = identity.role_id
        if not role_id:
            raise _forbidden()

        if await _is_admin(admin_roles, db, role_id):
            return

        try:
            module_id = await permission_cache.resolve_module_identifier(db, module_identifier)
        except Exception:
            logger.error("Module identifier resolution failed for %r", module_identifier, exc_info=True)
            module_id = None
        if module_id is None:
            raise _forbidden()

        try:
            permissions = await permission_cache.get_role_permissions(db, role_id)
        except Exception:
            logger.error("Role permission lookup failed for role_id=%s", role_id, exc_info=True)
            permissions = set()

        if module_id not in permissions:
            raise _forbidden()

    return _authorize


def admin_only():
    """관리자 역할만 통과시키는 의존성을 반환합니다."""
    async def _admin_only(
        request: Request,
        db: AsyncSession = Depends(deps.get_db_session),
        admin_roles: AdminRoleResolver = Depends(deps.get_admin_role_resolver),
    ) -> None:
        identity = deps.get_request_identity(request)
        if not identity.role_id:
            raise _forbidden()
        if not await _is_admin(admin_roles, db, identity.role_id):
            raise _forbidden()

    return _admin_only
