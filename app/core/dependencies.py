# app/core/dependencies.py

"""
FastAPI 애플리케이션의 의존성 주입(Dependency Injection)을 정의하는 모듈입니다.

- 데이터베이스 세션 관리 (get_db_session).
- app.state 에 보관된 프로세스 공용 캐시 접근자.
- 현재 요청의 인증 정보(Identity) 획득 (get_current_identity).
"""

from typing import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

# 실제 데이터베이스 세션 제너레이터 임포트
from app.core.database import get_session as get_main_app_session
from app.core.allowed_values import AllowedValuesResolver
from app.core.permissions import AdminRoleResolver, PermissionCache
from app.core.security import Identity, authenticate_request


# --- 데이터베이스 세션 의존성 주입 ---
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 의존성 주입을 위한 비동기 데이터베이스 세션 제너레이터입니다.
    app.core.database.get_session을 래핑하여 사용합니다.
    """
    async for session in get_main_app_session():
        yield session


# --- 캐시 접근자 (컴포지션 루트인 main.py 에서 app.state 에 등록) ---
def get_permission_cache(request: Request) -> PermissionCache:
    return request.app.state.permission_cache


def get_admin_role_resolver(request: Request) -> AdminRoleResolver:
    return request.app.state.admin_role_resolver


def get_allowed_values(request: Request) -> AllowedValuesResolver:
    return request.app.state.allowed_values


# --- 인증 의존성 ---
async def get_current_identity(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Identity:
    """
    Authorization 헤더를 검증하여 Identity 를 만들고 request.state.identity 에 보관합니다.
    라우터 등록 시 authorize() 보다 먼저 실행되도록 배치합니다.
    """
    identity = await authenticate_request(
        db,
        request.headers.get("authorization"),
        method=request.method,
        path=request.url.path,
    )
    request.state.identity = identity
    return identity


def get_request_identity(request: Request) -> Identity:
    """
    인증 단계가 이미 부여한 Identity 를 반환합니다. 없으면 401.
    (핸들러에서 회사 범위 검사 등에 사용)
    """
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthenticated")
    return identity
