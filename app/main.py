# app/main.py

import logging
from typing import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

# 핵심 설정 및 데이터베이스 모듈 임포트
from app import API_PREFIX
from app.core.config import settings
from app.core.database import engine, get_session
from app.core import dependencies as deps
from app.core.allowed_values import AllowedValuesResolver, fetch_check_constraint_definitions
from app.core.authorization import authorize
from app.core.errors import register_exception_handlers
from app.core.permissions import AdminRoleResolver, PermissionCache

# 각 도메인의 라우터들을 임포트합니다.
from app.domains.usr import crud as usr_crud
from app.domains.usr.routers import (
    auth_router, roles_router, modules_router, role_modules_router, users_router,
)
from app.domains.corp.routers import companies_router, company_areas_router, company_contacts_router
from app.domains.cyl.routers import cylinders_router, cylinder_checkout_router, cylinder_inventory_router
from app.domains.lims.routers import analysis_pricing_router, sample_checkin_router, workorder_headers_router


# -- 로깅 설정 --
# 기본은 WARNING 이며, ENABLE_ERROR_LOGS 가 켜지면 'app' 로거를 INFO 로 올립니다.
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
if settings.ENABLE_ERROR_LOGS:
    logging.getLogger("app").setLevel(logging.INFO)

logger = logging.getLogger(__name__)


# -- 애플리케이션 수명 주기 이벤트 핸들러 --
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI 애플리케이션의 수명 주기 이벤트를 처리합니다.
    스키마 생성/변경은 배포 절차(DDL)에서 수행하며, 종료 시 연결 풀을 정리합니다.
    """
    logger.info("%s %s starting (env=%s)", settings.APP_NAME, settings.APP_VERSION, settings.APP_ENV)

    yield  # 애플리케이션 실행

    logger.info("Shutting down, disposing database connection pool")
    await engine.dispose()


# -- FastAPI 애플리케이션 인스턴스 생성 --
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",       # Swagger UI (Interactive API documentation)
    redoc_url="/redoc",     # ReDoc (Alternative API documentation)
    lifespan=lifespan
)

# -- 프로세스 공용 캐시 --
# 저장소 조회 함수를 주입해 만들고, 요청에서는 app.state 를 통해 공유합니다.
app.state.permission_cache = PermissionCache(usr_crud.role_module.get_active_with_modules)
app.state.admin_role_resolver = AdminRoleResolver(usr_crud.role.get)
app.state.allowed_values = AllowedValuesResolver(fetch_check_constraint_definitions)

# -- 오류 응답 형식 통일 ({"error": ...}) --
register_exception_handlers(app)

# -- CORS (Cross-Origin Resource Sharing) 미들웨어 설정 --
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


# -- 도메인 라우터 포함 --
# 인증(get_current_identity) → 권한(authorize) 순서로 게이트를 걸어 등록합니다.
def gated(module_identifier: str) -> list:
    return [Depends(deps.get_current_identity), Depends(authorize(module_identifier))]


app.include_router(auth_router, prefix=f"{API_PREFIX}/auth")
app.include_router(roles_router, prefix=f"{API_PREFIX}/roles", dependencies=gated("roles"))
app.include_router(users_router, prefix=f"{API_PREFIX}/users", dependencies=gated("users"))
app.include_router(modules_router, prefix=f"{API_PREFIX}/modules", dependencies=gated("modules"))
app.include_router(companies_router, prefix=f"{API_PREFIX}/companies", dependencies=gated("companies"))
app.include_router(role_modules_router, prefix=f"{API_PREFIX}/role_modules", dependencies=gated("role_modules"))
app.include_router(company_areas_router, prefix=f"{API_PREFIX}/company_areas", dependencies=gated("company_areas"))
app.include_router(
    company_contacts_router, prefix=f"{API_PREFIX}/company_contacts", dependencies=gated("company_contacts")
)
app.include_router(cylinders_router, prefix=f"{API_PREFIX}/cylinders", dependencies=gated("cylinders"))
app.include_router(
    analysis_pricing_router, prefix=f"{API_PREFIX}/analysis_pricing", dependencies=gated("analysis_pricing")
)
app.include_router(
    cylinder_checkout_router, prefix=f"{API_PREFIX}/cylinder_checkout", dependencies=gated("cylinder_checkout")
)
app.include_router(
    sample_checkin_router, prefix=f"{API_PREFIX}/sample_checkin", dependencies=gated("sample_checkin")
)
# 재고 현황은 용기 권한으로 조회합니다.
app.include_router(
    cylinder_inventory_router, prefix=f"{API_PREFIX}/cylinder_inventory", dependencies=gated("cylinders")
)
app.include_router(
    workorder_headers_router, prefix=f"{API_PREFIX}/workorder_headers", dependencies=gated("workorder_headers")
)


# -- 루트 엔드포인트 --
@app.get(API_PREFIX, summary="API Root")
async def read_root():
    """LIMS API 의 루트 엔드포인트입니다. 실행 여부와 버전을 알려줍니다."""
    return {"message": "LIMS API is running", "version": settings.APP_VERSION}


# -- 헬스 체크 엔드포인트 --
@app.get("/health-check", summary="Health Check", response_description="Status of the application and database connection.")
async def health_check(session: AsyncSession = Depends(get_session)):
    """
    애플리케이션의 헬스 체크 엔드포인트입니다.
    데이터베이스 연결을 테스트하여 서비스의 정상 작동 여부를 확인합니다.
    """
    try:
        result = await session.execute(text("SELECT 1"))
        if result.scalar() == 1:
            return {"status": "ok", "database_connection": "successful"}
    except Exception as e:
        logger.error("Database health check failed", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database connection error during health check: {e}"
        )
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Database health check failed: No result from test query"
    )
