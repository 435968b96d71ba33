# tests/test_main.py

"""
FastAPI 애플리케이션의 메인 엔드포인트에 대한 통합 테스트를 정의하는 모듈입니다.

- API 루트 경로 (`/api`) 응답을 테스트합니다.
- 데이터베이스 연결 헬스 체크 엔드포인트 (`/health-check`)를 테스트합니다.
- 공통 오류 응답 형식({"error": ...})을 테스트합니다.
"""

import pytest
from httpx import AsyncClient

from app.core.config import settings


@pytest.mark.asyncio
async def test_read_root(client: AsyncClient):
    """
    루트 엔드포인트 (`GET /api`)는 인증 없이 실행 여부와 버전을 반환해야 합니다.
    """
    response = await client.get("/api")

    assert response.status_code == 200
    assert response.json() == {"message": "LIMS API is running", "version": settings.APP_VERSION}


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """
    헬스 체크 엔드포인트가 데이터베이스 연결 상태를 올바르게 반환하는지 테스트합니다.
    """
    response = await client.get("/health-check")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database_connection": "successful"}


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client: AsyncClient):
    response = await client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_validation_error_is_bad_request(admin_client: AsyncClient):
    response = await admin_client.post("/api/roles", json={"name": 123, "active": "maybe"})

    assert response.status_code == 400
    assert "error" in response.json()
