# tests/__init__.py

"""
LIMS FastAPI 애플리케이션의 테스트 스위트 패키지입니다.

- `core/`: 권한 캐시, 허용값 조회기, 토큰 인증, 라우터 게이트 등 공통 계층 테스트.
- `domains/`: 도메인(usr, corp, cyl, lims)별 API 통합 테스트.
- `scripts/`: 초기 데이터 시드 스크립트 테스트.
- `conftest.py`: 인메모리 SQLite 세션, 역할/사용자 픽스처, 인증된 클라이언트 등 공유 픽스처.
"""

__title__ = "LIMS API Tests"
__all__ = []
