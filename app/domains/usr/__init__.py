# app/domains/usr/__init__.py

"""
FastAPI 애플리케이션의 'usr' 도메인 패키지입니다.

'usr' 도메인은 시스템 사용자, 역할(role), 모듈(module), 역할별 모듈 접근 권한(role_modules),
그리고 로그인/토큰 발급과 관련된 데이터를 관리합니다.
역할-모듈 권한이 API 로 변경되면 권한 캐시를 비워 다음 요청부터 반영되도록 합니다.

주요 서브모듈:
- `models.py`: roles, modules, role_modules, users 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 요청 및 응답 유효성 검사, 로그인 응답 스키마.
- `crud.py`: 비동기 CRUD 및 사용자 인증 로직.
- `routers.py`: 로그인, 역할/모듈/권한/사용자 관리 엔드포인트.
"""

__title__ = "LIMS User Domain"
__description__ = "Manages users, roles, modules and role-module permissions, and handles authentication."
__version__ = "1.0.0"
__all__ = ["models", "schemas", "routers", "crud"]
