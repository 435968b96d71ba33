# app/core/__init__.py

"""
FastAPI 애플리케이션의 핵심 구성 요소 패키지입니다.

이 패키지는 애플리케이션 전반에 걸쳐 사용되는 공통 기능들을 캡슐화합니다.
주요 서브모듈은 다음과 같습니다:

- `config.py`: 애플리케이션 설정 및 환경 변수 관리 (Pydantic Settings).
- `database.py`: 비동기 엔진, 세션 관리 (SQLModel 및 AsyncSQLAlchemy).
- `crud_base.py`: 도메인 CRUD 클래스가 상속하는 제네릭 비동기 CRUD.
- `security.py`: 비밀번호 해싱, JWT 발급/검증, Bearer 토큰 인증.
- `permissions.py`: 역할별 모듈 권한 캐시와 관리자 역할 판별기.
- `authorization.py`: 라우터 게이트 authorize(<모듈>) / admin_only().
- `allowed_values.py`: DB CHECK 제약조건에서 읽은 허용값 조회 및 정규화.
- `errors.py`: {"error": ...} 형식의 공통 예외 핸들러.
- `dependencies.py`: FastAPI 의존성 주입에서 사용하는 공통 의존성 함수들.
"""

__title__ = "LIMS Core"
__description__ = "Core components for LIMS FastAPI application."
__version__ = "1.0.0"
__all__ = []
