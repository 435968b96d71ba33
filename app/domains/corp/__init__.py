# app/domains/corp/__init__.py

"""
FastAPI 애플리케이션의 'corp' 도메인 패키지입니다.

'corp' 도메인은 실험실의 고객사 정보, 즉 회사 기본 정보(코드, 청구 정보 등),
회사별 현장(company_areas), 회사별 담당자(company_contacts)를 관리합니다.
customer 역할의 사용자는 자기 회사의 데이터로만 범위가 제한됩니다.

주요 서브모듈:
- `models.py`: companies, company_areas, company_contacts 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 요청 및 응답 유효성 검사를 위한 Pydantic 모델.
- `crud.py`: 각 테이블에 대한 CRUD 로직.
- `routers.py`: 엔티티별 FastAPI API 엔드포인트 정의.
"""

# 패키지 메타데이터
__title__ = "LIMS Customer Company Domain"
__description__ = "Manages customer companies, their areas and contacts."
__version__ = "1.0.0"
__all__ = ["models", "schemas", "routers", "crud"]
