# app/domains/lims/__init__.py

"""
FastAPI 애플리케이션의 'lims' 도메인 패키지입니다.

'lims' 도메인은 실험실 접수 업무의 핵심 데이터를 관리합니다.
여기에는 분석 유형별 단가(AnalysisPricing), 시료 접수(SampleCheckin),
그리고 같은 작업지시 번호로 묶인 접수 건들의 비용 헤더(WorkorderHeader)가 포함됩니다.
작업지시 목록/상세 화면은 sample_checkin 에서 파생된 조회 결과입니다.

주요 서브모듈:
- `models.py`: analysis_pricing, sample_checkin, workorder_headers 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 요청/응답 스키마 및 작업지시 조회 결과 스키마.
- `crud.py`: 비동기 CRUD 및 작업지시 조회/상태 일괄 변경 로직.
- `routers.py`: analysis_pricing, sample_checkin, workorder_headers 엔드포인트.
"""

# 패키지 메타데이터
__title__ = "LIMS Sample Check-in Domain"
__description__ = "Manages analysis pricing, sample check-ins and work orders."
__version__ = "1.0.0"
__all__ = ["models", "schemas", "routers", "crud"]
