# app/domains/cyl/__init__.py

"""
FastAPI 애플리케이션의 'cyl' 도메인 패키지입니다.

시료 용기(cylinder)의 등록, 고객사 반출(checkout)/반납, 재고 현황 조회를 담당합니다.
cylinder_type / location 은 DB CHECK 제약조건에서 읽어온 허용값으로 검증합니다.

주요 서브모듈:
- `models.py`: cylinders, cylinder_checkout 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 요청/응답 스키마.
- `crud.py`: 비동기 CRUD 및 반출 규칙(실린더당 미반납 반출 1건).
- `routers.py`: cylinders, cylinder_checkout, cylinder_inventory 엔드포인트.
"""

__all__ = []
