# app/domains/cyl/models.py

"""
'cyl' 도메인 (시료 용기 관리)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

cylinder_type, location 컬럼의 CHECK 제약조건은 허용값 조회기(app.core.allowed_values)가
pg_constraint 에서 다시 읽어 쓰기 경로 검증에 사용합니다.
"""

from typing import Optional
from datetime import datetime, UTC

from sqlalchemy import CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP
from sqlmodel import Field, SQLModel, Column


CYLINDER_TYPES = ("Gas", "Liquid")
CYLINDER_LOCATIONS = ("Clean Cylinder", "Checked Out", "Checked In")


def _in_check(column: str, values) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


# =============================================================================
# 1. cylinders 테이블 모델
# =============================================================================
class CylinderBase(SQLModel):
    cylinder_number: str = Field(max_length=100, sa_column_kwargs={"unique": True}, description="용기 번호")
    cylinder_type: str = Field(max_length=20, description="용기 유형 (Gas / Liquid)")
    track_inventory: bool = Field(default=True, description="재고 추적 여부")
    location: str = Field(max_length=50, description="현재 위치 (Clean Cylinder / Checked Out / Checked In)")
    active: bool = Field(default=True, description="활성 여부")


class Cylinder(CylinderBase, table=True):
    __tablename__ = "cylinders"
    __table_args__ = (
        CheckConstraint(_in_check("cylinder_type", CYLINDER_TYPES), name="cylinders_cylinder_type_check"),
        CheckConstraint(_in_check("location", CYLINDER_LOCATIONS), name="cylinders_location_check"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    created_by_id: Optional[int] = Field(default=None, description="생성자 사용자 ID")
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
    )


# =============================================================================
# 2. cylinder_checkout 테이블 모델
# =============================================================================
class CylinderCheckoutBase(SQLModel):
    cylinder_id: int = Field(foreign_key="cylinders.id", description="용기 ID (FK)")
    company_id: int = Field(foreign_key="companies.id", description="반출 대상 회사 ID (FK)")
    company_contact_id: int = Field(foreign_key="company_contacts.id", description="회사 담당자 ID (FK)")
    is_returned: bool = Field(default=False, description="반납 여부 - 용기당 미반납 건은 1건만 허용")
    returned_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(TIMESTAMP(timezone=True), nullable=True),
        description="반납 일시"
    )


class CylinderCheckout(CylinderCheckoutBase, table=True):
    __tablename__ = "cylinder_checkout"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_by_id: Optional[int] = Field(default=None, description="생성자 사용자 ID")
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="반출 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
    )
