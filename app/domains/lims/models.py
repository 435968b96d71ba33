# app/domains/lims/models.py

"""
'lims' 도메인 (시료 접수 및 작업지시)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

- analysis_pricing: 분석 유형별 단가 (표준/긴급/시료 수수료)
- sample_checkin: 시료 접수 (작업지시 번호로 묶여 작업지시 라인이 됨)
- workorder_headers: 작업지시 헤더 (출장비/기타/시간당 비용)
"""

from typing import Optional
from datetime import datetime, date, UTC
from decimal import Decimal

from sqlalchemy import CheckConstraint, Numeric
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP
from sqlmodel import Field, SQLModel, Column


SAMPLE_TYPES = ("Spot", "Composite")
PRESSURE_UNITS = ("PSIG", "PSIA")
CHECKIN_TYPES = ("Cylinder", "Sample")


def _in_check(column: str, values) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


# =============================================================================
# 1. analysis_pricing 테이블 모델
# =============================================================================
class AnalysisPricingBase(SQLModel):
    analysis_type: str = Field(max_length=255, sa_column_kwargs={"unique": True}, description="분석 유형")
    description: Optional[str] = Field(default=None, description="설명")
    active: bool = Field(default=True, description="활성 여부")


class AnalysisPricing(AnalysisPricingBase, table=True):
    __tablename__ = "analysis_pricing"

    id: Optional[int] = Field(default=None, primary_key=True)
    standard_rate: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False), description="표준 단가")
    rushed_rate: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False), description="긴급 단가")
    sample_fee: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False), description="시료 수수료")
    created_by_id: Optional[int] = Field(default=None)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
    )


# =============================================================================
# 2. sample_checkin 테이블 모델
# =============================================================================
class SampleCheckinBase(SQLModel):
    company_id: int = Field(foreign_key="companies.id", description="회사 ID (FK)")
    company_contact_id: int = Field(foreign_key="company_contacts.id", description="회사 담당자 ID (FK)")
    analysis_type_id: int = Field(foreign_key="analysis_pricing.id", description="분석 유형 ID (FK)")
    area_id: Optional[int] = Field(default=None, foreign_key="company_areas.id", description="현장 ID (FK)")
    customer_cylinder: bool = Field(default=False, description="고객 소유 용기 여부")
    rushed: bool = Field(default=False, description="긴급 분석 여부")
    sampled_by_lab: bool = Field(default=False, description="실험실 채취 여부")
    cylinder_id: Optional[int] = Field(default=None, foreign_key="cylinders.id", description="실험실 용기 ID (FK)")
    cylinder_number: Optional[str] = Field(default=None, max_length=100, description="용기 번호")
    analysis_number: str = Field(max_length=100, sa_column_kwargs={"unique": True}, description="분석 번호")
    producer: Optional[str] = Field(default=None, max_length=255)
    well_name: Optional[str] = Field(default=None, max_length=255)
    meter_number: Optional[str] = Field(default=None, max_length=100)
    sample_type: str = Field(max_length=20, description="시료 유형 (Spot / Composite)")
    flow_rate: Optional[str] = Field(default=None, max_length=100)
    pressure: Optional[str] = Field(default=None, max_length=100)
    pressure_unit: Optional[str] = Field(default=None, max_length=10, description="압력 단위 (PSIG / PSIA)")
    temperature: Optional[str] = Field(default=None, max_length=100)
    field_h2s: Optional[str] = Field(default=None, max_length=100)
    cost_code: Optional[str] = Field(default=None, max_length=100)
    checkin_type: str = Field(max_length=20, description="접수 유형 (Cylinder / Sample)")
    invoice_ref_name: Optional[str] = Field(default=None, max_length=255)
    invoice_ref_value: Optional[str] = Field(default=None, max_length=255)
    remarks: Optional[str] = Field(default=None)
    scanned_tag_image: Optional[str] = Field(default=None)
    work_order_number: Optional[str] = Field(default=None, max_length=100, index=True, description="작업지시 번호")
    status: str = Field(max_length=50, description="진행 상태 (예: pending)")


class SampleCheckin(SampleCheckinBase, table=True):
    __tablename__ = "sample_checkin"
    __table_args__ = (
        CheckConstraint(_in_check("sample_type", SAMPLE_TYPES), name="sample_checkin_sample_type_check"),
        CheckConstraint(_in_check("pressure_unit", PRESSURE_UNITS), name="sample_checkin_pressure_unit_check"),
        CheckConstraint(_in_check("checkin_type", CHECKIN_TYPES), name="sample_checkin_checkin_type_check"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    standard_rate: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(12, 2)), description="적용 표준 단가")
    applied_rate: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(12, 2)), description="적용 단가")
    sample_fee: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(12, 2)))
    h2_pop_fee: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(12, 2)))
    spot_composite_fee: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(12, 2)))
    created_by_id: Optional[int] = Field(default=None, description="접수자 사용자 ID")
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="접수 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
    )


# =============================================================================
# 3. workorder_headers 테이블 모델
# =============================================================================
class WorkorderHeaderBase(SQLModel):
    company_id: Optional[int] = Field(default=None, foreign_key="companies.id", description="회사 ID (FK)")
    work_order_date: Optional[date] = Field(default=None, description="작업지시 일자")
    work_order_number: str = Field(max_length=100, sa_column_kwargs={"unique": True}, description="작업지시 번호")
    cylinders: Optional[int] = Field(default=None, description="용기 수")
    status: Optional[str] = Field(default=None, max_length=50)


class WorkorderHeader(WorkorderHeaderBase, table=True):
    __tablename__ = "workorder_headers"

    id: Optional[int] = Field(default=None, primary_key=True)
    mileage_fee: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(12, 2)), description="출장비")
    miscellaneous_charges: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(12, 2)), description="기타 비용")
    hourly_fee: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(12, 2)), description="시간당 비용")
    created_by_id: Optional[int] = Field(default=None)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
    )
