# app/domains/lims/schemas.py

"""
'lims' 도메인 (분석 단가, 시료 접수, 작업지시)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from typing import List, Optional
from datetime import datetime, date
from decimal import Decimal

from pydantic import BaseModel
from sqlmodel import SQLModel, Field


# =============================================================================
# 1. 분석 단가 (AnalysisPricing) 스키마
# =============================================================================
class AnalysisPricingBase(SQLModel):
    analysis_type: str = Field(..., min_length=1, max_length=255, description="분석 유형")
    description: Optional[str] = None
    standard_rate: Decimal = Field(..., ge=0, description="표준 단가")
    rushed_rate: Decimal = Field(..., ge=0, description="긴급 단가")
    sample_fee: Decimal = Field(..., ge=0, description="시료 수수료")
    active: bool = True


class AnalysisPricingCreate(AnalysisPricingBase):
    pass


class AnalysisPricingUpdate(SQLModel):
    analysis_type: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    standard_rate: Optional[Decimal] = Field(None, ge=0)
    rushed_rate: Optional[Decimal] = Field(None, ge=0)
    sample_fee: Optional[Decimal] = Field(None, ge=0)
    active: Optional[bool] = None


class AnalysisPricingRead(AnalysisPricingBase):
    id: int
    created_by_id: Optional[int] = None


# =============================================================================
# 2. 시료 접수 (SampleCheckin) 스키마
# =============================================================================
class SampleCheckinCreate(SQLModel):
    """
    시료 접수 생성 스키마.
    - customer 요청의 company_id 는 무시되고 자기 회사로 고정됩니다.
    - 고객 용기(customer_cylinder)는 cylinder_number 가, 실험실 용기는 cylinder_id 가 필요합니다.
    """
    company_id: Optional[int] = Field(None, gt=0)
    company_contact_id: int = Field(..., gt=0)
    analysis_type_id: int = Field(..., gt=0)
    area_id: Optional[int] = Field(None, gt=0)
    customer_cylinder: bool = False
    rushed: bool = False
    sampled_by_lab: bool = False
    cylinder_id: Optional[int] = Field(None, gt=0)
    cylinder_number: Optional[str] = Field(None, max_length=100)
    analysis_number: str = Field(..., min_length=1, max_length=100)
    producer: Optional[str] = None
    well_name: Optional[str] = None
    meter_number: Optional[str] = None
    sample_type: str = Field(..., min_length=1)
    flow_rate: Optional[str] = None
    pressure: Optional[str] = None
    pressure_unit: Optional[str] = None
    temperature: Optional[str] = None
    field_h2s: Optional[str] = None
    cost_code: Optional[str] = None
    checkin_type: str = Field(..., min_length=1)
    invoice_ref_name: Optional[str] = None
    invoice_ref_value: Optional[str] = None
    remarks: Optional[str] = None
    scanned_tag_image: Optional[str] = None
    work_order_number: Optional[str] = Field(None, max_length=100)
    status: str = Field(..., min_length=1, max_length=50)


class SampleCheckinUpdate(SQLModel):
    """부분 업데이트. area_id / cylinder_id 에 null 을 보내면 연결을 해제합니다."""
    company_id: Optional[int] = Field(None, gt=0)
    company_contact_id: Optional[int] = Field(None, gt=0)
    analysis_type_id: Optional[int] = Field(None, gt=0)
    area_id: Optional[int] = Field(None, gt=0)
    customer_cylinder: Optional[bool] = None
    rushed: Optional[bool] = None
    sampled_by_lab: Optional[bool] = None
    cylinder_id: Optional[int] = Field(None, gt=0)
    cylinder_number: Optional[str] = Field(None, max_length=100)
    analysis_number: Optional[str] = Field(None, min_length=1, max_length=100)
    producer: Optional[str] = None
    well_name: Optional[str] = None
    meter_number: Optional[str] = None
    sample_type: Optional[str] = None
    flow_rate: Optional[str] = None
    pressure: Optional[str] = None
    pressure_unit: Optional[str] = None
    temperature: Optional[str] = None
    field_h2s: Optional[str] = None
    cost_code: Optional[str] = None
    checkin_type: Optional[str] = None
    invoice_ref_name: Optional[str] = None
    invoice_ref_value: Optional[str] = None
    remarks: Optional[str] = None
    scanned_tag_image: Optional[str] = None
    work_order_number: Optional[str] = Field(None, max_length=100)
    status: Optional[str] = Field(None, min_length=1, max_length=50)


class SampleCheckinRead(SQLModel):
    id: int
    company_id: int
    company_contact_id: int
    analysis_type_id: int
    area_id: Optional[int] = None
    customer_cylinder: bool
    rushed: bool
    sampled_by_lab: bool
    cylinder_id: Optional[int] = None
    cylinder_number: Optional[str] = None
    analysis_number: str
    producer: Optional[str] = None
    well_name: Optional[str] = None
    meter_number: Optional[str] = None
    sample_type: str
    flow_rate: Optional[str] = None
    pressure: Optional[str] = None
    pressure_unit: Optional[str] = None
    temperature: Optional[str] = None
    field_h2s: Optional[str] = None
    cost_code: Optional[str] = None
    checkin_type: str
    invoice_ref_name: Optional[str] = None
    invoice_ref_value: Optional[str] = None
    remarks: Optional[str] = None
    scanned_tag_image: Optional[str] = None
    work_order_number: Optional[str] = None
    status: str
    standard_rate: Optional[Decimal] = None
    applied_rate: Optional[Decimal] = None
    sample_fee: Optional[Decimal] = None
    h2_pop_fee: Optional[Decimal] = None
    spot_composite_fee: Optional[Decimal] = None
    created_by_id: Optional[int] = None
    created_at: Optional[datetime] = None


# --- 작업지시 라인 수정 / 상태 일괄 변경 ---
class WorkOrderLineUpdate(SQLModel):
    analysis_type_id: Optional[int] = Field(None, gt=0)
    rushed: Optional[bool] = None
    standard_rate: Optional[Decimal] = None
    applied_rate: Optional[Decimal] = None
    sample_fee: Optional[Decimal] = None
    h2_pop_fee: Optional[Decimal] = None
    spot_composite_fee: Optional[Decimal] = None


class WorkOrderLineUpdateResult(BaseModel):
    message: str
    updated: SampleCheckinRead


class WorkOrderStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1)


class WorkOrderStatusUpdateResult(BaseModel):
    message: str
    count: int


# --- 작업지시 조회 (sample_checkin 에서 파생) ---
class WorkOrderSummary(BaseModel):
    id: int
    work_order_number: Optional[str] = None
    company: Optional[str] = None
    well_name: Optional[str] = None
    meter_number: Optional[str] = None
    date: Optional[datetime] = None
    pending_since: Optional[int] = None
    cylinders: int = 0
    amount: float = 0
    status: Optional[str] = None


class WorkOrderInfo(BaseModel):
    id: int
    work_order_number: Optional[str] = None
    company: Optional[str] = None
    date: Optional[datetime] = None
    status: Optional[str] = None
    mileage_fee: float = 0
    miscellaneous_charges: float = 0
    hourly_fee: float = 0


class WorkOrderLineItem(BaseModel):
    id: int
    cylinder_number: Optional[str] = None
    analysis_number: Optional[str] = None
    cc_number: Optional[str] = None
    rushed: bool = False
    well_name: Optional[str] = None
    meter_number: Optional[str] = None
    analysis_type_id: Optional[int] = None
    analysis_type: Optional[str] = None
    rate: float = 0
    standard_rate: float = 0
    applied_rate: float = 0
    sample_fee: float = 0
    h2_pop_fee: float = 0
    spot_composite_fee: float = 0
    amount: float = 0


class WorkOrderDetail(BaseModel):
    work_order: WorkOrderInfo
    line_items: List[WorkOrderLineItem] = []


# =============================================================================
# 3. 작업지시 헤더 (WorkorderHeader) 스키마
# =============================================================================
class WorkorderHeaderCreate(SQLModel):
    company_id: Optional[int] = Field(None, gt=0)
    work_order_date: Optional[date] = None
    work_order_number: str = Field(..., min_length=1, max_length=100)
    cylinders: Optional[int] = None
    status: Optional[str] = Field(None, max_length=50)
    mileage_fee: Optional[Decimal] = None
    miscellaneous_charges: Optional[Decimal] = None
    hourly_fee: Optional[Decimal] = None


class WorkorderHeaderUpdate(SQLModel):
    company_id: Optional[int] = Field(None, gt=0)
    work_order_date: Optional[date] = None
    work_order_number: Optional[str] = Field(None, min_length=1, max_length=100)
    cylinders: Optional[int] = None
    status: Optional[str] = Field(None, max_length=50)
    mileage_fee: Optional[Decimal] = None
    miscellaneous_charges: Optional[Decimal] = None
    hourly_fee: Optional[Decimal] = None


class WorkorderHeaderRead(WorkorderHeaderCreate):
    id: int
    created_by_id: Optional[int] = None
    created_at: Optional[datetime] = None


class WorkorderHeaderDeleted(BaseModel):
    message: str
    deleted: WorkorderHeaderRead
