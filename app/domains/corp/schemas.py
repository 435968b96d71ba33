# app/domains/corp/schemas.py

from typing import Optional
from sqlmodel import SQLModel, Field


# =============================================================================
# 1. 회사 (Company) 스키마
# =============================================================================
class CompanyBase(SQLModel):
    """
    회사 정보의 기본 속성을 정의하는 Pydantic Base 스키마입니다.
    """
    code: str = Field(..., min_length=1, max_length=50, description="회사 코드")
    name: str = Field(..., min_length=1, max_length=255, description="회사명")
    phone: Optional[str] = Field(None, max_length=50, description="대표 전화")
    email: Optional[str] = Field(None, max_length=255, description="대표 이메일")
    billing_ref: Optional[str] = Field(None, max_length=100, description="청구 참조명")
    billing_ref_no: Optional[str] = Field(None, max_length=100, description="청구 참조번호")
    billing_address: Optional[str] = Field(None, description="청구지 주소")
    active: bool = True


class CompanyCreate(CompanyBase):
    pass


class CompanyRead(CompanyBase):
    id: int
    code: Optional[str] = None
    created_by_id: Optional[int] = None


class CompanyUpdate(SQLModel):
    """
    회사 정보를 업데이트하기 위한 Pydantic 모델입니다.
    모든 필드는 선택 사항입니다 (부분 업데이트 가능).
    """
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    billing_ref: Optional[str] = Field(None, max_length=100)
    billing_ref_no: Optional[str] = Field(None, max_length=100)
    billing_address: Optional[str] = None
    active: Optional[bool] = None


# =============================================================================
# 2. 회사 현장/지역 (CompanyArea) 스키마
# =============================================================================
class CompanyAreaCreate(SQLModel):
    """company_id 는 customer 요청 시 무시되고 자기 회사로 고정됩니다."""
    company_id: Optional[int] = Field(None, gt=0)
    area: str = Field(..., min_length=1, max_length=255)
    region: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    active: bool = True


class CompanyAreaUpdate(SQLModel):
    company_id: Optional[int] = Field(None, gt=0)
    area: Optional[str] = Field(None, min_length=1, max_length=255)
    region: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    active: Optional[bool] = None


class CompanyAreaRead(SQLModel):
    id: int
    company_id: int
    area: str
    region: Optional[str] = None
    description: Optional[str] = None
    active: bool
    created_by_id: Optional[int] = None


# =============================================================================
# 3. 회사 담당자 (CompanyContact) 스키마
# =============================================================================
class CompanyContactCreate(SQLModel):
    company_id: Optional[int] = Field(None, gt=0)
    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=1, max_length=255)
    active: bool = True


class CompanyContactUpdate(SQLModel):
    company_id: Optional[int] = Field(None, gt=0)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    active: Optional[bool] = None


class CompanyContactRead(SQLModel):
    id: int
    company_id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    active: bool
    created_by_id: Optional[int] = None
