# app/domains/corp/models.py

"""
'corp' 도메인 (고객사 관리)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

companies, company_areas(고객사 현장/지역), company_contacts(고객사 담당자) 테이블을 포함합니다.
"""

from typing import Optional
from datetime import datetime, UTC

from sqlalchemy import UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP
from sqlmodel import Field, SQLModel, Column


# =============================================================================
# 1. companies 테이블 모델
# =============================================================================
class CompanyBase(SQLModel):
    code: Optional[str] = Field(default=None, max_length=50, sa_column_kwargs={"unique": True}, description="회사 코드")
    name: str = Field(max_length=255, sa_column_kwargs={"unique": True}, description="회사명")
    phone: Optional[str] = Field(default=None, max_length=50, description="대표 전화")
    email: Optional[str] = Field(default=None, max_length=255, description="대표 이메일")
    billing_ref: Optional[str] = Field(default=None, max_length=100, description="청구 참조명")
    billing_ref_no: Optional[str] = Field(default=None, max_length=100, description="청구 참조번호")
    billing_address: Optional[str] = Field(default=None, description="청구지 주소")
    active: bool = Field(default=True, description="활성 여부")


class Company(CompanyBase, table=True):
    __tablename__ = "companies"

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
# 2. company_areas 테이블 모델
# =============================================================================
class CompanyAreaBase(SQLModel):
    company_id: int = Field(foreign_key="companies.id", description="회사 ID (FK)")
    area: str = Field(max_length=255, description="현장/지역명 (회사 내 고유)")
    region: Optional[str] = Field(default=None, max_length=255, description="권역")
    description: Optional[str] = Field(default=None, description="설명")
    active: bool = Field(default=True, description="활성 여부")


class CompanyArea(CompanyAreaBase, table=True):
    __tablename__ = "company_areas"
    __table_args__ = (UniqueConstraint("company_id", "area"),)

    id: Optional[int] = Field(default=None, primary_key=True)
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
# 3. company_contacts 테이블 모델
# =============================================================================
class CompanyContactBase(SQLModel):
    company_id: int = Field(foreign_key="companies.id", description="회사 ID (FK)")
    name: str = Field(max_length=255, description="담당자명 (회사 내 고유)")
    phone: Optional[str] = Field(default=None, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    active: bool = Field(default=True, description="활성 여부")


class CompanyContact(CompanyContactBase, table=True):
    __tablename__ = "company_contacts"
    __table_args__ = (UniqueConstraint("company_id", "name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    created_by_id: Optional[int] = Field(default=None)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
    )
