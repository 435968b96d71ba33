# app/domains/cyl/schemas.py

"""
'cyl' 도메인 (시료 용기, 용기 반출, 용기 재고)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from typing import Optional, Union
from datetime import datetime
from sqlmodel import SQLModel, Field


# =============================================================================
# 1. 용기 (Cylinder) 스키마
# =============================================================================
class CylinderCreate(SQLModel):
    """
    필수값 누락은 라우터에서 하나의 메시지로 보고합니다.
    cylinder_type / location 은 DB CHECK 제약의 허용값으로 정규화됩니다.
    """
    cylinder_number: Optional[str] = Field(None, max_length=100)
    cylinder_type: Optional[str] = Field(None, max_length=20)
    track_inventory: bool = True
    location: Optional[str] = Field(None, max_length=50)
    active: bool = True


class CylinderUpdate(SQLModel):
    cylinder_number: Optional[str] = Field(None, min_length=1, max_length=100)
    cylinder_type: Optional[str] = Field(None, max_length=20)
    track_inventory: Optional[bool] = None
    location: Optional[str] = Field(None, max_length=50)
    active: Optional[bool] = None


class CylinderRead(SQLModel):
    id: int
    cylinder_number: str
    cylinder_type: str
    track_inventory: bool
    location: str
    active: bool
    created_by_id: Optional[int] = None
    created_at: Optional[datetime] = None


# =============================================================================
# 2. 용기 반출 (CylinderCheckout) 스키마
# =============================================================================
class CylinderCheckoutCreate(SQLModel):
    cylinder_id: Optional[int] = Field(None, gt=0)
    company_id: Optional[int] = Field(None, gt=0)
    company_contact_id: Optional[int] = Field(None, gt=0)
    is_returned: bool = False
    returned_at: Optional[datetime] = None


class CylinderCheckoutUpdate(SQLModel):
    cylinder_id: Optional[int] = Field(None, gt=0)
    company_id: Optional[int] = Field(None, gt=0)
    company_contact_id: Optional[int] = Field(None, gt=0)
    is_returned: Optional[bool] = None
    returned_at: Optional[datetime] = None


class CylinderCheckoutRead(SQLModel):
    id: int
    cylinder_id: int
    company_id: int
    company_contact_id: int
    is_returned: bool
    returned_at: Optional[datetime] = None
    created_by_id: Optional[int] = None
    created_at: Optional[datetime] = None


class OpenCheckoutRead(SQLModel):
    """미반납 반출 건 (용기/회사/담당자 정보 포함)"""
    id: int
    cylinder_id: int
    cylinder_number: Optional[str] = None
    company_id: int
    company_name: Optional[str] = None
    company_contact_id: int
    contact_name: Optional[str] = None
    created_at: Optional[datetime] = None


# =============================================================================
# 3. 용기 재고 (Inventory) 스키마
# =============================================================================
class CylinderInventoryRead(SQLModel):
    """미반출 용기는 issued_to/email/since_days 가 빈 문자열입니다."""
    id: int
    cylinder_number: str
    cylinder_type: str
    location: str
    status: str
    issued_to: str = ""
    since_days: Union[int, str] = ""
    email: str = ""
