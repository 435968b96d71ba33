# app/domains/usr/schemas.py

"""
'usr' 도메인 (역할, 모듈, 권한 매핑, 사용자, 인증)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from typing import Any, List, Optional
from sqlmodel import SQLModel, Field
from pydantic import BaseModel, EmailStr, model_validator


# =============================================================================
# 1. 역할 (Role) 스키마
# =============================================================================
def _legacy_status_to_active(data: Any) -> Any:
    # 'status'(bool) 는 예전 클라이언트가 사용하던 'active' 의 별칭입니다.
    if isinstance(data, dict) and "active" not in data and isinstance(data.get("status"), bool):
        data = {**data, "active": data["status"]}
    return data


class RoleCreate(SQLModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = ""
    active: bool = True

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_status(cls, data: Any) -> Any:
        return _legacy_status_to_active(data)


class RoleUpdate(SQLModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    active: Optional[bool] = None

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_status(cls, data: Any) -> Any:
        return _legacy_status_to_active(data)


class RoleRead(SQLModel):
    id: int
    name: str
    description: Optional[str] = None
    active: bool


# =============================================================================
# 2. 모듈 (Module) 스키마
# =============================================================================
def _legacy_module_name(data: Any) -> Any:
    # 'module_name' 은 'name' 의 예전 이름이며, 함께 오면 module_name 이 우선합니다.
    if isinstance(data, dict) and data.get("module_name") is not None:
        data = {**data, "name": data["module_name"]}
    return data


class ModuleCreate(SQLModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    active: bool = True

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_module_name(cls, data: Any) -> Any:
        return _legacy_module_name(data)


class ModuleUpdate(SQLModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    active: Optional[bool] = None

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_module_name(cls, data: Any) -> Any:
        return _legacy_module_name(data)


class ModuleRead(SQLModel):
    id: int
    name: str
    description: Optional[str] = None
    active: bool


# =============================================================================
# 3. 역할-모듈 권한 매핑 (RoleModule) 스키마
# =============================================================================
class RoleModuleCreate(SQLModel):
    role_id: int = Field(..., gt=0)
    module_id: int = Field(..., gt=0)
    active: bool = True


class RoleModuleUpdate(SQLModel):
    role_id: Optional[int] = Field(None, gt=0)
    module_id: Optional[int] = Field(None, gt=0)
    active: Optional[bool] = None


class RoleModuleRead(SQLModel):
    id: int
    role_id: int
    module_id: int
    active: bool
    created_by_id: Optional[int] = None


class RoleModuleReadWithDetails(RoleModuleRead):
    """역할/모듈 정보를 함께 반환하는 스키마"""
    role: Optional[RoleRead] = None
    module: Optional[ModuleRead] = None


# =============================================================================
# 4. 사용자 (User) 스키마
# =============================================================================
class UserCreate(SQLModel):
    """사용자 생성을 위한 스키마"""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1)
    role_id: int = Field(..., gt=0)
    company_id: Optional[int] = Field(None, gt=0)
    active: bool = True


class UserUpdate(SQLModel):
    """사용자 정보 수정을 위한 스키마 (company_id 에 null 을 보내면 소속 해제)"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=1)
    role_id: Optional[int] = Field(None, gt=0)
    company_id: Optional[int] = Field(None, gt=0)
    active: Optional[bool] = None


class UserRead(SQLModel):
    """
    사용자 정보 조회를 위한 기본 스키마.
    비밀번호 해시값 등 민감한 정보는 제외됩니다.
    """
    id: int
    name: str
    email: str
    role_id: int
    company_id: Optional[int] = None
    active: bool
    created_by_id: Optional[int] = None


class PasswordChange(SQLModel):
    current_password: Optional[str] = None
    new_password: str = Field(..., min_length=1)


# =============================================================================
# 5. 인증 (Auth) 스키마
# =============================================================================
class LoginRequest(BaseModel):
    """로그인 요청. 누락 여부는 라우터에서 400 으로 처리합니다."""
    email: Optional[str] = None
    password: Optional[str] = None


class LoginPermission(RoleModuleRead):
    module: Optional[ModuleRead] = None


class LoginResponse(BaseModel):
    user: UserRead
    role: Optional[RoleRead] = None
    permissions: List[LoginPermission] = []
    token: str


class Message(BaseModel):
    message: str
