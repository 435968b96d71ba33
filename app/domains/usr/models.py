# app/domains/usr/models.py

"""
'usr' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

이 모듈은 역할(roles), 모듈(modules), 역할-모듈 권한 매핑(role_modules), 사용자(users)
테이블에 대한 SQLModel 클래스를 포함합니다.
role_modules 의 active 행이 요청 단위 권한 검사(app.core.authorization)의 근거가 됩니다.
"""

from typing import Optional, List
from datetime import datetime, UTC
from sqlmodel import Field, Relationship, SQLModel, Column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


# =============================================================================
# 1. roles 테이블 모델
# =============================================================================
class RoleBase(SQLModel):
    """
    roles 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    name: str = Field(max_length=100, sa_column_kwargs={"unique": True}, description="역할명 (예: Admin, Employee, Customer)")
    description: Optional[str] = Field(default=None, description="설명")
    active: bool = Field(default=True, description="활성 여부")


class Role(RoleBase, table=True):
    """
    roles 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "roles"

    id: Optional[int] = Field(default=None, primary_key=True, description="역할 고유 ID")
    created_by_id: Optional[int] = Field(default=None, description="생성자 사용자 ID")
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )

    users: List["User"] = Relationship(back_populates="role")
    role_modules: List["RoleModule"] = Relationship(back_populates="role")


# =============================================================================
# 2. modules 테이블 모델
# =============================================================================
class ModuleBase(SQLModel):
    name: str = Field(max_length=100, sa_column_kwargs={"unique": True}, description="모듈명 (권한 검사 식별자)")
    description: Optional[str] = Field(default=None, description="설명")
    active: bool = Field(default=True, description="활성 여부")


class Module(ModuleBase, table=True):
    __tablename__ = "modules"

    id: Optional[int] = Field(default=None, primary_key=True, description="모듈 고유 ID")
    created_by_id: Optional[int] = Field(default=None, description="생성자 사용자 ID")
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
    )

    role_modules: List["RoleModule"] = Relationship(back_populates="module")


# =============================================================================
# 3. role_modules 테이블 모델 (역할 ↔ 모듈 권한 매핑)
# =============================================================================
class RoleModuleBase(SQLModel):
    role_id: int = Field(foreign_key="roles.id", description="역할 ID (FK)")
    module_id: int = Field(foreign_key="modules.id", description="모듈 ID (FK)")
    active: bool = Field(default=True, description="활성 여부 - 비활성 매핑은 권한 캐시에 적재되지 않음")


class RoleModule(RoleModuleBase, table=True):
    __tablename__ = "role_modules"

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

    role: Optional[Role] = Relationship(back_populates="role_modules")
    module: Optional[Module] = Relationship(back_populates="role_modules")


# =============================================================================
# 4. users 테이블 모델
# =============================================================================
class UserBase(SQLModel):
    """
    users 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    name: str = Field(max_length=100, description="사용자 이름 (루트 관리자는 'admin')")
    email: str = Field(max_length=100, sa_column_kwargs={"unique": True}, description="로그인 이메일")
    role_id: int = Field(foreign_key="roles.id", description="역할 ID (FK)")
    company_id: Optional[int] = Field(default=None, foreign_key="companies.id", description="소속 회사 ID (FK)")
    active: bool = Field(default=True, description="계정 활성 여부")


class User(UserBase, table=True):
    """
    users 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True, description="사용자 고유 ID")
    password_hash: str = Field(max_length=255, description="해싱된 비밀번호")
    created_by_id: Optional[int] = Field(default=None, description="생성자 사용자 ID")
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )

    role: Optional[Role] = Relationship(back_populates="users")
