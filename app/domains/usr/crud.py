# app/domains/usr/crud.py

"""
'usr' 도메인의 CRUD 작업을 담당하는 모듈입니다.
권한 캐시(app.core.permissions)가 사용하는 저장소 조회 함수도 이곳에 정의됩니다.
"""

from typing import Any, List, Optional
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

# 공통 CRUDBase 및 usr 도메인의 구성요소 임포트
from app.core.crud_base import CRUDBase, commit_or_rollback
from app.core.security import get_password_hash, verify_password
from . import models as usr_models
from . import schemas as usr_schemas


# =============================================================================
# 1. roles 테이블 CRUD
# =============================================================================
class CRUDRole(CRUDBase[usr_models.Role, usr_schemas.RoleCreate, usr_schemas.RoleUpdate]):
    def __init__(self):
        super().__init__(model=usr_models.Role)

    async def get_by_name(self, db: AsyncSession, *, name: str) -> Optional[usr_models.Role]:
        return await self.get_by_attribute(db, attribute="name", value=name)


role = CRUDRole()


# =============================================================================
# 2. modules 테이블 CRUD
# =============================================================================
class CRUDModule(CRUDBase[usr_models.Module, usr_schemas.ModuleCreate, usr_schemas.ModuleUpdate]):
    def __init__(self):
        super().__init__(model=usr_models.Module)

    async def get_by_name(self, db: AsyncSession, *, name: str) -> Optional[usr_models.Module]:
        return await self.get_by_attribute(db, attribute="name", value=name)


module = CRUDModule()


# =============================================================================
# 3. role_modules 테이블 CRUD
# =============================================================================
class CRUDRoleModule(CRUDBase[usr_models.RoleModule, usr_schemas.RoleModuleCreate, usr_schemas.RoleModuleUpdate]):
    def __init__(self):
        super().__init__(model=usr_models.RoleModule)

    def _with_details(self):
        return select(self.model).options(
            selectinload(self.model.role), selectinload(self.model.module)
        )

    async def get_active_with_modules(self, db: AsyncSession) -> List[usr_models.RoleModule]:
        """권한 캐시 적재용: active 매핑 전체를 모듈과 함께 조회합니다."""
        statement = (
            select(self.model)
            .options(selectinload(self.model.module))
            .where(self.model.active == True)  # noqa: E712
        )
        result = await db.execute(statement)
        return result.scalars().all()

    async def get_active_for_role(self, db: AsyncSession, *, role_id: int) -> List[usr_models.RoleModule]:
        statement = (
            select(self.model)
            .options(selectinload(self.model.module))
            .where(self.model.role_id == role_id, self.model.active == True)  # noqa: E712
            .order_by(self.model.id)
        )
        result = await db.execute(statement)
        return result.scalars().all()

    async def get_with_details(self, db: AsyncSession, id: int) -> Optional[usr_models.RoleModule]:
        result = await db.execute(self._with_details().where(self.model.id == id))
        return result.scalars().first()

    async def get_multi_with_details(
        self, db: AsyncSession, *, role_id: Optional[int] = None, module_id: Optional[int] = None
    ) -> List[usr_models.RoleModule]:
        statement = self._with_details()
        if role_id:
            statement = statement.where(self.model.role_id == role_id)
        if module_id:
            statement = statement.where(self.model.module_id == module_id)
        result = await db.execute(statement.order_by(self.model.id))
        return result.scalars().all()


role_module = CRUDRoleModule()


# =============================================================================
# 4. users 테이블 CRUD
# =============================================================================
class CRUDUser(CRUDBase[usr_models.User, usr_schemas.UserCreate, usr_schemas.UserUpdate]):
    def __init__(self):
        super().__init__(model=usr_models.User)

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[usr_models.User]:
        """이메일로 사용자를 조회합니다."""
        return await self.get_by_attribute(db, attribute="email", value=email)

    async def get_with_role(self, db: AsyncSession, id: int) -> Optional[usr_models.User]:
        statement = (
            select(self.model)
            .options(selectinload(self.model.role))
            .where(self.model.id == id)
        )
        result = await db.execute(statement)
        return result.scalars().first()

    async def create(
        self, db: AsyncSession, *, obj_in: usr_schemas.UserCreate, **extra: Any
    ) -> usr_models.User:
        """새로운 사용자를 생성하며 비밀번호를 해싱합니다. (이메일 중복은 무결성 오류로 처리)"""
        user_data = obj_in.model_dump(exclude={"password"})
        user_data.update(extra)
        db_user = usr_models.User(**user_data, password_hash=get_password_hash(obj_in.password))

        db.add(db_user)
        await commit_or_rollback(db)
        await db.refresh(db_user)
        return db_user

    async def update(self, db: AsyncSession, *, db_obj: usr_models.User, obj_in: Any) -> usr_models.User:
        """password 가 포함되면 해싱하여 password_hash 로 저장합니다."""
        if isinstance(obj_in, usr_schemas.UserUpdate):
            update_data = obj_in.model_dump(exclude_unset=True)
        else:
            update_data = dict(obj_in)
        password = update_data.pop("password", None)
        if password is not None:
            update_data["password_hash"] = get_password_hash(password)
        return await super().update(db, db_obj=db_obj, obj_in=update_data)

    async def set_password(self, db: AsyncSession, *, db_obj: usr_models.User, new_password: str) -> usr_models.User:
        return await super().update(db, db_obj=db_obj, obj_in={"password_hash": get_password_hash(new_password)})

    async def authenticate(self, db: AsyncSession, *, email: str, password: str) -> Optional[usr_models.User]:
        """이메일과 비밀번호를 사용하여 사용자를 인증합니다."""
        db_user = await self.get_by_email(db, email=email)
        if not db_user:
            return None
        if not verify_password(password, db_user.password_hash):
            return None
        return db_user


user = CRUDUser()
