# app/domains/usr/routers.py

"""
'usr' 도메인 (인증, 역할, 모듈, 역할-모듈 권한, 사용자)과 관련된 API 엔드포인트를 정의하는 모듈입니다.

엔티티별 라우터는 main.py 에서 인증 → authorize(<모듈명>) 게이트와 함께 등록됩니다.
역할/권한 매핑의 변경(생성·수정·삭제)은 추가로 admin_only() 를 요구합니다.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.core.authorization import admin_only
from app.core.permissions import PermissionCache, role_label
from app.core.security import Identity, create_access_token, verify_password
from app.domains.corp import crud as corp_crud

# usr 도메인의 CRUD, 모델, 스키마
from . import crud as usr_crud
from . import models as usr_models
from . import schemas as usr_schemas


auth_router = APIRouter(tags=["Auth (인증)"])
roles_router = APIRouter(tags=["Roles (역할 관리)"], responses={404: {"description": "Not found"}})
modules_router = APIRouter(tags=["Modules (모듈 관리)"], responses={404: {"description": "Not found"}})
role_modules_router = APIRouter(tags=["Role Modules (역할별 모듈 권한)"], responses={404: {"description": "Not found"}})
users_router = APIRouter(tags=["Users (사용자 관리)"], responses={404: {"description": "Not found"}})


# =============================================================================
# 1. 인증 (Authentication) 엔드포인트
# =============================================================================
@auth_router.post("/login", response_model=usr_schemas.LoginResponse, summary="로그인 (JWT 발급)")
async def login(
    credentials: usr_schemas.LoginRequest,
    db: AsyncSession = Depends(deps.get_db_session),
):
    """
    이메일/비밀번호를 검증하고 사용자, 역할, 활성 모듈 권한, 토큰을 반환합니다.
    토큰에는 사용자 ID(sub), role_id, company_id 가 담기지만,
    인증 단계는 매 요청마다 최신 사용자 레코드를 다시 읽습니다.
    """
    if not credentials.email or not credentials.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="email and password are required")

    db_user = await usr_crud.user.authenticate(db, email=credentials.email, password=credentials.password)
    if not db_user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not db_user.active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")

    db_role = await usr_crud.role.get(db, db_user.role_id)
    permissions = await usr_crud.role_module.get_active_for_role(db, role_id=db_user.role_id)
    token = create_access_token(
        data={"sub": str(db_user.id), "role_id": db_user.role_id, "company_id": db_user.company_id}
    )
    return usr_schemas.LoginResponse(
        user=usr_schemas.UserRead.model_validate(db_user),
        role=usr_schemas.RoleRead.model_validate(db_role) if db_role else None,
        permissions=[usr_schemas.LoginPermission.model_validate(p) for p in permissions],
        token=token,
    )


@auth_router.get("/me", response_model=usr_schemas.UserRead, summary="현재 사용자 정보 조회")
async def read_users_me(
    identity: Identity = Depends(deps.get_current_identity),
    db: AsyncSession = Depends(deps.get_db_session),
):
    db_user = await usr_crud.user.get(db, identity.user_id)
    if not db_user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return db_user


# =============================================================================
# 2. 역할 (Role) 관리 엔드포인트
# =============================================================================
@roles_router.get("", response_model=List[usr_schemas.RoleRead], summary="모든 역할 조회")
async def read_roles(db: AsyncSession = Depends(deps.get_db_session)):
    return await usr_crud.role.get_multi(db)


@roles_router.get("/{role_id}", response_model=usr_schemas.RoleRead, summary="특정 역할 조회")
async def read_role(role_id: int = Path(..., gt=0), db: AsyncSession = Depends(deps.get_db_session)):
    db_role = await usr_crud.role.get(db, role_id)
    if not db_role:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Role not found")
    return db_role


@roles_router.post(
    "", response_model=usr_schemas.RoleRead, status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(admin_only())], summary="새 역할 생성 (관리자)",
)
async def create_role(
    role_in: usr_schemas.RoleCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    if await usr_crud.role.get_by_name(db, name=role_in.name):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name must be unique")
    return await usr_crud.role.create(db, obj_in=role_in, created_by_id=identity.user_id)


@roles_router.put(
    "/{role_id}", response_model=usr_schemas.RoleRead,
    dependencies=[Depends(admin_only())], summary="역할 수정 (관리자)",
)
async def update_role(
    role_in: usr_schemas.RoleUpdate,
    role_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(deps.get_db_session),
):
    db_role = await usr_crud.role.get(db, role_id)
    if not db_role:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Role not found")
    if role_in.name and role_in.name != db_role.name:
        if await usr_crud.role.get_by_name(db, name=role_in.name):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name must be unique")
    return await usr_crud.role.update(db, db_obj=db_role, obj_in=role_in)


@roles_router.delete(
    "/{role_id}", response_model=usr_schemas.Message,
    dependencies=[Depends(admin_only())], summary="역할 삭제 (관리자)",
)
async def delete_role(role_id: int = Path(..., gt=0), db: AsyncSession = Depends(deps.get_db_session)):
    if not await usr_crud.role.delete(db, id=role_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Role not found")
    return {"message": "Role deleted"}


# =============================================================================
# 3. 모듈 (Module) 관리 엔드포인트
# =============================================================================
@modules_router.get("", response_model=List[usr_schemas.ModuleRead], summary="모든 모듈 조회")
async def read_modules(db: AsyncSession = Depends(deps.get_db_session)):
    return await usr_crud.module.get_multi(db)


@modules_router.get("/{module_id}", response_model=usr_schemas.ModuleRead, summary="특정 모듈 조회")
async def read_module(module_id: int = Path(..., gt=0), db: AsyncSession = Depends(deps.get_db_session)):
    db_module = await usr_crud.module.get(db, module_id)
    if not db_module:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Module not found")
    return db_module


@modules_router.post("", response_model=usr_schemas.ModuleRead, status_code=status.HTTP_201_CREATED, summary="새 모듈 생성")
async def create_module(
    module_in: usr_schemas.ModuleCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    if await usr_crud.module.get_by_name(db, name=module_in.name):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name must be unique")
    return await usr_crud.module.create(db, obj_in=module_in, created_by_id=identity.user_id)


@modules_router.put("/{module_id}", response_model=usr_schemas.ModuleRead, summary="모듈 수정")
async def update_module(
    module_in: usr_schemas.ModuleUpdate,
    module_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(deps.get_db_session),
):
    db_module = await usr_crud.module.get(db, module_id)
    if not db_module:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Module not found")
    if module_in.name and module_in.name != db_module.name:
        if await usr_crud.module.get_by_name(db, name=module_in.name):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name must be unique")
    return await usr_crud.module.update(db, db_obj=db_module, obj_in=module_in)


@modules_router.delete("/{module_id}", response_model=usr_schemas.Message, summary="모듈 삭제")
async def delete_module(module_id: int = Path(..., gt=0), db: AsyncSession = Depends(deps.get_db_session)):
    if not await usr_crud.module.delete(db, id=module_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Module not found")
    return {"message": "Module deleted"}


# =============================================================================
# 4. 역할-모듈 권한 (RoleModule) 엔드포인트
#    변경 후에는 항상 권한 캐시를 비워 다음 요청부터 새 매핑이 반영되도록 합니다.
# =============================================================================
async def _validate_role_module_refs(db: AsyncSession, role_id: Optional[int], module_id: Optional[int]) -> None:
    if role_id is not None and not await usr_crud.role.get(db, role_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="role_id does not refer to an existing role")
    if module_id is not None and not await usr_crud.module.get(db, module_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="module_id does not refer to an existing module")


@role_modules_router.get("", response_model=List[usr_schemas.RoleModuleReadWithDetails], summary="역할-모듈 권한 목록")
async def read_role_modules(
    role_id: Optional[int] = Query(None),
    module_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(deps.get_db_session),
):
    return await usr_crud.role_module.get_multi_with_details(db, role_id=role_id, module_id=module_id)


@role_modules_router.get("/{role_module_id}", response_model=usr_schemas.RoleModuleReadWithDetails, summary="역할-모듈 권한 조회")
async def read_role_module(role_module_id: int = Path(..., gt=0), db: AsyncSession = Depends(deps.get_db_session)):
    item = await usr_crud.role_module.get_with_details(db, role_module_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return item


@role_modules_router.post(
    "", response_model=usr_schemas.RoleModuleReadWithDetails, status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(admin_only())], summary="역할-모듈 권한 생성 (관리자)",
)
async def create_role_module(
    role_module_in: usr_schemas.RoleModuleCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
    permission_cache: PermissionCache = Depends(deps.get_permission_cache),
):
    await _validate_role_module_refs(db, role_module_in.role_id, role_module_in.module_id)
    created = await usr_crud.role_module.create(db, obj_in=role_module_in, created_by_id=identity.user_id)
    permission_cache.clear()
    return await usr_crud.role_module.get_with_details(db, created.id)


@role_modules_router.put(
    "/{role_module_id}", response_model=usr_schemas.RoleModuleReadWithDetails,
    dependencies=[Depends(admin_only())], summary="역할-모듈 권한 수정 (관리자)",
)
async def update_role_module(
    role_module_in: usr_schemas.RoleModuleUpdate,
    role_module_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(deps.get_db_session),
    permission_cache: PermissionCache = Depends(deps.get_permission_cache),
):
    db_obj = await usr_crud.role_module.get(db, role_module_id)
    if not db_obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    await _validate_role_module_refs(db, role_module_in.role_id, role_module_in.module_id)
    await usr_crud.role_module.update(db, db_obj=db_obj, obj_in=role_module_in)
    permission_cache.clear()
    return await usr_crud.role_module.get_with_details(db, role_module_id)


@role_modules_router.delete(
    "/{role_module_id}", response_model=usr_schemas.Message,
    dependencies=[Depends(admin_only())], summary="역할-모듈 권한 삭제 (관리자)",
)
async def delete_role_module(
    role_module_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(deps.get_db_session),
    permission_cache: PermissionCache = Depends(deps.get_permission_cache),
):
    if not await usr_crud.role_module.delete(db, id=role_module_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    permission_cache.clear()
    return {"message": "Deleted"}


# =============================================================================
# 5. 사용자 (User) 관리 엔드포인트
# =============================================================================
def _is_admin_user(db_user: usr_models.User) -> bool:
    return role_label(db_user.role) == "admin"


async def _validate_company(db: AsyncSession, company_id: Optional[int]) -> None:
    if company_id is not None and not await corp_crud.company.get(db, company_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="company_id does not exist")


@users_router.get("", response_model=List[usr_schemas.UserRead], summary="사용자 목록 조회")
async def read_users(
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    """customer 역할은 자기 회사 사용자만 조회합니다."""
    return await usr_crud.user.get_multi(db, company_id=identity.scoped_company_id())


@users_router.get("/{user_id}", response_model=usr_schemas.UserRead, summary="특정 사용자 조회")
async def read_user(
    user_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    db_user = await usr_crud.user.get(db, user_id)
    if not db_user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    identity.ensure_company_access(db_user.company_id)
    return db_user


@users_router.post("", response_model=usr_schemas.UserRead, status_code=status.HTTP_201_CREATED, summary="새 사용자 생성")
async def create_user(
    user_in: usr_schemas.UserCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    """customer 가 생성하는 사용자는 항상 customer 의 회사로 고정됩니다."""
    if not await usr_crud.role.get(db, user_in.role_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="role_id does not exist")
    user_in.company_id = identity.scoped_company_id(user_in.company_id)
    await _validate_company(db, user_in.company_id)
    if await usr_crud.user.get_by_email(db, email=user_in.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")
    return await usr_crud.user.create(db, obj_in=user_in, created_by_id=identity.user_id)


@users_router.put("/{user_id}", response_model=usr_schemas.UserRead, summary="사용자 수정")
async def update_user(
    user_in: usr_schemas.UserUpdate,
    user_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    """
    - 관리자 계정의 이름/역할/회사는 관리자만 변경할 수 있습니다.
    - 관리자 계정의 비밀번호는 이 엔드포인트로 아무도 변경할 수 없습니다.
    - customer 는 사용자의 회사를 다른 회사로 옮길 수 없습니다.
    """
    db_user = await usr_crud.user.get_with_role(db, user_id)
    if not db_user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    identity.ensure_company_access(db_user.company_id)

    changes = user_in.model_dump(exclude_unset=True)
    if changes.get("role_id") is not None and not await usr_crud.role.get(db, changes["role_id"]):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="role_id does not exist")

    if _is_admin_user(db_user):
        if not identity.is_admin_label:
            sensitive = (
                ("name" in changes and changes["name"] != db_user.name)
                or ("role_id" in changes and changes["role_id"] != db_user.role_id)
                or ("company_id" in changes and changes["company_id"] != db_user.company_id)
            )
            if sensitive:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Modifying admin user's name, role or company_id is not allowed",
                )
        if "password" in changes:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Modifying admin user's password via this endpoint is not allowed",
            )

    if identity.is_customer and "company_id" in changes and changes["company_id"] != identity.company_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden to change company")

    if changes.get("company_id") is not None:
        await _validate_company(db, changes["company_id"])
    if changes.get("email") and changes["email"] != db_user.email:
        if await usr_crud.user.get_by_email(db, email=changes["email"]):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    return await usr_crud.user.update(db, db_obj=db_user, obj_in=user_in)


@users_router.post("/{user_id}/change-password", response_model=usr_schemas.Message, summary="비밀번호 변경")
async def change_password(
    password_in: usr_schemas.PasswordChange,
    user_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    """
    본인 비밀번호 변경은 current_password 를 요구합니다.
    다른 사용자의 비밀번호는 관리자만, 그리고 관리자가 아닌 대상에 대해서만 변경할 수 있습니다.
    """
    db_user = await usr_crud.user.get_with_role(db, user_id)
    if not db_user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    identity.ensure_company_access(db_user.company_id)

    if identity.user_id == db_user.id:
        if not password_in.current_password:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="current_password is required")
        if not verify_password(password_in.current_password, db_user.password_hash):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Current password is incorrect")
    else:
        if not identity.is_admin_label:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        if _is_admin_user(db_user):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Changing another admin user's password is not allowed",
            )

    await usr_crud.user.set_password(db, db_obj=db_user, new_password=password_in.new_password)
    return {"message": "Password changed"}


@users_router.delete("/{user_id}", summary="사용자 삭제")
async def delete_user(
    user_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    """루트 관리자(관리자 역할 + 이름 'admin') 계정은 삭제할 수 없습니다."""
    db_user = await usr_crud.user.get_with_role(db, user_id)
    if not db_user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    identity.ensure_company_access(db_user.company_id)

    if _is_admin_user(db_user) and (db_user.name or "").strip().lower() == "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Deleting admin user is not allowed")

    deleted = usr_schemas.UserRead.model_validate(db_user)
    await usr_crud.user.delete(db, id=user_id)
    return {"message": "User deleted", "user": deleted}
