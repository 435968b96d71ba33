# app/domains/corp/routers.py

"""
'corp' 도메인 (고객사, 고객사 현장, 고객사 담당자) API 엔드포인트.

customer 역할은 자기 회사의 레코드만 조회/수정할 수 있으며,
생성 시 company_id 는 항상 자기 회사로 고정됩니다.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.core.security import Identity
from app.domains.usr import schemas as usr_schemas
from . import schemas, crud


companies_router = APIRouter(
    tags=["Companies (고객사 관리)"],
    responses={404: {"description": "Not found"}},
)
company_areas_router = APIRouter(
    tags=["Company Areas (고객사 현장 관리)"],
    responses={404: {"description": "Not found"}},
)
company_contacts_router = APIRouter(
    tags=["Company Contacts (고객사 담당자 관리)"],
    responses={404: {"description": "Not found"}},
)


async def _resolve_company_id(db: AsyncSession, identity: Identity, requested: Optional[int]) -> int:
    """customer 는 자기 회사로 고정하고, 회사가 실제로 존재하는지 확인합니다."""
    company_id = identity.scoped_company_id(requested)
    if company_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="company_id is required")
    if not await crud.company.get(db, company_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="company_id does not exist")
    return company_id


async def _validate_company_change(db: AsyncSession, identity: Identity, new_company_id: Optional[int]) -> None:
    if new_company_id is None:
        return
    if identity.is_customer and new_company_id != identity.company_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden to change to another company")
    if not await crud.company.get(db, new_company_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="company_id does not exist")


# =============================================================================
# 1. 회사 (Company)
# =============================================================================
@companies_router.get("", response_model=List[schemas.CompanyRead], summary="회사 목록 조회")
async def read_companies(
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    """customer 는 자기 회사 한 건만 조회됩니다."""
    return await crud.company.get_multi(session, id=identity.scoped_company_id())


@companies_router.get("/{company_id}", response_model=schemas.CompanyRead, summary="회사 정보 조회")
async def read_company(
    company_id: int = Path(..., gt=0),
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    identity.ensure_company_access(company_id)
    db_company = await crud.company.get(session, company_id)
    if not db_company:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")
    return db_company


@companies_router.post("", response_model=schemas.CompanyRead, status_code=status.HTTP_201_CREATED, summary="회사 생성")
async def create_company(
    company_in: schemas.CompanyCreate,
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    if await crud.company.get_by_code(session, code=company_in.code) or await crud.company.get_by_name(
        session, name=company_in.name
    ):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="code or name must be unique")
    return await crud.company.create(session, obj_in=company_in, created_by_id=identity.user_id)


@companies_router.put("/{company_id}", response_model=schemas.CompanyRead, summary="회사 정보 수정")
async def update_company(
    company_in: schemas.CompanyUpdate,
    company_id: int = Path(..., gt=0),
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    """부분 업데이트를 지원합니다. 코드/이름 중복은 400 입니다."""
    identity.ensure_company_access(company_id)
    db_company = await crud.company.get(session, company_id)
    if not db_company:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")

    for attribute in ("code", "name"):
        value = getattr(company_in, attribute)
        if value is not None and value != getattr(db_company, attribute):
            existing = await crud.company.get_by_attribute(session, attribute=attribute, value=value)
            if existing and existing.id != company_id:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="code or name must be unique")

    return await crud.company.update(session, db_obj=db_company, obj_in=company_in)


@companies_router.delete("/{company_id}", response_model=usr_schemas.Message, summary="회사 삭제")
async def delete_company(
    company_id: int = Path(..., gt=0),
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    identity.ensure_company_access(company_id)
    if not await crud.company.delete(session, id=company_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")
    return {"message": "Company deleted"}


# =============================================================================
# 2. 회사 현장/지역 (CompanyArea)
# =============================================================================
@company_areas_router.get("", response_model=List[schemas.CompanyAreaRead], summary="현장 목록 조회")
async def read_company_areas(
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    return await crud.company_area.get_multi(session, company_id=identity.scoped_company_id())


@company_areas_router.get("/{area_id}", response_model=schemas.CompanyAreaRead, summary="현장 조회")
async def read_company_area(
    area_id: int = Path(..., gt=0),
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    db_area = await crud.company_area.get(session, area_id)
    if not db_area:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company area not found")
    identity.ensure_company_access(db_area.company_id)
    return db_area


@company_areas_router.post("", response_model=schemas.CompanyAreaRead, status_code=status.HTTP_201_CREATED, summary="현장 생성")
async def create_company_area(
    area_in: schemas.CompanyAreaCreate,
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    area_in.company_id = await _resolve_company_id(session, identity, area_in.company_id)
    if await crud.company_area.get_by_company_and_area(session, company_id=area_in.company_id, area=area_in.area):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Area already exists for this company")
    return await crud.company_area.create(session, obj_in=area_in, created_by_id=identity.user_id)


@company_areas_router.put("/{area_id}", response_model=schemas.CompanyAreaRead, summary="현장 수정")
async def update_company_area(
    area_in: schemas.CompanyAreaUpdate,
    area_id: int = Path(..., gt=0),
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    db_area = await crud.company_area.get(session, area_id)
    if not db_area:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company area not found")
    identity.ensure_company_access(db_area.company_id)
    await _validate_company_change(session, identity, area_in.company_id)

    target_company = area_in.company_id or db_area.company_id
    target_area = area_in.area or db_area.area
    existing = await crud.company_area.get_by_company_and_area(session, company_id=target_company, area=target_area)
    if existing and existing.id != area_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Area already exists for this company")

    return await crud.company_area.update(session, db_obj=db_area, obj_in=area_in)


@company_areas_router.delete("/{area_id}", response_model=usr_schemas.Message, summary="현장 삭제")
async def delete_company_area(
    area_id: int = Path(..., gt=0),
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    db_area = await crud.company_area.get(session, area_id)
    if not db_area:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company area not found")
    identity.ensure_company_access(db_area.company_id)
    await crud.company_area.delete(session, id=area_id)
    return {"message": "Company area deleted"}


# =============================================================================
# 3. 회사 담당자 (CompanyContact)
# =============================================================================
@company_contacts_router.get("", response_model=List[schemas.CompanyContactRead], summary="담당자 목록 조회")
async def read_company_contacts(
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    return await crud.company_contact.get_multi(session, company_id=identity.scoped_company_id())


@company_contacts_router.get("/{contact_id}", response_model=schemas.CompanyContactRead, summary="담당자 조회")
async def read_company_contact(
    contact_id: int = Path(..., gt=0),
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    db_contact = await crud.company_contact.get(session, contact_id)
    if not db_contact:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company contact not found")
    identity.ensure_company_access(db_contact.company_id)
    return db_contact


@company_contacts_router.post("", response_model=schemas.CompanyContactRead, status_code=status.HTTP_201_CREATED, summary="담당자 생성")
async def create_company_contact(
    contact_in: schemas.CompanyContactCreate,
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    contact_in.company_id = await _resolve_company_id(session, identity, contact_in.company_id)
    if await crud.company_contact.get_by_company_and_name(
        session, company_id=contact_in.company_id, name=contact_in.name
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Contact name already exists for this company"
        )
    return await crud.company_contact.create(session, obj_in=contact_in, created_by_id=identity.user_id)


@company_contacts_router.put("/{contact_id}", response_model=schemas.CompanyContactRead, summary="담당자 수정")
async def update_company_contact(
    contact_in: schemas.CompanyContactUpdate,
    contact_id: int = Path(..., gt=0),
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    db_contact = await crud.company_contact.get(session, contact_id)
    if not db_contact:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company contact not found")
    identity.ensure_company_access(db_contact.company_id)
    await _validate_company_change(session, identity, contact_in.company_id)

    target_company = contact_in.company_id or db_contact.company_id
    target_name = contact_in.name or db_contact.name
    existing = await crud.company_contact.get_by_company_and_name(session, company_id=target_company, name=target_name)
    if existing and existing.id != contact_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Contact name already exists for this company"
        )

    return await crud.company_contact.update(session, db_obj=db_contact, obj_in=contact_in)


@company_contacts_router.delete("/{contact_id}", response_model=usr_schemas.Message, summary="담당자 삭제")
async def delete_company_contact(
    contact_id: int = Path(..., gt=0),
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    db_contact = await crud.company_contact.get(session, contact_id)
    if not db_contact:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company contact not found")
    identity.ensure_company_access(db_contact.company_id)
    await crud.company_contact.delete(session, id=contact_id)
    return {"message": "Company contact deleted"}
