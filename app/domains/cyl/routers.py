# app/domains/cyl/routers.py

"""
'cyl' 도메인 (시료 용기, 용기 반출, 용기 재고) API 엔드포인트.
"""

from datetime import datetime, UTC
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.core.allowed_values import AllowedValuesResolver
from app.core.security import Identity
from app.domains.corp import crud as corp_crud
from app.domains.usr import schemas as usr_schemas
from app.utils.dates import days_since
from . import schemas, crud


cylinders_router = APIRouter(
    tags=["Cylinders (시료 용기 관리)"],
    responses={404: {"description": "Not found"}},
)
cylinder_checkout_router = APIRouter(
    tags=["Cylinder Checkout (용기 반출 관리)"],
    responses={404: {"description": "Not found"}},
)
cylinder_inventory_router = APIRouter(tags=["Cylinder Inventory (용기 재고 현황)"])


# =============================================================================
# 1. 용기 (Cylinder)
# =============================================================================
@cylinders_router.get("", response_model=List[schemas.CylinderRead], summary="용기 목록 조회")
async def read_cylinders(session: AsyncSession = Depends(deps.get_db_session)):
    return await crud.cylinder.get_multi(session)


@cylinders_router.get("/{cylinder_id}", response_model=schemas.CylinderRead, summary="용기 조회")
async def read_cylinder(cylinder_id: int = Path(..., gt=0), session: AsyncSession = Depends(deps.get_db_session)):
    db_cylinder = await crud.cylinder.get(session, cylinder_id)
    if not db_cylinder:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cylinder not found")
    return db_cylinder


@cylinders_router.post("", response_model=schemas.CylinderRead, status_code=status.HTTP_201_CREATED, summary="용기 등록")
async def create_cylinder(
    cylinder_in: schemas.CylinderCreate,
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
    allowed: AllowedValuesResolver = Depends(deps.get_allowed_values),
):
    """
    cylinder_type 과 location 은 DB CHECK 제약의 허용값과 대소문자 무시로 비교하여
    정규화된 값으로 저장합니다. (예: 'gas' -> 'Gas')
    """
    if not cylinder_in.cylinder_number or not cylinder_in.cylinder_type or not cylinder_in.location:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="cylinder_number, cylinder_type and location are required",
        )
    cylinder_in.cylinder_type = await allowed.ensure_allowed(
        session, "cylinders", "cylinder_type", cylinder_in.cylinder_type
    )
    cylinder_in.location = await allowed.ensure_allowed(session, "cylinders", "location", cylinder_in.location)

    if await crud.cylinder.get_by_number(session, cylinder_number=cylinder_in.cylinder_number):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="cylinder_number must be unique")
    return await crud.cylinder.create(session, obj_in=cylinder_in, created_by_id=identity.user_id)


@cylinders_router.put("/{cylinder_id}", response_model=schemas.CylinderRead, summary="용기 수정")
async def update_cylinder(
    cylinder_in: schemas.CylinderUpdate,
    cylinder_id: int = Path(..., gt=0),
    session: AsyncSession = Depends(deps.get_db_session),
    allowed: AllowedValuesResolver = Depends(deps.get_allowed_values),
):
    db_cylinder = await crud.cylinder.get(session, cylinder_id)
    if not db_cylinder:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cylinder not found")

    if cylinder_in.cylinder_type is not None:
        cylinder_in.cylinder_type = await allowed.ensure_allowed(
            session, "cylinders", "cylinder_type", cylinder_in.cylinder_type
        )
    if cylinder_in.location is not None:
        cylinder_in.location = await allowed.ensure_allowed(session, "cylinders", "location", cylinder_in.location)
    if cylinder_in.cylinder_number and cylinder_in.cylinder_number != db_cylinder.cylinder_number:
        if await crud.cylinder.get_by_number(session, cylinder_number=cylinder_in.cylinder_number):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="cylinder_number must be unique")

    return await crud.cylinder.update(session, db_obj=db_cylinder, obj_in=cylinder_in)


@cylinders_router.delete("/{cylinder_id}", response_model=usr_schemas.Message, summary="용기 삭제")
async def delete_cylinder(cylinder_id: int = Path(..., gt=0), session: AsyncSession = Depends(deps.get_db_session)):
    if not await crud.cylinder.delete(session, id=cylinder_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cylinder not found")
    return {"message": "Cylinder deleted"}


# =============================================================================
# 2. 용기 반출 (CylinderCheckout)
# =============================================================================
async def _validate_contact(session: AsyncSession, company_contact_id: int, company_id: int) -> None:
    contact = await corp_crud.company_contact.get(session, company_contact_id)
    if not contact:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="company_contact_id does not exist")
    if contact.company_id != company_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="company_contact does not belong to company_id"
        )


@cylinder_checkout_router.get("/open", response_model=List[schemas.OpenCheckoutRead], summary="미반납 반출 목록")
async def read_open_checkouts(
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    return await crud.cylinder_checkout.get_open_with_details(session, company_id=identity.scoped_company_id())


@cylinder_checkout_router.get("", response_model=List[schemas.CylinderCheckoutRead], summary="반출 목록 조회")
async def read_checkouts(
    is_returned: Optional[bool] = Query(None, description="반납 여부 필터"),
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    return await crud.cylinder_checkout.get_multi(
        session, company_id=identity.scoped_company_id(), is_returned=is_returned
    )


@cylinder_checkout_router.get("/{checkout_id}", response_model=schemas.CylinderCheckoutRead, summary="반출 조회")
async def read_checkout(
    checkout_id: int = Path(..., gt=0),
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    db_checkout = await crud.cylinder_checkout.get(session, checkout_id)
    if not db_checkout:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Checkout not found")
    identity.ensure_company_access(db_checkout.company_id)
    return db_checkout


@cylinder_checkout_router.post(
    "", response_model=schemas.CylinderCheckoutRead, status_code=status.HTTP_201_CREATED, summary="용기 반출 등록"
)
async def create_checkout(
    checkout_in: schemas.CylinderCheckoutCreate,
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    """
    - 용기/회사/담당자가 존재해야 하며, 담당자는 해당 회사 소속이어야 합니다.
    - 용기당 미반납 반출 건은 1건만 허용됩니다.
    - 반납 상태로 생성하면서 returned_at 이 없으면 현재 시각으로 채웁니다.
    """
    if checkout_in.cylinder_id is None or checkout_in.company_contact_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="cylinder_id and company_contact_id are required"
        )
    company_id = identity.scoped_company_id(checkout_in.company_id)
    if company_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="company_id is required")

    if not await crud.cylinder.get(session, checkout_in.cylinder_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="cylinder_id does not exist")
    if not await corp_crud.company.get(session, company_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="company_id does not exist")
    await _validate_contact(session, checkout_in.company_contact_id, company_id)

    if checkout_in.is_returned:
        if checkout_in.returned_at is None:
            checkout_in.returned_at = datetime.now(UTC)
    elif await crud.cylinder_checkout.get_open_for_cylinder(session, cylinder_id=checkout_in.cylinder_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Open checkout already exists")

    checkout_in.company_id = company_id
    return await crud.cylinder_checkout.create(session, obj_in=checkout_in, created_by_id=identity.user_id)


@cylinder_checkout_router.put("/{checkout_id}", response_model=schemas.CylinderCheckoutRead, summary="반출 수정 (반납 처리)")
async def update_checkout(
    checkout_in: schemas.CylinderCheckoutUpdate,
    checkout_id: int = Path(..., gt=0),
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    db_checkout = await crud.cylinder_checkout.get(session, checkout_id)
    if not db_checkout:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Checkout not found")
    identity.ensure_company_access(db_checkout.company_id)

    changes = checkout_in.model_dump(exclude_unset=True)

    if changes.get("cylinder_id") is not None:
        if not await crud.cylinder.get(session, changes["cylinder_id"]):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="cylinder_id does not exist")

    if changes.get("company_id") is not None:
        if identity.is_customer and changes["company_id"] != identity.company_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden to change company")
        if not await corp_crud.company.get(session, changes["company_id"]):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="company_id does not exist")

    if changes.get("company_contact_id") is not None:
        await _validate_contact(
            session, changes["company_contact_id"], changes.get("company_id") or db_checkout.company_id
        )

    if changes.get("is_returned") and "returned_at" not in changes:
        changes["returned_at"] = datetime.now(UTC)

    return await crud.cylinder_checkout.update(session, db_obj=db_checkout, obj_in=changes)


@cylinder_checkout_router.delete("/{checkout_id}", response_model=usr_schemas.Message, summary="반출 삭제")
async def delete_checkout(
    checkout_id: int = Path(..., gt=0),
    session: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    db_checkout = await crud.cylinder_checkout.get(session, checkout_id)
    if not db_checkout:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Checkout not found")
    identity.ensure_company_access(db_checkout.company_id)
    await crud.cylinder_checkout.delete(session, id=checkout_id)
    return {"message": "Checkout deleted"}


# =============================================================================
# 3. 용기 재고 현황 (Inventory)
# =============================================================================
def status_from_location(location: Optional[str]) -> str:
    if location == "Clean Cylinder":
        return "Available"
    if location in ("Checked Out", "Checked In"):
        return "In Use"
    return "Unknown"


@cylinder_inventory_router.get("", response_model=List[schemas.CylinderInventoryRead], summary="용기 재고 현황")
async def read_cylinder_inventory(session: AsyncSession = Depends(deps.get_db_session)):
    """
    모든 용기를 미반납 반출 건과 함께 반환합니다.
    반출 중인 용기는 위치가 'Checked Out' 으로 표시되고, 반출 회사와 경과 일수가 채워집니다.
    """
    cylinders = await crud.cylinder.get_multi(session)
    open_checkouts = {co.cylinder_id: co for co in await crud.cylinder_checkout.get_open(session)}
    companies = {c.id: c for c in await corp_crud.company.get_multi(session)}

    inventory = []
    for cyl in cylinders:
        row = schemas.CylinderInventoryRead(
            id=cyl.id,
            cylinder_number=cyl.cylinder_number,
            cylinder_type=cyl.cylinder_type,
            location=cyl.location,
            status=status_from_location(cyl.location),
        )
        checkout = open_checkouts.get(cyl.id)
        if checkout:
            company = companies.get(checkout.company_id)
            row.location = "Checked Out"
            row.status = status_from_location(row.location)
            row.issued_to = company.name if company else ""
            row.email = (company.email or "") if company else ""
            row.since_days = days_since(checkout.created_at) or 0
        inventory.append(row)
    return inventory
