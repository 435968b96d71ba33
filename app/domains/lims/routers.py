# app/domains/lims/routers.py

"""
'lims' 도메인 (분석 단가, 시료 접수, 작업지시) API 엔드포인트.

sample_checkin 라우터의 고정 경로(/workorders, /update_wo_lines, /update_status_by_wo)는
경로 매개변수 라우트(/{checkin_id})보다 먼저 선언되어야 합니다.
"""

from collections import Counter
from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.core.allowed_values import AllowedValuesResolver
from app.core.security import Identity
from app.domains.corp import crud as corp_crud
from app.domains.cyl import crud as cyl_crud
from app.domains.usr import schemas as usr_schemas
from app.utils.dates import days_since
from . import crud as lims_crud
from . import schemas as lims_schemas


analysis_pricing_router = APIRouter(
    tags=["Analysis Pricing (분석 단가 관리)"],
    responses={404: {"description": "Not found"}},
)
sample_checkin_router = APIRouter(
    tags=["Sample Check-in (시료 접수 및 작업지시)"],
    responses={404: {"description": "Not found"}},
)
workorder_headers_router = APIRouter(
    tags=["Work Order Headers (작업지시 헤더)"],
    responses={404: {"description": "Not found"}},
)

SAMPLE_CHECKIN_TABLE = "sample_checkin"
NOT_NULL_CHECKIN_COLUMNS = (
    "company_id", "company_contact_id", "analysis_type_id", "customer_cylinder", "rushed", "sampled_by_lab",
    "analysis_number", "sample_type", "checkin_type", "status",
)


def _to_number(value: Optional[Decimal]) -> float:
    return float(value) if value is not None else 0.0


# =============================================================================
# 1. 분석 단가 (AnalysisPricing)
# =============================================================================
@analysis_pricing_router.get("", response_model=List[lims_schemas.AnalysisPricingRead], summary="분석 단가 목록")
async def read_analysis_pricing_list(db: AsyncSession = Depends(deps.get_db_session)):
    return await lims_crud.analysis_pricing.get_multi(db)


@analysis_pricing_router.get("/{pricing_id}", response_model=lims_schemas.AnalysisPricingRead, summary="분석 단가 조회")
async def read_analysis_pricing(pricing_id: int = Path(..., gt=0), db: AsyncSession = Depends(deps.get_db_session)):
    db_obj = await lims_crud.analysis_pricing.get(db, pricing_id)
    if not db_obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis pricing not found")
    return db_obj


@analysis_pricing_router.post(
    "", response_model=lims_schemas.AnalysisPricingRead, status_code=status.HTTP_201_CREATED, summary="분석 단가 생성"
)
async def create_analysis_pricing(
    pricing_in: lims_schemas.AnalysisPricingCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    if await lims_crud.analysis_pricing.get_by_analysis_type(db, analysis_type=pricing_in.analysis_type):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="analysis_type must be unique")
    return await lims_crud.analysis_pricing.create(db, obj_in=pricing_in, created_by_id=identity.user_id)


@analysis_pricing_router.put("/{pricing_id}", response_model=lims_schemas.AnalysisPricingRead, summary="분석 단가 수정")
async def update_analysis_pricing(
    pricing_in: lims_schemas.AnalysisPricingUpdate,
    pricing_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(deps.get_db_session),
):
    db_obj = await lims_crud.analysis_pricing.get(db, pricing_id)
    if not db_obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis pricing not found")
    if pricing_in.analysis_type and pricing_in.analysis_type != db_obj.analysis_type:
        if await lims_crud.analysis_pricing.get_by_analysis_type(db, analysis_type=pricing_in.analysis_type):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="analysis_type must be unique")
    return await lims_crud.analysis_pricing.update(db, db_obj=db_obj, obj_in=pricing_in)


@analysis_pricing_router.delete("/{pricing_id}", response_model=usr_schemas.Message, summary="분석 단가 삭제")
async def delete_analysis_pricing(pricing_id: int = Path(..., gt=0), db: AsyncSession = Depends(deps.get_db_session)):
    if not await lims_crud.analysis_pricing.delete(db, id=pricing_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis pricing not found")
    return {"message": "Analysis pricing deleted"}


# =============================================================================
# 2. 시료 접수 (SampleCheckin) - 작업지시 관련 고정 경로
# =============================================================================
@sample_checkin_router.get("/workorders", response_model=List[lims_schemas.WorkOrderSummary], summary="작업지시 목록")
async def read_work_orders(
    company_id: Optional[int] = Query(None, gt=0),
    status_filter: Optional[str] = Query(None, alias="status"),
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    """
    접수 건마다 한 행을 반환합니다 (최신 접수 순).
    - amount: (rushed ? 긴급 단가 : 표준 단가) + 시료 수수료
    - pending_since: 상태가 'pending' 이면 접수 후 경과 일수, 아니면 null
    - cylinders: 같은 작업지시 번호를 가진 접수 건 수 (번호가 없으면 1)
    """
    rows = await lims_crud.sample_checkin.get_work_order_rows(
        db, company_id=identity.scoped_company_id(company_id), status=status_filter
    )

    def work_order_key(checkin) -> str:
        return checkin.work_order_number or f"__no_work_order_{checkin.id}"

    counts = Counter(work_order_key(checkin) for checkin, _, _ in rows)

    work_orders = []
    for checkin, company_name, pricing in rows:
        if pricing is not None:
            base_rate = _to_number(pricing.rushed_rate if checkin.rushed else pricing.standard_rate)
            sample_fee = _to_number(pricing.sample_fee)
        else:
            base_rate = sample_fee = 0.0
        is_pending = (checkin.status or "").strip().lower() == "pending"
        work_orders.append(
            lims_schemas.WorkOrderSummary(
                id=checkin.id,
                work_order_number=checkin.work_order_number,
                company=company_name,
                well_name=checkin.well_name,
                meter_number=checkin.meter_number,
                date=checkin.created_at,
                pending_since=max(0, days_since(checkin.created_at) or 0) if is_pending else None,
                cylinders=counts[work_order_key(checkin)],
                amount=base_rate + sample_fee,
                status=checkin.status,
            )
        )
    return work_orders


@sample_checkin_router.get(
    "/workorders/by-number/{work_order_number}",
    response_model=lims_schemas.WorkOrderDetail,
    summary="작업지시 상세 (헤더 + 라인)",
)
async def read_work_order_detail(
    work_order_number: str = Path(..., min_length=1),
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    """
    작업지시 편집 화면용. 라인 금액 = 표준 단가 + 시료 수수료 + H2 POP 수수료 + Spot/Composite 수수료.
    헤더 비용은 workorder_headers 에 행이 없으면 0 입니다.
    """
    work_order_number = work_order_number.strip()
    company_id = identity.scoped_company_id()
    first = await lims_crud.sample_checkin.get_first_of_work_order(
        db, work_order_number=work_order_number, company_id=company_id
    )
    if first is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Work order not found")
    first_checkin, company_name = first

    line_items = []
    lines = await lims_crud.sample_checkin.get_work_order_lines(
        db, work_order_number=work_order_number, company_id=company_id
    )
    for item, analysis_type in lines:
        rate = _to_number(item.standard_rate)
        fees = [_to_number(item.sample_fee), _to_number(item.h2_pop_fee), _to_number(item.spot_composite_fee)]
        line_items.append(
            lims_schemas.WorkOrderLineItem(
                id=item.id,
                cylinder_number=item.cylinder_number,
                analysis_number=item.analysis_number,
                cc_number=item.cost_code,
                rushed=bool(item.rushed),
                well_name=item.well_name,
                meter_number=item.meter_number,
                analysis_type_id=item.analysis_type_id,
                analysis_type=analysis_type,
                rate=rate,
                standard_rate=rate,
                applied_rate=_to_number(item.applied_rate),
                sample_fee=fees[0],
                h2_pop_fee=fees[1],
                spot_composite_fee=fees[2],
                amount=rate + sum(fees),
            )
        )

    header = await lims_crud.workorder_header.get_by_number(db, work_order_number=work_order_number)
    work_order = lims_schemas.WorkOrderInfo(
        id=first_checkin.id,
        work_order_number=first_checkin.work_order_number,
        company=company_name,
        date=first_checkin.created_at,
        status=first_checkin.status,
        mileage_fee=_to_number(header.mileage_fee) if header else 0,
        miscellaneous_charges=_to_number(header.miscellaneous_charges) if header else 0,
        hourly_fee=_to_number(header.hourly_fee) if header else 0,
    )
    return lims_schemas.WorkOrderDetail(work_order=work_order, line_items=line_items)


@sample_checkin_router.put(
    "/update_wo_lines/{checkin_id}",
    response_model=lims_schemas.WorkOrderLineUpdateResult,
    summary="작업지시 라인 단가/수수료 수정",
)
async def update_work_order_line(
    line_in: lims_schemas.WorkOrderLineUpdate,
    checkin_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    db_checkin = await lims_crud.sample_checkin.get(db, checkin_id)
    if not db_checkin:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sample check-in not found")
    identity.ensure_company_access(db_checkin.company_id)
    if line_in.analysis_type_id is not None and not await lims_crud.analysis_pricing.get(db, line_in.analysis_type_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="analysis_type_id does not exist")

    updated = await lims_crud.sample_checkin.update(db, db_obj=db_checkin, obj_in=line_in)
    return {"message": "Update successful", "updated": updated}


@sample_checkin_router.put(
    "/update_status_by_wo/{work_order_number}",
    response_model=lims_schemas.WorkOrderStatusUpdateResult,
    summary="작업지시 상태 일괄 변경",
)
async def update_status_by_work_order(
    status_in: lims_schemas.WorkOrderStatusUpdate,
    work_order_number: str = Path(..., min_length=1),
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    count = await lims_crud.sample_checkin.update_status_by_work_order(
        db,
        work_order_number=work_order_number.strip(),
        status=status_in.status,
        company_id=identity.scoped_company_id(),
    )
    if count == 0:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="No record found for the given work_order_number."
        )
    return {"message": "Status updated successfully.", "count": count}


# =============================================================================
# 3. 시료 접수 (SampleCheckin) - 기본 CRUD
# =============================================================================
async def _normalize_enumerations(
    db: AsyncSession, allowed: AllowedValuesResolver, values: Dict[str, Any]
) -> None:
    """sample_type / pressure_unit / checkin_type 을 CHECK 제약의 허용값으로 정규화합니다."""
    for column in ("sample_type", "pressure_unit", "checkin_type"):
        if values.get(column) is not None:
            values[column] = await allowed.ensure_allowed(db, SAMPLE_CHECKIN_TABLE, column, values[column])


async def _validate_contact(db: AsyncSession, company_contact_id: int, company_id: int) -> None:
    contact = await corp_crud.company_contact.get(db, company_contact_id)
    if not contact:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="company_contact_id does not exist")
    if contact.company_id != company_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="company_contact does not belong to company_id"
        )


@sample_checkin_router.get("", response_model=List[lims_schemas.SampleCheckinRead], summary="시료 접수 목록")
async def read_sample_checkins(
    company_id: Optional[int] = Query(None, gt=0),
    status_filter: Optional[str] = Query(None, alias="status"),
    analysis_number: Optional[str] = Query(None),
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    return await lims_crud.sample_checkin.get_multi(
        db,
        company_id=identity.scoped_company_id(company_id),
        status=status_filter or None,
        analysis_number=analysis_number or None,
    )


@sample_checkin_router.get("/{checkin_id}", response_model=lims_schemas.SampleCheckinRead, summary="시료 접수 조회")
async def read_sample_checkin(
    checkin_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    db_checkin = await lims_crud.sample_checkin.get(db, checkin_id)
    if not db_checkin:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sample check-in not found")
    identity.ensure_company_access(db_checkin.company_id)
    return db_checkin


@sample_checkin_router.post(
    "", response_model=lims_schemas.SampleCheckinRead, status_code=status.HTTP_201_CREATED, summary="시료 접수 등록"
)
async def create_sample_checkin(
    checkin_in: lims_schemas.SampleCheckinCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
    allowed: AllowedValuesResolver = Depends(deps.get_allowed_values),
):
    """
    - 현장(area_id)이 주어지면 회사는 현장의 회사를 따릅니다. (customer 는 자기 회사 현장만 허용)
    - 담당자는 최종 회사 소속이어야 합니다.
    - 고객 용기는 cylinder_number 를 그대로, 실험실 용기는 cylinder_id 의 번호를 복사해 저장합니다.
    """
    values = checkin_in.model_dump()
    company_id = identity.scoped_company_id(values["company_id"])
    if company_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="company_id is required")

    if values["customer_cylinder"]:
        if not values["cylinder_number"]:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="cylinder_number is required")
    elif values["cylinder_id"] is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="cylinder_id is required")

    if values["area_id"] is not None:
        area = await corp_crud.company_area.get(db, values["area_id"])
        if not area:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="area_id does not exist")
        if identity.is_customer and area.company_id != identity.company_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="area_id belongs to a different company")
        company_id = area.company_id

    await _normalize_enumerations(db, allowed, values)

    if not await corp_crud.company.get(db, company_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="company_id does not exist")
    await _validate_contact(db, values["company_contact_id"], company_id)
    if not await lims_crud.analysis_pricing.get(db, values["analysis_type_id"]):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="analysis_type_id does not exist")

    if values["customer_cylinder"]:
        values["cylinder_id"] = None
    else:
        cylinder = await cyl_crud.cylinder.get(db, values["cylinder_id"])
        if not cylinder:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="cylinder_id does not exist")
        values["cylinder_number"] = cylinder.cylinder_number

    if await lims_crud.sample_checkin.get_by_analysis_number(db, analysis_number=values["analysis_number"]):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Duplicate analysis_number")

    values["company_id"] = company_id
    return await lims_crud.sample_checkin.create(db, obj_in=values, created_by_id=identity.user_id)


@sample_checkin_router.put("/{checkin_id}", response_model=lims_schemas.SampleCheckinRead, summary="시료 접수 수정")
async def update_sample_checkin(
    checkin_in: lims_schemas.SampleCheckinUpdate,
    checkin_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
    allowed: AllowedValuesResolver = Depends(deps.get_allowed_values),
):
    """전달된 필드만 검증/변경합니다. 변경 후 상태도 용기 규칙을 만족해야 합니다."""
    db_checkin = await lims_crud.sample_checkin.get(db, checkin_id)
    if not db_checkin:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sample check-in not found")
    identity.ensure_company_access(db_checkin.company_id)

    changes = checkin_in.model_dump(exclude_unset=True)
    for column in NOT_NULL_CHECKIN_COLUMNS:
        # NOT NULL 컬럼에는 null 을 쓰지 않습니다.
        if column in changes and changes[column] is None:
            changes.pop(column)

    if "company_id" in changes:
        if not await corp_crud.company.get(db, changes["company_id"]):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="company_id does not exist")
        if identity.is_customer and changes["company_id"] != identity.company_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden to change company_id")
    company_id = changes.get("company_id", db_checkin.company_id)

    if changes.get("company_contact_id") is not None:
        await _validate_contact(db, changes["company_contact_id"], company_id)
    if changes.get("analysis_type_id") is not None:
        if not await lims_crud.analysis_pricing.get(db, changes["analysis_type_id"]):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="analysis_type_id does not exist")
    if changes.get("area_id") is not None:
        area = await corp_crud.company_area.get(db, changes["area_id"])
        if not area:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="area_id does not exist")
        if area.company_id != company_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="area_id does not belong to company_id")
    if changes.get("cylinder_id") is not None:
        if not await cyl_crud.cylinder.get(db, changes["cylinder_id"]):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="cylinder_id does not exist")

    next_customer_cylinder = changes.get("customer_cylinder", db_checkin.customer_cylinder)
    next_cylinder_id = changes["cylinder_id"] if "cylinder_id" in changes else db_checkin.cylinder_id
    next_cylinder_number = changes["cylinder_number"] if "cylinder_number" in changes else db_checkin.cylinder_number
    if not next_cylinder_number:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="cylinder_number is required")
    if not next_customer_cylinder and next_cylinder_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="cylinder_id is required")

    await _normalize_enumerations(db, allowed, changes)

    if changes.get("analysis_number") and changes["analysis_number"] != db_checkin.analysis_number:
        if await lims_crud.sample_checkin.get_by_analysis_number(db, analysis_number=changes["analysis_number"]):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Duplicate analysis_number")

    return await lims_crud.sample_checkin.update(db, db_obj=db_checkin, obj_in=changes)


@sample_checkin_router.delete("/{checkin_id}", response_model=usr_schemas.Message, summary="시료 접수 삭제")
async def delete_sample_checkin(
    checkin_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    db_checkin = await lims_crud.sample_checkin.get(db, checkin_id)
    if not db_checkin:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sample check-in not found")
    identity.ensure_company_access(db_checkin.company_id)
    await lims_crud.sample_checkin.delete(db, id=checkin_id)
    return {"message": "Sample check-in deleted"}


# =============================================================================
# 4. 작업지시 헤더 (WorkorderHeader)
# =============================================================================
async def _ensure_work_order_exists(db: AsyncSession, work_order_number: Optional[str]) -> None:
    if work_order_number and not await lims_crud.sample_checkin.work_order_exists(
        db, work_order_number=work_order_number
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="work_order_number does not exist in sample_checkin"
        )


@workorder_headers_router.get("/by-number/{work_order_number}", response_model=lims_schemas.WorkorderHeaderRead, summary="작업지시 헤더 조회 (번호)")
async def read_workorder_header_by_number(
    work_order_number: str = Path(..., min_length=1),
    db: AsyncSession = Depends(deps.get_db_session),
):
    db_header = await lims_crud.workorder_header.get_by_number(db, work_order_number=work_order_number)
    if not db_header:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return db_header


@workorder_headers_router.put("/by-number/{work_order_number}", response_model=lims_schemas.WorkorderHeaderRead, summary="작업지시 헤더 수정 (번호)")
async def update_workorder_header_by_number(
    header_in: lims_schemas.WorkorderHeaderUpdate,
    work_order_number: str = Path(..., min_length=1),
    db: AsyncSession = Depends(deps.get_db_session),
):
    db_header = await lims_crud.workorder_header.get_by_number(db, work_order_number=work_order_number)
    if not db_header:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="workorder_header not found")
    if header_in.work_order_number != work_order_number:
        await _ensure_work_order_exists(db, header_in.work_order_number)
    return await lims_crud.workorder_header.update(db, db_obj=db_header, obj_in=header_in)


@workorder_headers_router.delete("/by-number/{work_order_number}", response_model=lims_schemas.WorkorderHeaderDeleted, summary="작업지시 헤더 삭제 (번호)")
async def delete_workorder_header_by_number(
    work_order_number: str = Path(..., min_length=1),
    db: AsyncSession = Depends(deps.get_db_session),
):
    deleted = await lims_crud.workorder_header.delete_by_number(db, work_order_number=work_order_number)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="workorder_header not found")
    return {"message": "Deleted", "deleted": deleted}


@workorder_headers_router.get("", response_model=List[lims_schemas.WorkorderHeaderRead], summary="작업지시 헤더 목록")
async def read_workorder_headers(db: AsyncSession = Depends(deps.get_db_session)):
    return await lims_crud.workorder_header.get_multi(db)


@workorder_headers_router.get("/{header_id}", response_model=lims_schemas.WorkorderHeaderRead, summary="작업지시 헤더 조회")
async def read_workorder_header(header_id: int = Path(..., gt=0), db: AsyncSession = Depends(deps.get_db_session)):
    db_header = await lims_crud.workorder_header.get(db, header_id)
    if not db_header:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return db_header


@workorder_headers_router.post(
    "", response_model=lims_schemas.WorkorderHeaderRead, status_code=status.HTTP_201_CREATED, summary="작업지시 헤더 생성"
)
async def create_workorder_header(
    header_in: lims_schemas.WorkorderHeaderCreate,
    db: AsyncSession = Depends(deps.get_db_session),
    identity: Identity = Depends(deps.get_current_identity),
):
    await _ensure_work_order_exists(db, header_in.work_order_number)
    if await lims_crud.workorder_header.get_by_number(db, work_order_number=header_in.work_order_number):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unique constraint failed on the fields: (work_order_number)",
        )
    return await lims_crud.workorder_header.create(db, obj_in=header_in, created_by_id=identity.user_id)


@workorder_headers_router.put("/{header_id}", response_model=lims_schemas.WorkorderHeaderRead, summary="작업지시 헤더 수정")
async def update_workorder_header(
    header_in: lims_schemas.WorkorderHeaderUpdate,
    header_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(deps.get_db_session),
):
    db_header = await lims_crud.workorder_header.get(db, header_id)
    if not db_header:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    if header_in.work_order_number != db_header.work_order_number:
        await _ensure_work_order_exists(db, header_in.work_order_number)
    return await lims_crud.workorder_header.update(db, db_obj=db_header, obj_in=header_in)


@workorder_headers_router.delete("/{header_id}", response_model=usr_schemas.Message, summary="작업지시 헤더 삭제")
async def delete_workorder_header(header_id: int = Path(..., gt=0), db: AsyncSession = Depends(deps.get_db_session)):
    if not await lims_crud.workorder_header.delete(db, id=header_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return {"message": "Deleted"}
