# app/domains/lims/crud.py

"""
'lims' 도메인의 CRUD 작업을 담당하는 모듈입니다.

작업지시(work order)는 별도 테이블이 아니라 같은 work_order_number 를 가진
sample_checkin 행들의 묶음이며, workorder_headers 는 그 묶음의 부가 비용 정보를 보관합니다.
"""

from typing import Any, List, Optional, Tuple

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase, commit_or_rollback
from app.domains.corp import models as corp_models
from . import models as lims_models
from . import schemas as lims_schemas


# =============================================================================
# 1. analysis_pricing 테이블 CRUD
# =============================================================================
class CRUDAnalysisPricing(
    CRUDBase[lims_models.AnalysisPricing, lims_schemas.AnalysisPricingCreate, lims_schemas.AnalysisPricingUpdate]
):
    async def get_by_analysis_type(self, db: AsyncSession, *, analysis_type: str) -> Optional[lims_models.AnalysisPricing]:
        return await self.get_by_attribute(db, attribute="analysis_type", value=analysis_type)


analysis_pricing = CRUDAnalysisPricing(lims_models.AnalysisPricing)


# =============================================================================
# 2. sample_checkin 테이블 CRUD
# =============================================================================
class CRUDSampleCheckin(
    CRUDBase[lims_models.SampleCheckin, lims_schemas.SampleCheckinCreate, lims_schemas.SampleCheckinUpdate]
):
    async def get_by_analysis_number(self, db: AsyncSession, *, analysis_number: str) -> Optional[lims_models.SampleCheckin]:
        return await self.get_by_attribute(db, attribute="analysis_number", value=analysis_number)

    async def work_order_exists(self, db: AsyncSession, *, work_order_number: str) -> bool:
        return await self.get_by_attribute(db, attribute="work_order_number", value=work_order_number) is not None

    async def get_work_order_rows(
        self, db: AsyncSession, *, company_id: Optional[int] = None, status: Optional[str] = None
    ) -> List[Tuple[lims_models.SampleCheckin, Optional[str], Optional[lims_models.AnalysisPricing]]]:
        """
        작업지시 목록용: 접수 건, 회사명, 분석 단가를 최신 접수 순으로 조회합니다.
        """
        statement = (
            select(self.model, corp_models.Company.name, lims_models.AnalysisPricing)
            .outerjoin(corp_models.Company, corp_models.Company.id == self.model.company_id)
            .outerjoin(lims_models.AnalysisPricing, lims_models.AnalysisPricing.id == self.model.analysis_type_id)
        )
        if company_id is not None:
            statement = statement.where(self.model.company_id == company_id)
        if status:
            statement = statement.where(self.model.status == status)
        result = await db.execute(statement.order_by(self.model.created_at.desc(), self.model.id.desc()))
        return result.all()

    async def get_first_of_work_order(
        self, db: AsyncSession, *, work_order_number: str, company_id: Optional[int] = None
    ) -> Optional[Tuple[lims_models.SampleCheckin, Optional[str]]]:
        """작업지시의 첫 접수 건(가장 이른 접수)과 회사명을 반환합니다."""
        statement = (
            select(self.model, corp_models.Company.name)
            .outerjoin(corp_models.Company, corp_models.Company.id == self.model.company_id)
            .where(self.model.work_order_number == work_order_number)
        )
        if company_id is not None:
            statement = statement.where(self.model.company_id == company_id)
        result = await db.execute(statement.order_by(self.model.created_at.asc(), self.model.id.asc()))
        return result.first()

    async def get_work_order_lines(
        self, db: AsyncSession, *, work_order_number: str, company_id: Optional[int] = None
    ) -> List[Tuple[lims_models.SampleCheckin, Optional[str]]]:
        """작업지시 라인(접수 건)과 분석 유형명을 id 순으로 반환합니다."""
        statement = (
            select(self.model, lims_models.AnalysisPricing.analysis_type)
            .outerjoin(lims_models.AnalysisPricing, lims_models.AnalysisPricing.id == self.model.analysis_type_id)
            .where(self.model.work_order_number == work_order_number)
        )
        if company_id is not None:
            statement = statement.where(self.model.company_id == company_id)
        result = await db.execute(statement.order_by(self.model.id))
        return result.all()

    async def update_status_by_work_order(
        self, db: AsyncSession, *, work_order_number: str, status: str, company_id: Optional[int] = None
    ) -> int:
        """같은 작업지시에 속한 모든 접수 건의 상태를 변경하고, 변경된 건수를 반환합니다."""
        rows = await self.get_multi(db, work_order_number=work_order_number, company_id=company_id)
        for row in rows:
            row.status = status
            db.add(row)
        if rows:
            await commit_or_rollback(db)
        return len(rows)


sample_checkin = CRUDSampleCheckin(lims_models.SampleCheckin)


# =============================================================================
# 3. workorder_headers 테이블 CRUD
# =============================================================================
class CRUDWorkorderHeader(
    CRUDBase[lims_models.WorkorderHeader, lims_schemas.WorkorderHeaderCreate, lims_schemas.WorkorderHeaderUpdate]
):
    async def get_by_number(self, db: AsyncSession, *, work_order_number: str) -> Optional[lims_models.WorkorderHeader]:
        return await self.get_by_attribute(db, attribute="work_order_number", value=work_order_number)

    async def delete_by_number(self, db: AsyncSession, *, work_order_number: str) -> Optional[lims_models.WorkorderHeader]:
        db_obj = await self.get_by_number(db, work_order_number=work_order_number)
        if db_obj:
            await db.delete(db_obj)
            await commit_or_rollback(db)
        return db_obj

    async def update(self, db: AsyncSession, *, db_obj: lims_models.WorkorderHeader, obj_in: Any) -> lims_models.WorkorderHeader:
        """work_order_number 에 null 이 들어오면 기존 번호를 유지합니다."""
        if isinstance(obj_in, lims_schemas.WorkorderHeaderUpdate):
            update_data = obj_in.model_dump(exclude_unset=True)
        else:
            update_data = dict(obj_in)
        if update_data.get("work_order_number") is None:
            update_data.pop("work_order_number", None)
        return await super().update(db, db_obj=db_obj, obj_in=update_data)


workorder_header = CRUDWorkorderHeader(lims_models.WorkorderHeader)
