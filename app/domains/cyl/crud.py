# app/domains/cyl/crud.py

"""
'cyl' 도메인의 CRUD 작업을 담당하는 모듈입니다.
"""

from typing import Any, Dict, List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.domains.corp import models as corp_models
from . import models, schemas


# =============================================================================
# 1. cylinders 테이블 CRUD
# =============================================================================
class CRUDCylinder(CRUDBase[models.Cylinder, schemas.CylinderCreate, schemas.CylinderUpdate]):
    async def get_by_number(self, db: AsyncSession, *, cylinder_number: str) -> Optional[models.Cylinder]:
        return await self.get_by_attribute(db, attribute="cylinder_number", value=cylinder_number)


cylinder = CRUDCylinder(models.Cylinder)


# =============================================================================
# 2. cylinder_checkout 테이블 CRUD
# =============================================================================
class CRUDCylinderCheckout(
    CRUDBase[models.CylinderCheckout, schemas.CylinderCheckoutCreate, schemas.CylinderCheckoutUpdate]
):
    async def get_open_for_cylinder(self, db: AsyncSession, *, cylinder_id: int) -> Optional[models.CylinderCheckout]:
        """용기당 미반납(is_returned=False) 반출 건은 최대 1건입니다."""
        return await self.get_one_filtered(db, filters={"cylinder_id": cylinder_id, "is_returned": False})

    async def get_open(self, db: AsyncSession) -> List[models.CylinderCheckout]:
        return await self.get_multi(db, is_returned=False)

    async def get_open_with_details(
        self, db: AsyncSession, *, company_id: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """미반납 반출 건을 용기 번호, 회사명, 담당자명과 함께 조회합니다."""
        statement = (
            select(
                self.model,
                models.Cylinder.cylinder_number,
                corp_models.Company.name,
                corp_models.CompanyContact.name,
            )
            .join(models.Cylinder, models.Cylinder.id == self.model.cylinder_id)
            .join(corp_models.Company, corp_models.Company.id == self.model.company_id)
            .join(corp_models.CompanyContact, corp_models.CompanyContact.id == self.model.company_contact_id)
            .where(self.model.is_returned == False)  # noqa: E712
        )
        if company_id is not None:
            statement = statement.where(self.model.company_id == company_id)
        result = await db.execute(statement.order_by(self.model.id))

        rows = []
        for checkout, cylinder_number, company_name, contact_name in result.all():
            rows.append({
                "id": checkout.id,
                "cylinder_id": checkout.cylinder_id,
                "cylinder_number": cylinder_number,
                "company_id": checkout.company_id,
                "company_name": company_name,
                "company_contact_id": checkout.company_contact_id,
                "contact_name": contact_name,
                "created_at": checkout.created_at,
            })
        return rows


cylinder_checkout = CRUDCylinderCheckout(models.CylinderCheckout)
