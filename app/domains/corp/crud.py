# app/domains/corp/crud.py
from typing import Optional
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from . import models, schemas


class CRUDCompany(CRUDBase[models.Company, schemas.CompanyCreate, schemas.CompanyUpdate]):
    async def get_by_code(self, db: AsyncSession, *, code: str) -> Optional[models.Company]:
        return await self.get_by_attribute(db, attribute="code", value=code)

    async def get_by_name(self, db: AsyncSession, *, name: str) -> Optional[models.Company]:
        return await self.get_by_attribute(db, attribute="name", value=name)


company = CRUDCompany(models.Company)


class CRUDCompanyArea(CRUDBase[models.CompanyArea, schemas.CompanyAreaCreate, schemas.CompanyAreaUpdate]):
    async def get_by_company_and_area(
        self, db: AsyncSession, *, company_id: int, area: str
    ) -> Optional[models.CompanyArea]:
        """(회사, 현장명) 조합은 고유합니다."""
        return await self.get_one_filtered(db, filters={"company_id": company_id, "area": area})


company_area = CRUDCompanyArea(models.CompanyArea)


class CRUDCompanyContact(CRUDBase[models.CompanyContact, schemas.CompanyContactCreate, schemas.CompanyContactUpdate]):
    async def get_by_company_and_name(
        self, db: AsyncSession, *, company_id: int, name: str
    ) -> Optional[models.CompanyContact]:
        return await self.get_one_filtered(db, filters={"company_id": company_id, "name": name})


company_contact = CRUDCompanyContact(models.CompanyContact)
