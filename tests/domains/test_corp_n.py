# tests/domains/test_corp_n.py

"""
'corp' 도메인 (회사, 현장, 담당자) API 통합 테스트.
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from app.domains.corp import models as corp_models


@pytest_asyncio.fixture
async def globex_area(db_session: AsyncSession, company_b) -> corp_models.CompanyArea:
    area = corp_models.CompanyArea(company_id=company_b.id, area="North Field", region="TX", description="Field office")
    db_session.add(area)
    await db_session.commit()
    await db_session.refresh(area)
    return area


# =============================================================================
# 1. 회사 (Companies)
# =============================================================================
@pytest.mark.asyncio
async def test_company_crud(employee_client: AsyncClient):
    response = await employee_client.post(
        "/api/companies", json={"code": "INITECH", "name": "Initech", "email": "it@initech.com"}
    )
    assert response.status_code == 201
    company = response.json()

    response = await employee_client.put(f"/api/companies/{company['id']}", json={"phone": "+1-555-0100"})
    assert response.status_code == 200
    assert response.json()["phone"] == "+1-555-0100"
    assert response.json()["name"] == "Initech"

    response = await employee_client.delete(f"/api/companies/{company['id']}")
    assert response.json() == {"message": "Company deleted"}
    response = await employee_client.get(f"/api/companies/{company['id']}")
    assert response.status_code == 404
    assert response.json() == {"error": "Company not found"}


@pytest.mark.asyncio
async def test_company_code_and_name_are_unique(employee_client: AsyncClient, company_a, company_b):
    response = await employee_client.post("/api/companies", json={"code": company_a.code, "name": "Other"})
    assert response.status_code == 400
    assert response.json() == {"error": "code or name must be unique"}

    response = await employee_client.put(f"/api/companies/{company_b.id}", json={"name": company_a.name})
    assert response.json() == {"error": "code or name must be unique"}


@pytest.mark.asyncio
async def test_company_requires_code_and_name(employee_client: AsyncClient):
    response = await employee_client.post("/api/companies", json={"name": "No Code"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_customer_sees_only_own_company(customer_client: AsyncClient, company_a, company_b):
    response = await customer_client.get("/api/companies")
    assert [c["id"] for c in response.json()] == [company_a.id]

    response = await customer_client.get(f"/api/companies/{company_b.id}")
    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden"}

    response = await customer_client.put(f"/api/companies/{company_b.id}", json={"phone": "x"})
    assert response.status_code == 403


# =============================================================================
# 2. 현장 (Company Areas)
# =============================================================================
@pytest.mark.asyncio
async def test_company_area_crud(employee_client: AsyncClient, company_a):
    payload = {"company_id": company_a.id, "area": "HQ", "region": "NA", "description": "Headquarters"}
    response = await employee_client.post("/api/company_areas", json=payload)
    assert response.status_code == 201
    area = response.json()

    response = await employee_client.post("/api/company_areas", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": "Area already exists for this company"}

    response = await employee_client.put(f"/api/company_areas/{area['id']}", json={"region": "EU"})
    assert response.json()["region"] == "EU"

    response = await employee_client.delete(f"/api/company_areas/{area['id']}")
    assert response.json() == {"message": "Company area deleted"}
    response = await employee_client.get(f"/api/company_areas/{area['id']}")
    assert response.json() == {"error": "Company area not found"}


@pytest.mark.asyncio
async def test_company_area_requires_existing_company(employee_client: AsyncClient):
    payload = {"area": "HQ", "region": "NA", "description": "Headquarters"}

    response = await employee_client.post("/api/company_areas", json=payload)
    assert response.json() == {"error": "company_id is required"}

    response = await employee_client.post("/api/company_areas", json={**payload, "company_id": 9999})
    assert response.json() == {"error": "company_id does not exist"}


@pytest.mark.asyncio
async def test_company_area_requires_region_and_description(employee_client: AsyncClient, company_a):
    response = await employee_client.post("/api/company_areas", json={"company_id": company_a.id, "area": "HQ"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_customer_area_is_pinned_to_own_company(customer_client: AsyncClient, company_a, company_b):
    response = await customer_client.post(
        "/api/company_areas",
        json={"company_id": company_b.id, "area": "Yard", "region": "NA", "description": "Storage yard"},
    )

    assert response.status_code == 201
    assert response.json()["company_id"] == company_a.id


@pytest.mark.asyncio
async def test_customer_cannot_touch_other_company_area(customer_client: AsyncClient, globex_area, company_a):
    response = await customer_client.get("/api/company_areas")
    assert response.json() == []

    response = await customer_client.get(f"/api/company_areas/{globex_area.id}")
    assert response.status_code == 403

    response = await customer_client.delete(f"/api/company_areas/{globex_area.id}")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_customer_cannot_move_area_to_other_company(
    customer_client: AsyncClient, db_session: AsyncSession, company_a, company_b
):
    area = corp_models.CompanyArea(company_id=company_a.id, area="Plant", region="NA", description="Plant")
    db_session.add(area)
    await db_session.commit()

    response = await customer_client.put(f"/api/company_areas/{area.id}", json={"company_id": company_b.id})

    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden to change to another company"}


# =============================================================================
# 3. 담당자 (Company Contacts)
# =============================================================================
@pytest.mark.asyncio
async def test_company_contact_crud(employee_client: AsyncClient, company_a):
    payload = {"company_id": company_a.id, "name": "Jane Roe", "phone": "+1-555-0002", "email": "jane@acme.com"}
    response = await employee_client.post("/api/company_contacts", json=payload)
    assert response.status_code == 201
    contact = response.json()

    response = await employee_client.post("/api/company_contacts", json=payload)
    assert response.json() == {"error": "Contact name already exists for this company"}

    response = await employee_client.put(f"/api/company_contacts/{contact['id']}", json={"phone": "+1-555-0003"})
    assert response.json()["phone"] == "+1-555-0003"

    response = await employee_client.delete(f"/api/company_contacts/{contact['id']}")
    assert response.json() == {"message": "Company contact deleted"}
    response = await employee_client.get(f"/api/company_contacts/{contact['id']}")
    assert response.json() == {"error": "Company contact not found"}


@pytest.mark.asyncio
async def test_same_contact_name_allowed_in_different_companies(employee_client: AsyncClient, company_a, company_b):
    for company in (company_a, company_b):
        response = await employee_client.post(
            "/api/company_contacts",
            json={"company_id": company.id, "name": "Pat Smith", "phone": "1", "email": "pat@example.com"},
        )
        assert response.status_code == 201


@pytest.mark.asyncio
async def test_rename_contact_to_existing_name_is_rejected(
    employee_client: AsyncClient, db_session: AsyncSession, company_a
):
    first = corp_models.CompanyContact(company_id=company_a.id, name="Ann", phone="1", email="ann@acme.com")
    second = corp_models.CompanyContact(company_id=company_a.id, name="Bob", phone="2", email="bob@acme.com")
    db_session.add_all([first, second])
    await db_session.commit()

    response = await employee_client.put(f"/api/company_contacts/{second.id}", json={"name": "Ann"})

    assert response.status_code == 400
    assert response.json() == {"error": "Contact name already exists for this company"}
