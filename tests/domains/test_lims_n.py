# tests/domains/test_lims_n.py

"""
'lims' 도메인 (분석 단가, 시료 접수, 작업지시, 작업지시 헤더) API 통합 테스트.
"""

from datetime import datetime, timedelta, UTC
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from app.domains.corp import models as corp_models
from app.domains.cyl import models as cyl_models
from app.domains.lims import models as lims_models


@pytest_asyncio.fixture
async def pricing(db_session: AsyncSession) -> lims_models.AnalysisPricing:
    obj = lims_models.AnalysisPricing(
        analysis_type="Water Hardness", description="Hardness test",
        standard_rate=Decimal("100"), rushed_rate=Decimal("150"), sample_fee=Decimal("25"),
    )
    db_session.add(obj)
    await db_session.commit()
    await db_session.refresh(obj)
    return obj


@pytest_asyncio.fixture
async def acme_site(db_session: AsyncSession, company_a):
    """company_a 의 현장, 담당자, 실험실 용기를 한 번에 준비합니다."""
    area = corp_models.CompanyArea(company_id=company_a.id, area="HQ", region="NA", description="Headquarters")
    contact = corp_models.CompanyContact(company_id=company_a.id, name="John Doe", phone="1", email="john@acme.com")
    cylinder = cyl_models.Cylinder(cylinder_number="CYL-0001", cylinder_type="Gas", location="Clean Cylinder")
    db_session.add_all([area, contact, cylinder])
    await db_session.commit()
    return {"area": area, "contact": contact, "cylinder": cylinder}


@pytest_asyncio.fixture
async def globex_contact(db_session: AsyncSession, company_b) -> corp_models.CompanyContact:
    contact = corp_models.CompanyContact(company_id=company_b.id, name="Hank", phone="9", email="hank@globex.com")
    db_session.add(contact)
    await db_session.commit()
    return contact


@pytest.fixture
def checkin_factory(db_session: AsyncSession, pricing):
    """DB 에 직접 접수 건을 만듭니다. (접수 일시를 과거로 지정할 때 사용)"""
    async def _create(company_id: int, contact_id: int, analysis_number: str, **overrides) -> lims_models.SampleCheckin:
        values = dict(
            company_id=company_id, company_contact_id=contact_id, analysis_type_id=pricing.id,
            customer_cylinder=True, cylinder_number=f"CUST-{analysis_number}", analysis_number=analysis_number,
            sample_type="Spot", checkin_type="Cylinder", status="Pending",
        )
        values.update(overrides)
        checkin = lims_models.SampleCheckin(**values)
        db_session.add(checkin)
        await db_session.commit()
        await db_session.refresh(checkin)
        return checkin
    return _create


def checkin_payload(company_id, contact_id, pricing_id, **overrides):
    payload = {
        "company_id": company_id, "company_contact_id": contact_id, "analysis_type_id": pricing_id,
        "customer_cylinder": True, "cylinder_number": "CUST-1", "analysis_number": "AN-1",
        "sample_type": "Spot", "checkin_type": "Cylinder", "status": "Pending",
    }
    payload.update(overrides)
    return payload


# =============================================================================
# 1. 분석 단가 (Analysis Pricing)
# =============================================================================
@pytest.mark.asyncio
async def test_analysis_pricing_crud(employee_client: AsyncClient):
    payload = {"analysis_type": "BTEX", "standard_rate": 80, "rushed_rate": 120, "sample_fee": "15.50"}
    response = await employee_client.post("/api/analysis_pricing", json=payload)
    assert response.status_code == 201
    created = response.json()
    assert float(created["sample_fee"]) == 15.5

    response = await employee_client.post("/api/analysis_pricing", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": "analysis_type must be unique"}

    response = await employee_client.put(f"/api/analysis_pricing/{created['id']}", json={"rushed_rate": 130})
    assert float(response.json()["rushed_rate"]) == 130
    assert float(response.json()["standard_rate"]) == 80

    response = await employee_client.delete(f"/api/analysis_pricing/{created['id']}")
    assert response.json() == {"message": "Analysis pricing deleted"}
    response = await employee_client.get(f"/api/analysis_pricing/{created['id']}")
    assert response.json() == {"error": "Analysis pricing not found"}


@pytest.mark.asyncio
async def test_analysis_pricing_rejects_negative_rate(employee_client: AsyncClient):
    response = await employee_client.post(
        "/api/analysis_pricing",
        json={"analysis_type": "H2S", "standard_rate": -1, "rushed_rate": 1, "sample_fee": 1},
    )
    assert response.status_code == 400


# =============================================================================
# 2. 시료 접수 (Sample Check-in)
# =============================================================================
@pytest.mark.asyncio
async def test_create_checkin_normalizes_enumerations(employee_client: AsyncClient, company_a, acme_site, pricing):
    payload = checkin_payload(
        company_a.id, acme_site["contact"].id, pricing.id,
        sample_type="spot", checkin_type="CYLINDER", pressure_unit="psig",
    )
    response = await employee_client.post("/api/sample_checkin", json=payload)

    assert response.status_code == 201
    data = response.json()
    assert (data["sample_type"], data["checkin_type"], data["pressure_unit"]) == ("Spot", "Cylinder", "PSIG")
    assert data["cylinder_id"] is None
    assert data["cylinder_number"] == "CUST-1"


@pytest.mark.asyncio
async def test_create_checkin_rejects_unknown_sample_type(employee_client: AsyncClient, company_a, acme_site, pricing):
    payload = checkin_payload(company_a.id, acme_site["contact"].id, pricing.id, sample_type="Grab")
    response = await employee_client.post("/api/sample_checkin", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid sample_type. Allowed: Spot, Composite"}


@pytest.mark.asyncio
async def test_lab_cylinder_copies_cylinder_number(employee_client: AsyncClient, company_a, acme_site, pricing):
    payload = checkin_payload(
        company_a.id, acme_site["contact"].id, pricing.id,
        customer_cylinder=False, cylinder_id=acme_site["cylinder"].id, cylinder_number="IGNORED",
    )
    response = await employee_client.post("/api/sample_checkin", json=payload)

    assert response.status_code == 201
    assert response.json()["cylinder_id"] == acme_site["cylinder"].id
    assert response.json()["cylinder_number"] == "CYL-0001"


@pytest.mark.asyncio
async def test_cylinder_rules(employee_client: AsyncClient, company_a, acme_site, pricing):
    base = checkin_payload(company_a.id, acme_site["contact"].id, pricing.id)

    response = await employee_client.post("/api/sample_checkin", json={**base, "cylinder_number": None})
    assert response.json() == {"error": "cylinder_number is required"}

    response = await employee_client.post("/api/sample_checkin", json={**base, "customer_cylinder": False})
    assert response.json() == {"error": "cylinder_id is required"}

    response = await employee_client.post(
        "/api/sample_checkin", json={**base, "customer_cylinder": False, "cylinder_id": 9999}
    )
    assert response.json() == {"error": "cylinder_id does not exist"}


@pytest.mark.asyncio
async def test_area_decides_company(
    employee_client: AsyncClient, company_a, company_b, acme_site, pricing
):
    payload = checkin_payload(company_b.id, acme_site["contact"].id, pricing.id, area_id=acme_site["area"].id)
    response = await employee_client.post("/api/sample_checkin", json=payload)

    assert response.status_code == 201
    assert response.json()["company_id"] == company_a.id


@pytest.mark.asyncio
async def test_customer_cannot_use_other_company_area(
    customer_client: AsyncClient, db_session: AsyncSession, company_a, company_b, acme_site, pricing
):
    foreign_area = corp_models.CompanyArea(company_id=company_b.id, area="Yard", region="TX", description="Yard")
    db_session.add(foreign_area)
    await db_session.commit()

    payload = checkin_payload(None, acme_site["contact"].id, pricing.id, area_id=foreign_area.id)
    response = await customer_client.post("/api/sample_checkin", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "area_id belongs to a different company"}


@pytest.mark.asyncio
async def test_contact_must_belong_to_company(
    employee_client: AsyncClient, company_a, acme_site, pricing, globex_contact
):
    payload = checkin_payload(company_a.id, globex_contact.id, pricing.id)
    response = await employee_client.post("/api/sample_checkin", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "company_contact does not belong to company_id"}


@pytest.mark.asyncio
async def test_duplicate_analysis_number(employee_client: AsyncClient, company_a, acme_site, pricing):
    payload = checkin_payload(company_a.id, acme_site["contact"].id, pricing.id)
    assert (await employee_client.post("/api/sample_checkin", json=payload)).status_code == 201

    response = await employee_client.post("/api/sample_checkin", json={**payload, "cylinder_number": "CUST-2"})

    assert response.status_code == 400
    assert response.json() == {"error": "Duplicate analysis_number"}


@pytest.mark.asyncio
async def test_update_ignores_null_for_required_columns(
    employee_client: AsyncClient, company_a, acme_site, checkin_factory
):
    checkin = await checkin_factory(company_a.id, acme_site["contact"].id, "AN-10")

    response = await employee_client.put(
        f"/api/sample_checkin/{checkin.id}", json={"status": None, "sample_type": None, "remarks": "Leaking valve"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "Pending"
    assert data["sample_type"] == "Spot"
    assert data["remarks"] == "Leaking valve"


@pytest.mark.asyncio
async def test_update_rejects_switch_to_lab_cylinder_without_id(
    employee_client: AsyncClient, company_a, acme_site, checkin_factory
):
    checkin = await checkin_factory(company_a.id, acme_site["contact"].id, "AN-11")

    response = await employee_client.put(f"/api/sample_checkin/{checkin.id}", json={"customer_cylinder": False})

    assert response.status_code == 400
    assert response.json() == {"error": "cylinder_id is required"}


@pytest.mark.asyncio
async def test_customer_checkin_scoping(
    customer_client: AsyncClient, company_a, company_b, acme_site, globex_contact, checkin_factory
):
    own = await checkin_factory(company_a.id, acme_site["contact"].id, "AN-20")
    foreign = await checkin_factory(company_b.id, globex_contact.id, "AN-21")

    response = await customer_client.get("/api/sample_checkin", params={"company_id": company_b.id})
    assert [row["id"] for row in response.json()] == [own.id]

    assert (await customer_client.get(f"/api/sample_checkin/{foreign.id}")).status_code == 403
    assert (await customer_client.delete(f"/api/sample_checkin/{foreign.id}")).status_code == 403

    response = await customer_client.put(f"/api/sample_checkin/{own.id}", json={"company_id": company_b.id})
    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden to change company_id"}


# =============================================================================
# 3. 작업지시 (Work Orders)
# =============================================================================
@pytest.mark.asyncio
async def test_work_order_list(employee_client: AsyncClient, company_a, acme_site, checkin_factory):
    contact_id = acme_site["contact"].id
    three_days_ago = datetime.now(UTC) - timedelta(days=3, hours=1)
    first = await checkin_factory(
        company_a.id, contact_id, "AN-1", work_order_number="WO-1", rushed=True, created_at=three_days_ago
    )
    second = await checkin_factory(
        company_a.id, contact_id, "AN-2", work_order_number="WO-1", status="Completed",
        created_at=three_days_ago + timedelta(hours=1),
    )
    loose = await checkin_factory(company_a.id, contact_id, "AN-3")

    response = await employee_client.get("/api/sample_checkin/workorders")

    assert response.status_code == 200
    rows = {row["id"]: row for row in response.json()}
    assert [row["id"] for row in response.json()] == [loose.id, second.id, first.id]

    assert rows[first.id]["amount"] == 175.0
    assert rows[first.id]["pending_since"] == 3
    assert rows[first.id]["cylinders"] == 2
    assert rows[first.id]["company"] == company_a.name

    assert rows[second.id]["amount"] == 125.0
    assert rows[second.id]["pending_since"] is None

    assert rows[loose.id]["cylinders"] == 1
    assert rows[loose.id]["pending_since"] == 0

    response = await employee_client.get("/api/sample_checkin/workorders", params={"status": "Completed"})
    assert [row["id"] for row in response.json()] == [second.id]


@pytest.mark.asyncio
async def test_work_order_detail_and_line_update(
    employee_client: AsyncClient, db_session: AsyncSession, company_a, acme_site, checkin_factory, pricing
):
    contact_id = acme_site["contact"].id
    line = await checkin_factory(company_a.id, contact_id, "AN-1", work_order_number="WO-7", cost_code="CC-9")
    await checkin_factory(company_a.id, contact_id, "AN-2", work_order_number="WO-7")

    response = await employee_client.put(
        f"/api/sample_checkin/update_wo_lines/{line.id}",
        json={"standard_rate": 100, "sample_fee": 25, "h2_pop_fee": 10, "applied_rate": 90},
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Update successful"
    assert float(response.json()["updated"]["h2_pop_fee"]) == 10

    db_session.add(lims_models.WorkorderHeader(work_order_number="WO-7", mileage_fee=Decimal("50")))
    await db_session.commit()

    response = await employee_client.get("/api/sample_checkin/workorders/by-number/WO-7")

    assert response.status_code == 200
    detail = response.json()
    assert detail["work_order"]["id"] == line.id
    assert detail["work_order"]["mileage_fee"] == 50
    assert detail["work_order"]["hourly_fee"] == 0
    first_line, second_line = detail["line_items"]
    assert first_line["analysis_type"] == "Water Hardness"
    assert first_line["cc_number"] == "CC-9"
    assert first_line["rate"] == 100
    assert first_line["applied_rate"] == 90
    assert first_line["amount"] == 135
    assert second_line["amount"] == 0


@pytest.mark.asyncio
async def test_work_order_detail_not_found(employee_client: AsyncClient):
    response = await employee_client.get("/api/sample_checkin/workorders/by-number/WO-404")

    assert response.status_code == 404
    assert response.json() == {"error": "Work order not found"}


@pytest.mark.asyncio
async def test_update_status_by_work_order(employee_client: AsyncClient, company_a, acme_site, checkin_factory):
    contact_id = acme_site["contact"].id
    await checkin_factory(company_a.id, contact_id, "AN-1", work_order_number="WO-2")
    await checkin_factory(company_a.id, contact_id, "AN-2", work_order_number="WO-2")

    response = await employee_client.put(
        "/api/sample_checkin/update_status_by_wo/WO-2", json={"status": "Completed"}
    )
    assert response.json() == {"message": "Status updated successfully.", "count": 2}

    response = await employee_client.get("/api/sample_checkin", params={"status": "Completed"})
    assert len(response.json()) == 2

    response = await employee_client.put(
        "/api/sample_checkin/update_status_by_wo/WO-404", json={"status": "Completed"}
    )
    assert response.status_code == 404
    assert response.json() == {"error": "No record found for the given work_order_number."}


@pytest.mark.asyncio
async def test_customer_work_orders_are_scoped(
    customer_client: AsyncClient, company_a, company_b, acme_site, globex_contact, checkin_factory
):
    own = await checkin_factory(company_a.id, acme_site["contact"].id, "AN-1", work_order_number="WO-A")
    await checkin_factory(company_b.id, globex_contact.id, "AN-2", work_order_number="WO-B")

    response = await customer_client.get("/api/sample_checkin/workorders")
    assert [row["id"] for row in response.json()] == [own.id]

    response = await customer_client.get("/api/sample_checkin/workorders/by-number/WO-B")
    assert response.status_code == 404

    response = await customer_client.put("/api/sample_checkin/update_status_by_wo/WO-B", json={"status": "Done"})
    assert response.status_code == 404


# =============================================================================
# 4. 작업지시 헤더 (Work Order Headers)
# =============================================================================
@pytest.mark.asyncio
async def test_workorder_header_requires_existing_work_order(employee_client: AsyncClient):
    response = await employee_client.post("/api/workorder_headers", json={"work_order_number": "WO-X"})

    assert response.status_code == 400
    assert response.json() == {"error": "work_order_number does not exist in sample_checkin"}


@pytest.mark.asyncio
async def test_workorder_header_lifecycle(employee_client: AsyncClient, company_a, acme_site, checkin_factory):
    await checkin_factory(company_a.id, acme_site["contact"].id, "AN-1", work_order_number="WO-1")
    payload = {"work_order_number": "WO-1", "company_id": company_a.id, "mileage_fee": 12.5, "cylinders": 1}

    response = await employee_client.post("/api/workorder_headers", json=payload)
    assert response.status_code == 201
    header = response.json()

    response = await employee_client.post("/api/workorder_headers", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": "Unique constraint failed on the fields: (work_order_number)"}

    response = await employee_client.get("/api/workorder_headers/by-number/WO-1")
    assert response.json()["id"] == header["id"]

    response = await employee_client.put(
        "/api/workorder_headers/by-number/WO-1", json={"work_order_number": None, "hourly_fee": 40}
    )
    assert response.status_code == 200
    assert response.json()["work_order_number"] == "WO-1"
    assert float(response.json()["hourly_fee"]) == 40

    response = await employee_client.put(f"/api/workorder_headers/{header['id']}", json={"work_order_number": "WO-9"})
    assert response.status_code == 400

    response = await employee_client.delete("/api/workorder_headers/by-number/WO-1")
    assert response.json()["message"] == "Deleted"
    assert response.json()["deleted"]["id"] == header["id"]

    response = await employee_client.get(f"/api/workorder_headers/{header['id']}")
    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}
