# scripts/seed.py

"""
LIMS 데이터베이스 초기 데이터 시드 스크립트.

- 고정 역할(Admin / Employee / Customer)
- 기본 회사와 관리자 계정 (ADMIN_* 환경 변수로 변경 가능)
- 화면 메뉴용 기본 모듈(비어 있을 때만)과 authorize() 에서 쓰는 API 모듈
- 관리자 역할에 전체 모듈 권한 부여
- 엔티티별 데모 레코드 1건

여러 번 실행해도 같은 결과가 되도록 모든 단계가 '없으면 생성' 으로 동작합니다.

사용법:
    python -m scripts.seed
    python -m scripts.seed --create-tables
"""

import asyncio
from decimal import Decimal
from typing import Optional

import typer
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import create_db_and_tables, get_async_session_context
from app.core.security import get_password_hash
from app.domains.corp import crud as corp_crud
from app.domains.corp import models as corp_models
from app.domains.cyl import crud as cyl_crud
from app.domains.cyl import models as cyl_models
from app.domains.lims import crud as lims_crud
from app.domains.lims import models as lims_models
from app.domains.usr import crud as usr_crud
from app.domains.usr import models as usr_models

cli = typer.Typer()

ROLE_DESCRIPTIONS = {
    "Admin": "Full System Access",
    "Employee": "Lab Operation Access",
    "Customer": "Access to their company data",
}

DEFAULT_MODULE_NAMES = [
    "Dashboard", "Cylinder Check-Out", "Sample Check-In", "Work Orders", "Generate Invoice",
    "Invoices", "Analysis Pricing", "Cylinder Master", "Company Master", "Contacts",
    "Company Areas", "Import Machine Report", "Cylinder Inventory", "Analysis Reports",
    "Pending Work Orders", "Roles", "Users", "Modules", "Role Module",
]

# main.py 의 authorize("<name>") 와 일치해야 합니다.
API_MODULE_NAMES = [
    "roles", "users", "modules", "companies", "role_modules", "company_areas", "company_contacts",
    "cylinders", "analysis_pricing", "cylinder_checkout", "sample_checkin", "workorder_headers",
]


async def _get_or_add(db: AsyncSession, crud_obj, filters: dict, obj):
    existing = await crud_obj.get_one_filtered(db, filters=filters)
    if existing:
        return existing
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return obj


async def seed_roles(db: AsyncSession) -> dict:
    roles = {}
    for name, description in ROLE_DESCRIPTIONS.items():
        roles[name] = await _get_or_add(
            db, usr_crud.role, {"name": name}, usr_models.Role(name=name, description=description, active=True)
        )
    return roles


async def seed_default_company(db: AsyncSession, code: str, name: str) -> corp_models.Company:
    return await _get_or_add(
        db, corp_crud.company, {"code": code},
        corp_models.Company(code=code, name=name, phone="", email="", billing_address="", active=True),
    )


async def seed_admin_user(
    db: AsyncSession, *, role_id: int, company_id: Optional[int], name: str, email: str, password: str
) -> usr_models.User:
    """관리자 계정은 존재하면 이름/비밀번호/역할/회사를 다시 맞춥니다."""
    admin = await usr_crud.user.get_by_email(db, email=email)
    if admin is None:
        admin = usr_models.User(email=email, name=name, role_id=role_id, password_hash="")
    admin.name = name
    admin.password_hash = get_password_hash(password)
    admin.role_id = role_id
    admin.company_id = company_id
    admin.active = True
    db.add(admin)
    await db.commit()
    await db.refresh(admin)
    return admin


async def seed_modules(db: AsyncSession, created_by_id: int) -> None:
    if not await usr_crud.module.get_multi(db, limit=1):
        for name in DEFAULT_MODULE_NAMES:
            db.add(usr_models.Module(name=name, description=name, active=True, created_by_id=created_by_id))
        await db.commit()
    for name in API_MODULE_NAMES:
        await _get_or_add(
            db, usr_crud.module, {"name": name},
            usr_models.Module(name=name, description=name, active=True, created_by_id=created_by_id),
        )


async def grant_all_modules(db: AsyncSession, role_id: int, created_by_id: int) -> int:
    granted = 0
    for module in await usr_crud.module.get_multi(db):
        existing = await usr_crud.role_module.get_one_filtered(db, filters={"role_id": role_id, "module_id": module.id})
        if not existing:
            db.add(usr_models.RoleModule(role_id=role_id, module_id=module.id, active=True, created_by_id=created_by_id))
            granted += 1
    await db.commit()
    return granted


async def seed_demo_records(db: AsyncSession, company_id: int, created_by_id: int) -> None:
    area = await _get_or_add(
        db, corp_crud.company_area, {"company_id": company_id, "area": "HQ"},
        corp_models.CompanyArea(
            company_id=company_id, area="HQ", region="NA", description="Headquarters", created_by_id=created_by_id
        ),
    )
    contact = await _get_or_add(
        db, corp_crud.company_contact, {"company_id": company_id, "name": "John Doe"},
        corp_models.CompanyContact(
            company_id=company_id, name="John Doe", phone="+1-555-0001", email="john.doe@example.com",
            created_by_id=created_by_id,
        ),
    )
    cylinder = await _get_or_add(
        db, cyl_crud.cylinder, {"cylinder_number": "CYL-0001"},
        cyl_models.Cylinder(
            cylinder_number="CYL-0001", cylinder_type="Gas", track_inventory=True, location="Clean Cylinder",
            created_by_id=created_by_id,
        ),
    )
    pricing = await _get_or_add(
        db, lims_crud.analysis_pricing, {"analysis_type": "Water Hardness"},
        lims_models.AnalysisPricing(
            analysis_type="Water Hardness", description="Standard water hardness analysis",
            standard_rate=Decimal("100.00"), rushed_rate=Decimal("150.00"), sample_fee=Decimal("25.00"),
            created_by_id=created_by_id,
        ),
    )
    await _get_or_add(
        db, cyl_crud.cylinder_checkout, {"cylinder_id": cylinder.id, "is_returned": False},
        cyl_models.CylinderCheckout(
            cylinder_id=cylinder.id, company_id=company_id, company_contact_id=contact.id, is_returned=False,
            created_by_id=created_by_id,
        ),
    )
    await _get_or_add(
        db, lims_crud.sample_checkin, {"analysis_number": "AN-0001"},
        lims_models.SampleCheckin(
            company_id=company_id, company_contact_id=contact.id, analysis_type_id=pricing.id, area_id=area.id,
            cylinder_id=cylinder.id, cylinder_number=cylinder.cylinder_number, analysis_number="AN-0001",
            producer="Demo Producer", well_name="Well-001", meter_number="MTR-001", sample_type="Spot",
            flow_rate="10 scfh", pressure="100", pressure_unit="PSIG", temperature="25 C", field_h2s="0 ppm",
            cost_code="CC-001", checkin_type="Cylinder", invoice_ref_name="WO", invoice_ref_value="WO-0001",
            remarks="Initial demo check-in", work_order_number="WO-0001", status="Pending",
            created_by_id=created_by_id,
        ),
    )


async def seed(
    db: AsyncSession,
    *,
    admin_name: str = "admin",
    admin_email: str = "admin@lims.com",
    admin_password: str = "admin123!",
    admin_company_id: Optional[int] = None,
    company_code: str = "DEFAULT",
    company_name: str = "Default Company",
    with_demo: bool = True,
) -> usr_models.User:
    roles = await seed_roles(db)
    admin_role = roles["Admin"]

    company = await corp_crud.company.get(db, admin_company_id) if admin_company_id else None
    if company is None:
        if admin_company_id:
            print(f"경고: ADMIN_COMPANY_ID={admin_company_id} 회사가 없어 기본 회사를 사용합니다.")
        company = await seed_default_company(db, company_code, company_name)

    admin = await seed_admin_user(
        db, role_id=admin_role.id, company_id=company.id, name=admin_name, email=admin_email, password=admin_password
    )
    await seed_modules(db, admin.id)
    granted = await grant_all_modules(db, admin_role.id, admin.id)
    print(f"관리자 역할에 {granted}개 모듈 권한을 새로 부여했습니다.")

    if with_demo:
        await seed_demo_records(db, company.id, admin.id)
    return admin


@cli.command()
def main(
    admin_name: str = typer.Option("admin", envvar="ADMIN_NAME", help="관리자 이름"),
    admin_email: str = typer.Option("admin@lims.com", envvar="ADMIN_EMAIL", help="관리자 이메일"),
    admin_password: str = typer.Option("admin123!", envvar="ADMIN_PASSWORD", help="관리자 비밀번호"),
    admin_company_id: Optional[int] = typer.Option(None, envvar="ADMIN_COMPANY_ID", help="관리자 소속 회사 ID"),
    company_code: str = typer.Option("DEFAULT", envvar="DEFAULT_COMPANY_CODE", help="기본 회사 코드"),
    company_name: str = typer.Option("Default Company", envvar="DEFAULT_COMPANY_NAME", help="기본 회사명"),
    demo: bool = typer.Option(True, "--demo/--no-demo", help="데모 레코드 생성 여부"),
    create_tables: bool = typer.Option(False, "--create-tables", help="시드 전에 테이블을 생성합니다 (개발용)"),
):
    """
    LIMS 애플리케이션의 역할, 관리자 계정, 모듈 권한, 데모 데이터를 시드합니다.
    """
    async def run_seed():
        if create_tables:
            await create_db_and_tables()
        async with get_async_session_context() as db:
            await seed(
                db,
                admin_name=admin_name,
                admin_email=admin_email,
                admin_password=admin_password,
                admin_company_id=admin_company_id,
                company_code=company_code,
                company_name=company_name,
                with_demo=demo,
            )

    print("데이터베이스 시드를 시작합니다...")
    asyncio.run(run_seed())
    print("시드 완료.")
    print(f"관리자 계정: {admin_email}")
    print("기본 비밀번호를 변경하거나 ADMIN_PASSWORD 환경 변수를 설정하세요.")


if __name__ == "__main__":
    cli()
