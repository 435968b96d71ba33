# app/domains/models/__init__.py

"""
이 파일은 모든 도메인의 SQLModel 모델들을 한 곳에서 중앙 관리하여,
다른 모듈에서 쉽게 임포트할 수 있도록 하는 역할을 합니다.
SQLModel.metadata가 모든 테이블을 인식하도록 보장합니다.
"""

# usr (Role, Module, RoleModule, User)
from app.domains.usr.models import Role, Module, RoleModule, User

# corp (Company, CompanyArea, CompanyContact)
from app.domains.corp.models import Company, CompanyArea, CompanyContact

# cyl (Cylinder, CylinderCheckout)
from app.domains.cyl.models import Cylinder, CylinderCheckout

# lims (AnalysisPricing, SampleCheckin, WorkorderHeader)
from app.domains.lims.models import AnalysisPricing, SampleCheckin, WorkorderHeader

__all__ = [
    "Role", "Module", "RoleModule", "User",
    "Company", "CompanyArea", "CompanyContact",
    "Cylinder", "CylinderCheckout",
    "AnalysisPricing", "SampleCheckin", "WorkorderHeader",
]
