from __future__ import annotations

import pytest

from holitime.companies.service import CompanyService
from holitime.core.enums import UserRole
from holitime.core.exceptions import AuthorizationError, ConflictError, NotFoundError


def test_admin_creates_and_updates_companies(world, companies):
    service = CompanyService(companies)
    company_id = service.create_company(actor=world.admin, data={"name": " Acme Staging ", "phone": " 555 "})
    company = companies.get_by_id(company_id)
    assert company.name == "Acme Staging"
    assert company.phone == "555"

    with pytest.raises(ConflictError):
        service.create_company(actor=world.admin, data={"name": "demo productions"})
    with pytest.raises(AuthorizationError):
        service.create_company(actor=world.staff, data={"name": "Other"})

    updated = service.update_company(actor=world.admin, company_id=company_id, data={"website": "acme.test"})
    assert updated.website == "acme.test"
    with pytest.raises(ConflictError):
        service.update_company(actor=world.admin, company_id=company_id, data={"name": "Demo Productions"})


def test_delete_refused_while_jobs_exist(world, companies):
    service = CompanyService(companies)
    companies.job_counts[7] = 2
    with pytest.raises(ConflictError):
        service.delete_company(actor=world.admin, company_id=7)

    companies.job_counts[7] = 0
    service.delete_company(actor=world.admin, company_id=7)
    with pytest.raises(NotFoundError):
        service.get_company(actor=world.admin, company_id=7)


def test_company_users_only_see_their_company(world, companies):
    service = CompanyService(companies)
    other_id = service.create_company(actor=world.admin, data={"name": "Other Co"})
    outsider = world.worker(40, UserRole.COMPANY_USER, company_id=other_id)

    assert [c.company_id for c in service.list_companies(actor=world.client)] == [7]
    assert len(service.list_companies(actor=world.staff)) == 2
    with pytest.raises(AuthorizationError):
        service.get_company(actor=outsider, company_id=7)
