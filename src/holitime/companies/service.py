from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import optional_text, parse_bool, require_non_empty
from ..core.constants import INTERNAL_ROLES
from ..core.enums import UserRole
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import SessionUser
from .model import Company
from .repository import CompanyRepository

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("address", "phone", "email", "website", "description")


class CompanyService:
    def __init__(self, companies: CompanyRepository):
        self._companies = companies

    @staticmethod
    def _require_admin(actor: SessionUser) -> None:
        if actor.role != UserRole.ADMIN:
            raise AuthorizationError("Only administrators can manage companies")

    def _clean(self, data: dict) -> dict:
        fields = {k: optional_text(data[k]) for k in _TEXT_FIELDS if k in data}
        if "is_active" in data:
            fields["is_active"] = parse_bool(data["is_active"], "is_active")
        return fields

    def create_company(self, *, actor: SessionUser, data: dict) -> int:
        self._require_admin(actor)
        name = require_non_empty(data.get("name"), "Company name")
        if self._companies.get_by_name(name):
            raise ConflictError("A company with this name already exists")
        company_id = self._companies.create(name=name, **self._clean(data))
        logger.info("Company %s created by %s", company_id, actor.user_id)
        return company_id

    def update_company(self, *, actor: SessionUser, company_id: int, data: dict) -> Company:
        self._require_admin(actor)
        company = self.get_company(actor=actor, company_id=company_id)
        fields = self._clean(data)
        if "name" in data:
            name = require_non_empty(data.get("name"), "Company name")
            other = self._companies.get_by_name(name)
            if other and other.company_id != company.company_id:
                raise ConflictError("A company with this name already exists")
            fields["name"] = name
        if fields:
            self._companies.update(company.company_id, **fields)
        return self._companies.get_by_id(company.company_id) or company

    def delete_company(self, *, actor: SessionUser, company_id: int) -> None:
        self._require_admin(actor)
        company = self.get_company(actor=actor, company_id=company_id)
        if self._companies.count_jobs(company.company_id) > 0:
            raise ConflictError("Cannot delete a company that still has jobs")
        self._companies.delete(company.company_id)
        logger.info("Company %s deleted by %s", company.company_id, actor.user_id)

    def get_company(self, *, actor: SessionUser, company_id: int) -> Company:
        company = self._companies.get_by_id(int(company_id))
        if not company:
            raise NotFoundError("Company not found")
        if actor.role == UserRole.COMPANY_USER and actor.company_id != company.company_id:
            raise AuthorizationError("You can only view your own company")
        return company

    def list_companies(self, *, actor: SessionUser, active_only: bool = False) -> Sequence[Company]:
        if actor.role in INTERNAL_ROLES:
            return self._companies.list_all(active_only=active_only)
        if actor.role == UserRole.COMPANY_USER:
            if actor.company_id is None:
                return []
            company: Optional[Company] = self._companies.get_by_id(int(actor.company_id))
            return [company] if company else []
        raise ValidationError("Unknown role")
