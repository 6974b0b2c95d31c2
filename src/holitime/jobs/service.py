from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..common.datetime_utils import parse_optional_date
from ..common.validators import optional_text, require_int, require_non_empty
from ..companies.repository import CompanyRepository
from ..core.constants import DEFAULT_LIST_LIMIT, MAX_LIST_LIMIT, has_minimum_role
from ..core.enums import JobStatus, UserRole
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import SessionUser
from .model import Job
from .repository import JobRepository

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("description", "location", "budget", "notes")


def parse_job_status(value: Any) -> JobStatus:
    try:
        return JobStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown job status: {value!r}")


def can_view_job(actor: SessionUser, job: Job) -> bool:
    if actor.role == UserRole.COMPANY_USER:
        return actor.company_id == job.company_id
    return True


class JobService:
    def __init__(self, jobs: JobRepository, companies: CompanyRepository):
        self._jobs = jobs
        self._companies = companies

    @staticmethod
    def _require_staff(actor: SessionUser) -> None:
        if actor.role == UserRole.COMPANY_USER or not has_minimum_role(actor.role, UserRole.STAFF):
            raise AuthorizationError("Only staff can manage jobs")

    def _clean(self, data: dict, *, current: Optional[Job] = None) -> dict:
        fields: dict[str, Any] = {k: optional_text(data[k]) for k in _TEXT_FIELDS if k in data}
        if "status" in data:
            fields["status"] = parse_job_status(data["status"])
        if "start_date" in data:
            fields["start_date"] = parse_optional_date(data["start_date"])
        if "end_date" in data:
            fields["end_date"] = parse_optional_date(data["end_date"])

        start = fields.get("start_date", current.start_date if current else None)
        end = fields.get("end_date", current.end_date if current else None)
        if start and end and end < start:
            raise ValidationError("End date must be on or after start date")
        return fields

    def get_job(self, *, actor: SessionUser, job_id: int) -> Job:
        job = self._jobs.get_by_id(int(job_id))
        if not job:
            raise NotFoundError("Job not found")
        if not can_view_job(actor, job):
            raise AuthorizationError("You do not have access to this job")
        return job

    def create_job(self, *, actor: SessionUser, data: dict) -> int:
        self._require_staff(actor)
        name = require_non_empty(data.get("name"), "Job name")
        company_id = require_int(data.get("company_id"), "company_id", minimum=1)
        if not self._companies.get_by_id(company_id):
            raise ValidationError("Company does not exist")
        if self._jobs.find_by_name(company_id=company_id, name=name):
            raise ConflictError("This company already has a job with that name")

        fields = self._clean(data)
        fields.setdefault("status", JobStatus.PENDING)
        job_id = self._jobs.create(name=name, company_id=company_id, **fields)
        logger.info("Job %s created for company %s by %s", job_id, company_id, actor.user_id)
        return job_id

    def update_job(self, *, actor: SessionUser, job_id: int, data: dict) -> Job:
        self._require_staff(actor)
        job = self.get_job(actor=actor, job_id=job_id)
        fields = self._clean(data, current=job)

        company_id = job.company_id
        if "company_id" in data:
            company_id = require_int(data["company_id"], "company_id", minimum=1)
            if not self._companies.get_by_id(company_id):
                raise ValidationError("Company does not exist")
            fields["company_id"] = company_id
        name = job.name
        if "name" in data:
            name = require_non_empty(data["name"], "Job name")
            fields["name"] = name
        if "name" in data or "company_id" in data:
            other = self._jobs.find_by_name(company_id=company_id, name=name)
            if other and other.job_id != job.job_id:
                raise ConflictError("This company already has a job with that name")

        if fields:
            self._jobs.update(job.job_id, **fields)
        return self._jobs.get_by_id(job.job_id) or job

    def delete_job(self, *, actor: SessionUser, job_id: int) -> None:
        if actor.role != UserRole.ADMIN:
            raise AuthorizationError("Only administrators can delete jobs")
        job = self.get_job(actor=actor, job_id=job_id)
        if self._jobs.count_shifts(job.job_id) > 0:
            raise ConflictError("Cannot delete a job that still has shifts")
        self._jobs.delete(job.job_id)
        logger.info("Job %s deleted by %s", job.job_id, actor.user_id)

    def list_jobs(
        self,
        *,
        actor: SessionUser,
        company_id: Optional[int] = None,
        status: Optional[JobStatus] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[Job]:
        if actor.role == UserRole.COMPANY_USER:
            if actor.company_id is None:
                return []
            company_id = int(actor.company_id)
        limit = max(1, min(int(limit), MAX_LIST_LIMIT))
        return self._jobs.list_jobs(company_id=company_id, status=status, limit=limit)
