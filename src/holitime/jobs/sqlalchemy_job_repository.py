from __future__ import annotations

from typing import Optional, Sequence

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func, select

from ..core.enums import JobStatus
from ..database.session import session_scope
from ..database.tables import CompanyRow, JobRow, ShiftRow
from .model import Job
from .repository import JobRepository

_FIELDS = (
    "name",
    "description",
    "status",
    "start_date",
    "end_date",
    "location",
    "budget",
    "notes",
    "company_id",
)


def to_job(row: JobRow, company_name: Optional[str] = None) -> Job:
    return Job(
        job_id=int(row.id),
        name=row.name,
        company_id=int(row.company_id),
        status=JobStatus(row.status),
        description=row.description,
        start_date=row.start_date,
        end_date=row.end_date,
        location=row.location,
        budget=row.budget,
        notes=row.notes,
        created_at=row.created_at,
        company_name=company_name,
    )


def _columns(fields: dict) -> dict:
    out = {}
    for key, value in fields.items():
        if key not in _FIELDS:
            continue
        if isinstance(value, JobStatus):
            value = value.value
        out[key] = value
    return out


class SQLAlchemyJobRepository(JobRepository):
    def __init__(self, db: SQLAlchemy):
        self._db = db

    def _select(self):
        return select(JobRow, CompanyRow.name).join(CompanyRow, CompanyRow.id == JobRow.company_id)

    def get_by_id(self, job_id: int) -> Optional[Job]:
        with session_scope(self._db) as s:
            r = s.execute(self._select().where(JobRow.id == int(job_id))).first()
            return to_job(r[0], r[1]) if r else None

    def find_by_name(self, *, company_id: int, name: str) -> Optional[Job]:
        stmt = self._select().where(
            JobRow.company_id == int(company_id),
            func.lower(JobRow.name) == (name or "").strip().lower(),
        )
        with session_scope(self._db) as s:
            r = s.execute(stmt).first()
            return to_job(r[0], r[1]) if r else None

    def create(self, **fields) -> int:
        with session_scope(self._db) as s:
            row = JobRow(**_columns(fields))
            s.add(row)
            s.flush()
            return int(row.id)

    def update(self, job_id: int, **fields) -> bool:
        with session_scope(self._db) as s:
            row = s.get(JobRow, int(job_id))
            if not row:
                return False
            for key, value in _columns(fields).items():
                setattr(row, key, value)
            return True

    def delete(self, job_id: int) -> bool:
        with session_scope(self._db) as s:
            row = s.get(JobRow, int(job_id))
            if not row:
                return False
            s.delete(row)
            return True

    def count_shifts(self, job_id: int) -> int:
        with session_scope(self._db) as s:
            return int(s.execute(select(func.count(ShiftRow.id)).where(ShiftRow.job_id == int(job_id))).scalar_one())

    def list_jobs(
        self,
        *,
        company_id: Optional[int] = None,
        status: Optional[JobStatus] = None,
        limit: int = 200,
    ) -> Sequence[Job]:
        stmt = self._select()
        if company_id is not None:
            stmt = stmt.where(JobRow.company_id == int(company_id))
        if status is not None:
            stmt = stmt.where(JobRow.status == status.value)
        stmt = stmt.order_by(JobRow.created_at.desc(), JobRow.id.desc()).limit(int(limit))
        with session_scope(self._db) as s:
            return [to_job(r[0], r[1]) for r in s.execute(stmt)]

    def count_jobs(self, *, status: Optional[JobStatus] = None, company_id: Optional[int] = None) -> int:
        stmt = select(func.count(JobRow.id))
        if status is not None:
            stmt = stmt.where(JobRow.status == status.value)
        if company_id is not None:
            stmt = stmt.where(JobRow.company_id == int(company_id))
        with session_scope(self._db) as s:
            return int(s.execute(stmt).scalar_one())
