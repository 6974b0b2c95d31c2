from __future__ import annotations

from typing import Optional, Sequence

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func, select

from ..database.session import session_scope
from ..database.tables import CompanyRow, JobRow
from .model import Company
from .repository import CompanyRepository

_FIELDS = ("name", "address", "phone", "email", "website", "description", "is_active")


def to_company(row: CompanyRow) -> Company:
    return Company(
        company_id=int(row.id),
        name=row.name,
        address=row.address,
        phone=row.phone,
        email=row.email,
        website=row.website,
        description=row.description,
        is_active=bool(row.is_active),
        created_at=row.created_at,
    )


class SQLAlchemyCompanyRepository(CompanyRepository):
    def __init__(self, db: SQLAlchemy):
        self._db = db

    def get_by_id(self, company_id: int) -> Optional[Company]:
        with session_scope(self._db) as s:
            row = s.get(CompanyRow, int(company_id))
            return to_company(row) if row else None

    def get_by_name(self, name: str) -> Optional[Company]:
        with session_scope(self._db) as s:
            row = s.execute(
                select(CompanyRow).where(func.lower(CompanyRow.name) == (name or "").strip().lower())
            ).scalar_one_or_none()
            return to_company(row) if row else None

    def create(self, **fields) -> int:
        with session_scope(self._db) as s:
            row = CompanyRow(**{k: v for k, v in fields.items() if k in _FIELDS})
            s.add(row)
            s.flush()
            return int(row.id)

    def update(self, company_id: int, **fields) -> bool:
        with session_scope(self._db) as s:
            row = s.get(CompanyRow, int(company_id))
            if not row:
                return False
            for key, value in fields.items():
                if key in _FIELDS:
                    setattr(row, key, value)
            return True

    def delete(self, company_id: int) -> bool:
        with session_scope(self._db) as s:
            row = s.get(CompanyRow, int(company_id))
            if not row:
                return False
            s.delete(row)
            return True

    def count_jobs(self, company_id: int) -> int:
        with session_scope(self._db) as s:
            return int(
                s.execute(select(func.count(JobRow.id)).where(JobRow.company_id == int(company_id))).scalar_one()
            )

    def list_all(self, *, active_only: bool = False, limit: int = 200) -> Sequence[Company]:
        stmt = select(CompanyRow)
        if active_only:
            stmt = stmt.where(CompanyRow.is_active.is_(True))
        stmt = stmt.order_by(CompanyRow.name.asc()).limit(int(limit))
        with session_scope(self._db) as s:
            return [to_company(r) for r in s.execute(stmt).scalars()]
