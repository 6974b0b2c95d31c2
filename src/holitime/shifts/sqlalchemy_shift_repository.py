from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import delete, exists, select

from ..core.enums import ShiftStatus
from ..database.session import session_scope
from ..database.tables import AssignmentRow, CompanyRow, JobRow, ShiftRow, TimeEntryRow, TimesheetRow
from .model import REQUIREMENT_COLUMNS, Shift, WorkerRequirements
from .repository import ShiftRepository

_FIELDS = (
    "job_id",
    "date",
    "start_time",
    "end_time",
    "status",
    "location",
    "description",
    "notes",
    "requested_workers",
)


def to_shift(row: ShiftRow, job: Optional[JobRow] = None, company_name: Optional[str] = None) -> Shift:
    requirements = WorkerRequirements(
        counts={rc: int(getattr(row, col) or 0) for rc, col in REQUIREMENT_COLUMNS.items()}
    )
    return Shift(
        shift_id=int(row.id),
        job_id=int(row.job_id),
        date=row.date,
        start_time=row.start_time,
        end_time=row.end_time,
        status=ShiftStatus(row.status),
        location=row.location,
        description=row.description,
        notes=row.notes,
        requested_workers=row.requested_workers,
        requirements=requirements,
        created_at=row.created_at,
        job_name=job.name if job is not None else None,
        company_id=int(job.company_id) if job is not None else None,
        company_name=company_name,
    )


def _columns(fields: dict) -> dict:
    out = {}
    for key, value in fields.items():
        if key not in _FIELDS:
            continue
        if isinstance(value, ShiftStatus):
            value = value.value
        out[key] = value
    return out


class SQLAlchemyShiftRepository(ShiftRepository):
    def __init__(self, db: SQLAlchemy):
        self._db = db

    @staticmethod
    def _select():
        return (
            select(ShiftRow, JobRow, CompanyRow.name)
            .join(JobRow, JobRow.id == ShiftRow.job_id)
            .join(CompanyRow, CompanyRow.id == JobRow.company_id)
        )

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with session_scope(self._db) as s:
            r = s.execute(self._select().where(ShiftRow.id == int(shift_id))).first()
            return to_shift(*r) if r else None

    def create(self, *, requirements: WorkerRequirements, **fields) -> int:
        with session_scope(self._db) as s:
            row = ShiftRow(**_columns(fields))
            for rc, col in REQUIREMENT_COLUMNS.items():
                setattr(row, col, requirements.count_for(rc))
            s.add(row)
            s.flush()
            return int(row.id)

    def update(self, shift_id: int, **fields) -> bool:
        with session_scope(self._db) as s:
            row = s.get(ShiftRow, int(shift_id))
            if not row:
                return False
            for key, value in _columns(fields).items():
                setattr(row, key, value)
            return True

    def set_status(self, shift_id: int, status: ShiftStatus) -> bool:
        return self.update(shift_id, status=status)

    def set_requirements(self, shift_id: int, requirements: WorkerRequirements) -> bool:
        with session_scope(self._db) as s:
            row = s.get(ShiftRow, int(shift_id))
            if not row:
                return False
            for rc, col in REQUIREMENT_COLUMNS.items():
                setattr(row, col, requirements.count_for(rc))
            return True

    def delete(self, shift_id: int) -> bool:
        with session_scope(self._db) as s:
            row = s.get(ShiftRow, int(shift_id))
            if not row:
                return False
            s.execute(delete(TimesheetRow).where(TimesheetRow.shift_id == row.id))
            s.execute(delete(AssignmentRow).where(AssignmentRow.shift_id == row.id))
            s.delete(row)
            return True

    def has_time_entries(self, shift_id: int) -> bool:
        stmt = select(
            exists().where(
                TimeEntryRow.assignment_id == AssignmentRow.id,
                AssignmentRow.shift_id == int(shift_id),
            )
        )
        with session_scope(self._db) as s:
            return bool(s.execute(stmt).scalar())

    def find_by_slot(self, *, job_id: int, on_date: date, start_time: time) -> Optional[Shift]:
        stmt = self._select().where(
            ShiftRow.job_id == int(job_id), ShiftRow.date == on_date, ShiftRow.start_time == start_time
        )
        with session_scope(self._db) as s:
            r = s.execute(stmt.order_by(ShiftRow.id.asc()).limit(1)).first()
            return to_shift(*r) if r else None

    def list_shifts(
        self,
        *,
        job_id: Optional[int] = None,
        company_id: Optional[int] = None,
        on_date: Optional[date] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 200,
    ) -> Sequence[Shift]:
        stmt = self._select()
        if job_id is not None:
            stmt = stmt.where(ShiftRow.job_id == int(job_id))
        if company_id is not None:
            stmt = stmt.where(JobRow.company_id == int(company_id))
        if on_date is not None:
            stmt = stmt.where(ShiftRow.date == on_date)
        if date_from is not None:
            stmt = stmt.where(ShiftRow.date >= date_from)
        if date_to is not None:
            stmt = stmt.where(ShiftRow.date <= date_to)
        stmt = stmt.order_by(ShiftRow.date.asc(), ShiftRow.start_time.asc(), ShiftRow.id.asc()).limit(int(limit))
        with session_scope(self._db) as s:
            return [to_shift(*r) for r in s.execute(stmt)]

    def list_for_user(self, *, user_id: int, date_from: Optional[date] = None, limit: int = 200) -> Sequence[Shift]:
        stmt = self._select().where(
            ShiftRow.id.in_(select(AssignmentRow.shift_id).where(AssignmentRow.user_id == int(user_id)))
        )
        if date_from is not None:
            stmt = stmt.where(ShiftRow.date >= date_from)
        stmt = stmt.order_by(ShiftRow.date.asc(), ShiftRow.start_time.asc()).limit(int(limit))
        with session_scope(self._db) as s:
            return [to_shift(*r) for r in s.execute(stmt)]
