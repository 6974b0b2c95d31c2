from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func, select

from ..core.enums import TimesheetStatus
from ..database.session import session_scope
from ..database.tables import AssignmentRow, CompanyRow, JobRow, ShiftRow, TimesheetRow
from .model import Timesheet
from .repository import TimesheetRepository

_FIELDS = (
    "status",
    "submitted_by",
    "submitted_at",
    "company_signature",
    "company_approved_at",
    "company_approved_by",
    "company_notes",
    "manager_approved_at",
    "manager_approved_by",
    "manager_notes",
    "rejection_reason",
    "rejected_at",
    "rejected_by",
)


def to_timesheet(row: TimesheetRow, shift: Optional[ShiftRow] = None, job: Optional[JobRow] = None,
                 company_name: Optional[str] = None) -> Timesheet:
    return Timesheet(
        timesheet_id=int(row.id),
        shift_id=int(row.shift_id),
        status=TimesheetStatus(row.status),
        submitted_by=row.submitted_by,
        submitted_at=row.submitted_at,
        company_signature=row.company_signature,
        company_approved_at=row.company_approved_at,
        company_approved_by=row.company_approved_by,
        company_notes=row.company_notes,
        manager_approved_at=row.manager_approved_at,
        manager_approved_by=row.manager_approved_by,
        manager_notes=row.manager_notes,
        rejection_reason=row.rejection_reason,
        rejected_at=row.rejected_at,
        rejected_by=row.rejected_by,
        created_at=row.created_at,
        shift_date=shift.date if shift is not None else None,
        job_id=int(job.id) if job is not None else None,
        job_name=job.name if job is not None else None,
        company_id=int(job.company_id) if job is not None else None,
        company_name=company_name,
    )


class SQLAlchemyTimesheetRepository(TimesheetRepository):
    def __init__(self, db: SQLAlchemy):
        self._db = db

    @staticmethod
    def _select():
        return (
            select(TimesheetRow, ShiftRow, JobRow, CompanyRow.name)
            .join(ShiftRow, ShiftRow.id == TimesheetRow.shift_id)
            .join(JobRow, JobRow.id == ShiftRow.job_id)
            .join(CompanyRow, CompanyRow.id == JobRow.company_id)
        )

    def get_by_id(self, timesheet_id: int) -> Optional[Timesheet]:
        with session_scope(self._db) as s:
            r = s.execute(self._select().where(TimesheetRow.id == int(timesheet_id))).first()
            return to_timesheet(*r) if r else None

    def get_by_shift_id(self, shift_id: int) -> Optional[Timesheet]:
        with session_scope(self._db) as s:
            r = s.execute(self._select().where(TimesheetRow.shift_id == int(shift_id))).first()
            return to_timesheet(*r) if r else None

    def create(
        self,
        *,
        shift_id: int,
        status: TimesheetStatus,
        submitted_by: Optional[int],
        submitted_at: Optional[datetime],
    ) -> int:
        with session_scope(self._db) as s:
            row = TimesheetRow(
                shift_id=int(shift_id),
                status=status.value,
                submitted_by=submitted_by,
                submitted_at=submitted_at,
            )
            s.add(row)
            s.flush()
            return int(row.id)

    def update(self, timesheet_id: int, **fields) -> bool:
        unknown = set(fields) - set(_FIELDS)
        if unknown:
            raise ValueError(f"Unknown timesheet fields: {sorted(unknown)}")
        with session_scope(self._db) as s:
            row = s.get(TimesheetRow, int(timesheet_id))
            if not row:
                return False
            for key, value in fields.items():
                if isinstance(value, TimesheetStatus):
                    value = value.value
                setattr(row, key, value)
            return True

    def list_timesheets(
        self,
        *,
        status: Optional[TimesheetStatus] = None,
        company_id: Optional[int] = None,
        assigned_user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[Timesheet]:
        stmt = self._select()
        if status is not None:
            stmt = stmt.where(TimesheetRow.status == status.value)
        if company_id is not None:
            stmt = stmt.where(JobRow.company_id == int(company_id))
        if assigned_user_id is not None:
            mine = select(AssignmentRow.shift_id).where(AssignmentRow.user_id == int(assigned_user_id))
            stmt = stmt.where(TimesheetRow.shift_id.in_(mine))
        stmt = stmt.order_by(ShiftRow.date.desc(), TimesheetRow.id.desc()).limit(int(limit))
        with session_scope(self._db) as s:
            return [to_timesheet(*r) for r in s.execute(stmt)]

    def statuses_for_shifts(self, shift_ids: Iterable[int]) -> dict[int, TimesheetStatus]:
        ids = [int(i) for i in shift_ids]
        if not ids:
            return {}
        stmt = select(TimesheetRow.shift_id, TimesheetRow.status).where(TimesheetRow.shift_id.in_(ids))
        with session_scope(self._db) as s:
            return {int(sid): TimesheetStatus(st) for sid, st in s.execute(stmt)}

    def count_by_status(self, status: TimesheetStatus, *, company_id: Optional[int] = None) -> int:
        stmt = select(func.count(TimesheetRow.id)).where(TimesheetRow.status == status.value)
        if company_id is not None:
            stmt = (
                stmt.join(ShiftRow, ShiftRow.id == TimesheetRow.shift_id)
                .join(JobRow, JobRow.id == ShiftRow.job_id)
                .where(JobRow.company_id == int(company_id))
            )
        with session_scope(self._db) as s:
            return int(s.execute(stmt).scalar_one())
