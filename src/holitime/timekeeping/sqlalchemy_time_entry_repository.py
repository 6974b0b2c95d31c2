from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import select

from ..database.session import session_scope
from ..database.tables import AssignmentRow, TimeEntryRow
from .model import TimeEntry
from .repository import TimeEntryRepository


def to_entry(row: TimeEntryRow) -> TimeEntry:
    return TimeEntry(
        entry_id=int(row.id),
        assignment_id=int(row.assignment_id),
        entry_number=int(row.entry_number),
        clock_in=row.clock_in,
        clock_out=row.clock_out,
        notes=row.notes,
        verified=bool(row.verified),
        is_active=bool(row.is_active),
    )


class SQLAlchemyTimeEntryRepository(TimeEntryRepository):
    def __init__(self, db: SQLAlchemy):
        self._db = db

    def list_for_assignment(self, assignment_id: int) -> Sequence[TimeEntry]:
        stmt = (
            select(TimeEntryRow)
            .where(TimeEntryRow.assignment_id == int(assignment_id))
            .order_by(TimeEntryRow.entry_number.asc())
        )
        with session_scope(self._db) as s:
            return [to_entry(r) for r in s.execute(stmt).scalars()]

    def list_for_shift(self, shift_id: int) -> Sequence[TimeEntry]:
        stmt = (
            select(TimeEntryRow)
            .join(AssignmentRow, AssignmentRow.id == TimeEntryRow.assignment_id)
            .where(AssignmentRow.shift_id == int(shift_id))
            .order_by(TimeEntryRow.assignment_id.asc(), TimeEntryRow.entry_number.asc())
        )
        with session_scope(self._db) as s:
            return [to_entry(r) for r in s.execute(stmt).scalars()]

    def get_active(self, assignment_id: int) -> Optional[TimeEntry]:
        stmt = select(TimeEntryRow).where(
            TimeEntryRow.assignment_id == int(assignment_id),
            TimeEntryRow.is_active.is_(True),
        )
        with session_scope(self._db) as s:
            row = s.execute(stmt).scalars().first()
            return to_entry(row) if row else None

    def create(self, *, assignment_id: int, entry_number: int, clock_in: datetime, notes: Optional[str] = None) -> int:
        with session_scope(self._db) as s:
            row = TimeEntryRow(
                assignment_id=int(assignment_id),
                entry_number=int(entry_number),
                clock_in=clock_in,
                notes=notes,
                is_active=True,
            )
            s.add(row)
            s.flush()
            return int(row.id)

    def close(self, entry_id: int, *, clock_out: datetime) -> bool:
        with session_scope(self._db) as s:
            row = s.get(TimeEntryRow, int(entry_id))
            if not row:
                return False
            row.clock_out = clock_out
            row.is_active = False
            return True
