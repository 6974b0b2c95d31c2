from __future__ import annotations

from typing import Optional, Sequence

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import select

from ..core.enums import RoleCode, WorkerStatus
from ..database.session import session_scope
from ..database.tables import AssignmentRow
from .model import Assignment
from .repository import AssignmentRepository


def to_assignment(row: AssignmentRow) -> Assignment:
    user = row.user if row.user_id is not None else None
    return Assignment(
        assignment_id=int(row.id),
        shift_id=int(row.shift_id),
        user_id=int(row.user_id) if row.user_id is not None else None,
        role_code=RoleCode(row.role_code),
        status=WorkerStatus(row.status),
        created_at=row.created_at,
        user_name=user.name if user is not None else None,
        user_email=user.email if user is not None else None,
    )


class SQLAlchemyAssignmentRepository(AssignmentRepository):
    def __init__(self, db: SQLAlchemy):
        self._db = db

    def get_by_id(self, assignment_id: int) -> Optional[Assignment]:
        with session_scope(self._db) as s:
            row = s.get(AssignmentRow, int(assignment_id))
            return to_assignment(row) if row else None

    def list_for_shift(self, shift_id: int) -> Sequence[Assignment]:
        stmt = (
            select(AssignmentRow)
            .where(AssignmentRow.shift_id == int(shift_id))
            .order_by(AssignmentRow.created_at.asc(), AssignmentRow.id.asc())
        )
        with session_scope(self._db) as s:
            return [to_assignment(r) for r in s.execute(stmt).scalars()]

    def find_for_user(self, *, shift_id: int, user_id: int) -> Optional[Assignment]:
        stmt = select(AssignmentRow).where(
            AssignmentRow.shift_id == int(shift_id),
            AssignmentRow.user_id == int(user_id),
        )
        with session_scope(self._db) as s:
            row = s.execute(stmt).scalars().first()
            return to_assignment(row) if row else None

    def find_placeholder(self, *, shift_id: int, role_code: RoleCode) -> Optional[Assignment]:
        stmt = (
            select(AssignmentRow)
            .where(
                AssignmentRow.shift_id == int(shift_id),
                AssignmentRow.user_id.is_(None),
                AssignmentRow.role_code == role_code.value,
            )
            .order_by(AssignmentRow.created_at.asc(), AssignmentRow.id.asc())
        )
        with session_scope(self._db) as s:
            row = s.execute(stmt).scalars().first()
            return to_assignment(row) if row else None

    def create(
        self,
        *,
        shift_id: int,
        user_id: Optional[int],
        role_code: RoleCode,
        status: WorkerStatus = WorkerStatus.ASSIGNED,
    ) -> int:
        with session_scope(self._db) as s:
            row = AssignmentRow(
                shift_id=int(shift_id),
                user_id=int(user_id) if user_id is not None else None,
                role_code=role_code.value,
                status=status.value,
            )
            s.add(row)
            s.flush()
            return int(row.id)

    def assign_user(self, assignment_id: int, *, user_id: int, status: WorkerStatus = WorkerStatus.ASSIGNED) -> bool:
        with session_scope(self._db) as s:
            row = s.get(AssignmentRow, int(assignment_id))
            if not row:
                return False
            row.user_id = int(user_id)
            row.status = status.value
            return True

    def set_status(self, assignment_id: int, status: WorkerStatus) -> bool:
        with session_scope(self._db) as s:
            row = s.get(AssignmentRow, int(assignment_id))
            if not row:
                return False
            row.status = status.value
            return True

    def make_placeholder(self, assignment_id: int) -> bool:
        with session_scope(self._db) as s:
            row = s.get(AssignmentRow, int(assignment_id))
            if not row:
                return False
            row.user_id = None
            row.status = WorkerStatus.UP_FOR_GRABS.value
            return True

    def delete(self, assignment_id: int) -> bool:
        with session_scope(self._db) as s:
            row = s.get(AssignmentRow, int(assignment_id))
            if not row:
                return False
            s.delete(row)
            return True
