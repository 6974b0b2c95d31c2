from __future__ import annotations

from typing import Optional, Sequence

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import and_, or_, select

from ..database.session import session_scope
from ..database.tables import CrewChiefPermissionRow, JobRow, ShiftRow, UserRow
from .model import CrewChiefPermission, PermissionType
from .repository import CrewChiefPermissionRepository


def to_permission(row: CrewChiefPermissionRow, user_name: Optional[str] = None) -> CrewChiefPermission:
    return CrewChiefPermission(
        permission_id=int(row.id),
        user_id=int(row.user_id),
        permission_type=PermissionType(row.permission_type),
        target_id=int(row.target_id),
        granted_by=int(row.granted_by) if row.granted_by is not None else None,
        created_at=row.created_at,
        user_name=user_name,
    )


class SQLAlchemyCrewChiefPermissionRepository(CrewChiefPermissionRepository):
    def __init__(self, db: SQLAlchemy):
        self._db = db

    @staticmethod
    def _select():
        return select(CrewChiefPermissionRow, UserRow.name).join(UserRow, UserRow.id == CrewChiefPermissionRow.user_id)

    @staticmethod
    def _match(user_id: int, permission_type: PermissionType, target_id: int):
        return and_(
            CrewChiefPermissionRow.user_id == int(user_id),
            CrewChiefPermissionRow.permission_type == PermissionType(permission_type).value,
            CrewChiefPermissionRow.target_id == int(target_id),
        )

    def get(self, *, user_id: int, permission_type: PermissionType, target_id: int) -> Optional[CrewChiefPermission]:
        with session_scope(self._db) as s:
            r = s.execute(self._select().where(self._match(user_id, permission_type, target_id))).first()
            return to_permission(*r) if r else None

    def create(
        self, *, user_id: int, permission_type: PermissionType, target_id: int, granted_by: Optional[int]
    ) -> int:
        with session_scope(self._db) as s:
            row = CrewChiefPermissionRow(
                user_id=int(user_id),
                permission_type=PermissionType(permission_type).value,
                target_id=int(target_id),
                granted_by=granted_by,
            )
            s.add(row)
            s.flush()
            return int(row.id)

    def delete(self, *, user_id: int, permission_type: PermissionType, target_id: int) -> bool:
        with session_scope(self._db) as s:
            row = s.execute(
                select(CrewChiefPermissionRow).where(self._match(user_id, permission_type, target_id))
            ).scalar_one_or_none()
            if not row:
                return False
            s.delete(row)
            return True

    def list_permissions(
        self,
        *,
        user_id: Optional[int] = None,
        permission_type: Optional[PermissionType] = None,
        target_id: Optional[int] = None,
    ) -> Sequence[CrewChiefPermission]:
        stmt = self._select()
        if user_id is not None:
            stmt = stmt.where(CrewChiefPermissionRow.user_id == int(user_id))
        if permission_type is not None:
            stmt = stmt.where(CrewChiefPermissionRow.permission_type == PermissionType(permission_type).value)
        if target_id is not None:
            stmt = stmt.where(CrewChiefPermissionRow.target_id == int(target_id))
        stmt = stmt.order_by(CrewChiefPermissionRow.created_at.desc(), CrewChiefPermissionRow.id.desc())
        with session_scope(self._db) as s:
            return [to_permission(*r) for r in s.execute(stmt)]

    def has_shift_access(self, *, user_id: int, shift_id: int) -> bool:
        with session_scope(self._db) as s:
            target = s.execute(
                select(ShiftRow.job_id, JobRow.company_id)
                .join(JobRow, JobRow.id == ShiftRow.job_id)
                .where(ShiftRow.id == int(shift_id))
            ).first()
            if not target:
                return False
            job_id, company_id = target
            kind = CrewChiefPermissionRow.permission_type
            stmt = (
                select(CrewChiefPermissionRow.id)
                .where(CrewChiefPermissionRow.user_id == int(user_id))
                .where(
                    or_(
                        and_(kind == PermissionType.SHIFT.value, CrewChiefPermissionRow.target_id == int(shift_id)),
                        and_(kind == PermissionType.JOB.value, CrewChiefPermissionRow.target_id == int(job_id)),
                        and_(kind == PermissionType.CLIENT.value, CrewChiefPermissionRow.target_id == int(company_id)),
                    )
                )
                .limit(1)
            )
            return s.execute(stmt).first() is not None
