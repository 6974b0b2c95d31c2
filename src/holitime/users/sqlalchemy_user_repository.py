from __future__ import annotations

from typing import Iterable, Optional, Sequence

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func, select

from ..core.enums import UserRole
from ..database.session import session_scope
from ..database.tables import UserRow
from .model import User
from .repository import UserRepository

_UPDATABLE = {
    "name",
    "email",
    "role",
    "company_id",
    "is_active",
    "crew_chief_eligible",
    "fork_operator_eligible",
    "certifications",
    "location",
}


def to_user(row: UserRow) -> User:
    return User(
        user_id=int(row.id),
        name=row.name,
        email=row.email,
        password_hash=row.password_hash or "",
        role=UserRole(row.role),
        company_id=row.company_id,
        is_active=bool(row.is_active),
        crew_chief_eligible=bool(row.crew_chief_eligible),
        fork_operator_eligible=bool(row.fork_operator_eligible),
        certifications=tuple(row.certifications or ()),
        location=row.location,
    )


class SQLAlchemyUserRepository(UserRepository):
    def __init__(self, db: SQLAlchemy):
        self._db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        with session_scope(self._db) as s:
            row = s.get(UserRow, int(user_id))
            return to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with session_scope(self._db) as s:
            row = s.execute(
                select(UserRow).where(func.lower(UserRow.email) == (email or "").strip().lower())
            ).scalar_one_or_none()
            return to_user(row) if row else None

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: UserRole,
        company_id: Optional[int],
        crew_chief_eligible: bool = False,
        fork_operator_eligible: bool = False,
        certifications: Sequence[str] = (),
        location: Optional[str] = None,
    ) -> int:
        with session_scope(self._db) as s:
            row = UserRow(
                name=name,
                email=email,
                password_hash=password_hash,
                role=role.value,
                company_id=company_id,
                is_active=True,
                crew_chief_eligible=bool(crew_chief_eligible),
                fork_operator_eligible=bool(fork_operator_eligible),
                certifications=list(certifications),
                location=location,
            )
            s.add(row)
            s.flush()
            return int(row.id)

    def update_user(self, user_id: int, **fields) -> bool:
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)}")
        with session_scope(self._db) as s:
            row = s.get(UserRow, int(user_id))
            if not row:
                return False
            for key, value in fields.items():
                if key == "role" and isinstance(value, UserRole):
                    value = value.value
                if key == "certifications":
                    value = list(value or ())
                setattr(row, key, value)
            return True

    def set_password_hash(self, user_id: int, password_hash: str) -> bool:
        with session_scope(self._db) as s:
            row = s.get(UserRow, int(user_id))
            if not row:
                return False
            row.password_hash = password_hash
            return True

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        with session_scope(self._db) as s:
            row = s.get(UserRow, int(user_id))
            if not row:
                return False
            row.is_active = bool(is_active)
            return True

    def list_users(
        self,
        *,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
        company_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[User]:
        stmt = select(UserRow)
        if role is not None:
            stmt = stmt.where(UserRow.role == role.value)
        if is_active is not None:
            stmt = stmt.where(UserRow.is_active == bool(is_active))
        if company_id is not None:
            stmt = stmt.where(UserRow.company_id == int(company_id))
        stmt = stmt.order_by(UserRow.name.asc()).limit(int(limit))
        with session_scope(self._db) as s:
            return [to_user(r) for r in s.execute(stmt).scalars()]

    def list_active_by_roles(self, roles: Iterable[UserRole]) -> Sequence[User]:
        values = [r.value for r in roles]
        if not values:
            return []
        stmt = (
            select(UserRow)
            .where(UserRow.is_active.is_(True), UserRow.role.in_(values))
            .order_by(UserRow.id.asc())
        )
        with session_scope(self._db) as s:
            return [to_user(r) for r in s.execute(stmt).scalars()]

    def find_active_company_user(self, company_id: int) -> Optional[User]:
        stmt = (
            select(UserRow)
            .where(
                UserRow.company_id == int(company_id),
                UserRow.role == UserRole.COMPANY_USER.value,
                UserRow.is_active.is_(True),
            )
            .order_by(UserRow.id.asc())
            .limit(1)
        )
        with session_scope(self._db) as s:
            row = s.execute(stmt).scalar_one_or_none()
            return to_user(row) if row else None
