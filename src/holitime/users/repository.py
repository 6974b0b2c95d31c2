from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import UserRole
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

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
        raise NotImplementedError

    def update_user(self, user_id: int, **fields) -> bool:
        raise NotImplementedError

    def set_password_hash(self, user_id: int, password_hash: str) -> bool:
        raise NotImplementedError

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def list_users(
        self,
        *,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
        company_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[User]:
        raise NotImplementedError

    def list_active_by_roles(self, roles: Iterable[UserRole]) -> Sequence[User]:
        raise NotImplementedError

    def find_active_company_user(self, company_id: int) -> Optional[User]:
        raise NotImplementedError
