from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.enums import UserRole


@dataclass(frozen=True)
class User:
    """Domain entity: a person who can log in.

    Plain data object, no database access.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: UserRole
    company_id: Optional[int]
    is_active: bool = True
    crew_chief_eligible: bool = False
    fork_operator_eligible: bool = False
    certifications: tuple[str, ...] = field(default_factory=tuple)
    location: Optional[str] = None

    def public_view(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "company_id": self.company_id,
            "is_active": self.is_active,
            "crew_chief_eligible": self.crew_chief_eligible,
            "fork_operator_eligible": self.fork_operator_eligible,
            "certifications": list(self.certifications),
            "location": self.location,
        }


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    name: str
    email: str
    role: UserRole
    company_id: Optional[int]

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def as_session(self) -> dict:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "company_id": self.company_id,
        }
