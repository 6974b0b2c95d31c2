from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import (
    optional_text,
    parse_bool,
    require_email,
    require_int,
    require_min_length,
    require_non_empty,
)
from ..companies.repository import CompanyRepository
from ..core.constants import DEFAULT_LIST_LIMIT, INTERNAL_ROLES, MAX_LIST_LIMIT, MIN_PASSWORD_LENGTH
from ..core.enums import UserRole
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from .model import SessionUser, User
from .repository import UserRepository

logger = logging.getLogger(__name__)

_BAD_CREDENTIALS = "Invalid email or password"


def parse_role(value: Any) -> UserRole:
    try:
        return UserRole(value)
    except ValueError:
        raise ValidationError(f"Unknown role: {value!r}")


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email(str(email or "").strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError(_BAD_CREDENTIALS)

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("Failed login for %s", user.email)
            raise AuthenticationError(_BAD_CREDENTIALS)

        logger.info("User %s logged in", user.user_id)
        return SessionUser(
            user_id=user.user_id,
            name=user.name,
            email=user.email,
            role=user.role,
            company_id=user.company_id,
        )


class UserService:
    """Use case: manage user accounts."""

    def __init__(self, users: UserRepository, companies: CompanyRepository):
        self._users = users
        self._companies = companies

    def _require_company(self, role: UserRole, company_id: Optional[int]) -> Optional[int]:
        if company_id is None:
            if role == UserRole.COMPANY_USER:
                raise ValidationError("Company users must belong to a company")
            return None
        company_id = require_int(company_id, "company_id", minimum=1)
        if not self._companies.get_by_id(company_id):
            raise ValidationError("Company does not exist")
        return company_id

    def create_user(
        self,
        *,
        actor: SessionUser,
        name: str,
        email: str,
        password: str,
        role: UserRole,
        company_id: Optional[int] = None,
        crew_chief_eligible: bool = False,
        fork_operator_eligible: bool = False,
        certifications: Sequence[str] = (),
        location: Optional[str] = None,
    ) -> int:
        if actor.role != UserRole.ADMIN:
            raise AuthorizationError("Only administrators can create users")

        name = require_non_empty(name, "Name")
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        company_id = self._require_company(role, company_id)
        if not isinstance(certifications, (list, tuple)):
            raise ValidationError("certifications must be a list")

        if self._users.get_by_email(email):
            raise ConflictError("A user with this email already exists")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            company_id=company_id,
            crew_chief_eligible=parse_bool(crew_chief_eligible, "crew_chief_eligible"),
            fork_operator_eligible=parse_bool(fork_operator_eligible, "fork_operator_eligible"),
            certifications=[str(c).strip() for c in certifications if str(c).strip()],
            location=optional_text(location),
        )
        logger.info("User %s created by %s with role %s", user_id, actor.user_id, role.value)
        return user_id

    def get_user(self, *, actor: SessionUser, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        if actor.user_id == user.user_id or actor.role in INTERNAL_ROLES:
            return user
        if actor.role == UserRole.COMPANY_USER and user.company_id == actor.company_id:
            return user
        raise AuthorizationError("You do not have permission to view this user")

    def update_user(self, *, actor: SessionUser, user_id: int, changes: dict) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")

        is_admin = actor.role == UserRole.ADMIN
        if not is_admin and actor.user_id != user.user_id:
            raise AuthorizationError("You can only update your own profile")

        admin_only = {"role", "company_id", "is_active", "crew_chief_eligible", "fork_operator_eligible"}
        if not is_admin and admin_only & set(changes):
            raise AuthorizationError("Only administrators can change role, company or status")

        fields: dict[str, Any] = {}
        if "name" in changes:
            fields["name"] = require_non_empty(changes["name"], "Name")
        if "email" in changes:
            email = require_email(changes["email"])
            other = self._users.get_by_email(email)
            if other and other.user_id != user.user_id:
                raise ConflictError("A user with this email already exists")
            fields["email"] = email
        if "location" in changes:
            fields["location"] = optional_text(changes["location"])
        if "certifications" in changes:
            certs = changes["certifications"] or []
            if not isinstance(certs, (list, tuple)):
                raise ValidationError("certifications must be a list")
            fields["certifications"] = [str(c).strip() for c in certs if str(c).strip()]
        for flag in ("is_active", "crew_chief_eligible", "fork_operator_eligible"):
            if flag in changes:
                fields[flag] = parse_bool(changes[flag], flag)

        role = user.role
        if "role" in changes:
            role = parse_role(changes["role"])
            fields["role"] = role
        company_id = changes.get("company_id", user.company_id)
        if "role" in changes or "company_id" in changes:
            fields["company_id"] = self._require_company(role, company_id)

        if fields.get("is_active") is False and user.user_id == actor.user_id:
            raise ValidationError("You cannot deactivate your own account")

        if fields:
            self._users.update_user(user.user_id, **fields)
            logger.info("User %s updated by %s: %s", user.user_id, actor.user_id, sorted(fields))
        return self._users.get_by_id(user.user_id) or user

    def change_password(self, *, actor: SessionUser, user_id: int, current_password: str, new_password: str) -> None:
        if actor.user_id != int(user_id):
            raise AuthorizationError("You can only change your own password")
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        try:
            ok = check_password_hash(user.password_hash, current_password or "")
        except ValueError:
            ok = False
        if not ok:
            raise ValidationError("Current password is incorrect")
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)
        self._users.set_password_hash(user.user_id, generate_password_hash(new_password))
        logger.info("User %s changed password", user.user_id)

    def reset_password(self, *, actor: SessionUser, user_id: int, new_password: str) -> None:
        if actor.role != UserRole.ADMIN:
            raise AuthorizationError("Only administrators can reset passwords")
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)
        if not self._users.set_password_hash(int(user_id), generate_password_hash(new_password)):
            raise NotFoundError("User not found")
        logger.info("Password of user %s reset by %s", user_id, actor.user_id)

    def deactivate_user(self, *, actor: SessionUser, user_id: int) -> None:
        if actor.role != UserRole.ADMIN:
            raise AuthorizationError("Only administrators can deactivate users")
        if int(user_id) == actor.user_id:
            raise ValidationError("You cannot deactivate your own account")
        if not self._users.set_active(int(user_id), is_active=False):
            raise NotFoundError("User not found")
        logger.info("User %s deactivated by %s", user_id, actor.user_id)

    def list_users(
        self,
        *,
        actor: SessionUser,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
        company_id: Optional[int] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[User]:
        limit = max(1, min(int(limit), MAX_LIST_LIMIT))
        if actor.role in {UserRole.ADMIN, UserRole.STAFF}:
            return self._users.list_users(role=role, is_active=is_active, company_id=company_id, limit=limit)
        if actor.role == UserRole.COMPANY_USER:
            return self._users.list_users(role=role, is_active=is_active, company_id=actor.company_id, limit=limit)
        raise AuthorizationError("You do not have permission to list users")
