from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..common.validators import optional_int, require_int
from ..companies.repository import CompanyRepository
from ..core.enums import UserRole
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..jobs.repository import JobRepository
from ..shifts.repository import ShiftRepository
from ..users.model import SessionUser
from ..users.repository import UserRepository
from .model import CrewChiefPermission, PermissionType
from .repository import CrewChiefPermissionRepository

logger = logging.getLogger(__name__)


def parse_permission_type(value: Any) -> PermissionType:
    try:
        return PermissionType(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError("permissionType must be one of shift, job, client")


class CrewChiefPermissionService:
    """Admin-granted access for crew chiefs beyond the shifts they lead."""

    def __init__(
        self,
        permissions: CrewChiefPermissionRepository,
        users: UserRepository,
        shifts: ShiftRepository,
        jobs: JobRepository,
        companies: CompanyRepository,
    ):
        self._permissions = permissions
        self._users = users
        self._shifts = shifts
        self._jobs = jobs
        self._companies = companies

    @staticmethod
    def _require_admin(actor: SessionUser) -> None:
        if actor.role != UserRole.ADMIN:
            raise AuthorizationError("Only administrators can manage crew chief permissions")

    def _target_exists(self, permission_type: PermissionType, target_id: int) -> bool:
        if permission_type == PermissionType.SHIFT:
            return self._shifts.get_by_id(target_id) is not None
        if permission_type == PermissionType.JOB:
            return self._jobs.get_by_id(target_id) is not None
        return self._companies.get_by_id(target_id) is not None

    def list_permissions(
        self, *, actor: SessionUser, user_id: Any = None, permission_type: Any = None
    ) -> Sequence[CrewChiefPermission]:
        self._require_admin(actor)
        kind: Optional[PermissionType] = parse_permission_type(permission_type) if permission_type else None
        return self._permissions.list_permissions(
            user_id=optional_int(user_id, "userId", minimum=1), permission_type=kind
        )

    def grant(self, *, actor: SessionUser, user_id: Any, permission_type: Any, target_id: Any) -> int:
        self._require_admin(actor)
        user_id = require_int(user_id, "userId", minimum=1)
        target_id = require_int(target_id, "targetId", minimum=1)
        kind = parse_permission_type(permission_type)

        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        if user.role != UserRole.CREW_CHIEF or not user.is_active:
            raise ValidationError(f"{user.name} is not an active crew chief")
        if not self._target_exists(kind, target_id):
            raise NotFoundError(f"{kind.value.capitalize()} {target_id} not found")
        if self._permissions.get(user_id=user_id, permission_type=kind, target_id=target_id):
            raise ConflictError("Permission already granted")

        permission_id = self._permissions.create(
            user_id=user_id, permission_type=kind, target_id=target_id, granted_by=actor.user_id
        )
        logger.info("Crew chief %s granted %s %s by %s", user_id, kind.value, target_id, actor.user_id)
        return permission_id

    def revoke(self, *, actor: SessionUser, user_id: Any, permission_type: Any, target_id: Any) -> None:
        self._require_admin(actor)
        user_id = require_int(user_id, "userId", minimum=1)
        target_id = require_int(target_id, "targetId", minimum=1)
        kind = parse_permission_type(permission_type)
        if not self._permissions.delete(user_id=user_id, permission_type=kind, target_id=target_id):
            raise NotFoundError("Permission not found")
        logger.info("Crew chief %s lost %s %s (revoked by %s)", user_id, kind.value, target_id, actor.user_id)
