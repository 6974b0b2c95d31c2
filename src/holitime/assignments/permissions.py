from __future__ import annotations

from typing import Optional

from ..core.enums import RoleCode, UserRole
from ..core.exceptions import AuthorizationError
from ..crew_permissions.repository import CrewChiefPermissionRepository
from ..users.model import SessionUser
from .repository import AssignmentRepository


def can_manage_shift(
    actor: SessionUser,
    shift_id: int,
    assignments: AssignmentRepository,
    grants: Optional[CrewChiefPermissionRepository] = None,
) -> bool:
    """Admin and Staff manage every shift. A crew chief manages the shifts they
    lead, plus any shift covered by a shift, job or client grant."""

    if actor.role in (UserRole.ADMIN, UserRole.STAFF):
        return True
    if actor.role != UserRole.CREW_CHIEF:
        return False
    mine = assignments.find_for_user(shift_id=int(shift_id), user_id=actor.user_id)
    if mine and mine.role_code == RoleCode.CREW_CHIEF:
        return True
    return bool(grants and grants.has_shift_access(user_id=actor.user_id, shift_id=int(shift_id)))


def require_shift_manager(
    actor: SessionUser,
    shift_id: int,
    assignments: AssignmentRepository,
    grants: Optional[CrewChiefPermissionRepository] = None,
) -> None:
    if not can_manage_shift(actor, shift_id, assignments, grants):
        raise AuthorizationError("You do not have permission to manage this shift")
