from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import CrewChiefPermission, PermissionType


class CrewChiefPermissionRepository(Protocol):
    def get(self, *, user_id: int, permission_type: PermissionType, target_id: int) -> Optional[CrewChiefPermission]:
        raise NotImplementedError

    def create(
        self, *, user_id: int, permission_type: PermissionType, target_id: int, granted_by: Optional[int]
    ) -> int:
        raise NotImplementedError

    def delete(self, *, user_id: int, permission_type: PermissionType, target_id: int) -> bool:
        raise NotImplementedError

    def list_permissions(
        self,
        *,
        user_id: Optional[int] = None,
        permission_type: Optional[PermissionType] = None,
        target_id: Optional[int] = None,
    ) -> Sequence[CrewChiefPermission]:
        raise NotImplementedError

    def has_shift_access(self, *, user_id: int, shift_id: int) -> bool:
        """True when a shift, job or client grant of ``user_id`` covers the shift."""
        raise NotImplementedError
