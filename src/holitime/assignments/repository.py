from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import RoleCode, WorkerStatus
from .model import Assignment


class AssignmentRepository(Protocol):
    def get_by_id(self, assignment_id: int) -> Optional[Assignment]:
        raise NotImplementedError

    def list_for_shift(self, shift_id: int) -> Sequence[Assignment]:
        raise NotImplementedError

    def find_for_user(self, *, shift_id: int, user_id: int) -> Optional[Assignment]:
        raise NotImplementedError

    def find_placeholder(self, *, shift_id: int, role_code: RoleCode) -> Optional[Assignment]:
        """Oldest open (up for grabs) slot of that role."""

        raise NotImplementedError

    def create(
        self,
        *,
        shift_id: int,
        user_id: Optional[int],
        role_code: RoleCode,
        status: WorkerStatus = WorkerStatus.ASSIGNED,
    ) -> int:
        raise NotImplementedError

    def assign_user(self, assignment_id: int, *, user_id: int, status: WorkerStatus = WorkerStatus.ASSIGNED) -> bool:
        raise NotImplementedError

    def set_status(self, assignment_id: int, status: WorkerStatus) -> bool:
        raise NotImplementedError

    def make_placeholder(self, assignment_id: int) -> bool:
        """Detach the worker and open the slot for others."""

        raise NotImplementedError

    def delete(self, assignment_id: int) -> bool:
        raise NotImplementedError
