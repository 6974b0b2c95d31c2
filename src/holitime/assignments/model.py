from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import RoleCode, WorkerStatus


@dataclass(frozen=True)
class Assignment:
    """A worker (or an open placeholder) on a shift."""

    assignment_id: int
    shift_id: int
    user_id: Optional[int]
    role_code: RoleCode
    status: WorkerStatus = WorkerStatus.ASSIGNED
    created_at: Optional[datetime] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None

    @property
    def is_placeholder(self) -> bool:
        return self.user_id is None

    @property
    def is_done(self) -> bool:
        return self.status in (WorkerStatus.SHIFT_ENDED, WorkerStatus.NO_SHOW)
