from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class PermissionType(str, Enum):
    SHIFT = "shift"
    JOB = "job"
    CLIENT = "client"


@dataclass(frozen=True)
class CrewChiefPermission:
    """A grant letting a crew chief manage one shift, every shift of a job,
    or every shift of a client company."""

    permission_id: int
    user_id: int
    permission_type: PermissionType
    target_id: int
    granted_by: Optional[int] = None
    created_at: Optional[datetime] = None
    user_name: Optional[str] = None
