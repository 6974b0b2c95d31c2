from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class NotificationType(str, Enum):
    TIMESHEET_SUBMITTED = "TIMESHEET_SUBMITTED"
    TIMESHEET_COMPANY_APPROVED = "TIMESHEET_COMPANY_APPROVED"
    TIMESHEET_COMPLETED = "TIMESHEET_COMPLETED"
    TIMESHEET_REJECTED = "TIMESHEET_REJECTED"
    TIMESHEET_UNLOCKED = "TIMESHEET_UNLOCKED"
    SHIFT_UP_FOR_GRABS = "SHIFT_UP_FOR_GRABS"
    SHIFT_ASSIGNED = "SHIFT_ASSIGNED"


@dataclass(frozen=True)
class Notification:
    notification_id: int
    user_id: int
    type: str
    title: str
    message: str
    related_timesheet_id: Optional[int] = None
    related_shift_id: Optional[int] = None
    is_read: bool = False
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewNotification:
    user_id: int
    type: NotificationType
    title: str
    message: str
    related_timesheet_id: Optional[int] = None
    related_shift_id: Optional[int] = None
