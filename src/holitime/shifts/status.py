from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import LiveShiftStatus, ShiftStatus, TimesheetStatus
from .model import Shift

FINALIZED_TIMESHEET_STATUSES = frozenset(
    {
        TimesheetStatus.PENDING_COMPANY_APPROVAL,
        TimesheetStatus.PENDING_MANAGER_APPROVAL,
        TimesheetStatus.COMPLETED,
    }
)


def derive_live_status(
    shift: Shift,
    timesheet_status: Optional[TimesheetStatus],
    now: datetime,
) -> LiveShiftStatus:
    """Status shown to users, computed from the clock and the timesheet.

    First match wins: cancelled, finalized timesheet, running, not started,
    ended without a finalized timesheet.
    """

    if shift.status == ShiftStatus.CANCELLED:
        return LiveShiftStatus.CANCELLED
    if timesheet_status in FINALIZED_TIMESHEET_STATUSES:
        return LiveShiftStatus.COMPLETED

    start, end = shift.window()
    if start <= now <= end:
        return LiveShiftStatus.ONGOING
    if now < start:
        return LiveShiftStatus.SCHEDULED
    return LiveShiftStatus.PENDING
