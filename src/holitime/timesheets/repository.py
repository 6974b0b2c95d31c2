from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import TimesheetStatus
from .model import Timesheet


class TimesheetRepository(Protocol):
    def get_by_id(self, timesheet_id: int) -> Optional[Timesheet]:
        raise NotImplementedError

    def get_by_shift_id(self, shift_id: int) -> Optional[Timesheet]:
        raise NotImplementedError

    def create(
        self,
        *,
        shift_id: int,
        status: TimesheetStatus,
        submitted_by: Optional[int],
        submitted_at: Optional[datetime],
    ) -> int:
        raise NotImplementedError

    def update(self, timesheet_id: int, **fields) -> bool:
        raise NotImplementedError

    def list_timesheets(
        self,
        *,
        status: Optional[TimesheetStatus] = None,
        company_id: Optional[int] = None,
        assigned_user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[Timesheet]:
        """Newest first; ``assigned_user_id`` keeps shifts that user works on."""

        raise NotImplementedError

    def statuses_for_shifts(self, shift_ids: Iterable[int]) -> dict[int, TimesheetStatus]:
        raise NotImplementedError

    def count_by_status(self, status: TimesheetStatus, *, company_id: Optional[int] = None) -> int:
        raise NotImplementedError
