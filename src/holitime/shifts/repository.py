from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import ShiftStatus
from .model import Shift, WorkerRequirements


class ShiftRepository(Protocol):
    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def create(self, *, requirements: WorkerRequirements, **fields) -> int:
        raise NotImplementedError

    def update(self, shift_id: int, **fields) -> bool:
        raise NotImplementedError

    def set_status(self, shift_id: int, status: ShiftStatus) -> bool:
        raise NotImplementedError

    def set_requirements(self, shift_id: int, requirements: WorkerRequirements) -> bool:
        raise NotImplementedError

    def delete(self, shift_id: int) -> bool:
        """Delete the shift with its assignments and timesheet."""

        raise NotImplementedError

    def has_time_entries(self, shift_id: int) -> bool:
        raise NotImplementedError

    def find_by_slot(self, *, job_id: int, on_date: date, start_time: time) -> Optional[Shift]:
        """The job's shift starting at ``start_time`` on ``on_date``, if any."""

        raise NotImplementedError

    def list_shifts(
        self,
        *,
        job_id: Optional[int] = None,
        company_id: Optional[int] = None,
        on_date: Optional[date] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 200,
    ) -> Sequence[Shift]:
        raise NotImplementedError

    def list_for_user(self, *, user_id: int, date_from: Optional[date] = None, limit: int = 200) -> Sequence[Shift]:
        """Shifts the user is assigned to (placeholders excluded)."""

        raise NotImplementedError
