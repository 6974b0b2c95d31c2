from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import TimeEntry


class TimeEntryRepository(Protocol):
    def list_for_assignment(self, assignment_id: int) -> Sequence[TimeEntry]:
        raise NotImplementedError

    def list_for_shift(self, shift_id: int) -> Sequence[TimeEntry]:
        raise NotImplementedError

    def get_active(self, assignment_id: int) -> Optional[TimeEntry]:
        raise NotImplementedError

    def create(self, *, assignment_id: int, entry_number: int, clock_in: datetime, notes: Optional[str] = None) -> int:
        """Insert an open (active) entry."""

        raise NotImplementedError

    def close(self, entry_id: int, *, clock_out: datetime) -> bool:
        raise NotImplementedError
