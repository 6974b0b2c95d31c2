from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class TimeEntry:
    """One clock-in/clock-out pair of an assignment (at most three)."""

    entry_id: int
    assignment_id: int
    entry_number: int
    clock_in: datetime
    clock_out: Optional[datetime] = None
    notes: Optional[str] = None
    verified: bool = False
    is_active: bool = False
