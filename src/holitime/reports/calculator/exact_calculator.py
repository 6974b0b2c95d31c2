from __future__ import annotations

from .base import HoursCalculator
from ...common.datetime_utils import minutes_between
from ...timekeeping.model import TimeEntry


class ExactHoursCalculator(HoursCalculator):
    """Whole minutes between clock-in and clock-out; open entries count 0."""

    def entry_minutes(self, entry: TimeEntry) -> int:
        if not entry.clock_out:
            return 0
        return minutes_between(entry.clock_in, entry.clock_out)
