from __future__ import annotations

from .base import HoursCalculator
from ...common.datetime_utils import minutes_between, round_time
from ...core.constants import ROUNDING_MINUTES
from ...timekeeping.model import TimeEntry


class RoundedHoursCalculator(HoursCalculator):
    """Billing rule: clock-in rounded down, clock-out rounded up to 15 minutes."""

    def __init__(self, step_minutes: int = ROUNDING_MINUTES):
        self._step = int(step_minutes)

    def entry_minutes(self, entry: TimeEntry) -> int:
        if not entry.clock_out:
            return 0
        start = round_time(entry.clock_in, "down", step_minutes=self._step)
        end = round_time(entry.clock_out, "up", step_minutes=self._step)
        return minutes_between(start, end)
