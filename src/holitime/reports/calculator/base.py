from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from ...timekeeping.model import TimeEntry


class HoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked hours)."""

    @abstractmethod
    def entry_minutes(self, entry: TimeEntry) -> int:
        raise NotImplementedError

    def total_minutes(self, entries: Iterable[TimeEntry]) -> int:
        return sum(self.entry_minutes(e) for e in entries)
