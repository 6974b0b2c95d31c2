from __future__ import annotations

from datetime import datetime

from holitime.reports.calculator.exact_calculator import ExactHoursCalculator
from holitime.reports.calculator.rounded_calculator import RoundedHoursCalculator
from holitime.timekeeping.model import TimeEntry


def _entry(n: int, start: datetime, end=None) -> TimeEntry:
    return TimeEntry(entry_id=n, assignment_id=1, entry_number=n, clock_in=start, clock_out=end)


def test_rounded_calculator_rounds_in_down_and_out_up():
    calc = RoundedHoursCalculator()
    e = _entry(1, datetime(2025, 1, 1, 8, 7), datetime(2025, 1, 1, 12, 1))
    # 08:00 -> 12:15
    assert calc.entry_minutes(e) == 255


def test_exact_calculator_counts_whole_minutes():
    calc = ExactHoursCalculator()
    e = _entry(1, datetime(2025, 1, 1, 8, 7), datetime(2025, 1, 1, 12, 1, 59))
    assert calc.entry_minutes(e) == 234


def test_open_entries_count_zero_and_totals_add_up():
    calc = RoundedHoursCalculator()
    entries = [
        _entry(1, datetime(2025, 1, 1, 8, 0), datetime(2025, 1, 1, 12, 0)),
        _entry(2, datetime(2025, 1, 1, 12, 30), datetime(2025, 1, 1, 16, 0)),
        _entry(3, datetime(2025, 1, 1, 16, 30)),
    ]
    assert calc.entry_minutes(entries[2]) == 0
    assert calc.total_minutes(entries) == 240 + 210
