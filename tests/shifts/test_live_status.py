from __future__ import annotations

from datetime import date, datetime, time

from holitime.core.enums import LiveShiftStatus, ShiftStatus, TimesheetStatus
from holitime.shifts.model import Shift
from holitime.shifts.status import derive_live_status


def _shift(status: ShiftStatus = ShiftStatus.ACTIVE, start=time(8, 0), end=time(16, 0)) -> Shift:
    return Shift(shift_id=1, job_id=1, date=date(2025, 3, 10), start_time=start, end_time=end, status=status)


def test_before_start_is_scheduled():
    assert derive_live_status(_shift(), None, datetime(2025, 3, 10, 7, 59)) == LiveShiftStatus.SCHEDULED


def test_inside_window_is_ongoing_including_edges():
    s = _shift()
    assert derive_live_status(s, None, datetime(2025, 3, 10, 8, 0)) == LiveShiftStatus.ONGOING
    assert derive_live_status(s, TimesheetStatus.DRAFT, datetime(2025, 3, 10, 12, 0)) == LiveShiftStatus.ONGOING
    assert derive_live_status(s, None, datetime(2025, 3, 10, 16, 0)) == LiveShiftStatus.ONGOING


def test_after_end_without_finalized_timesheet_is_pending():
    s = _shift()
    assert derive_live_status(s, None, datetime(2025, 3, 10, 16, 1)) == LiveShiftStatus.PENDING
    assert derive_live_status(s, TimesheetStatus.REJECTED, datetime(2025, 3, 11, 9, 0)) == LiveShiftStatus.PENDING


def test_finalized_timesheet_wins_over_clock():
    s = _shift()
    for ts in (
        TimesheetStatus.PENDING_COMPANY_APPROVAL,
        TimesheetStatus.PENDING_MANAGER_APPROVAL,
        TimesheetStatus.COMPLETED,
    ):
        assert derive_live_status(s, ts, datetime(2025, 3, 10, 9, 0)) == LiveShiftStatus.COMPLETED


def test_cancelled_wins_over_everything():
    s = _shift(status=ShiftStatus.CANCELLED)
    assert derive_live_status(s, TimesheetStatus.COMPLETED, datetime(2025, 3, 10, 9, 0)) == LiveShiftStatus.CANCELLED


def test_overnight_shift_runs_past_midnight():
    s = _shift(start=time(22, 0), end=time(6, 0))
    assert s.ends_at == datetime(2025, 3, 11, 6, 0)
    assert derive_live_status(s, None, datetime(2025, 3, 11, 2, 0)) == LiveShiftStatus.ONGOING
    assert derive_live_status(s, None, datetime(2025, 3, 11, 6, 30)) == LiveShiftStatus.PENDING


def test_labels():
    assert LiveShiftStatus.ONGOING.label == "Live"
    assert LiveShiftStatus.PENDING.label == "Pending Completion"
