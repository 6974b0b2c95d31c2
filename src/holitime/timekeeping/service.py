from __future__ import annotations

import logging
from contextlib import nullcontext
from datetime import datetime
from typing import Callable, ContextManager, Optional

from ..assignments.model import Assignment
from ..assignments.permissions import require_shift_manager
from ..assignments.repository import AssignmentRepository
from ..common.datetime_utils import minutes_between, now_local
from ..core.constants import MAX_TIME_ENTRIES, MIN_WORK_PERIOD_SECONDS
from ..core.enums import ShiftStatus, TimesheetStatus, UserRole, WorkerStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..crew_permissions.repository import CrewChiefPermissionRepository
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from ..timesheets.repository import TimesheetRepository
from ..users.model import SessionUser
from .repository import TimeEntryRepository

logger = logging.getLogger(__name__)


class TimeTrackingService:
    """Clock events of workers on a shift.

    Every command that touches more than one row runs inside one
    ``transaction()`` so a failure leaves nothing half written.
    """

    def __init__(
        self,
        assignments: AssignmentRepository,
        time_entries: TimeEntryRepository,
        shifts: ShiftRepository,
        timesheets: TimesheetRepository,
        *,
        transaction: Callable[[], ContextManager] = nullcontext,
        clock: Callable[[], datetime] = now_local,
        grants: Optional[CrewChiefPermissionRepository] = None,
    ):
        self._assignments = assignments
        self._time_entries = time_entries
        self._shifts = shifts
        self._timesheets = timesheets
        self._transaction = transaction
        self._clock = clock
        self._grants = grants

    # -------- helpers --------
    def _get_shift(self, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError("Shift not found")
        return shift

    def _get_assignment(self, shift_id: int, assignment_id: int) -> Assignment:
        a = self._assignments.get_by_id(int(assignment_id))
        if not a or a.shift_id != int(shift_id):
            raise NotFoundError("Assignment not found on this shift")
        if a.is_placeholder:
            raise ValidationError("This slot has no worker")
        return a

    @staticmethod
    def _require_shift_closer(actor: SessionUser) -> None:
        if actor.role not in (UserRole.ADMIN, UserRole.CREW_CHIEF):
            raise AuthorizationError("Only administrators and crew chiefs can end shifts")

    def _finish_if_everyone_done(self, shift: Shift, actor: SessionUser) -> Optional[int]:
        """Open the shift's timesheet once every worker is ShiftEnded or NoShow."""

        workers = [a for a in self._assignments.list_for_shift(shift.shift_id) if not a.is_placeholder]
        if not workers or not all(a.is_done for a in workers):
            return None
        if self._timesheets.get_by_shift_id(shift.shift_id):
            return None
        timesheet_id = self._timesheets.create(
            shift_id=shift.shift_id,
            status=TimesheetStatus.PENDING_COMPANY_APPROVAL,
            submitted_by=actor.user_id,
            submitted_at=self._clock(),
        )
        self._shifts.set_status(shift.shift_id, ShiftStatus.COMPLETED)
        logger.info("Shift %s complete, timesheet %s awaiting company approval", shift.shift_id, timesheet_id)
        return timesheet_id

    def _end_one(self, a: Assignment, now: datetime) -> None:
        active = self._time_entries.get_active(a.assignment_id)
        if active:
            self._time_entries.close(active.entry_id, clock_out=max(now, active.clock_in))
        self._assignments.set_status(a.assignment_id, WorkerStatus.SHIFT_ENDED)

    # -------- queries --------
    def list_time_entries(self, *, actor: SessionUser, shift_id: int) -> list[dict]:
        shift = self._get_shift(shift_id)
        if actor.role == UserRole.COMPANY_USER and shift.company_id != actor.company_id:
            raise AuthorizationError("You do not have access to this shift")
        entries = self._time_entries.list_for_shift(shift.shift_id)
        out = []
        for a in self._assignments.list_for_shift(shift.shift_id):
            if a.is_placeholder:
                continue
            out.append(
                {
                    "assignment": a,
                    "time_entries": [e for e in entries if e.assignment_id == a.assignment_id],
                }
            )
        return out

    # -------- commands --------
    def clock_in(
        self,
        *,
        actor: SessionUser,
        shift_id: int,
        assignment_id: int,
        entry_number: Optional[int] = None,
        at: Optional[datetime] = None,
    ) -> int:
        require_shift_manager(actor, shift_id, self._assignments, self._grants)
        a = self._get_assignment(shift_id, assignment_id)
        if a.status == WorkerStatus.NO_SHOW:
            raise ValidationError("Cannot clock in a worker marked as no-show")
        if a.status == WorkerStatus.SHIFT_ENDED:
            raise ValidationError("This worker's shift has already ended")

        entries = self._time_entries.list_for_assignment(a.assignment_id)
        if any(e.is_active for e in entries):
            raise ConflictError("Worker is already clocked in")
        if len(entries) >= MAX_TIME_ENTRIES:
            raise ValidationError(f"Maximum of {MAX_TIME_ENTRIES} clock-ins per shift reached")

        number = int(entry_number) if entry_number is not None else len(entries) + 1
        if number < 1 or number > MAX_TIME_ENTRIES:
            raise ValidationError(f"Entry number must be between 1 and {MAX_TIME_ENTRIES}")
        if any(e.entry_number == number for e in entries):
            raise ConflictError(f"Time entry {number} already exists")

        at = at or self._clock()
        with self._transaction():
            entry_id = self._time_entries.create(assignment_id=a.assignment_id, entry_number=number, clock_in=at)
            self._assignments.set_status(a.assignment_id, WorkerStatus.CLOCKED_IN)
        logger.info("Assignment %s clocked in (entry %s) by %s", a.assignment_id, number, actor.user_id)
        return entry_id

    def clock_out(
        self,
        *,
        actor: SessionUser,
        shift_id: int,
        assignment_id: int,
        at: Optional[datetime] = None,
    ) -> int:
        """Close the active entry; returns the worked minutes of that entry."""

        require_shift_manager(actor, shift_id, self._assignments, self._grants)
        a = self._get_assignment(shift_id, assignment_id)
        active = self._time_entries.get_active(a.assignment_id)
        if not active:
            raise ValidationError("Worker is not clocked in")

        at = at or self._clock()
        if (at - active.clock_in).total_seconds() < MIN_WORK_PERIOD_SECONDS:
            raise ValidationError("Clock-out must be at least 1 minute after clock-in")

        with self._transaction():
            self._time_entries.close(active.entry_id, clock_out=at)
            self._assignments.set_status(a.assignment_id, WorkerStatus.CLOCKED_OUT)
        logger.info("Assignment %s clocked out by %s", a.assignment_id, actor.user_id)
        return minutes_between(active.clock_in, at)

    def master_start_break(self, *, actor: SessionUser, shift_id: int) -> int:
        """Put every clocked-in worker on break; returns how many."""

        require_shift_manager(actor, shift_id, self._assignments, self._grants)
        shift = self._get_shift(shift_id)
        now = self._clock()
        count = 0
        with self._transaction():
            for a in self._assignments.list_for_shift(shift.shift_id):
                if a.is_placeholder:
                    continue
                active = self._time_entries.get_active(a.assignment_id)
                if not active:
                    continue
                self._time_entries.close(active.entry_id, clock_out=max(now, active.clock_in))
                self._assignments.set_status(a.assignment_id, WorkerStatus.ON_BREAK)
                count += 1
            if count == 0:
                raise ValidationError("No workers are currently clocked in")
        logger.info("Break started for %s worker(s) on shift %s by %s", count, shift.shift_id, actor.user_id)
        return count

    def end_worker_shift(self, *, actor: SessionUser, shift_id: int, assignment_id: int) -> dict:
        self._require_shift_closer(actor)
        require_shift_manager(actor, shift_id, self._assignments, self._grants)
        shift = self._get_shift(shift_id)
        a = self._get_assignment(shift.shift_id, assignment_id)
        if a.status == WorkerStatus.SHIFT_ENDED:
            raise ValidationError("This worker's shift has already ended")
        if a.status == WorkerStatus.NO_SHOW:
            raise ValidationError("Cannot end the shift of a worker marked as no-show")

        with self._transaction():
            self._end_one(a, self._clock())
            timesheet_id = self._finish_if_everyone_done(shift, actor)
        logger.info("Assignment %s shift ended by %s", a.assignment_id, actor.user_id)
        return {"timesheet_id": timesheet_id, "shift_completed": timesheet_id is not None}

    def master_end_shift(self, *, actor: SessionUser, shift_id: int) -> dict:
        self._require_shift_closer(actor)
        require_shift_manager(actor, shift_id, self._assignments, self._grants)
        shift = self._get_shift(shift_id)
        now = self._clock()
        ended = 0
        with self._transaction():
            for a in self._assignments.list_for_shift(shift.shift_id):
                if a.is_placeholder or a.is_done:
                    continue
                self._end_one(a, now)
                ended += 1
            timesheet_id = self._finish_if_everyone_done(shift, actor)
        logger.info("Shift %s ended for %s worker(s) by %s", shift.shift_id, ended, actor.user_id)
        return {"ended": ended, "timesheet_id": timesheet_id, "shift_completed": timesheet_id is not None}
