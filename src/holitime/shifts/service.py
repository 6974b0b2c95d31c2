from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Callable, Optional, Sequence

from ..assignments.model import Assignment
from ..assignments.repository import AssignmentRepository
from ..common.datetime_utils import now_local, parse_hhmm, parse_iso_date
from ..common.validators import optional_int, optional_text, require_int
from ..core.constants import MAX_LIST_LIMIT, has_minimum_role
from ..core.enums import RoleCode, ShiftStatus, UserRole
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..jobs.repository import JobRepository
from ..timesheets.repository import TimesheetRepository
from ..users.model import SessionUser
from .model import Shift, WorkerRequirements
from .repository import ShiftRepository
from .staffing import all_worker_slots, staffing_summary
from .status import derive_live_status

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("location", "description", "notes")


def parse_shift_status(value: Any) -> ShiftStatus:
    try:
        return ShiftStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown shift status: {value!r}")


def parse_role_code(value: Any) -> RoleCode:
    try:
        return RoleCode(str(value or "").strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown role code: {value!r}")


def parse_requirements(items: Any, *, base: Optional[WorkerRequirements] = None) -> WorkerRequirements:
    """``[{roleCode, requiredCount}]`` -> requirements; the crew chief count stays 1."""

    if not isinstance(items, list):
        raise ValidationError("workerRequirements must be a list")
    reqs = base or WorkerRequirements()
    for item in items:
        if not isinstance(item, dict):
            raise ValidationError("Each worker requirement must be an object")
        role_code = parse_role_code(item.get("roleCode"))
        count = require_int(item.get("requiredCount"), f"requiredCount for {role_code.value}", minimum=0)
        reqs = reqs.with_count(role_code, count)
    return reqs.with_count(RoleCode.CREW_CHIEF, 1)


class ShiftService:
    def __init__(
        self,
        shifts: ShiftRepository,
        jobs: JobRepository,
        assignments: AssignmentRepository,
        timesheets: TimesheetRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._shifts = shifts
        self._jobs = jobs
        self._assignments = assignments
        self._timesheets = timesheets
        self._clock = clock

    # -------- access --------
    @staticmethod
    def _require_scheduler(actor: SessionUser) -> None:
        if actor.role == UserRole.COMPANY_USER or not has_minimum_role(actor.role, UserRole.CREW_CHIEF):
            raise AuthorizationError("You do not have permission to schedule shifts")

    def get_shift(self, *, actor: SessionUser, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError("Shift not found")
        if actor.role == UserRole.COMPANY_USER and shift.company_id != actor.company_id:
            raise AuthorizationError("You do not have access to this shift")
        return shift

    # -------- views --------
    def shift_view(self, shift: Shift, *, assignments: Optional[Sequence[Assignment]] = None,
                   now: Optional[datetime] = None) -> dict:
        now = now or self._clock()
        if assignments is None:
            assignments = self._assignments.list_for_shift(shift.shift_id)
        timesheet = self._timesheets.get_by_shift_id(shift.shift_id)
        ts_status = timesheet.status if timesheet else None
        live = derive_live_status(shift, ts_status, now)
        start, end = shift.window()
        return {
            "shift": shift,
            "starts_at": start,
            "ends_at": end,
            "live_status": live.value,
            "live_status_label": live.label,
            "timesheet_id": timesheet.timesheet_id if timesheet else None,
            "timesheet_status": ts_status.value if ts_status else None,
            "staffing": staffing_summary(shift, assignments),
            "worker_requirements": shift.requirements.as_list(),
        }

    def get_shift_detail(self, *, actor: SessionUser, shift_id: int) -> dict:
        shift = self.get_shift(actor=actor, shift_id=shift_id)
        assignments = self._assignments.list_for_shift(shift.shift_id)
        view = self.shift_view(shift, assignments=assignments)
        view["assignments"] = list(assignments)
        return view

    def list_shifts(
        self,
        *,
        actor: SessionUser,
        job_id: Optional[int] = None,
        on_date: Optional[date] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 200,
    ) -> list[dict]:
        limit = max(1, min(int(limit), MAX_LIST_LIMIT))
        company_id = None
        if actor.role == UserRole.COMPANY_USER:
            if actor.company_id is None:
                return []
            company_id = int(actor.company_id)
        shifts = self._shifts.list_shifts(
            job_id=job_id,
            company_id=company_id,
            on_date=on_date,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
        )
        now = self._clock()
        return [self.shift_view(s, now=now) for s in shifts]

    def today_shifts(self, *, actor: SessionUser) -> list[dict]:
        return self.list_shifts(actor=actor, on_date=self._clock().date())

    def upcoming_for_user(self, *, actor: SessionUser, limit: int = 50) -> list[dict]:
        limit = max(1, min(int(limit), MAX_LIST_LIMIT))
        now = self._clock()
        # yesterday too, so overnight shifts still running show up
        shifts = self._shifts.list_for_user(user_id=actor.user_id, date_from=now.date() - timedelta(days=1), limit=limit)
        return [self.shift_view(s, now=now) for s in shifts if s.ends_at >= now]

    # -------- commands --------
    def create_shift(self, *, actor: SessionUser, data: dict) -> int:
        self._require_scheduler(actor)
        job_id = require_int(data.get("job_id"), "job_id", minimum=1)
        if not self._jobs.get_by_id(job_id):
            raise ValidationError("Job does not exist")

        fields: dict[str, Any] = {
            "job_id": job_id,
            "date": parse_iso_date(data.get("date", "")),
            "start_time": parse_hhmm(data.get("start_time", "")),
            "end_time": parse_hhmm(data.get("end_time", "")),
            "status": parse_shift_status(data["status"]) if data.get("status") else ShiftStatus.PENDING,
            "requested_workers": optional_int(data.get("requested_workers"), "requested_workers", minimum=0),
        }
        fields.update({k: optional_text(data.get(k)) for k in _TEXT_FIELDS})

        requirements = WorkerRequirements()
        if data.get("workerRequirements") is not None:
            requirements = parse_requirements(data["workerRequirements"])

        shift_id = self._shifts.create(requirements=requirements, **fields)
        logger.info("Shift %s created for job %s by %s", shift_id, job_id, actor.user_id)
        return shift_id

    def update_shift(self, *, actor: SessionUser, shift_id: int, data: dict) -> Shift:
        self._require_scheduler(actor)
        shift = self.get_shift(actor=actor, shift_id=shift_id)

        fields: dict[str, Any] = {k: optional_text(data[k]) for k in _TEXT_FIELDS if k in data}
        if "date" in data:
            fields["date"] = parse_iso_date(data["date"])
        if "start_time" in data:
            fields["start_time"] = parse_hhmm(data["start_time"])
        if "end_time" in data:
            fields["end_time"] = parse_hhmm(data["end_time"])
        if "status" in data:
            fields["status"] = parse_shift_status(data["status"])
        if "requested_workers" in data:
            fields["requested_workers"] = optional_int(data["requested_workers"], "requested_workers", minimum=0)
        if "job_id" in data:
            job_id = require_int(data["job_id"], "job_id", minimum=1)
            if not self._jobs.get_by_id(job_id):
                raise ValidationError("Job does not exist")
            fields["job_id"] = job_id

        if fields:
            self._shifts.update(shift.shift_id, **fields)
        if data.get("workerRequirements") is not None:
            self._shifts.set_requirements(
                shift.shift_id, parse_requirements(data["workerRequirements"], base=shift.requirements)
            )
        return self._shifts.get_by_id(shift.shift_id) or shift

    def delete_shift(self, *, actor: SessionUser, shift_id: int) -> None:
        if actor.role == UserRole.COMPANY_USER or not has_minimum_role(actor.role, UserRole.STAFF):
            raise AuthorizationError("Only staff can delete shifts")
        shift = self.get_shift(actor=actor, shift_id=shift_id)
        if self._shifts.has_time_entries(shift.shift_id):
            raise ConflictError("Cannot delete a shift with recorded time entries")
        self._shifts.delete(shift.shift_id)
        logger.info("Shift %s deleted by %s", shift.shift_id, actor.user_id)

    # -------- worker requirements --------
    def get_worker_requirements(self, *, actor: SessionUser, shift_id: int) -> list[dict]:
        shift = self.get_shift(actor=actor, shift_id=shift_id)
        reqs = shift.requirements
        if reqs.count_for(RoleCode.CREW_CHIEF) < 1:
            reqs = reqs.with_count(RoleCode.CREW_CHIEF, 1)
        return reqs.as_list()

    def update_worker_requirements(self, *, actor: SessionUser, shift_id: int, items: Any) -> list[dict]:
        if actor.role not in (UserRole.ADMIN, UserRole.CREW_CHIEF):
            raise AuthorizationError("Only administrators and crew chiefs can change worker requirements")
        shift = self.get_shift(actor=actor, shift_id=shift_id)
        reqs = parse_requirements(items, base=shift.requirements)
        self._shifts.set_requirements(shift.shift_id, reqs)
        logger.info("Worker requirements of shift %s updated by %s", shift.shift_id, actor.user_id)
        return reqs.as_list()

    def worker_slots(self, *, actor: SessionUser, shift_id: int) -> list[dict]:
        shift = self.get_shift(actor=actor, shift_id=shift_id)
        assignments = self._assignments.list_for_shift(shift.shift_id)
        return [slot.as_dict() for slot in all_worker_slots(shift, assignments)]
