from __future__ import annotations

import logging
from contextlib import nullcontext
from datetime import datetime
from typing import Callable, ContextManager, Optional, Sequence

from ..assignments.permissions import can_manage_shift
from ..assignments.repository import AssignmentRepository
from ..common.datetime_utils import format_minutes, format_time_12h, now_local
from ..common.validators import optional_text, require_non_empty
from ..core.constants import ADMIN_OVERRIDE_SIGNATURE, DEFAULT_LIST_LIMIT, MAX_LIST_LIMIT, MAX_TIME_ENTRIES
from ..core.enums import ApprovalType, ShiftStatus, TimesheetStatus, UserRole
from ..core.exceptions import AuthorizationError, InvalidTransitionError, NotFoundError, ValidationError
from ..crew_permissions.repository import CrewChiefPermissionRepository
from ..notifications.model import NotificationType
from ..notifications.service import NotificationService
from ..reports.calculator.base import HoursCalculator
from ..reports.calculator.exact_calculator import ExactHoursCalculator
from ..reports.calculator.rounded_calculator import RoundedHoursCalculator
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from ..timekeeping.repository import TimeEntryRepository
from ..users.model import SessionUser
from ..users.repository import UserRepository
from .model import Timesheet
from .repository import TimesheetRepository

logger = logging.getLogger(__name__)

# Sheets in these states can be (re)submitted by finalizing the shift.
RESUBMITTABLE = frozenset({TimesheetStatus.DRAFT, TimesheetStatus.REJECTED})
NOT_REJECTABLE = frozenset({TimesheetStatus.COMPLETED, TimesheetStatus.REJECTED})


class TimesheetService:
    """Timesheet approval workflow.

    DRAFT -> PENDING_COMPANY_APPROVAL -> PENDING_MANAGER_APPROVAL -> COMPLETED,
    REJECTED from any stage before COMPLETED, and an admin unlock that sends a
    COMPLETED sheet back to DRAFT.
    """

    def __init__(
        self,
        timesheets: TimesheetRepository,
        shifts: ShiftRepository,
        assignments: AssignmentRepository,
        time_entries: TimeEntryRepository,
        users: UserRepository,
        notifications: NotificationService,
        *,
        transaction: Callable[[], ContextManager] = nullcontext,
        clock: Callable[[], datetime] = now_local,
        rounded: Optional[HoursCalculator] = None,
        exact: Optional[HoursCalculator] = None,
        grants: Optional[CrewChiefPermissionRepository] = None,
    ):
        self._timesheets = timesheets
        self._shifts = shifts
        self._assignments = assignments
        self._time_entries = time_entries
        self._users = users
        self._notifications = notifications
        self._transaction = transaction
        self._clock = clock
        self._rounded = rounded or RoundedHoursCalculator()
        self._exact = exact or ExactHoursCalculator()
        self._grants = grants

    # -------- access --------
    def _is_on_shift(self, actor: SessionUser, shift_id: int) -> bool:
        return self._assignments.find_for_user(shift_id=shift_id, user_id=actor.user_id) is not None

    def _is_crew_chief_on_shift(self, actor: SessionUser, shift_id: int) -> bool:
        if actor.role != UserRole.CREW_CHIEF:
            return False
        return can_manage_shift(actor, shift_id, self._assignments, self._grants)

    def _can_view(self, actor: SessionUser, ts: Timesheet) -> bool:
        if actor.role in (UserRole.ADMIN, UserRole.STAFF):
            return True
        if actor.role == UserRole.COMPANY_USER:
            return actor.company_id is not None and ts.company_id == actor.company_id
        return self._is_on_shift(actor, ts.shift_id)

    def _get(self, actor: SessionUser, timesheet_id: int) -> Timesheet:
        ts = self._timesheets.get_by_id(int(timesheet_id))
        if not ts:
            raise NotFoundError("Timesheet not found")
        if not self._can_view(actor, ts):
            raise AuthorizationError("You do not have access to this timesheet")
        return ts

    def _get_shift(self, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError("Shift not found")
        return shift

    def _worker_ids(self, shift_id: int) -> list[int]:
        return [a.user_id for a in self._assignments.list_for_shift(shift_id) if a.user_id is not None]

    # -------- finalize --------
    def finalize(self, *, actor: SessionUser, shift_id: int) -> Timesheet:
        shift = self._get_shift(shift_id)
        if actor.role not in (UserRole.ADMIN, UserRole.STAFF) and not self._is_crew_chief_on_shift(actor, shift.shift_id):
            raise AuthorizationError("You do not have permission to finalize this timesheet")

        pending = [
            a for a in self._assignments.list_for_shift(shift.shift_id) if not a.is_placeholder and not a.is_done
        ]
        if pending:
            names = ", ".join(a.user_name or str(a.user_id) for a in pending)
            raise ValidationError(f"All workers must be ended or marked no-show first: {names}")

        now = self._clock()
        existing = self._timesheets.get_by_shift_id(shift.shift_id)
        if existing and existing.status not in RESUBMITTABLE:
            raise InvalidTransitionError(f"Timesheet is already {existing.status.value}")

        with self._transaction():
            if existing:
                timesheet_id = existing.timesheet_id
                self._timesheets.update(
                    timesheet_id,
                    status=TimesheetStatus.PENDING_COMPANY_APPROVAL,
                    submitted_by=actor.user_id,
                    submitted_at=now,
                    rejection_reason=None,
                    rejected_at=None,
                    rejected_by=None,
                )
            else:
                timesheet_id = self._timesheets.create(
                    shift_id=shift.shift_id,
                    status=TimesheetStatus.PENDING_COMPANY_APPROVAL,
                    submitted_by=actor.user_id,
                    submitted_at=now,
                )
            self._shifts.set_status(shift.shift_id, ShiftStatus.COMPLETED)
            if shift.company_id is not None:
                company_users = [
                    u.user_id
                    for u in self._users.list_users(role=UserRole.COMPANY_USER, is_active=True, company_id=shift.company_id)
                ]
                self._notifications.notify_many(
                    company_users,
                    type=NotificationType.TIMESHEET_SUBMITTED,
                    title="Timesheet Ready for Approval",
                    message=f"The timesheet for {shift.job_name or 'your job'} on {shift.date.isoformat()} is ready for your approval.",
                    related_timesheet_id=timesheet_id,
                    related_shift_id=shift.shift_id,
                )

        logger.info("Timesheet %s for shift %s submitted by %s", timesheet_id, shift.shift_id, actor.user_id)
        return self._timesheets.get_by_id(timesheet_id)

    # -------- approval --------
    def approve(
        self,
        *,
        actor: SessionUser,
        timesheet_id: int,
        approval_type: ApprovalType,
        signature: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Timesheet:
        ts = self._get(actor, timesheet_id)

        if approval_type == ApprovalType.ADMIN:
            if actor.role != UserRole.ADMIN:
                raise AuthorizationError("Only administrators can use admin approval")
            if ts.status == TimesheetStatus.PENDING_COMPANY_APPROVAL:
                self._company_approve(actor, ts, optional_text(signature) or ADMIN_OVERRIDE_SIGNATURE, notes)
            elif ts.status == TimesheetStatus.PENDING_MANAGER_APPROVAL:
                self._manager_approve(actor, ts, notes)
            else:
                raise InvalidTransitionError(f"Timesheet in status {ts.status.value} cannot be approved")
        elif approval_type == ApprovalType.COMPANY:
            allowed = (
                actor.role == UserRole.ADMIN
                or (actor.role == UserRole.COMPANY_USER and ts.company_id == actor.company_id)
                or self._is_crew_chief_on_shift(actor, ts.shift_id)
            )
            if not allowed:
                raise AuthorizationError("You do not have permission to approve this timesheet for the client")
            signature = require_non_empty(signature, "Signature")
            if ts.status != TimesheetStatus.PENDING_COMPANY_APPROVAL:
                raise InvalidTransitionError("Timesheet is not awaiting client approval")
            self._company_approve(actor, ts, signature, notes)
        elif approval_type == ApprovalType.MANAGER:
            if actor.role != UserRole.ADMIN:
                raise AuthorizationError("Only administrators can give final approval")
            if ts.status != TimesheetStatus.PENDING_MANAGER_APPROVAL:
                raise InvalidTransitionError("Timesheet is not awaiting manager approval")
            self._manager_approve(actor, ts, notes)
        else:
            raise ValidationError(f"Unknown approval type: {approval_type!r}")

        return self._timesheets.get_by_id(ts.timesheet_id)

    def _company_approve(self, actor: SessionUser, ts: Timesheet, signature: str, notes: Optional[str]) -> None:
        with self._transaction():
            self._timesheets.update(
                ts.timesheet_id,
                status=TimesheetStatus.PENDING_MANAGER_APPROVAL,
                company_signature=signature,
                company_approved_at=self._clock(),
                company_approved_by=actor.user_id,
                company_notes=optional_text(notes),
            )
            admins = [u.user_id for u in self._users.list_active_by_roles([UserRole.ADMIN])]
            self._notifications.notify_many(
                admins,
                type=NotificationType.TIMESHEET_COMPANY_APPROVED,
                title="Timesheet Awaiting Final Approval",
                message=f"The client approved the timesheet for {ts.job_name or 'a job'}; it needs final approval.",
                related_timesheet_id=ts.timesheet_id,
                related_shift_id=ts.shift_id,
            )
        logger.info("Timesheet %s client-approved by %s", ts.timesheet_id, actor.user_id)

    def _manager_approve(self, actor: SessionUser, ts: Timesheet, notes: Optional[str]) -> None:
        with self._transaction():
            self._timesheets.update(
                ts.timesheet_id,
                status=TimesheetStatus.COMPLETED,
                manager_approved_at=self._clock(),
                manager_approved_by=actor.user_id,
                manager_notes=optional_text(notes),
            )
            self._shifts.set_status(ts.shift_id, ShiftStatus.COMPLETED)
        logger.info("Timesheet %s completed by %s", ts.timesheet_id, actor.user_id)

    def reject(self, *, actor: SessionUser, timesheet_id: int, reason: str) -> Timesheet:
        ts = self._get(actor, timesheet_id)
        allowed = (
            actor.role == UserRole.ADMIN
            or (actor.role == UserRole.COMPANY_USER and ts.company_id == actor.company_id)
            or (actor.role == UserRole.CREW_CHIEF and self._is_on_shift(actor, ts.shift_id))
        )
        if not allowed:
            raise AuthorizationError("You do not have permission to reject this timesheet")
        reason = require_non_empty(reason, "Rejection reason")
        if ts.status in NOT_REJECTABLE:
            raise InvalidTransitionError(f"Timesheet in status {ts.status.value} cannot be rejected")

        job_name = ts.job_name or "a job"
        with self._transaction():
            self._timesheets.update(
                ts.timesheet_id,
                status=TimesheetStatus.REJECTED,
                rejection_reason=reason,
                rejected_at=self._clock(),
                rejected_by=actor.user_id,
            )
            self._notifications.notify_many(
                self._worker_ids(ts.shift_id),
                type=NotificationType.TIMESHEET_REJECTED,
                title="Timesheet Rejected",
                message=f"Your timesheet for {job_name} has been rejected. Reason: {reason}",
                related_timesheet_id=ts.timesheet_id,
                related_shift_id=ts.shift_id,
            )
            if actor.role == UserRole.COMPANY_USER:
                managers = self._users.list_active_by_roles([UserRole.ADMIN, UserRole.CREW_CHIEF])
                self._notifications.notify_many(
                    [u.user_id for u in managers],
                    type=NotificationType.TIMESHEET_REJECTED,
                    title="Timesheet Rejected by Company",
                    message=f"Timesheet for {job_name} has been rejected by the company. Reason: {reason}",
                    related_timesheet_id=ts.timesheet_id,
                    related_shift_id=ts.shift_id,
                )
        logger.info("Timesheet %s rejected by %s", ts.timesheet_id, actor.user_id)
        return self._timesheets.get_by_id(ts.timesheet_id)

    def unlock(self, *, actor: SessionUser, timesheet_id: int, reason: str, notes: Optional[str] = None) -> Timesheet:
        if actor.role != UserRole.ADMIN:
            raise AuthorizationError("Only administrators can unlock timesheets")
        ts = self._get(actor, timesheet_id)
        if ts.status != TimesheetStatus.COMPLETED:
            raise InvalidTransitionError("Only completed timesheets can be unlocked")
        reason = require_non_empty(reason, "Unlock reason")
        notes = optional_text(notes)

        now = self._clock()
        audit = f"UNLOCKED BY ADMIN: {actor.name} ({actor.email}) on {now.isoformat()}\nReason: {reason}"
        if notes:
            audit += f"\nNotes: {notes}"

        with self._transaction():
            self._timesheets.update(
                ts.timesheet_id,
                status=TimesheetStatus.DRAFT,
                company_signature=None,
                company_approved_at=None,
                company_approved_by=None,
                company_notes=None,
                manager_approved_at=None,
                manager_approved_by=None,
                manager_notes=audit,
            )
            recipient = actor.user_id
            if ts.company_id is not None:
                company_user = self._users.find_active_company_user(ts.company_id)
                if company_user:
                    recipient = company_user.user_id
            date_text = ts.shift_date.strftime("%b %d, %Y") if ts.shift_date else "-"
            self._notifications.notify_many(
                [recipient],
                type=NotificationType.TIMESHEET_UNLOCKED,
                title="Timesheet Unlocked",
                message=(
                    f"Timesheet for {ts.job_name or 'a job'} on {date_text} has been unlocked by admin "
                    f"{actor.name}. Reason: {reason}"
                ),
                related_timesheet_id=ts.timesheet_id,
                related_shift_id=ts.shift_id,
            )
        logger.info("Timesheet %s unlocked by %s", ts.timesheet_id, actor.user_id)
        return self._timesheets.get_by_id(ts.timesheet_id)

    # -------- queries --------
    def list_timesheets(
        self,
        *,
        actor: SessionUser,
        status: Optional[TimesheetStatus] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[Timesheet]:
        limit = max(1, min(int(limit), MAX_LIST_LIMIT))
        if actor.role in (UserRole.ADMIN, UserRole.STAFF):
            return self._timesheets.list_timesheets(status=status, limit=limit)
        if actor.role == UserRole.COMPANY_USER:
            if actor.company_id is None:
                return []
            return self._timesheets.list_timesheets(status=status, company_id=actor.company_id, limit=limit)
        return self._timesheets.list_timesheets(status=status, assigned_user_id=actor.user_id, limit=limit)

    def list_pending_company_approval(self, *, actor: SessionUser) -> Sequence[Timesheet]:
        return self.list_timesheets(actor=actor, status=TimesheetStatus.PENDING_COMPANY_APPROVAL)

    def review(self, *, actor: SessionUser, timesheet_id: int) -> dict:
        """Everything needed to review or export one timesheet."""

        ts = self._get(actor, timesheet_id)
        shift = self._get_shift(ts.shift_id)
        entries = self._time_entries.list_for_shift(shift.shift_id)

        workers = []
        total_raw = 0
        total_rounded = 0
        for a in self._assignments.list_for_shift(shift.shift_id):
            if a.is_placeholder:
                continue
            mine = sorted((e for e in entries if e.assignment_id == a.assignment_id), key=lambda e: e.entry_number)
            raw = self._exact.total_minutes(mine)
            rounded = self._rounded.total_minutes(mine)
            total_raw += raw
            total_rounded += rounded
            pairs = [
                {
                    "entry_number": e.entry_number,
                    "clock_in": e.clock_in,
                    "clock_out": e.clock_out,
                    "clock_in_display": format_time_12h(e.clock_in),
                    "clock_out_display": format_time_12h(e.clock_out),
                }
                for e in mine[:MAX_TIME_ENTRIES]
            ]
            workers.append(
                {
                    "assignment_id": a.assignment_id,
                    "user_id": a.user_id,
                    "name": a.user_name,
                    "role_code": a.role_code.value,
                    "role_label": a.role_code.label,
                    "status": a.status.value,
                    "entries": pairs,
                    "raw_minutes": raw,
                    "rounded_minutes": rounded,
                    "raw_hours": format_minutes(raw),
                    "rounded_hours": format_minutes(rounded),
                }
            )

        return {
            "timesheet": ts,
            "shift": shift,
            "job_name": shift.job_name,
            "company_name": shift.company_name,
            "workers": workers,
            "totals": {
                "workers": len(workers),
                "raw_minutes": total_raw,
                "rounded_minutes": total_rounded,
                "raw_hours": format_minutes(total_raw),
                "rounded_hours": format_minutes(total_rounded),
            },
        }
