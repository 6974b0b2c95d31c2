from __future__ import annotations

import logging
from contextlib import nullcontext
from datetime import datetime, timedelta
from typing import Callable, ContextManager, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import ASSIGNABLE_ROLES, DROP_UNASSIGN_WINDOW_HOURS
from ..core.enums import RoleCode, ShiftStatus, UserRole, WorkerStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..crew_permissions.repository import CrewChiefPermissionRepository
from ..notifications.model import NotificationType
from ..notifications.service import NotificationService
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from ..timekeeping.repository import TimeEntryRepository
from ..users.model import SessionUser, User
from ..users.repository import UserRepository
from .model import Assignment
from .permissions import require_shift_manager
from .repository import AssignmentRepository

logger = logging.getLogger(__name__)

FORK_ROLES = frozenset({RoleCode.FORK_OPERATOR, RoleCode.REACH_FORK_OPERATOR})


def check_role_eligibility(user: User, role_code: RoleCode) -> None:
    """Raise when ``user`` may not fill ``role_code``."""

    if user.role == UserRole.ADMIN:
        return
    if role_code == RoleCode.CREW_CHIEF:
        if user.role != UserRole.CREW_CHIEF and not user.crew_chief_eligible:
            raise ValidationError(f"{user.name} is not eligible to work as Crew Chief")
    if role_code in FORK_ROLES and not user.fork_operator_eligible:
        raise ValidationError(f"{user.name} is not eligible to work as {role_code.label}")


class AssignmentService:
    def __init__(
        self,
        assignments: AssignmentRepository,
        shifts: ShiftRepository,
        users: UserRepository,
        time_entries: TimeEntryRepository,
        notifications: NotificationService,
        *,
        transaction: Callable[[], ContextManager] = nullcontext,
        clock: Callable[[], datetime] = now_local,
        grants: Optional[CrewChiefPermissionRepository] = None,
    ):
        self._assignments = assignments
        self._shifts = shifts
        self._users = users
        self._time_entries = time_entries
        self._notifications = notifications
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
        return a

    def _get_worker(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        if not user.is_active:
            raise ValidationError(f"{user.name} is inactive")
        if user.role not in ASSIGNABLE_ROLES:
            raise ValidationError(f"{user.role.value} accounts cannot be assigned to shifts")
        return user

    def _has_time_entries(self, assignment_id: int) -> bool:
        return len(self._time_entries.list_for_assignment(assignment_id)) > 0

    def find_conflicts(self, *, user_id: int, shift: Shift) -> list[dict]:
        """Other shifts of the user whose time range overlaps ``shift``."""

        start, end = shift.window()
        candidates = self._shifts.list_for_user(user_id=int(user_id), date_from=shift.date - timedelta(days=1))
        out = []
        for other in candidates:
            if other.shift_id == shift.shift_id or other.status == ShiftStatus.CANCELLED:
                continue
            o_start, o_end = other.window()
            if o_start < end and start < o_end:
                out.append(
                    {
                        "shift_id": other.shift_id,
                        "job_name": other.job_name,
                        "starts_at": o_start,
                        "ends_at": o_end,
                    }
                )
        return out

    # -------- queries --------
    def list_assigned(self, *, actor: SessionUser, shift_id: int) -> Sequence[Assignment]:
        shift = self._get_shift(shift_id)
        if actor.role == UserRole.COMPANY_USER and shift.company_id != actor.company_id:
            raise AuthorizationError("You do not have access to this shift")
        return self._assignments.list_for_shift(shift.shift_id)

    def check_conflicts(self, *, actor: SessionUser, shift_id: int, user_id: int) -> list[dict]:
        require_shift_manager(actor, shift_id, self._assignments, self._grants)
        shift = self._get_shift(shift_id)
        return self.find_conflicts(user_id=user_id, shift=shift)

    # -------- commands --------
    def assign_worker(
        self,
        *,
        actor: SessionUser,
        shift_id: int,
        user_id: int,
        role_code: RoleCode,
        force: bool = False,
    ) -> Assignment:
        require_shift_manager(actor, shift_id, self._assignments, self._grants)
        shift = self._get_shift(shift_id)
        if shift.status == ShiftStatus.CANCELLED:
            raise ValidationError("Cannot assign workers to a cancelled shift")

        user = self._get_worker(user_id)
        if self._assignments.find_for_user(shift_id=shift.shift_id, user_id=user.user_id):
            raise ConflictError(f"{user.name} is already assigned to this shift")
        check_role_eligibility(user, role_code)

        conflicts = self.find_conflicts(user_id=user.user_id, shift=shift)
        if conflicts and not force:
            raise ConflictError(f"{user.name} has {len(conflicts)} overlapping shift(s)")

        with self._transaction():
            placeholder = self._assignments.find_placeholder(shift_id=shift.shift_id, role_code=role_code)
            if placeholder:
                self._assignments.assign_user(placeholder.assignment_id, user_id=user.user_id)
                assignment_id = placeholder.assignment_id
            else:
                assignment_id = self._assignments.create(
                    shift_id=shift.shift_id, user_id=user.user_id, role_code=role_code
                )
            self._notifications.notify_many(
                [user.user_id],
                type=NotificationType.SHIFT_ASSIGNED,
                title="New Shift Assignment",
                message=(
                    f"You have been assigned as {role_code.label} for {shift.job_name or 'a job'} "
                    f"on {shift.date.isoformat()} at {shift.start_time.strftime('%H:%M')}"
                ),
                related_shift_id=shift.shift_id,
            )

        logger.info("User %s assigned to shift %s as %s by %s", user.user_id, shift.shift_id, role_code.value, actor.user_id)
        return self._assignments.get_by_id(assignment_id)

    def unassign(self, *, actor: SessionUser, shift_id: int, assignment_id: int) -> None:
        require_shift_manager(actor, shift_id, self._assignments, self._grants)
        a = self._get_assignment(shift_id, assignment_id)
        if self._has_time_entries(a.assignment_id):
            raise ConflictError("Cannot remove a worker who already has time entries")
        self._assignments.delete(a.assignment_id)
        logger.info("Assignment %s removed from shift %s by %s", a.assignment_id, shift_id, actor.user_id)

    def replace_assignment(
        self,
        *,
        actor: SessionUser,
        shift_id: int,
        assignment_id: int,
        new_user_id: int,
        force: bool = False,
    ) -> Assignment:
        require_shift_manager(actor, shift_id, self._assignments, self._grants)
        shift = self._get_shift(shift_id)
        a = self._get_assignment(shift_id, assignment_id)
        if self._has_time_entries(a.assignment_id):
            raise ConflictError("Cannot replace a worker who already has time entries")

        user = self._get_worker(new_user_id)
        if user.user_id == a.user_id:
            raise ValidationError("The new worker is the same as the current one")
        if self._assignments.find_for_user(shift_id=shift.shift_id, user_id=user.user_id):
            raise ConflictError(f"{user.name} is already assigned to this shift")
        check_role_eligibility(user, a.role_code)

        conflicts = self.find_conflicts(user_id=user.user_id, shift=shift)
        if conflicts and not force:
            raise ConflictError(f"{user.name} has {len(conflicts)} overlapping shift(s)")

        self._assignments.assign_user(a.assignment_id, user_id=user.user_id)
        logger.info("Assignment %s on shift %s now held by %s", a.assignment_id, shift_id, user.user_id)
        return self._assignments.get_by_id(a.assignment_id)

    def mark_no_show(self, *, actor: SessionUser, shift_id: int, assignment_id: int) -> Assignment:
        require_shift_manager(actor, shift_id, self._assignments, self._grants)
        a = self._get_assignment(shift_id, assignment_id)
        if a.is_placeholder:
            raise ValidationError("Cannot mark an open slot as no-show")
        if a.status == WorkerStatus.NO_SHOW:
            raise ValidationError("Worker is already marked as no-show")
        if self._has_time_entries(a.assignment_id):
            raise ValidationError("Worker has time entries and cannot be marked as no-show")
        self._assignments.set_status(a.assignment_id, WorkerStatus.NO_SHOW)
        logger.info("Assignment %s marked no-show by %s", a.assignment_id, actor.user_id)
        return self._assignments.get_by_id(a.assignment_id)

    def drop_shift(self, *, actor: SessionUser, shift_id: int) -> str:
        """Worker gives up their own shift.

        Returns ``"removed"`` when the assignment was deleted, ``"up_for_grabs"``
        when the slot was opened to others.
        """

        shift = self._get_shift(shift_id)
        a = self._assignments.find_for_user(shift_id=shift.shift_id, user_id=actor.user_id)
        if not a:
            raise AuthorizationError("You are not assigned to this shift")
        if self._has_time_entries(a.assignment_id):
            raise ValidationError("You cannot drop a shift you have already clocked in to")

        now = self._clock()
        if shift.starts_at - now > timedelta(hours=DROP_UNASSIGN_WINDOW_HOURS):
            self._assignments.delete(a.assignment_id)
            logger.info("User %s dropped shift %s (removed)", actor.user_id, shift.shift_id)
            return "removed"

        with self._transaction():
            self._assignments.make_placeholder(a.assignment_id)
            recipients = [
                u.user_id
                for u in self._users.list_active_by_roles([UserRole.EMPLOYEE, UserRole.CREW_CHIEF])
                if u.user_id != actor.user_id
            ]
            self._notifications.notify_many(
                recipients,
                type=NotificationType.SHIFT_UP_FOR_GRABS,
                title="Shift Available!",
                message=(
                    f"A spot for {a.role_code.label} at {shift.company_name or 'a client'} is up for grabs! "
                    f"Location: {shift.location or '-'}, Starts: {shift.starts_at.strftime('%Y-%m-%d %H:%M')}"
                ),
                related_shift_id=shift.shift_id,
            )
        logger.info("User %s dropped shift %s (up for grabs)", actor.user_id, shift.shift_id)
        return "up_for_grabs"

    def claim_shift(
        self,
        *,
        actor: SessionUser,
        shift_id: int,
        assignment_id: Optional[int] = None,
    ) -> Assignment:
        """Take an open slot; the oldest one when ``assignment_id`` is not given."""

        shift = self._get_shift(shift_id)
        if shift.status == ShiftStatus.CANCELLED:
            raise ValidationError("This shift was cancelled")
        if shift.ends_at <= self._clock():
            raise ValidationError("This shift has already ended")

        user = self._get_worker(actor.user_id)
        if self._assignments.find_for_user(shift_id=shift.shift_id, user_id=user.user_id):
            raise ConflictError("You are already assigned to this shift")

        if assignment_id is not None:
            slot = self._get_assignment(shift.shift_id, assignment_id)
            if not slot.is_placeholder:
                raise ConflictError("This slot has already been taken")
        else:
            slot = next((a for a in self._assignments.list_for_shift(shift.shift_id) if a.is_placeholder), None)
            if slot is None:
                raise NotFoundError("No open slots on this shift")

        check_role_eligibility(user, slot.role_code)
        if self.find_conflicts(user_id=user.user_id, shift=shift):
            raise ConflictError("This shift overlaps another shift you are working")

        self._assignments.assign_user(slot.assignment_id, user_id=user.user_id)
        logger.info("User %s claimed slot %s on shift %s", user.user_id, slot.assignment_id, shift.shift_id)
        return self._assignments.get_by_id(slot.assignment_id)
