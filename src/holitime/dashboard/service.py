from __future__ import annotations

import logging
from typing import Optional

from ..core.enums import JobStatus, TimesheetStatus, UserRole
from ..jobs.repository import JobRepository
from ..notifications.repository import NotificationRepository
from ..shifts.service import ShiftService
from ..timesheets.repository import TimesheetRepository
from ..timesheets.service import TimesheetService
from ..users.model import SessionUser

logger = logging.getLogger(__name__)

_PENDING_STAGES = (
    TimesheetStatus.PENDING_COMPANY_APPROVAL,
    TimesheetStatus.PENDING_MANAGER_APPROVAL,
)


class DashboardService:
    """Landing page summary, shaped by the caller's role."""

    def __init__(
        self,
        jobs: JobRepository,
        timesheets: TimesheetRepository,
        notifications: NotificationRepository,
        shift_service: ShiftService,
        timesheet_service: TimesheetService,
    ):
        self._jobs = jobs
        self._timesheets = timesheets
        self._notifications = notifications
        self._shift_service = shift_service
        self._timesheet_service = timesheet_service

    def summary(self, *, actor: SessionUser) -> dict:
        data: dict = {
            "role": actor.role.value,
            "unread_notifications": self._notifications.count_unread(actor.user_id),
        }
        if actor.role in (UserRole.ADMIN, UserRole.STAFF):
            data.update(self._manager_summary(actor))
        elif actor.role == UserRole.COMPANY_USER:
            data.update(self._company_summary(actor, actor.company_id))
        else:
            data["upcoming_shifts"] = self._shift_service.upcoming_for_user(actor=actor, limit=20)
        return data

    def _manager_summary(self, actor: SessionUser) -> dict:
        return {
            "active_jobs": self._jobs.count_jobs(status=JobStatus.ACTIVE),
            "today_shifts": self._shift_service.today_shifts(actor=actor),
            "pending_timesheets": {
                status.value: self._timesheets.count_by_status(status) for status in _PENDING_STAGES
            },
        }

    def _company_summary(self, actor: SessionUser, company_id: Optional[int]) -> dict:
        if company_id is None:
            logger.warning("Company user %s has no company", actor.user_id)
            return {"active_jobs": 0, "total_jobs": 0, "pending_company_approval": []}
        return {
            "active_jobs": self._jobs.count_jobs(status=JobStatus.ACTIVE, company_id=company_id),
            "total_jobs": self._jobs.count_jobs(company_id=company_id),
            "pending_company_approval": list(self._timesheet_service.list_pending_company_approval(actor=actor)),
        }
