from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..assignments.repository import AssignmentRepository
from ..common.datetime_utils import format_minutes
from ..core.enums import UserRole
from ..core.exceptions import AuthorizationError, NotFoundError
from ..jobs.repository import JobRepository
from ..shifts.repository import ShiftRepository
from ..shifts.staffing import staffing_summary
from ..timekeeping.repository import TimeEntryRepository
from ..users.model import SessionUser
from .calculator.base import HoursCalculator
from .calculator.rounded_calculator import RoundedHoursCalculator


@dataclass(frozen=True)
class ReportData:
    job: dict
    shifts: list[dict]
    summary: list[dict]
    totals: dict


class JobReportService:
    def __init__(
        self,
        jobs: JobRepository,
        shifts: ShiftRepository,
        assignments: AssignmentRepository,
        time_entries: TimeEntryRepository,
        *,
        calculator: Optional[HoursCalculator] = None,
    ):
        self._jobs = jobs
        self._shifts = shifts
        self._assignments = assignments
        self._time_entries = time_entries
        self._calculator = calculator or RoundedHoursCalculator()

    def build_job_report(self, *, actor: SessionUser, job_id: int) -> ReportData:
        job = self._jobs.get_by_id(int(job_id))
        if not job:
            raise NotFoundError("Job not found")
        if actor.role == UserRole.COMPANY_USER:
            if job.company_id != actor.company_id:
                raise AuthorizationError("You do not have access to this job")
        elif actor.role == UserRole.EMPLOYEE:
            raise AuthorizationError("You do not have permission to view job reports")

        summary_map: dict[int, dict] = {}
        shift_rows: list[dict] = []
        total_minutes = 0

        for shift in self._shifts.list_shifts(job_id=job.job_id, limit=10_000):
            assignments = self._assignments.list_for_shift(shift.shift_id)
            entries = self._time_entries.list_for_shift(shift.shift_id)
            shift_minutes = 0

            for a in assignments:
                if a.is_placeholder:
                    continue
                minutes = self._calculator.total_minutes(e for e in entries if e.assignment_id == a.assignment_id)
                shift_minutes += minutes

                s = summary_map.get(a.user_id)
                if not s:
                    s = {"user_id": a.user_id, "name": a.user_name, "shifts": 0, "total_minutes": 0}
                    summary_map[a.user_id] = s
                s["shifts"] += 1
                s["total_minutes"] += minutes

            total_minutes += shift_minutes
            staffing = staffing_summary(shift, assignments)
            shift_rows.append(
                {
                    "shift_id": shift.shift_id,
                    "date": shift.date.isoformat(),
                    "start_time": shift.start_time.strftime("%H:%M"),
                    "end_time": shift.end_time.strftime("%H:%M"),
                    "status": shift.status.value,
                    "staffing": staffing["display"],
                    "assigned": staffing["assigned"],
                    "required": staffing["required"],
                    "worked_minutes": shift_minutes,
                    "worked_hours": format_minutes(shift_minutes),
                }
            )

        summary = []
        for s in summary_map.values():
            summary.append(
                {
                    "user_id": s["user_id"],
                    "name": s["name"],
                    "shifts": s["shifts"],
                    "total_minutes": s["total_minutes"],
                    "total_hours": format_minutes(s["total_minutes"]),
                }
            )
        summary.sort(key=lambda x: x["total_minutes"], reverse=True)

        return ReportData(
            job={
                "job_id": job.job_id,
                "name": job.name,
                "company_id": job.company_id,
                "company_name": job.company_name,
                "status": job.status.value,
            },
            shifts=shift_rows,
            summary=summary,
            totals={
                "shifts": len(shift_rows),
                "workers": len(summary),
                "total_minutes": total_minutes,
                "total_hours": format_minutes(total_minutes),
            },
        )
