from __future__ import annotations

from datetime import datetime, time

import pytest

from holitime.core.enums import RoleCode, UserRole
from holitime.core.exceptions import AuthorizationError, NotFoundError
from holitime.reports.calculator.exact_calculator import ExactHoursCalculator
from holitime.reports.service import JobReportService
from holitime.shifts.model import Shift, WorkerRequirements


def _clocked(world, shift_id: int, user_id: int, start: datetime, end: datetime) -> None:
    aid = world.assignments.create(shift_id=shift_id, user_id=user_id, role_code=RoleCode.STAGEHAND)
    entry_id = world.time_entries.create(assignment_id=aid, entry_number=1, clock_in=start)
    world.time_entries.close(entry_id, clock_out=end)


@pytest.fixture
def report_world(world):
    world.worker(20, name="Erin")
    world.worker(21, name="Finn")
    world.shifts.add(
        Shift(
            shift_id=101,
            job_id=10,
            date=datetime(2025, 3, 11).date(),
            start_time=time(8),
            end_time=time(12),
            requirements=WorkerRequirements().with_count(RoleCode.STAGEHAND, 1),
            company_id=7,
        )
    )
    _clocked(world, 100, 20, datetime(2025, 3, 10, 8, 7), datetime(2025, 3, 10, 12, 1))
    _clocked(world, 101, 20, datetime(2025, 3, 11, 8, 0), datetime(2025, 3, 11, 12, 0))
    _clocked(world, 101, 21, datetime(2025, 3, 11, 8, 0), datetime(2025, 3, 11, 10, 0))
    return world


def test_report_totals_per_worker_and_shift(report_world, jobs):
    w = report_world
    report = JobReportService(jobs, w.shifts, w.assignments, w.time_entries).build_job_report(actor=w.staff, job_id=10)

    assert report.job["name"] == "Arena Load-In"
    assert [s["shift_id"] for s in report.shifts] == [100, 101]
    assert report.shifts[0]["staffing"] == "2 of 3 Workers Assigned"
    # 08:00-12:15 rounded
    assert report.shifts[0]["worked_minutes"] == 255
    assert report.summary[0] == {"user_id": 20, "name": "Erin", "shifts": 2, "total_minutes": 495, "total_hours": "08:15"}
    assert report.totals == {"shifts": 2, "workers": 3, "total_minutes": 615, "total_hours": "10:15"}


def test_report_with_exact_calculator(report_world, jobs):
    w = report_world
    service = JobReportService(jobs, w.shifts, w.assignments, w.time_entries, calculator=ExactHoursCalculator())
    report = service.build_job_report(actor=w.admin, job_id=10)
    assert report.shifts[0]["worked_minutes"] == 234


def test_report_access(report_world, jobs):
    w = report_world
    service = JobReportService(jobs, w.shifts, w.assignments, w.time_entries)
    outsider = w.worker(40, UserRole.COMPANY_USER, company_id=8)

    assert service.build_job_report(actor=w.client, job_id=10).totals["shifts"] == 2
    with pytest.raises(AuthorizationError):
        service.build_job_report(actor=outsider, job_id=10)
    with pytest.raises(AuthorizationError):
        service.build_job_report(actor=w.worker(41), job_id=10)
    with pytest.raises(NotFoundError):
        service.build_job_report(actor=w.admin, job_id=999)
