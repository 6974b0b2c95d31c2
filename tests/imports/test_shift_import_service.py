from __future__ import annotations

from datetime import date, datetime, time

import pytest

from holitime.core.enums import RoleCode, UserRole, WorkerStatus
from holitime.core.exceptions import AuthorizationError, ValidationError
from holitime.imports.service import ShiftImportService, generated_email


@pytest.fixture
def import_service(world, companies, jobs) -> ShiftImportService:
    return ShiftImportService(world.users, companies, jobs, world.shifts, world.assignments, world.time_entries)


def _record(**overrides) -> dict:
    record = {
        "client_name": "Demo Productions",
        "job_name": "Arena Load-In",
        "shift_date": "2025-03-10",
        "shift_start_time": "08:00",
        "shift_end_time": "16:00",
        "employee_name": "Erin Employee",
        "employee_email": "erin@example.com",
        "worker_type": "SH",
        "clock_in_1": "08:02",
        "clock_out_1": "16:05",
    }
    record.update(overrides)
    return record


def test_only_admin_imports(world, import_service):
    with pytest.raises(AuthorizationError):
        import_service.import_rows(actor=world.staff, records=[_record()])
    with pytest.raises(AuthorizationError):
        import_service.parse(actor=world.chief, text="client_name\nA\n")


def test_import_reuses_existing_client_job_and_shift(world, import_service):
    summary = import_service.import_rows(actor=world.admin, records=[_record()])

    assert summary.errors == []
    assert summary.imported_rows == 1
    assert summary.existing["companies"] == 1
    assert summary.existing["jobs"] == 1
    assert summary.existing["shifts"] == 1
    assert summary.created["users"] == 1
    assert summary.created["assignments"] == 1
    assert summary.created["time_entries"] == 1

    user = world.users.get_by_email("erin@example.com")
    assert user.role == UserRole.EMPLOYEE
    a = world.assignments.find_for_user(shift_id=100, user_id=user.user_id)
    assert a.role_code == RoleCode.STAGEHAND
    assert a.status == WorkerStatus.SHIFT_ENDED
    (entry,) = world.time_entries.list_for_assignment(a.assignment_id)
    assert (entry.clock_in, entry.clock_out) == (datetime(2025, 3, 10, 8, 2), datetime(2025, 3, 10, 16, 5))


def test_import_is_idempotent(world, import_service):
    import_service.import_rows(actor=world.admin, records=[_record()])
    summary = import_service.import_rows(actor=world.admin, records=[_record()])

    assert summary.created == {k: 0 for k in summary.created}
    assert summary.existing["assignments"] == 1
    user = world.users.get_by_email("erin@example.com")
    a = world.assignments.find_for_user(shift_id=100, user_id=user.user_id)
    assert len(world.time_entries.list_for_assignment(a.assignment_id)) == 1


def test_import_creates_missing_records(world, companies, jobs, import_service):
    record = _record(
        client_name="Northside Events",
        contact_phone="555-0199",
        job_name="Gala Teardown",
        job_start_date="2025-03-01",
        shift_date="2025-03-12",
        shift_start_time="22:00",
        shift_end_time="04:00",
        employee_name="Fred  Fork",
        employee_email="",
        worker_type="FO",
        clock_in_1="22:00",
        clock_out_1="03:30",
    )
    summary = import_service.import_rows(actor=world.admin, records=[record])

    assert summary.errors == []
    assert summary.created["companies"] == summary.created["jobs"] == summary.created["shifts"] == 1

    company = companies.get_by_name("Northside Events")
    assert company.phone == "555-0199"
    job = jobs.find_by_name(company_id=company.company_id, name="Gala Teardown")
    assert job.start_date == date(2025, 3, 1)
    shift = world.shifts.find_by_slot(job_id=job.job_id, on_date=date(2025, 3, 12), start_time=time(22, 0))
    assert shift.requirements.count_for(RoleCode.FORK_OPERATOR) == 1

    user = world.users.get_by_email(generated_email("Fred  Fork"))
    assert user.email == "fred.fork@import.local"
    assert user.fork_operator_eligible is True
    a = world.assignments.find_for_user(shift_id=shift.shift_id, user_id=user.user_id)
    (entry,) = world.time_entries.list_for_assignment(a.assignment_id)
    # clock-out before clock-in rolls to the next day
    assert entry.clock_out == datetime(2025, 3, 13, 3, 30)


def test_open_entry_leaves_worker_clocked_in(world, import_service):
    import_service.import_rows(actor=world.admin, records=[_record(clock_out_1="")])
    user = world.users.get_by_email("erin@example.com")
    a = world.assignments.find_for_user(shift_id=100, user_id=user.user_id)
    assert a.status == WorkerStatus.CLOCKED_IN


def test_bad_rows_are_reported_and_good_rows_still_import(world, import_service):
    world.users.add(40, UserRole.EMPLOYEE, email="cc@example.com")
    records = [
        _record(employee_name=""),
        _record(employee_email="cc@example.com", worker_type="CC"),
        _record(),
    ]
    summary = import_service.import_rows(actor=world.admin, records=records)

    assert summary.imported_rows == 1
    assert [e["row_number"] for e in summary.errors] == [1, 2]
    assert "Employee name is required" in summary.errors[0]["error"]
    assert "Crew Chief" in summary.errors[1]["error"]


def test_second_crew_chief_on_a_shift_is_refused(world, import_service):
    world.users.add(41, UserRole.CREW_CHIEF, email="cc2@example.com", crew_chief_eligible=True)
    summary = import_service.import_rows(
        actor=world.admin, records=[_record(employee_email="cc2@example.com", worker_type="CC")]
    )
    assert summary.imported_rows == 0
    assert summary.errors[0]["error"] == "This shift already has a crew chief"


def test_import_rows_needs_a_list(world, import_service):
    with pytest.raises(ValidationError):
        import_service.import_rows(actor=world.admin, records={"client_name": "x"})
    with pytest.raises(ValidationError):
        import_service.import_rows(actor=world.admin, records=[])


def test_parse_reports_counts(world, import_service):
    text = (
        "client_name,job_name,shift_date,shift_start_time,shift_end_time,employee_name\n"
        "Demo Productions,Arena Load-In,2025-03-10,08:00,16:00,Erin\n"
        "Demo Productions,Arena Load-In,not-a-date,08:00,16:00,Erin\n"
    )
    preview = import_service.parse(actor=world.admin, text=text)
    assert preview["counts"] == {"total": 2, "valid": 1, "invalid": 1}
    assert preview["rows"][1].row_number == 3
