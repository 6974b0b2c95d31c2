from __future__ import annotations

from datetime import datetime, time

import pytest

from holitime.core.enums import RoleCode, ShiftStatus, UserRole, WorkerStatus
from holitime.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from holitime.shifts.model import Shift


def test_assign_worker_creates_assignment_and_notifies(world):
    worker = world.worker(20)
    a = world.assignment_service.assign_worker(
        actor=world.staff, shift_id=100, user_id=worker.user_id, role_code=RoleCode.STAGEHAND
    )

    assert a.user_id == 20
    assert a.role_code == RoleCode.STAGEHAND
    assert a.status == WorkerStatus.ASSIGNED
    sent = world.notifications.for_user(20)
    assert [n.type for n in sent] == ["SHIFT_ASSIGNED"]
    assert "Stagehand" in sent[0].message


def test_crew_chief_manages_only_shifts_they_lead(world):
    worker = world.worker(20)
    other_chief = world.worker(30, UserRole.CREW_CHIEF)

    with pytest.raises(AuthorizationError):
        world.assignment_service.assign_worker(
            actor=other_chief, shift_id=100, user_id=worker.user_id, role_code=RoleCode.STAGEHAND
        )

    a = world.assignment_service.assign_worker(
        actor=world.chief, shift_id=100, user_id=worker.user_id, role_code=RoleCode.STAGEHAND
    )
    assert a.user_id == 20


def test_employees_and_clients_cannot_assign(world):
    worker = world.worker(20)
    for actor in (worker, world.client):
        with pytest.raises(AuthorizationError):
            world.assignment_service.assign_worker(
                actor=actor, shift_id=100, user_id=worker.user_id, role_code=RoleCode.STAGEHAND
            )


def test_same_worker_twice_is_a_conflict(world):
    worker = world.worker(20)
    world.assignment_service.assign_worker(actor=world.admin, shift_id=100, user_id=20, role_code=RoleCode.STAGEHAND)
    with pytest.raises(ConflictError):
        world.assignment_service.assign_worker(
            actor=world.admin, shift_id=100, user_id=worker.user_id, role_code=RoleCode.RIGGER
        )


def test_role_eligibility(world):
    world.worker(20)
    world.worker(21, fork_operator_eligible=True)

    with pytest.raises(ValidationError):
        world.assignment_service.assign_worker(actor=world.admin, shift_id=100, user_id=20, role_code=RoleCode.FORK_OPERATOR)
    with pytest.raises(ValidationError):
        world.assignment_service.assign_worker(actor=world.admin, shift_id=100, user_id=20, role_code=RoleCode.CREW_CHIEF)

    a = world.assignment_service.assign_worker(actor=world.admin, shift_id=100, user_id=21, role_code=RoleCode.FORK_OPERATOR)
    assert a.role_code == RoleCode.FORK_OPERATOR


def test_company_users_and_inactive_users_cannot_be_assigned(world):
    world.worker(22, active=False)
    with pytest.raises(ValidationError):
        world.assignment_service.assign_worker(
            actor=world.admin, shift_id=100, user_id=world.client.user_id, role_code=RoleCode.STAGEHAND
        )
    with pytest.raises(ValidationError):
        world.assignment_service.assign_worker(actor=world.admin, shift_id=100, user_id=22, role_code=RoleCode.STAGEHAND)
    with pytest.raises(NotFoundError):
        world.assignment_service.assign_worker(actor=world.admin, shift_id=100, user_id=999, role_code=RoleCode.STAGEHAND)


def test_cancelled_shift_takes_no_workers(world):
    world.worker(20)
    world.shifts.set_status(100, ShiftStatus.CANCELLED)
    with pytest.raises(ValidationError):
        world.assignment_service.assign_worker(actor=world.admin, shift_id=100, user_id=20, role_code=RoleCode.STAGEHAND)


def test_overlapping_shift_needs_force(world):
    world.worker(20)
    world.shifts.add(
        Shift(shift_id=101, job_id=11, date=world.shift.date, start_time=time(12, 0), end_time=time(20, 0), job_name="Other")
    )
    world.assignments.create(shift_id=101, user_id=20, role_code=RoleCode.STAGEHAND)

    conflicts = world.assignment_service.check_conflicts(actor=world.admin, shift_id=100, user_id=20)
    assert [c["shift_id"] for c in conflicts] == [101]

    with pytest.raises(ConflictError):
        world.assignment_service.assign_worker(actor=world.admin, shift_id=100, user_id=20, role_code=RoleCode.STAGEHAND)

    a = world.assignment_service.assign_worker(
        actor=world.admin, shift_id=100, user_id=20, role_code=RoleCode.STAGEHAND, force=True
    )
    assert a.shift_id == 100


def test_back_to_back_shifts_do_not_conflict(world):
    world.worker(20)
    world.shifts.add(
        Shift(shift_id=101, job_id=11, date=world.shift.date, start_time=time(16, 0), end_time=time(20, 0))
    )
    world.assignments.create(shift_id=101, user_id=20, role_code=RoleCode.STAGEHAND)
    assert world.assignment_service.check_conflicts(actor=world.admin, shift_id=100, user_id=20) == []


def test_assigning_fills_an_open_placeholder_first(world):
    world.worker(20)
    open_id = world.assignments.create(
        shift_id=100, user_id=None, role_code=RoleCode.STAGEHAND, status=WorkerStatus.UP_FOR_GRABS
    )
    a = world.assignment_service.assign_worker(actor=world.admin, shift_id=100, user_id=20, role_code=RoleCode.STAGEHAND)
    assert a.assignment_id == open_id
    assert a.status == WorkerStatus.ASSIGNED


def test_unassign_and_replace_are_refused_after_clock_in(world):
    world.worker(20)
    world.worker(21)
    a = world.assignment_service.assign_worker(actor=world.admin, shift_id=100, user_id=20, role_code=RoleCode.STAGEHAND)
    world.time_entries.create(assignment_id=a.assignment_id, entry_number=1, clock_in=datetime(2025, 3, 10, 8, 0))

    with pytest.raises(ConflictError):
        world.assignment_service.unassign(actor=world.admin, shift_id=100, assignment_id=a.assignment_id)
    with pytest.raises(ConflictError):
        world.assignment_service.replace_assignment(
            actor=world.admin, shift_id=100, assignment_id=a.assignment_id, new_user_id=21
        )


def test_replace_assignment_swaps_the_worker(world):
    world.worker(20)
    world.worker(21)
    a = world.assignment_service.assign_worker(actor=world.admin, shift_id=100, user_id=20, role_code=RoleCode.STAGEHAND)

    replaced = world.assignment_service.replace_assignment(
        actor=world.admin, shift_id=100, assignment_id=a.assignment_id, new_user_id=21
    )
    assert replaced.assignment_id == a.assignment_id
    assert replaced.user_id == 21

    with pytest.raises(ValidationError):
        world.assignment_service.replace_assignment(
            actor=world.admin, shift_id=100, assignment_id=a.assignment_id, new_user_id=21
        )


def test_unassign_removes_the_row(world):
    world.worker(20)
    a = world.assignment_service.assign_worker(actor=world.admin, shift_id=100, user_id=20, role_code=RoleCode.STAGEHAND)
    world.assignment_service.unassign(actor=world.admin, shift_id=100, assignment_id=a.assignment_id)
    assert world.assignments.get_by_id(a.assignment_id) is None

    with pytest.raises(NotFoundError):
        world.assignment_service.unassign(actor=world.admin, shift_id=100, assignment_id=a.assignment_id)


def test_mark_no_show(world):
    world.worker(20)
    a = world.assignment_service.assign_worker(actor=world.admin, shift_id=100, user_id=20, role_code=RoleCode.STAGEHAND)

    marked = world.assignment_service.mark_no_show(actor=world.chief, shift_id=100, assignment_id=a.assignment_id)
    assert marked.status == WorkerStatus.NO_SHOW

    with pytest.raises(ValidationError):
        world.assignment_service.mark_no_show(actor=world.chief, shift_id=100, assignment_id=a.assignment_id)


def test_drop_well_before_start_removes_the_assignment(world):
    worker = world.worker(20)
    a = world.assignment_service.assign_worker(actor=world.admin, shift_id=100, user_id=20, role_code=RoleCode.STAGEHAND)
    world.clock.now = datetime(2025, 3, 8, 7, 0)

    assert world.assignment_service.drop_shift(actor=worker, shift_id=100) == "removed"
    assert world.assignments.get_by_id(a.assignment_id) is None


def test_drop_close_to_start_opens_the_slot_for_others(world):
    worker = world.worker(20)
    world.worker(21)
    world.worker(22, active=False)
    a = world.assignment_service.assign_worker(actor=world.admin, shift_id=100, user_id=20, role_code=RoleCode.STAGEHAND)

    assert world.assignment_service.drop_shift(actor=worker, shift_id=100) == "up_for_grabs"

    slot = world.assignments.get_by_id(a.assignment_id)
    assert slot.is_placeholder
    assert slot.status == WorkerStatus.UP_FOR_GRABS
    told = {n.user_id for n in world.notifications.rows.values() if n.type == "SHIFT_UP_FOR_GRABS"}
    assert told == {world.chief.user_id, 21}


def test_drop_requires_being_on_the_shift(world):
    stranger = world.worker(20)
    with pytest.raises(AuthorizationError):
        world.assignment_service.drop_shift(actor=stranger, shift_id=100)


def test_claim_open_slot(world):
    dropper = world.worker(20)
    taker = world.worker(21)
    a = world.assignment_service.assign_worker(actor=world.admin, shift_id=100, user_id=20, role_code=RoleCode.STAGEHAND)
    world.assignment_service.drop_shift(actor=dropper, shift_id=100)

    claimed = world.assignment_service.claim_shift(actor=taker, shift_id=100)
    assert claimed.assignment_id == a.assignment_id
    assert claimed.user_id == 21

    with pytest.raises(NotFoundError):
        world.assignment_service.claim_shift(actor=dropper, shift_id=100)


def test_claim_after_shift_end_is_refused(world):
    dropper = world.worker(20)
    taker = world.worker(21)
    world.assignment_service.assign_worker(actor=world.admin, shift_id=100, user_id=20, role_code=RoleCode.STAGEHAND)
    world.assignment_service.drop_shift(actor=dropper, shift_id=100)

    world.clock.now = datetime(2025, 3, 10, 17, 0)
    with pytest.raises(ValidationError):
        world.assignment_service.claim_shift(actor=taker, shift_id=100)


def test_list_assigned_hides_other_companies_shifts(world):
    outsider = world.worker(40, UserRole.COMPANY_USER, company_id=8)
    assert len(world.assignment_service.list_assigned(actor=world.client, shift_id=100)) == 1
    with pytest.raises(AuthorizationError):
        world.assignment_service.list_assigned(actor=outsider, shift_id=100)
