"""Staffing math: how many workers a shift has versus what it needs."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..assignments.model import Assignment
from ..core.enums import RoleCode, WorkerStatus
from .model import ROLE_ORDER, Shift

SLOT_ASSIGNED = "assigned"
SLOT_PLACEHOLDER = "placeholder"
SLOT_EMPTY = "empty"


@dataclass(frozen=True)
class WorkerSlot:
    role_code: RoleCode
    slot_index: int
    kind: str
    assignment: Optional[Assignment] = None

    def as_dict(self) -> dict:
        a = self.assignment
        return {
            "roleCode": self.role_code.value,
            "roleLabel": self.role_code.label,
            "slotIndex": self.slot_index,
            "kind": self.kind,
            "assignmentId": a.assignment_id if a else None,
            "userId": a.user_id if a else None,
            "userName": a.user_name if a else None,
            "status": a.status.value if a else None,
        }


def counts_as_assigned(a: Assignment) -> bool:
    return not a.is_placeholder and a.status != WorkerStatus.NO_SHOW


def assigned_count(assignments: Iterable[Assignment], role_code: Optional[RoleCode] = None) -> int:
    return sum(
        1
        for a in assignments
        if counts_as_assigned(a) and (role_code is None or a.role_code == role_code)
    )


def total_required(shift: Shift) -> int:
    total = shift.requirements.total()
    if total == 0:
        return int(shift.requested_workers or 0)
    return total


def workers_needed(shift: Shift, assignments: Sequence[Assignment]) -> list[dict]:
    """Roles that still have open slots."""

    out = []
    for rc in ROLE_ORDER:
        required = shift.requirements.count_for(rc)
        if required <= 0:
            continue
        have = assigned_count(assignments, rc)
        if have < required:
            out.append(
                {
                    "roleCode": rc.value,
                    "roleLabel": rc.label,
                    "required": required,
                    "assigned": have,
                    "needed": required - have,
                }
            )
    return out


def staffing_summary(shift: Shift, assignments: Sequence[Assignment]) -> dict:
    assigned = assigned_count(assignments)
    required = total_required(shift)
    percent = 0 if required <= 0 else min(100, round(assigned * 100 / required))
    return {
        "assigned": assigned,
        "required": required,
        "display": f"{assigned} of {required} Workers Assigned",
        "percent": percent,
        "fully_staffed": required > 0 and assigned >= required,
        "workers_needed": workers_needed(shift, assignments),
    }


def generate_worker_slots(
    role_code: RoleCode,
    required: int,
    assignments: Sequence[Assignment],
) -> list[WorkerSlot]:
    """Slots for one role: real workers first, then the open positions.

    Open positions are filled by existing placeholders in order; whatever is
    left is empty. Workers beyond ``required`` still get a slot.
    """

    of_role = [a for a in assignments if a.role_code == role_code]
    workers = [a for a in of_role if not a.is_placeholder]
    placeholders = [a for a in of_role if a.is_placeholder]

    slots = [WorkerSlot(role_code, i, SLOT_ASSIGNED, a) for i, a in enumerate(workers)]
    open_slots = max(0, int(required) - len(workers))
    for n in range(open_slots):
        index = len(workers) + n
        if n < len(placeholders):
            slots.append(WorkerSlot(role_code, index, SLOT_PLACEHOLDER, placeholders[n]))
        else:
            slots.append(WorkerSlot(role_code, index, SLOT_EMPTY))
    return slots


def all_worker_slots(shift: Shift, assignments: Sequence[Assignment]) -> list[WorkerSlot]:
    slots: list[WorkerSlot] = []
    for rc in ROLE_ORDER:
        slots.extend(generate_worker_slots(rc, shift.requirements.count_for(rc), assignments))
    return slots
