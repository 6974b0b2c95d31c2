from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Mapping, Optional

from ..common.datetime_utils import shift_window
from ..core.enums import RoleCode, ShiftStatus

# Fixed display order of role codes.
ROLE_ORDER: tuple[RoleCode, ...] = (
    RoleCode.CREW_CHIEF,
    RoleCode.STAGEHAND,
    RoleCode.FORK_OPERATOR,
    RoleCode.REACH_FORK_OPERATOR,
    RoleCode.RIGGER,
    RoleCode.GENERAL_LABOR,
)

# RoleCode -> shifts table column
REQUIREMENT_COLUMNS: dict[RoleCode, str] = {
    RoleCode.CREW_CHIEF: "required_crew_chiefs",
    RoleCode.STAGEHAND: "required_stagehands",
    RoleCode.FORK_OPERATOR: "required_fork_operators",
    RoleCode.REACH_FORK_OPERATOR: "required_reach_fork_operators",
    RoleCode.RIGGER: "required_riggers",
    RoleCode.GENERAL_LABOR: "required_general_laborers",
}


@dataclass(frozen=True)
class WorkerRequirements:
    """How many workers of each role a shift needs."""

    counts: Mapping[RoleCode, int] = field(default_factory=lambda: {RoleCode.CREW_CHIEF: 1})

    def count_for(self, role_code: RoleCode) -> int:
        return int(self.counts.get(role_code, 0))

    def total(self) -> int:
        return sum(self.count_for(rc) for rc in ROLE_ORDER)

    def with_count(self, role_code: RoleCode, count: int) -> "WorkerRequirements":
        counts = {rc: self.count_for(rc) for rc in ROLE_ORDER}
        counts[role_code] = int(count)
        return WorkerRequirements(counts=counts)

    def as_list(self) -> list[dict]:
        return [{"roleCode": rc.value, "requiredCount": self.count_for(rc)} for rc in ROLE_ORDER]


@dataclass(frozen=True)
class Shift:
    shift_id: int
    job_id: int
    date: date
    start_time: time
    end_time: time
    status: ShiftStatus = ShiftStatus.PENDING
    location: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    requested_workers: Optional[int] = None
    requirements: WorkerRequirements = field(default_factory=WorkerRequirements)
    created_at: Optional[datetime] = None
    job_name: Optional[str] = None
    company_id: Optional[int] = None
    company_name: Optional[str] = None

    def window(self) -> tuple[datetime, datetime]:
        return shift_window(self.date, self.start_time, self.end_time)

    @property
    def starts_at(self) -> datetime:
        return self.window()[0]

    @property
    def ends_at(self) -> datetime:
        return self.window()[1]
