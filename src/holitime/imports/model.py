from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, time
from typing import Optional

from ..core.enums import RoleCode

ENTITY_KINDS = ("companies", "jobs", "shifts", "users", "assignments", "time_entries")


@dataclass(frozen=True)
class ImportRow:
    """One validated CSV line.

    Field names match the CSV headers, so a serialized row can be posted back
    to the import endpoint as is.
    """

    row_number: int
    client_name: str = ""
    contact_name: str = ""
    contact_phone: str = ""
    job_name: str = ""
    job_start_date: Optional[date] = None
    shift_date: Optional[date] = None
    shift_start_time: Optional[time] = None
    shift_end_time: Optional[time] = None
    employee_name: str = ""
    employee_email: str = ""
    employee_phone: str = ""
    worker_type: RoleCode = RoleCode.STAGEHAND
    clock_in_1: Optional[time] = None
    clock_out_1: Optional[time] = None
    clock_in_2: Optional[time] = None
    clock_out_2: Optional[time] = None
    clock_in_3: Optional[time] = None
    clock_out_3: Optional[time] = None
    errors: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def clock_pairs(self) -> list[tuple[Optional[time], Optional[time]]]:
        return [
            (self.clock_in_1, self.clock_out_1),
            (self.clock_in_2, self.clock_out_2),
            (self.clock_in_3, self.clock_out_3),
        ]


@dataclass
class ImportSummary:
    created: dict[str, int] = field(default_factory=lambda: dict.fromkeys(ENTITY_KINDS, 0))
    existing: dict[str, int] = field(default_factory=lambda: dict.fromkeys(ENTITY_KINDS, 0))
    imported_rows: int = 0
    errors: list[dict] = field(default_factory=list)

    def add(self, tally: Counter) -> None:
        """Fold one committed row's ``(kind, created)`` counts into the totals."""
        for (kind, was_created), n in tally.items():
            bucket = self.created if was_created else self.existing
            bucket[kind] += n
        self.imported_rows += 1

    def fail(self, row_number: int, message: str) -> None:
        self.errors.append({"row_number": row_number, "error": message})
