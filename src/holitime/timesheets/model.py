from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import TimesheetStatus


@dataclass(frozen=True)
class Timesheet:
    timesheet_id: int
    shift_id: int
    status: TimesheetStatus
    submitted_by: Optional[int] = None
    submitted_at: Optional[datetime] = None
    company_signature: Optional[str] = None
    company_approved_at: Optional[datetime] = None
    company_approved_by: Optional[int] = None
    company_notes: Optional[str] = None
    manager_approved_at: Optional[datetime] = None
    manager_approved_by: Optional[int] = None
    manager_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[int] = None
    created_at: Optional[datetime] = None

    # joined for listings
    shift_date: Optional[date] = None
    job_id: Optional[int] = None
    job_name: Optional[str] = None
    company_id: Optional[int] = None
    company_name: Optional[str] = None
