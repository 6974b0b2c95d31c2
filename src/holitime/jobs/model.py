from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import JobStatus


@dataclass(frozen=True)
class Job:
    job_id: int
    name: str
    company_id: int
    status: JobStatus = JobStatus.PENDING
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    location: Optional[str] = None
    budget: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    company_name: Optional[str] = None
