from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import JobStatus
from .model import Job


class JobRepository(Protocol):
    def get_by_id(self, job_id: int) -> Optional[Job]:
        raise NotImplementedError

    def find_by_name(self, *, company_id: int, name: str) -> Optional[Job]:
        raise NotImplementedError

    def create(self, **fields) -> int:
        raise NotImplementedError

    def update(self, job_id: int, **fields) -> bool:
        raise NotImplementedError

    def delete(self, job_id: int) -> bool:
        raise NotImplementedError

    def count_shifts(self, job_id: int) -> int:
        raise NotImplementedError

    def list_jobs(
        self,
        *,
        company_id: Optional[int] = None,
        status: Optional[JobStatus] = None,
        limit: int = 200,
    ) -> Sequence[Job]:
        raise NotImplementedError

    def count_jobs(self, *, status: Optional[JobStatus] = None, company_id: Optional[int] = None) -> int:
        raise NotImplementedError
