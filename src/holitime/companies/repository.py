from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Company


class CompanyRepository(Protocol):
    def get_by_id(self, company_id: int) -> Optional[Company]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[Company]:
        raise NotImplementedError

    def create(self, **fields) -> int:
        raise NotImplementedError

    def update(self, company_id: int, **fields) -> bool:
        raise NotImplementedError

    def delete(self, company_id: int) -> bool:
        raise NotImplementedError

    def count_jobs(self, company_id: int) -> int:
        raise NotImplementedError

    def list_all(self, *, active_only: bool = False, limit: int = 200) -> Sequence[Company]:
        raise NotImplementedError
