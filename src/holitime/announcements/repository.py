from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Announcement


class AnnouncementRepository(Protocol):
    def get_by_id(self, announcement_id: int) -> Optional[Announcement]:
        raise NotImplementedError

    def create(self, *, title: str, content: str, date: datetime, created_by: int) -> int:
        raise NotImplementedError

    def update(self, announcement_id: int, **fields) -> bool:
        raise NotImplementedError

    def delete(self, announcement_id: int) -> bool:
        raise NotImplementedError

    def list_recent(self, *, limit: int = 50) -> Sequence[Announcement]:
        raise NotImplementedError
