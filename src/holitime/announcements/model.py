from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Announcement:
    announcement_id: int
    title: str
    content: str
    date: datetime
    created_by: int
    created_at: Optional[datetime] = None
    author_name: Optional[str] = None
