from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.enums import UserRole
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import SessionUser
from .model import Announcement
from .repository import AnnouncementRepository

logger = logging.getLogger(__name__)


def _parse_when(value: Optional[str]) -> Optional[datetime]:
    if value is None or not str(value).strip():
        return None
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid date {value!r}")


class AnnouncementService:
    def __init__(self, announcements: AnnouncementRepository, *, clock: Callable[[], datetime] = now_local):
        self._announcements = announcements
        self._clock = clock

    @staticmethod
    def _require_admin(actor: SessionUser) -> None:
        if actor.role != UserRole.ADMIN:
            raise AuthorizationError("Only administrators can manage announcements")

    def list_recent(self, *, limit: int = 50) -> Sequence[Announcement]:
        return self._announcements.list_recent(limit=max(1, min(int(limit), 200)))

    def create(self, *, actor: SessionUser, title: str, content: str, date: Optional[str] = None) -> int:
        self._require_admin(actor)
        announcement_id = self._announcements.create(
            title=require_non_empty(title, "Title"),
            content=require_non_empty(content, "Content"),
            date=_parse_when(date) or self._clock(),
            created_by=actor.user_id,
        )
        logger.info("Announcement %s created by %s", announcement_id, actor.user_id)
        return announcement_id

    def update(self, *, actor: SessionUser, announcement_id: int, data: dict) -> Announcement:
        self._require_admin(actor)
        current = self._announcements.get_by_id(int(announcement_id))
        if not current:
            raise NotFoundError("Announcement not found")
        fields = {}
        if "title" in data:
            fields["title"] = require_non_empty(data["title"], "Title")
        if "content" in data:
            fields["content"] = require_non_empty(data["content"], "Content")
        if "date" in data:
            fields["date"] = _parse_when(data["date"]) or current.date
        if fields:
            self._announcements.update(current.announcement_id, **fields)
        return self._announcements.get_by_id(current.announcement_id) or current

    def delete(self, *, actor: SessionUser, announcement_id: int) -> None:
        self._require_admin(actor)
        if not self._announcements.delete(int(announcement_id)):
            raise NotFoundError("Announcement not found")
        logger.info("Announcement %s deleted by %s", announcement_id, actor.user_id)
