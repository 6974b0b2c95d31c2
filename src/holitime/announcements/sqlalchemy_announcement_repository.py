from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import select

from ..database.session import session_scope
from ..database.tables import AnnouncementRow, UserRow
from .model import Announcement
from .repository import AnnouncementRepository


def to_announcement(row: AnnouncementRow, author_name: Optional[str] = None) -> Announcement:
    return Announcement(
        announcement_id=int(row.id),
        title=row.title,
        content=row.content,
        date=row.date,
        created_by=int(row.created_by),
        created_at=row.created_at,
        author_name=author_name,
    )


class SQLAlchemyAnnouncementRepository(AnnouncementRepository):
    def __init__(self, db: SQLAlchemy):
        self._db = db

    @staticmethod
    def _select():
        return select(AnnouncementRow, UserRow.name).outerjoin(UserRow, UserRow.id == AnnouncementRow.created_by)

    def get_by_id(self, announcement_id: int) -> Optional[Announcement]:
        with session_scope(self._db) as s:
            r = s.execute(self._select().where(AnnouncementRow.id == int(announcement_id))).first()
            return to_announcement(*r) if r else None

    def create(self, *, title: str, content: str, date: datetime, created_by: int) -> int:
        with session_scope(self._db) as s:
            row = AnnouncementRow(title=title, content=content, date=date, created_by=int(created_by))
            s.add(row)
            s.flush()
            return int(row.id)

    def update(self, announcement_id: int, **fields) -> bool:
        with session_scope(self._db) as s:
            row = s.get(AnnouncementRow, int(announcement_id))
            if not row:
                return False
            for key in ("title", "content", "date"):
                if key in fields:
                    setattr(row, key, fields[key])
            return True

    def delete(self, announcement_id: int) -> bool:
        with session_scope(self._db) as s:
            row = s.get(AnnouncementRow, int(announcement_id))
            if not row:
                return False
            s.delete(row)
            return True

    def list_recent(self, *, limit: int = 50) -> Sequence[Announcement]:
        stmt = self._select().order_by(AnnouncementRow.date.desc(), AnnouncementRow.id.desc()).limit(int(limit))
        with session_scope(self._db) as s:
            return [to_announcement(*r) for r in s.execute(stmt)]
