from __future__ import annotations

from typing import Iterable, Optional, Sequence

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import func, select, update

from ..database.session import session_scope
from ..database.tables import NotificationRow
from .model import NewNotification, Notification
from .repository import NotificationRepository


def to_notification(row: NotificationRow) -> Notification:
    return Notification(
        notification_id=int(row.id),
        user_id=int(row.user_id),
        type=row.type,
        title=row.title,
        message=row.message,
        related_timesheet_id=row.related_timesheet_id,
        related_shift_id=row.related_shift_id,
        is_read=bool(row.is_read),
        created_at=row.created_at,
    )


class SQLAlchemyNotificationRepository(NotificationRepository):
    def __init__(self, db: SQLAlchemy):
        self._db = db

    def create_many(self, items: Iterable[NewNotification]) -> int:
        rows = [
            NotificationRow(
                user_id=int(n.user_id),
                type=n.type.value,
                title=n.title,
                message=n.message,
                related_timesheet_id=n.related_timesheet_id,
                related_shift_id=n.related_shift_id,
                is_read=False,
            )
            for n in items
        ]
        if not rows:
            return 0
        with session_scope(self._db) as s:
            s.add_all(rows)
        return len(rows)

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        with session_scope(self._db) as s:
            row = s.get(NotificationRow, int(notification_id))
            return to_notification(row) if row else None

    def list_for_user(self, *, user_id: int, unread_only: bool = False, limit: int = 200) -> Sequence[Notification]:
        stmt = select(NotificationRow).where(NotificationRow.user_id == int(user_id))
        if unread_only:
            stmt = stmt.where(NotificationRow.is_read.is_(False))
        stmt = stmt.order_by(NotificationRow.created_at.desc(), NotificationRow.id.desc()).limit(int(limit))
        with session_scope(self._db) as s:
            return [to_notification(r) for r in s.execute(stmt).scalars()]

    def count_unread(self, user_id: int) -> int:
        stmt = select(func.count(NotificationRow.id)).where(
            NotificationRow.user_id == int(user_id),
            NotificationRow.is_read.is_(False),
        )
        with session_scope(self._db) as s:
            return int(s.execute(stmt).scalar_one())

    def mark_read(self, *, user_id: int, notification_ids: Optional[Iterable[int]] = None) -> int:
        stmt = (
            update(NotificationRow)
            .where(NotificationRow.user_id == int(user_id), NotificationRow.is_read.is_(False))
            .values(is_read=True)
        )
        if notification_ids is not None:
            ids = [int(i) for i in notification_ids]
            if not ids:
                return 0
            stmt = stmt.where(NotificationRow.id.in_(ids))
        with session_scope(self._db) as s:
            return int(s.execute(stmt.execution_options(synchronize_session=False)).rowcount or 0)

    def delete(self, notification_id: int) -> bool:
        with session_scope(self._db) as s:
            row = s.get(NotificationRow, int(notification_id))
            if not row:
                return False
            s.delete(row)
            return True
