from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ..common.validators import require_int
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import SessionUser
from .model import NewNotification, Notification, NotificationType
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def notify_many(
        self,
        user_ids: Iterable[Optional[int]],
        *,
        type: NotificationType,
        title: str,
        message: str,
        related_timesheet_id: Optional[int] = None,
        related_shift_id: Optional[int] = None,
    ) -> int:
        """One notification per distinct user; ``None`` ids are skipped."""

        seen: list[int] = []
        for uid in user_ids:
            if uid is not None and int(uid) not in seen:
                seen.append(int(uid))
        written = self._notifications.create_many(
            NewNotification(
                user_id=uid,
                type=type,
                title=title,
                message=message,
                related_timesheet_id=related_timesheet_id,
                related_shift_id=related_shift_id,
            )
            for uid in seen
        )
        logger.info("Sent %s %s notification(s)", written, type.value)
        return written

    def list_mine(self, *, actor: SessionUser, unread_only: bool = False, limit: int = 100) -> dict:
        items: Sequence[Notification] = self._notifications.list_for_user(
            user_id=actor.user_id, unread_only=unread_only, limit=limit
        )
        return {"notifications": items, "unread_count": self._notifications.count_unread(actor.user_id)}

    def _own(self, actor: SessionUser, notification_id: int) -> Notification:
        n = self._notifications.get_by_id(require_int(notification_id, "notification id", minimum=1))
        if not n:
            raise NotFoundError("Notification not found")
        if n.user_id != actor.user_id:
            raise AuthorizationError("This notification belongs to another user")
        return n

    def mark_read(self, *, actor: SessionUser, notification_id: int) -> None:
        n = self._own(actor, notification_id)
        self._notifications.mark_read(user_id=actor.user_id, notification_ids=[n.notification_id])

    def bulk(self, *, actor: SessionUser, action: str, notification_ids: Optional[list] = None) -> int:
        """``mark_read`` / ``mark_all_read`` / ``delete`` over the caller's notifications."""

        action = str(action or "").strip().lower()
        if action == "mark_all_read":
            return self._notifications.mark_read(user_id=actor.user_id)

        if not isinstance(notification_ids, list) or not notification_ids:
            raise ValidationError("notificationIds must be a non-empty list")
        owned = [self._own(actor, nid).notification_id for nid in notification_ids]
        if action == "mark_read":
            return self._notifications.mark_read(user_id=actor.user_id, notification_ids=owned)
        if action == "delete":
            return sum(1 for nid in owned if self._notifications.delete(nid))
        raise ValidationError(f"Unknown action: {action!r}")

    def delete(self, *, actor: SessionUser, notification_id: int) -> None:
        n = self._own(actor, notification_id)
        self._notifications.delete(n.notification_id)
