from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import NewNotification, Notification


class NotificationRepository(Protocol):
    def create_many(self, items: Iterable[NewNotification]) -> int:
        """Insert all items, return how many were written."""

        raise NotImplementedError

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        raise NotImplementedError

    def list_for_user(self, *, user_id: int, unread_only: bool = False, limit: int = 200) -> Sequence[Notification]:
        raise NotImplementedError

    def count_unread(self, user_id: int) -> int:
        raise NotImplementedError

    def mark_read(self, *, user_id: int, notification_ids: Optional[Iterable[int]] = None) -> int:
        """Mark the given (or all) notifications of the user read."""

        raise NotImplementedError

    def delete(self, notification_id: int) -> bool:
        raise NotImplementedError
