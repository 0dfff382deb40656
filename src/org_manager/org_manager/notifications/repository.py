from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import NewNotification, Notification


class NotificationRepository(Protocol):
    def create(self, notification: NewNotification) -> int:
        raise NotImplementedError

    def create_many(self, notifications: Sequence[NewNotification]) -> int:
        """Insert all rows in one statement; returns the number inserted."""

        raise NotImplementedError

    def get(self, notification_id: int) -> Optional[Notification]:
        raise NotImplementedError

    def list_for_recipient(
        self,
        *,
        recipient_id: int,
        unread_only: bool = False,
        offset: int = 0,
        limit: int = 20,
    ) -> Sequence[Notification]:
        raise NotImplementedError

    def count_for_recipient(self, *, recipient_id: int, unread_only: bool = False) -> int:
        raise NotImplementedError

    def mark_read(self, *, notification_id: int, recipient_id: int, read_at: datetime) -> bool:
        raise NotImplementedError

    def mark_all_read(self, *, recipient_id: int, read_at: datetime) -> int:
        raise NotImplementedError

    def delete(self, *, notification_id: int, recipient_id: int) -> bool:
        raise NotImplementedError

    def delete_read(self, *, recipient_id: int) -> int:
        raise NotImplementedError
