from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Iterable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.enums import NotificationType
from ..core.exceptions import NotFoundError, ValidationError
from .model import NewNotification, Notification, NotificationPage, Reference
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


def _page_args(page: Optional[int], limit: Optional[int]) -> tuple[int, int]:
    page = int(page or 1)
    limit = int(limit or DEFAULT_PAGE_SIZE)
    if page < 1:
        raise ValidationError("page must be at least 1")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
    return page, limit


class NotificationService:
    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    # Producers
    def notify(self, notification: NewNotification) -> Optional[int]:
        """Create one notification; nobody is notified about their own action."""
        if notification.sender_id is not None and int(notification.sender_id) == int(notification.recipient_id):
            return None
        return self._notifications.create(notification)

    def notify_many(
        self,
        *,
        recipient_ids: Iterable[int],
        type: NotificationType,
        title: str,
        message: str,
        sender_id: Optional[int] = None,
        reference: Optional[Reference] = None,
        extra: Optional[dict] = None,
    ) -> int:
        seen: set[int] = set()
        rows: list[NewNotification] = []
        for rid in recipient_ids:
            rid = int(rid)
            if rid in seen or (sender_id is not None and rid == int(sender_id)):
                continue
            seen.add(rid)
            rows.append(
                NewNotification(
                    recipient_id=rid,
                    type=type,
                    title=title,
                    message=message,
                    sender_id=sender_id,
                    reference=reference,
                    extra=extra,
                )
            )
        if not rows:
            return 0
        return self._notifications.create_many(rows)

    # Recipient operations
    def list_for(
        self,
        *,
        recipient_id: int,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        unread_only: bool = False,
    ) -> NotificationPage:
        page, limit = _page_args(page, limit)
        items = self._notifications.list_for_recipient(
            recipient_id=int(recipient_id),
            unread_only=unread_only,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return NotificationPage(
            items=list(items),
            total=self._notifications.count_for_recipient(recipient_id=int(recipient_id), unread_only=unread_only),
            unread_count=self.unread_count(recipient_id=recipient_id),
            page=page,
            limit=limit,
        )

    def unread_count(self, *, recipient_id: int) -> int:
        return self._notifications.count_for_recipient(recipient_id=int(recipient_id), unread_only=True)

    def _get_owned(self, *, recipient_id: int, notification_id: int) -> Notification:
        n = self._notifications.get(int(notification_id))
        if not n or n.recipient_id != int(recipient_id):
            raise NotFoundError("Notification not found")
        return n

    def mark_read(self, *, recipient_id: int, notification_id: int, now: Optional[datetime] = None) -> Notification:
        n = self._get_owned(recipient_id=recipient_id, notification_id=notification_id)
        if n.is_read:
            return n
        read_at = now or now_local()
        self._notifications.mark_read(notification_id=n.notification_id, recipient_id=n.recipient_id, read_at=read_at)
        return replace(n, is_read=True, read_at=read_at)

    def mark_all_read(self, *, recipient_id: int, now: Optional[datetime] = None) -> int:
        return self._notifications.mark_all_read(recipient_id=int(recipient_id), read_at=now or now_local())

    def delete(self, *, recipient_id: int, notification_id: int) -> None:
        n = self._get_owned(recipient_id=recipient_id, notification_id=notification_id)
        self._notifications.delete(notification_id=n.notification_id, recipient_id=n.recipient_id)

    def delete_read(self, *, recipient_id: int) -> int:
        removed = self._notifications.delete_read(recipient_id=int(recipient_id))
        logger.debug("Deleted %d read notifications for recipient %s", removed, recipient_id)
        return removed
