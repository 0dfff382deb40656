from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import NotificationType, ReferenceKind


@dataclass(frozen=True)
class Reference:
    """Tagged pointer to the entity a notification is about."""

    kind: ReferenceKind
    id: int


@dataclass(frozen=True)
class NewNotification:
    recipient_id: int
    type: NotificationType
    title: str
    message: str
    sender_id: Optional[int] = None
    reference: Optional[Reference] = None
    extra: Optional[dict] = None


@dataclass(frozen=True)
class Notification:
    notification_id: int
    recipient_id: int
    type: NotificationType
    title: str
    message: str
    created_at: datetime
    reference: Optional[Reference] = None
    extra: Optional[dict] = None
    is_read: bool = False
    read_at: Optional[datetime] = None
    sender_id: Optional[int] = None


@dataclass(frozen=True)
class NotificationPage:
    items: list[Notification] = field(default_factory=list)
    total: int = 0
    unread_count: int = 0
    page: int = 1
    limit: int = 20
