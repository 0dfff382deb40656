"""Best-effort side effects (notifications, audit entries).

Services record intents in an `Outbox` while performing their primary write
and hand it to `SideEffectDispatcher.dispatch` once that write has committed.
A failing intent is logged and counted; it never fails the operation that
produced it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Union

from ..audit.model import NewAuditEntry
from ..audit.service import AuditService
from ..common.actor import Actor
from ..core.enums import AuditAction, NotificationType, ReferenceKind
from ..notifications.model import NewNotification, Reference
from ..notifications.service import NotificationService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotifyIntent:
    notification: NewNotification


@dataclass(frozen=True)
class NotifyManyIntent:
    recipient_ids: tuple
    type: NotificationType
    title: str
    message: str
    sender_id: Optional[int] = None
    reference: Optional[Reference] = None
    extra: Optional[dict] = None


@dataclass(frozen=True)
class AuditIntent:
    entry: NewAuditEntry


Intent = Union[NotifyIntent, NotifyManyIntent, AuditIntent]


class Outbox:
    def __init__(self):
        self._intents: List[Intent] = []

    def __len__(self) -> int:
        return len(self._intents)

    def notify(
        self,
        *,
        recipient_id: int,
        type: NotificationType,
        title: str,
        message: str,
        sender_id: Optional[int] = None,
        reference: Optional[Reference] = None,
        extra: Optional[dict] = None,
    ) -> None:
        self._intents.append(
            NotifyIntent(
                NewNotification(
                    recipient_id=int(recipient_id),
                    type=type,
                    title=title,
                    message=message,
                    sender_id=sender_id,
                    reference=reference,
                    extra=extra,
                )
            )
        )

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
    ) -> None:
        self._intents.append(
            NotifyManyIntent(
                recipient_ids=tuple(int(r) for r in recipient_ids),
                type=type,
                title=title,
                message=message,
                sender_id=sender_id,
                reference=reference,
                extra=extra,
            )
        )

    def audit(
        self,
        *,
        actor: Optional[Actor],
        action: AuditAction,
        resource_kind: ReferenceKind,
        description: str,
        resource_id: Optional[int] = None,
        changes: Optional[dict] = None,
    ) -> None:
        self._intents.append(
            AuditIntent(
                NewAuditEntry(
                    action=action,
                    resource_kind=resource_kind,
                    description=description,
                    resource_id=resource_id,
                    performed_by=actor.user_id if actor else None,
                    performed_role=actor.role if actor else None,
                    changes=changes,
                    ip_address=actor.ip_address if actor else None,
                )
            )
        )

    def drain(self) -> List[Intent]:
        intents, self._intents = self._intents, []
        return intents


@dataclass
class DispatchReport:
    delivered: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)


class SideEffectDispatcher:
    def __init__(self, notifications: NotificationService, audit: AuditService):
        self._notifications = notifications
        self._audit = audit

    def _deliver(self, intent: Intent) -> None:
        if isinstance(intent, NotifyIntent):
            self._notifications.notify(intent.notification)
        elif isinstance(intent, NotifyManyIntent):
            self._notifications.notify_many(
                recipient_ids=intent.recipient_ids,
                type=intent.type,
                title=intent.title,
                message=intent.message,
                sender_id=intent.sender_id,
                reference=intent.reference,
                extra=intent.extra,
            )
        elif isinstance(intent, AuditIntent):
            self._audit.record(intent.entry)
        else:
            raise TypeError(f"Unknown side-effect intent: {intent!r}")

    def dispatch(self, outbox: Outbox) -> DispatchReport:
        report = DispatchReport()
        for intent in outbox.drain():
            try:
                self._deliver(intent)
                report.delivered += 1
            except Exception as exc:
                logger.exception("Side effect %s failed", type(intent).__name__)
                report.failed += 1
                report.errors.append(str(exc))
        if report.failed:
            logger.warning(
                "%d of %d side effects failed: %s",
                report.failed,
                report.delivered + report.failed,
                "; ".join(report.errors),
            )
        return report
