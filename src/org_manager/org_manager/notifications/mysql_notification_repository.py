from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import NotificationType, ReferenceKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import NewNotification, Notification, Reference
from .repository import NotificationRepository

_COLUMNS = """
    notification_id, recipient_id, type, title, message,
    reference_kind, reference_id, extra, is_read, read_at, sender_id, created_at
"""


def _row_to_notification(r: dict) -> Notification:
    reference = None
    if r.get("reference_kind") and r.get("reference_id") is not None:
        reference = Reference(kind=ReferenceKind(r["reference_kind"]), id=int(r["reference_id"]))
    return Notification(
        notification_id=int(r["notification_id"]),
        recipient_id=int(r["recipient_id"]),
        type=NotificationType(r["type"]),
        title=r["title"],
        message=r["message"],
        created_at=r["created_at"],
        reference=reference,
        extra=load_json(r.get("extra")),
        is_read=bool(r.get("is_read")),
        read_at=r.get("read_at"),
        sender_id=(int(r["sender_id"]) if r.get("sender_id") is not None else None),
    )


def _insert_params(n: NewNotification) -> tuple:
    return (
        int(n.recipient_id),
        n.type.value,
        n.title,
        n.message,
        n.reference.kind.value if n.reference else None,
        int(n.reference.id) if n.reference else None,
        dump_json(n.extra),
        int(n.sender_id) if n.sender_id is not None else None,
    )


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, notification: NewNotification) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(recipient_id, type, title, message, reference_kind, reference_id, extra, sender_id)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _insert_params(notification),
            )
            return int(cur.lastrowid)

    def create_many(self, notifications: Sequence[NewNotification]) -> int:
        if not notifications:
            return 0
        placeholders = ", ".join(["(%s,%s,%s,%s,%s,%s,%s,%s)"] * len(notifications))
        params: list = []
        for n in notifications:
            params.extend(_insert_params(n))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO notifications(recipient_id, type, title, message, reference_kind, reference_id, extra, sender_id)
                VALUES {placeholders}
                """,
                tuple(params),
            )
            return int(cur.rowcount)

    def get(self, notification_id: int) -> Optional[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM notifications WHERE notification_id=%s", (int(notification_id),))
            r = fetchone(cur)
            return _row_to_notification(r) if r else None

    def list_for_recipient(
        self,
        *,
        recipient_id: int,
        unread_only: bool = False,
        offset: int = 0,
        limit: int = 20,
    ) -> Sequence[Notification]:
        unread_sql = " AND is_read=0" if unread_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM notifications
                WHERE recipient_id=%s{unread_sql}
                ORDER BY created_at DESC, notification_id DESC
                LIMIT %s OFFSET %s
                """,
                (int(recipient_id), int(limit), int(offset)),
            )
            return [_row_to_notification(r) for r in fetchall(cur)]

    def count_for_recipient(self, *, recipient_id: int, unread_only: bool = False) -> int:
        unread_sql = " AND is_read=0" if unread_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT COUNT(*) AS total FROM notifications WHERE recipient_id=%s{unread_sql}",
                (int(recipient_id),),
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def mark_read(self, *, notification_id: int, recipient_id: int, read_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE notifications
                SET is_read=1, read_at=%s
                WHERE notification_id=%s AND recipient_id=%s AND is_read=0
                """,
                (read_at, int(notification_id), int(recipient_id)),
            )
            return cur.rowcount > 0

    def mark_all_read(self, *, recipient_id: int, read_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET is_read=1, read_at=%s WHERE recipient_id=%s AND is_read=0",
                (read_at, int(recipient_id)),
            )
            return int(cur.rowcount)

    def delete(self, *, notification_id: int, recipient_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM notifications WHERE notification_id=%s AND recipient_id=%s",
                (int(notification_id), int(recipient_id)),
            )
            return cur.rowcount > 0

    def delete_read(self, *, recipient_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM notifications WHERE recipient_id=%s AND is_read=1", (int(recipient_id),))
            return int(cur.rowcount)
