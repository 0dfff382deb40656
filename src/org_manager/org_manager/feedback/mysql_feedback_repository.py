from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import FeedbackCategory, FeedbackPriority, FeedbackStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import Feedback, NewFeedback
from .repository import FeedbackRepository

_COLUMNS = """
    feedback_id, submitted_by, submitter_name, submitter_email, category, subject, message,
    status, priority, admin_notes, reviewed_by, reviewed_at, created_at
"""


def _row_to_feedback(r: dict) -> Feedback:
    return Feedback(
        feedback_id=int(r["feedback_id"]),
        submitted_by=int(r["submitted_by"]),
        submitter_name=r["submitter_name"],
        submitter_email=r["submitter_email"],
        category=FeedbackCategory(r["category"]),
        subject=r["subject"],
        message=r["message"],
        status=FeedbackStatus(r["status"]),
        priority=FeedbackPriority(r["priority"]),
        admin_notes=r.get("admin_notes") or "",
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
        created_at=r.get("created_at"),
    )


class MySQLFeedbackRepository(FeedbackRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, feedback_id: int) -> Optional[Feedback]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM feedback WHERE feedback_id=%s", (int(feedback_id),))
            r = fetchone(cur)
            return _row_to_feedback(r) if r else None

    def create(self, feedback: NewFeedback) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO feedback(
                    submitted_by, submitter_name, submitter_email, category, subject, message,
                    status, priority, admin_notes, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,'',%s)
                """,
                (
                    int(feedback.submitted_by),
                    feedback.submitter_name,
                    feedback.submitter_email,
                    feedback.category.value,
                    feedback.subject,
                    feedback.message,
                    FeedbackStatus.NEW.value,
                    feedback.priority.value,
                    feedback.created_at,
                ),
            )
            return int(cur.lastrowid)

    def list_feedback(
        self,
        *,
        submitted_by: Optional[int] = None,
        status: Optional[FeedbackStatus] = None,
        category: Optional[FeedbackCategory] = None,
        priority: Optional[FeedbackPriority] = None,
        limit: int = 500,
    ) -> Sequence[Feedback]:
        where, params = build_where(
            [
                ("submitted_by=%s", int(submitted_by) if submitted_by is not None else None),
                ("status=%s", status.value if status else None),
                ("category=%s", category.value if category else None),
                ("priority=%s", priority.value if priority else None),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM feedback
                WHERE {where}
                ORDER BY created_at DESC, feedback_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_feedback(r) for r in fetchall(cur)]

    def update_review(
        self,
        feedback_id: int,
        *,
        status: FeedbackStatus,
        priority: FeedbackPriority,
        admin_notes: str,
        reviewed_by: Optional[int],
        reviewed_at: Optional[datetime],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE feedback
                SET status=%s, priority=%s, admin_notes=%s, reviewed_by=%s, reviewed_at=%s
                WHERE feedback_id=%s
                """,
                (status.value, priority.value, admin_notes, reviewed_by, reviewed_at, int(feedback_id)),
            )
            return cur.rowcount > 0

    def delete(self, feedback_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM feedback WHERE feedback_id=%s", (int(feedback_id),))
            return cur.rowcount > 0
