from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import AttendanceStatus, LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import Leave
from .repository import LeaveRepository

_COLUMNS = """
    leave_id, employee_id, start_date, end_date, leave_type, reason, status,
    applied_date, approved_by, approved_date, rejection_reason
"""


def _row_to_leave(r: dict) -> Leave:
    return Leave(
        leave_id=int(r["leave_id"]),
        employee_id=int(r["employee_id"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        leave_type=LeaveType(r["leave_type"]),
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        applied_date=r["applied_date"],
        approved_by=r.get("approved_by"),
        approved_date=r.get("approved_date"),
        rejection_reason=r.get("rejection_reason"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, leave_id: int) -> Optional[Leave]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leaves WHERE leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return _row_to_leave(r) if r else None

    def find_overlapping(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        exclude_leave_id: Optional[int] = None,
    ) -> Sequence[Leave]:
        where, params = build_where([("leave_id<>%s", exclude_leave_id)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leaves
                WHERE employee_id=%s AND status IN (%s, %s)
                  AND start_date<=%s AND end_date>=%s AND {where}
                """,
                tuple(
                    [
                        int(employee_id),
                        LeaveStatus.PENDING.value,
                        LeaveStatus.APPROVED.value,
                        end_date,
                        start_date,
                    ]
                    + params
                ),
            )
            return [_row_to_leave(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        leave_type: LeaveType,
        reason: str,
        applied_date: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leaves(employee_id, start_date, end_date, leave_type, reason, status, applied_date)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    start_date,
                    end_date,
                    leave_type.value,
                    reason,
                    LeaveStatus.PENDING.value,
                    applied_date,
                ),
            )
            return int(cur.lastrowid)

    def update_pending(
        self,
        leave_id: int,
        *,
        start_date: date,
        end_date: date,
        leave_type: LeaveType,
        reason: str,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leaves
                SET start_date=%s, end_date=%s, leave_type=%s, reason=%s
                WHERE leave_id=%s AND status=%s
                """,
                (start_date, end_date, leave_type.value, reason, int(leave_id), LeaveStatus.PENDING.value),
            )
            # rowcount is 0 when nothing changed, so re-check the guard
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT status FROM leaves WHERE leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return bool(r) and r["status"] == LeaveStatus.PENDING.value

    def approve(
        self,
        leave_id: int,
        *,
        approved_by: int,
        approved_at: datetime,
        attendance_days: Sequence[date],
        attendance_remarks: str,
    ) -> bool:
        with db_cursor(self._conn_factory) as (conn, cur):
            cur.execute(
                """
                UPDATE leaves
                SET status=%s, approved_by=%s, approved_date=%s, rejection_reason=NULL
                WHERE leave_id=%s AND status=%s
                """,
                (
                    LeaveStatus.APPROVED.value,
                    int(approved_by),
                    approved_at,
                    int(leave_id),
                    LeaveStatus.PENDING.value,
                ),
            )
            if cur.rowcount == 0:
                conn.rollback()
                return False

            cur.execute("SELECT employee_id FROM leaves WHERE leave_id=%s", (int(leave_id),))
            employee_id = int(fetchone(cur)["employee_id"])
            if attendance_days:
                cur.executemany(
                    """
                    INSERT INTO attendance_records(employee_id, work_date, status, remarks)
                    VALUES(%s,%s,%s,%s)
                    ON DUPLICATE KEY UPDATE status=VALUES(status), remarks=VALUES(remarks)
                    """,
                    [
                        (employee_id, day, AttendanceStatus.LEAVE.value, attendance_remarks)
                        for day in attendance_days
                    ],
                )
            return True

    def reject(self, leave_id: int, *, approved_by: int, approved_at: datetime, rejection_reason: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leaves
                SET status=%s, approved_by=%s, approved_date=%s, rejection_reason=%s
                WHERE leave_id=%s AND status=%s
                """,
                (
                    LeaveStatus.REJECTED.value,
                    int(approved_by),
                    approved_at,
                    rejection_reason,
                    int(leave_id),
                    LeaveStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def delete_pending(self, leave_id: int, *, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM leaves WHERE leave_id=%s AND employee_id=%s AND status=%s",
                (int(leave_id), int(employee_id), LeaveStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def list_leaves(
        self,
        *,
        employee_ids: Optional[Iterable[int]] = None,
        status: Optional[LeaveStatus] = None,
        start_from: Optional[date] = None,
        start_until: Optional[date] = None,
        end_until: Optional[date] = None,
        limit: int = 500,
    ) -> Sequence[Leave]:
        ids_sql = ""
        ids: list[int] = []
        if employee_ids is not None:
            ids = sorted({int(i) for i in employee_ids})
            if not ids:
                return []
            ids_sql = f" AND employee_id IN ({', '.join(['%s'] * len(ids))})"

        where, params = build_where(
            [
                ("status=%s", status.value if status else None),
                ("start_date>=%s", start_from),
                ("start_date<=%s", start_until),
                ("end_date<=%s", end_until),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leaves
                WHERE {where}{ids_sql}
                ORDER BY applied_date DESC, leave_id DESC
                LIMIT %s
                """,
                tuple(params + ids + [int(limit)]),
            )
            return [_row_to_leave(r) for r in fetchall(cur)]
