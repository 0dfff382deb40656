from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Sequence

from ..core.enums import AttendanceStatus, JustificationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, check_in_time, check_out_time, status,
    working_hours, remarks, device_id, is_manual_entry,
    justification_reason, justification_status, justification_remarks,
    justification_reviewed_by, justification_reviewed_at
"""


def _row_to_record(r: dict) -> AttendanceRecord:
    justification = r.get("justification_status")
    hours = r.get("working_hours")
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        working_hours=float(hours) if hours is not None else None,
        remarks=r.get("remarks") or "",
        device_id=r.get("device_id") or "",
        is_manual_entry=bool(r.get("is_manual_entry")),
        justification_reason=r.get("justification_reason"),
        justification_status=JustificationStatus(justification) if justification else None,
        justification_remarks=r.get("justification_remarks"),
        justification_reviewed_by=r.get("justification_reviewed_by"),
        justification_reviewed_at=r.get("justification_reviewed_at"),
    )


def _ids_clause(employee_ids: Optional[Iterable[int]]) -> tuple[Optional[str], list[int]]:
    """(' AND employee_id IN (...)', ids); None as the clause means "match nothing"."""
    if employee_ids is None:
        return "", []
    ids = sorted({int(i) for i in employee_ids})
    if not ids:
        return None, []
    return f" AND employee_id IN ({', '.join(['%s'] * len(ids))})", ids


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def create_checkin(self, *, employee_id: int, work_date: date, check_in_time: datetime, device_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(employee_id, work_date, check_in_time, status, device_id, is_manual_entry)
                VALUES(%s,%s,%s,%s,%s,0)
                """,
                (int(employee_id), work_date, check_in_time, AttendanceStatus.PENDING.value, device_id or ""),
            )
            return int(cur.lastrowid)

    def set_checkin(self, attendance_id: int, *, check_in_time: datetime, device_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, device_id=COALESCE(NULLIF(%s, ''), device_id)
                WHERE attendance_id=%s AND check_in_time IS NULL
                """,
                (check_in_time, device_id or "", int(attendance_id)),
            )
            return cur.rowcount > 0

    def update_checkout(
        self,
        attendance_id: int,
        *,
        check_out_time: datetime,
        status: AttendanceStatus,
        working_hours: float,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, status=%s, working_hours=%s
                WHERE attendance_id=%s AND check_in_time IS NOT NULL AND check_out_time IS NULL
                """,
                (check_out_time, status.value, round(float(working_hours), 2), int(attendance_id)),
            )
            return cur.rowcount > 0

    def list_records(
        self,
        *,
        employee_ids: Optional[Iterable[int]] = None,
        status: Optional[AttendanceStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 500,
    ) -> Sequence[AttendanceRecord]:
        ids_sql, ids = _ids_clause(employee_ids)
        if ids_sql is None:
            return []
        where, params = build_where(
            [
                ("status=%s", status.value if status else None),
                ("work_date>=%s", start_date),
                ("work_date<=%s", end_date),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}{ids_sql}
                ORDER BY work_date DESC, attendance_id DESC
                LIMIT %s
                """,
                tuple(params + ids + [int(limit)]),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def count_by_status(
        self,
        *,
        employee_ids: Optional[Iterable[int]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Mapping[AttendanceStatus, int]:
        ids_sql, ids = _ids_clause(employee_ids)
        if ids_sql is None:
            return {}
        where, params = build_where([("work_date>=%s", start_date), ("work_date<=%s", end_date)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT status, COUNT(*) AS cnt
                FROM attendance_records
                WHERE {where}{ids_sql}
                GROUP BY status
                """,
                tuple(params + ids),
            )
            return {AttendanceStatus(r["status"]): int(r["cnt"]) for r in fetchall(cur)}

    def submit_justification(self, attendance_id: int, *, reason: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET justification_reason=%s, justification_status=%s,
                    justification_remarks=NULL, justification_reviewed_by=NULL, justification_reviewed_at=NULL
                WHERE attendance_id=%s
                  AND (justification_status IS NULL OR justification_status=%s)
                """,
                (
                    reason,
                    JustificationStatus.PENDING.value,
                    int(attendance_id),
                    JustificationStatus.REJECTED.value,
                ),
            )
            return cur.rowcount > 0

    def review_justification(
        self,
        attendance_id: int,
        *,
        approved: bool,
        remarks: Optional[str],
        reviewed_by: int,
        reviewed_at: datetime,
    ) -> bool:
        new_status = JustificationStatus.APPROVED if approved else JustificationStatus.REJECTED
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET justification_status=%s, justification_remarks=%s,
                    justification_reviewed_by=%s, justification_reviewed_at=%s,
                    status=IF(%s, %s, status)
                WHERE attendance_id=%s AND justification_status=%s
                """,
                (
                    new_status.value,
                    remarks,
                    int(reviewed_by),
                    reviewed_at,
                    1 if approved else 0,
                    AttendanceStatus.PRESENT.value,
                    int(attendance_id),
                    JustificationStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def list_pending_justifications(self, *, employee_ids: Optional[Iterable[int]] = None) -> Sequence[AttendanceRecord]:
        ids_sql, ids = _ids_clause(employee_ids)
        if ids_sql is None:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE justification_status=%s{ids_sql}
                ORDER BY work_date DESC, attendance_id DESC
                """,
                tuple([JustificationStatus.PENDING.value] + ids),
            )
            return [_row_to_record(r) for r in fetchall(cur)]
