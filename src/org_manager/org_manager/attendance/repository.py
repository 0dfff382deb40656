from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(self, *, employee_id: int, work_date: date, check_in_time: datetime, device_id: str) -> int:
        raise NotImplementedError

    def set_checkin(self, attendance_id: int, *, check_in_time: datetime, device_id: str) -> bool:
        """Fill the check-in of a row that has none (e.g. one written by a leave)."""

        raise NotImplementedError

    def update_checkout(
        self,
        attendance_id: int,
        *,
        check_out_time: datetime,
        status: AttendanceStatus,
        working_hours: float,
    ) -> bool:
        """Guarded on the row not having a check-out yet."""

        raise NotImplementedError

    def list_records(
        self,
        *,
        employee_ids: Optional[Iterable[int]] = None,
        status: Optional[AttendanceStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 500,
    ) -> Sequence[AttendanceRecord]:
        """Newest day first. `employee_ids=[]` matches nothing."""

        raise NotImplementedError

    def count_by_status(
        self,
        *,
        employee_ids: Optional[Iterable[int]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Mapping[AttendanceStatus, int]:
        raise NotImplementedError

    def submit_justification(self, attendance_id: int, *, reason: str) -> bool:
        """Guarded on no justification being pending or approved."""

        raise NotImplementedError

    def review_justification(
        self,
        attendance_id: int,
        *,
        approved: bool,
        remarks: Optional[str],
        reviewed_by: int,
        reviewed_at: datetime,
    ) -> bool:
        """pending -> approved|rejected; approval also marks the day present."""

        raise NotImplementedError

    def list_pending_justifications(self, *, employee_ids: Optional[Iterable[int]] = None) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
