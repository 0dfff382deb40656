from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import Leave


class LeaveRepository(Protocol):
    def get(self, leave_id: int) -> Optional[Leave]:
        raise NotImplementedError

    def find_overlapping(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        exclude_leave_id: Optional[int] = None,
    ) -> Sequence[Leave]:
        """Pending or approved leaves of the employee intersecting [start, end]."""

        raise NotImplementedError

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
        raise NotImplementedError

    def update_pending(
        self,
        leave_id: int,
        *,
        start_date: date,
        end_date: date,
        leave_type: LeaveType,
        reason: str,
    ) -> bool:
        raise NotImplementedError

    def approve(
        self,
        leave_id: int,
        *,
        approved_by: int,
        approved_at: datetime,
        attendance_days: Sequence[date],
        attendance_remarks: str,
    ) -> bool:
        """pending -> approved plus one `leave` attendance row per day, atomically.

        False (and nothing written) if the leave is no longer pending.
        """

        raise NotImplementedError

    def reject(self, leave_id: int, *, approved_by: int, approved_at: datetime, rejection_reason: Optional[str]) -> bool:
        raise NotImplementedError

    def delete_pending(self, leave_id: int, *, employee_id: int) -> bool:
        raise NotImplementedError

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
        """Newest applied first. `employee_ids=[]` matches nothing."""

        raise NotImplementedError
