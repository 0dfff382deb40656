from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus, LeaveType
from ..employees.model import EmployeeSummary


@dataclass(frozen=True)
class Leave:
    leave_id: int
    employee_id: int
    start_date: date
    end_date: date
    leave_type: LeaveType
    reason: str
    status: LeaveStatus
    applied_date: datetime
    approved_by: Optional[int] = None
    approved_date: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def overlaps(self, start: date, end: date) -> bool:
        return self.start_date <= end and self.end_date >= start


@dataclass(frozen=True)
class LeaveView:
    leave: Leave
    employee: Optional[EmployeeSummary] = None
    approver: Optional[EmployeeSummary] = None
