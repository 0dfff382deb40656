from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, JustificationStatus
from ..employees.model import EmployeeSummary


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance row per employee and day."""

    attendance_id: int
    employee_id: int
    work_date: date
    status: AttendanceStatus
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    working_hours: Optional[float] = None
    remarks: str = ""
    device_id: str = ""
    is_manual_entry: bool = False
    justification_reason: Optional[str] = None
    justification_status: Optional[JustificationStatus] = None
    justification_remarks: Optional[str] = None
    justification_reviewed_by: Optional[int] = None
    justification_reviewed_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceView:
    record: AttendanceRecord
    employee: Optional[EmployeeSummary] = None


@dataclass(frozen=True)
class PunchResult:
    """Outcome of a device punch."""

    punch_type: Optional[str]
    employee: EmployeeSummary
    record: Optional[AttendanceRecord] = None
    timestamp: Optional[datetime] = None
    skipped: bool = False

    @property
    def message(self) -> str:
        if self.skipped:
            return "Attendance not required for superAdmin"
        return f"{self.punch_type} recorded successfully"
