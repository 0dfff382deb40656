from __future__ import annotations

from datetime import datetime, timedelta

from ...core.enums import AttendanceStatus
from ...settings.model import WorkSchedule
from .base import AttendanceStrategy, StatusDecision, working_hours


class FullDayStrategy(AttendanceStrategy):
    """Enough hours worked; flag late arrival and early departure."""

    def decide(self, *, check_in: datetime, check_out: datetime, schedule: WorkSchedule) -> StatusDecision:
        scheduled_in = datetime.combine(check_in.date(), schedule.check_in_time)
        scheduled_out = datetime.combine(check_out.date(), schedule.check_out_time)

        arrived_late = check_in > scheduled_in + timedelta(minutes=schedule.check_in_leverage_minutes)
        left_early = check_out < scheduled_out - timedelta(minutes=schedule.check_out_leverage_minutes)

        if arrived_late and left_early:
            status = AttendanceStatus.LATE_EARLY_ARRIVAL
        elif left_early:
            status = AttendanceStatus.EARLY_ARRIVAL
        elif arrived_late:
            status = AttendanceStatus.LATE
        else:
            status = AttendanceStatus.PRESENT
        return StatusDecision(status=status, working_hours=working_hours(check_in, check_out))
