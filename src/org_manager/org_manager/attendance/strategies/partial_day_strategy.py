from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...settings.model import WorkSchedule
from .base import AttendanceStrategy, StatusDecision, working_hours


class HalfDayStrategy(AttendanceStrategy):
    def decide(self, *, check_in: datetime, check_out: datetime, schedule: WorkSchedule) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.HALF_DAY, working_hours=working_hours(check_in, check_out))


class ShortDayStrategy(AttendanceStrategy):
    """Worked, but less than half a day."""

    def decide(self, *, check_in: datetime, check_out: datetime, schedule: WorkSchedule) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE, working_hours=working_hours(check_in, check_out))


class AbsentStrategy(AttendanceStrategy):
    """Check-out at (or before) check-in: nothing was worked."""

    def decide(self, *, check_in: datetime, check_out: datetime, schedule: WorkSchedule) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ABSENT, working_hours=0.0)
