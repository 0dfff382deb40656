from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Optional

from ..core.constants import (
    DEFAULT_CHECK_IN_LEVERAGE_MINUTES,
    DEFAULT_CHECK_IN_TIME,
    DEFAULT_CHECK_OUT_LEVERAGE_MINUTES,
    DEFAULT_CHECK_OUT_TIME,
    DEFAULT_WORKING_HOURS_PER_DAY,
)


@dataclass(frozen=True)
class Setting:
    key: str
    value: Any
    description: str = ""
    updated_by: Optional[int] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class SettingSpec:
    """A known key: its value type, default and description."""

    key: str
    kind: type
    default: Any
    description: str


KNOWN_SETTINGS = {
    s.key: s
    for s in (
        SettingSpec("manualAttendanceEnabled", bool, True, "Allow attendance department to mark attendance manually"),
        SettingSpec("importAttendanceEnabled", bool, True, "Allow attendance department to import attendance data"),
        SettingSpec("autoMarkAbsentEnabled", bool, False, "Automatically mark absent employees at end of day"),
        SettingSpec("workCheckInTime", str, DEFAULT_CHECK_IN_TIME, "Scheduled check-in time (HH:MM)"),
        SettingSpec("workCheckOutTime", str, DEFAULT_CHECK_OUT_TIME, "Scheduled check-out time (HH:MM)"),
        SettingSpec("checkInLeverageMinutes", int, DEFAULT_CHECK_IN_LEVERAGE_MINUTES, "Grace period after check-in time"),
        SettingSpec("checkOutLeverageMinutes", int, DEFAULT_CHECK_OUT_LEVERAGE_MINUTES, "Grace period before check-out time"),
        SettingSpec("workingHoursPerDay", float, DEFAULT_WORKING_HOURS_PER_DAY, "Expected working hours per day"),
    )
}


@dataclass(frozen=True)
class WorkSchedule:
    """Daily schedule the attendance classifier measures punches against."""

    check_in_time: time
    check_out_time: time
    check_in_leverage_minutes: int
    check_out_leverage_minutes: int
    working_hours_per_day: float

    @property
    def half_day_hours(self) -> float:
        return self.working_hours_per_day / 2

    @property
    def minimum_full_day_hours(self) -> float:
        # Using both grace periods still counts as a full day.
        return self.working_hours_per_day - (self.check_in_leverage_minutes + self.check_out_leverage_minutes) / 60
