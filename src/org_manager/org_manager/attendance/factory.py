from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..settings.model import WorkSchedule
from .strategies.base import AttendanceStrategy, StatusDecision, working_hours
from .strategies.full_day_strategy import FullDayStrategy
from .strategies.partial_day_strategy import AbsentStrategy, HalfDayStrategy, ShortDayStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the classification strategy from hours worked."""

    def for_checkout(self, *, check_in: datetime, check_out: datetime, schedule: WorkSchedule) -> AttendanceStrategy:
        hours = working_hours(check_in, check_out)
        if hours >= schedule.minimum_full_day_hours:
            return FullDayStrategy()
        if hours >= schedule.half_day_hours:
            return HalfDayStrategy()
        if hours > 0:
            return ShortDayStrategy()
        return AbsentStrategy()

    def classify(self, *, check_in: datetime, check_out: datetime, schedule: WorkSchedule) -> StatusDecision:
        strategy = self.for_checkout(check_in=check_in, check_out=check_out, schedule=schedule)
        return strategy.decide(check_in=check_in, check_out=check_out, schedule=schedule)
