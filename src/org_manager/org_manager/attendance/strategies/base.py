from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...settings.model import WorkSchedule


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    working_hours: float
    note: Optional[str] = None


def working_hours(check_in: datetime, check_out: datetime) -> float:
    return max((check_out - check_in).total_seconds(), 0.0) / 3600


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how a completed day is classified."""

    @abstractmethod
    def decide(self, *, check_in: datetime, check_out: datetime, schedule: WorkSchedule) -> StatusDecision:
        raise NotImplementedError
