from datetime import datetime, time

import pytest

from src.org_manager.org_manager.attendance.factory import AttendanceStrategyFactory
from src.org_manager.org_manager.attendance.strategies.full_day_strategy import FullDayStrategy
from src.org_manager.org_manager.attendance.strategies.partial_day_strategy import (
    AbsentStrategy,
    HalfDayStrategy,
    ShortDayStrategy,
)
from src.org_manager.org_manager.core.enums import AttendanceStatus
from src.org_manager.org_manager.settings.model import WorkSchedule


def _schedule(working_hours_per_day=8.0):
    return WorkSchedule(
        check_in_time=time(9, 0),
        check_out_time=time(17, 0),
        check_in_leverage_minutes=15,
        check_out_leverage_minutes=10,
        working_hours_per_day=working_hours_per_day,
    )


def _at(hour, minute=0):
    return datetime(2026, 2, 2, hour, minute)


def test_full_day_within_grace_is_present():
    factory = AttendanceStrategyFactory()
    check_in, check_out = _at(9, 10), _at(17, 0)

    strategy = factory.for_checkout(check_in=check_in, check_out=check_out, schedule=_schedule())
    decision = factory.classify(check_in=check_in, check_out=check_out, schedule=_schedule())

    assert isinstance(strategy, FullDayStrategy)
    assert decision.status == AttendanceStatus.PRESENT
    assert decision.working_hours == pytest.approx(7 + 50 / 60)


@pytest.mark.parametrize(
    "check_in, check_out, hours_per_day, expected",
    [
        (_at(9, 30), _at(17, 30), 8.0, AttendanceStatus.LATE),
        (_at(8, 30), _at(16, 30), 8.0, AttendanceStatus.EARLY_ARRIVAL),
        (_at(9, 30), _at(16, 30), 7.0, AttendanceStatus.LATE_EARLY_ARRIVAL),
        (_at(9, 0), _at(15, 0), 8.0, AttendanceStatus.HALF_DAY),
        (_at(9, 0), _at(11, 0), 8.0, AttendanceStatus.LATE),
        (_at(9, 0), _at(9, 0), 8.0, AttendanceStatus.ABSENT),
    ],
)
def test_classification(check_in, check_out, hours_per_day, expected):
    decision = AttendanceStrategyFactory().classify(
        check_in=check_in, check_out=check_out, schedule=_schedule(hours_per_day)
    )

    assert decision.status == expected


def test_strategy_choice_follows_hours_worked():
    factory = AttendanceStrategyFactory()
    schedule = _schedule()

    assert isinstance(factory.for_checkout(check_in=_at(9), check_out=_at(14), schedule=schedule), HalfDayStrategy)
    assert isinstance(factory.for_checkout(check_in=_at(9), check_out=_at(12), schedule=schedule), ShortDayStrategy)
    assert isinstance(factory.for_checkout(check_in=_at(12), check_out=_at(9), schedule=schedule), AbsentStrategy)


def test_minimum_full_day_allows_both_grace_periods():
    schedule = _schedule()

    assert schedule.half_day_hours == 4.0
    assert schedule.minimum_full_day_hours == pytest.approx(8 - 25 / 60)
