from __future__ import annotations

from datetime import time

import pytest

from src.org_manager.org_manager.core.enums import AuditAction
from src.org_manager.org_manager.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.org_manager.org_manager.settings.model import KNOWN_SETTINGS
from src.org_manager.org_manager.settings.service import coerce_setting
from tests.fakes import make_container


def test_defaults_are_reported_when_nothing_is_stored(container):
    merged = container.settings_service.all_settings()

    assert set(merged) == set(KNOWN_SETTINGS)
    assert merged["manualAttendanceEnabled"] == {
        "value": True,
        "description": KNOWN_SETTINGS["manualAttendanceEnabled"].description,
        "isDefault": True,
    }
    assert container.settings_service.get_setting("workingHoursPerDay") == {
        "key": "workingHoursPerDay",
        "value": 8.0,
        "isDefault": True,
    }


def test_unknown_key_is_not_found(container):
    with pytest.raises(NotFoundError, match="Setting not found"):
        container.settings_service.get_setting("colorScheme")


def test_super_admin_updates_and_is_audited(container, people, fixed_now):
    updated = container.settings_service.update(
        actor=people.actor(people.admin),
        values={"importAttendanceEnabled": False, "checkInLeverageMinutes": 20},
        now=fixed_now,
    )

    assert updated["importAttendanceEnabled"]["value"] is False
    assert updated["checkInLeverageMinutes"] == {"key": "checkInLeverageMinutes", "value": 20, "isDefault": False}
    entry = container.repos.audit.entries[-1]
    assert entry.action == AuditAction.UPDATE
    assert entry.changes["before"] == {"importAttendanceEnabled": True, "checkInLeverageMinutes": 15}
    stored = container.settings_service.all_settings()["checkInLeverageMinutes"]
    assert stored["updatedBy"] == people.admin.employee_id
    assert stored["updatedAt"] == fixed_now


def test_update_requires_super_admin(container, people):
    with pytest.raises(AuthorizationError, match="Only superAdmin can update settings"):
        container.settings_service.update(actor=people.actor(people.clerk), values={"autoMarkAbsentEnabled": True})


def test_update_rejects_unknown_key_without_writing(container, people):
    with pytest.raises(ValidationError, match="Invalid setting key"):
        container.settings_service.update(
            actor=people.actor(people.admin), values={"autoMarkAbsentEnabled": True, "theme": "dark"}
        )

    assert container.repos.settings.list_all() == []


def test_update_requires_a_key(container, people):
    with pytest.raises(ValidationError, match="Setting key is required"):
        container.settings_service.update(actor=people.actor(people.admin), values={})


@pytest.mark.parametrize(
    "key, value",
    [
        ("manualAttendanceEnabled", "yes"),
        ("checkInLeverageMinutes", -5),
        ("checkInLeverageMinutes", 2.5),
        ("workingHoursPerDay", 0),
        ("workingHoursPerDay", 30),
        ("workCheckInTime", "9am"),
    ],
)
def test_values_are_type_checked(key, value):
    with pytest.raises(ValidationError):
        coerce_setting(KNOWN_SETTINGS[key], value)


def test_work_schedule_reads_stored_values_and_skips_bad_ones():
    container = make_container(settings={"workCheckInTime": "08:30", "workingHoursPerDay": "lots"})

    schedule = container.settings_service.work_schedule()

    assert schedule.check_in_time == time(8, 30)
    assert schedule.check_out_time == time(17, 0)
    assert schedule.working_hours_per_day == 8.0
