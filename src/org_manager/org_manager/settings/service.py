from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.actor import Actor
from ..common.datetime_utils import now_local, parse_hhmm
from ..core.enums import AuditAction, ReferenceKind
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..sideeffects.outbox import Outbox, SideEffectDispatcher
from .model import KNOWN_SETTINGS, SettingSpec, WorkSchedule
from .repository import SettingsRepository

logger = logging.getLogger(__name__)


def coerce_setting(spec: SettingSpec, value: Any) -> Any:
    """Validate a raw JSON value against the key's type."""
    if spec.kind is bool:
        if not isinstance(value, bool):
            raise ValidationError(f"{spec.key} must be true or false")
        return value
    if spec.kind is int:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value or value < 0:
            raise ValidationError(f"{spec.key} must be a non-negative integer")
        return int(value)
    if spec.kind is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 < value <= 24:
            raise ValidationError(f"{spec.key} must be a number of hours between 0 and 24")
        return float(value)
    # Only schedule times are stored as strings.
    parse_hhmm(str(value))
    return str(value).strip()


class SettingsService:
    def __init__(self, settings: SettingsRepository, effects: SideEffectDispatcher):
        self._settings = settings
        self._effects = effects

    def all_settings(self) -> dict:
        merged = {
            key: {"value": spec.default, "description": spec.description, "isDefault": True}
            for key, spec in KNOWN_SETTINGS.items()
        }
        for s in self._settings.list_all():
            merged[s.key] = {
                "value": s.value,
                "description": s.description or merged.get(s.key, {}).get("description", ""),
                "isDefault": False,
                "updatedBy": s.updated_by,
                "updatedAt": s.updated_at,
            }
        return merged

    def get_setting(self, key: str) -> dict:
        stored = self._settings.get(key)
        if stored:
            return {"key": key, "value": stored.value, "isDefault": False}
        spec = KNOWN_SETTINGS.get(key)
        if not spec:
            raise NotFoundError("Setting not found")
        return {"key": key, "value": spec.default, "isDefault": True}

    def value(self, key: str) -> Any:
        return self.get_setting(key)["value"]

    def work_schedule(self) -> WorkSchedule:
        values = {key: spec.default for key, spec in KNOWN_SETTINGS.items()}
        for s in self._settings.list_all():
            spec = KNOWN_SETTINGS.get(s.key)
            if not spec:
                continue
            try:
                values[s.key] = coerce_setting(spec, s.value)
            except ValidationError:
                logger.warning("Ignoring invalid stored setting %s=%r", s.key, s.value)

        return WorkSchedule(
            check_in_time=parse_hhmm(values["workCheckInTime"]),
            check_out_time=parse_hhmm(values["workCheckOutTime"]),
            check_in_leverage_minutes=int(values["checkInLeverageMinutes"]),
            check_out_leverage_minutes=int(values["checkOutLeverageMinutes"]),
            working_hours_per_day=float(values["workingHoursPerDay"]),
        )

    def update(
        self,
        *,
        actor: Actor,
        values: Mapping[str, Any],
        descriptions: Optional[Mapping[str, str]] = None,
        now: Optional[datetime] = None,
    ) -> dict:
        if not actor.is_super_admin:
            raise AuthorizationError("Only superAdmin can update settings")
        if not values:
            raise ValidationError("Setting key is required")

        clean: dict = {}
        for key, raw in values.items():
            spec = KNOWN_SETTINGS.get(key)
            if not spec:
                valid = ", ".join(KNOWN_SETTINGS)
                raise ValidationError(f"Invalid setting key. Valid keys are: {valid}")
            clean[key] = coerce_setting(spec, raw)

        before = {key: self.value(key) for key in clean}
        descriptions = dict(descriptions or {})
        for key in clean:
            descriptions.setdefault(key, KNOWN_SETTINGS[key].description)

        self._settings.upsert_many(
            clean,
            descriptions=descriptions,
            updated_by=actor.user_id,
            updated_at=now or now_local(),
        )
        logger.info("Settings %s updated by user %s", ", ".join(sorted(clean)), actor.user_id)

        outbox = Outbox()
        outbox.audit(
            actor=actor,
            action=AuditAction.UPDATE,
            resource_kind=ReferenceKind.SYSTEM,
            description=f"Updated settings: {', '.join(sorted(clean))}",
            changes={"before": before, "after": clean},
        )
        self._effects.dispatch(outbox)
        return {key: self.get_setting(key) for key in clean}
