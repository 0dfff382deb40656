from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.actor import Actor
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_non_empty
from ..core.enums import (
    JUSTIFIABLE_STATUSES,
    AttendanceStatus,
    AuditAction,
    JustificationStatus,
    NotificationType,
    ReferenceKind,
    Role,
)
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.model import Employee, summarize
from ..employees.repository import EmployeeRepository
from ..notifications.model import Reference
from ..settings.service import SettingsService
from ..sideeffects.outbox import Outbox, SideEffectDispatcher
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, AttendanceView, PunchResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

ALREADY_COMPLETE = "Already checked in and checked out for today"


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        settings: SettingsService,
        effects: SideEffectDispatcher,
        *,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._settings = settings
        self._effects = effects
        self._factory = strategy_factory or AttendanceStrategyFactory()

    # Device punches
    def device_checkin(
        self,
        *,
        biometric_id: Optional[str],
        timestamp: Optional[datetime] = None,
        device_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> PunchResult:
        """Toggle a punch: first of the day checks in, second checks out, third is refused."""
        biometric_id = str(biometric_id).strip() if biometric_id is not None else ""
        if not biometric_id:
            raise ValidationError("Biometric ID is required")

        employee = self._employees.get_by_biometric_id(biometric_id)
        if not employee:
            raise NotFoundError(f"Employee with biometric ID {biometric_id} not found")
        if employee.role == Role.SUPER_ADMIN:
            return PunchResult(punch_type=None, employee=summarize(employee), skipped=True)

        punch_time = timestamp or now or now_local()
        work_date = punch_time.date()
        device_id = device_id or ""

        record = self._attendance.get_for_employee_and_date(employee.employee_id, work_date)
        if record is None:
            attendance_id = self._attendance.create_checkin(
                employee_id=employee.employee_id,
                work_date=work_date,
                check_in_time=punch_time,
                device_id=device_id,
            )
            punch_type = "CHECK-IN"
        elif record.check_in_time is None:
            if not self._attendance.set_checkin(record.attendance_id, check_in_time=punch_time, device_id=device_id):
                raise ValidationError(ALREADY_COMPLETE)
            attendance_id = record.attendance_id
            punch_type = "CHECK-IN"
        elif record.check_out_time is None:
            decision = self._factory.classify(
                check_in=record.check_in_time,
                check_out=punch_time,
                schedule=self._settings.work_schedule(),
            )
            if not self._attendance.update_checkout(
                record.attendance_id,
                check_out_time=punch_time,
                status=decision.status,
                working_hours=decision.working_hours,
            ):
                raise ValidationError(ALREADY_COMPLETE)
            attendance_id = record.attendance_id
            punch_type = "CHECK-OUT"
        else:
            raise ValidationError(ALREADY_COMPLETE)

        logger.info("%s for %s (biometric %s) at %s", punch_type, employee.employee_code, biometric_id, punch_time)
        return PunchResult(
            punch_type=punch_type,
            employee=summarize(employee),
            record=self._attendance.get(attendance_id),
            timestamp=punch_time,
        )

    # Reads
    def _visible_employee_ids(self, actor: Actor) -> Optional[list[int]]:
        """None means every employee."""
        if actor.role == Role.SUPER_ADMIN:
            return None
        if actor.role == Role.ATTENDANCE_DEPARTMENT:
            return list(self._employees.list_ids_created_by(actor.user_id)) + [actor.user_id]
        return [actor.user_id]

    def list_records(
        self,
        *,
        actor: Actor,
        employee_id: Optional[int] = None,
        status: Optional[AttendanceStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[AttendanceView]:
        if start_date and end_date and end_date < start_date:
            raise ValidationError("End date cannot be before start date")

        employee_ids = self._visible_employee_ids(actor)
        if employee_id is not None:
            employee_ids = [int(employee_id)] if employee_ids is None or int(employee_id) in employee_ids else []

        records = self._attendance.list_records(
            employee_ids=employee_ids,
            status=status,
            start_date=start_date,
            end_date=end_date,
        )
        return self._views(records)

    def stats(self, *, actor: Actor, start_date: Optional[date] = None, end_date: Optional[date] = None) -> dict:
        if not actor.is_reviewer:
            raise AuthorizationError("You do not have permission to view attendance statistics")

        if actor.role == Role.ATTENDANCE_DEPARTMENT:
            employee_ids: Optional[list[int]] = list(self._employees.list_ids_created_by(actor.user_id))
            total = len(employee_ids)
        else:
            employee_ids = None
            total = self._employees.count_active()

        counts = self._attendance.count_by_status(employee_ids=employee_ids, start_date=start_date, end_date=end_date)
        return {
            "stats": [
                {"status": status.value, "count": count}
                for status, count in sorted(counts.items(), key=lambda kv: kv[0].value)
            ],
            "totalUsers": total,
        }

    # Justifications
    def submit_justification(self, *, actor: Actor, attendance_id: int, reason: Optional[str]) -> AttendanceView:
        reason = require_non_empty(reason, "Justification reason")
        record = self._attendance.get(int(attendance_id))
        if not record or record.employee_id != actor.user_id:
            raise NotFoundError("Attendance record not found")
        if record.status not in JUSTIFIABLE_STATUSES:
            raise ValidationError("Only irregular attendance records can be justified")
        if record.justification_status == JustificationStatus.PENDING:
            raise ValidationError("A justification is already pending for this record")
        if record.justification_status == JustificationStatus.APPROVED:
            raise ValidationError("This record has already been justified")
        if not self._attendance.submit_justification(record.attendance_id, reason=reason):
            raise ValidationError("A justification is already pending for this record")

        recipients = list(self._employees.list_ids_by_role(Role.SUPER_ADMIN))
        employee = self._employees.get_by_id(actor.user_id)
        if employee and employee.created_by is not None:
            recipients.append(int(employee.created_by))
        name = employee.name if employee else f"Employee #{actor.user_id}"

        outbox = Outbox()
        outbox.notify_many(
            recipient_ids=recipients,
            type=NotificationType.ATTENDANCE_UPDATED,
            title="Attendance Justification Submitted",
            message=f"{name} submitted a justification for {record.work_date.isoformat()} ({record.status.value})",
            sender_id=actor.user_id,
            reference=Reference(ReferenceKind.ATTENDANCE, record.attendance_id),
        )
        outbox.audit(
            actor=actor,
            action=AuditAction.UPDATE,
            resource_kind=ReferenceKind.ATTENDANCE,
            resource_id=record.attendance_id,
            description=f"Justification submitted for {record.work_date.isoformat()}",
        )
        self._effects.dispatch(outbox)
        return self._view(record.attendance_id)

    def review_justification(
        self,
        *,
        actor: Actor,
        attendance_id: int,
        status: str,
        remarks: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceView:
        if not actor.is_reviewer:
            raise AuthorizationError("You do not have permission to review justifications")
        if status not in (JustificationStatus.APPROVED.value, JustificationStatus.REJECTED.value):
            raise ValidationError("Invalid status")
        approved = status == JustificationStatus.APPROVED.value
        remarks = optional_text(remarks)
        if not approved and not remarks:
            raise ValidationError("Remarks are required when rejecting a justification")

        record = self._attendance.get(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        visible = self._visible_employee_ids(actor)
        if visible is not None and record.employee_id not in visible:
            raise AuthorizationError("You can only review justifications of employees you created")
        if record.justification_status != JustificationStatus.PENDING:
            raise ValidationError("Only pending justifications can be reviewed")

        if not self._attendance.review_justification(
            record.attendance_id,
            approved=approved,
            remarks=remarks,
            reviewed_by=actor.user_id,
            reviewed_at=now or now_local(),
        ):
            raise ValidationError("Only pending justifications can be reviewed")

        day = record.work_date.isoformat()
        message = (
            f"Your justification for {day} was approved; the day is marked present"
            if approved
            else f"Your justification for {day} was rejected: {remarks}"
        )
        outbox = Outbox()
        outbox.notify(
            recipient_id=record.employee_id,
            type=NotificationType.ATTENDANCE_UPDATED,
            title="Justification Approved" if approved else "Justification Rejected",
            message=message,
            sender_id=actor.user_id,
            reference=Reference(ReferenceKind.ATTENDANCE, record.attendance_id),
        )
        outbox.audit(
            actor=actor,
            action=AuditAction.STATUS_CHANGE,
            resource_kind=ReferenceKind.ATTENDANCE,
            resource_id=record.attendance_id,
            description=f"Justification {status} for {day}",
            changes={"before": {"status": record.status}, "after": {"status": AttendanceStatus.PRESENT if approved else record.status}},
        )
        self._effects.dispatch(outbox)
        return self._view(record.attendance_id)

    def pending_justifications(self, *, actor: Actor) -> list[AttendanceView]:
        if not actor.is_reviewer:
            raise AuthorizationError("You do not have permission to review justifications")
        employee_ids = None
        if actor.role == Role.ATTENDANCE_DEPARTMENT:
            employee_ids = list(self._employees.list_ids_created_by(actor.user_id))
        return self._views(self._attendance.list_pending_justifications(employee_ids=employee_ids))

    def _view(self, attendance_id: int) -> AttendanceView:
        record = self._attendance.get(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        return self._views([record])[0]

    def _views(self, records: Sequence[AttendanceRecord]) -> list[AttendanceView]:
        people: dict[int, Employee] = dict(self._employees.get_many({r.employee_id for r in records})) if records else {}
        return [
            AttendanceView(
                record=r,
                employee=summarize(people[r.employee_id]) if r.employee_id in people else None,
            )
            for r in records
        ]
