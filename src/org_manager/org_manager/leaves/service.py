from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.actor import Actor
from ..common.datetime_utils import iter_days, now_local
from ..common.validators import optional_text, require_enum, require_non_empty
from ..core.enums import AuditAction, LeaveStatus, LeaveType, NotificationType, ReferenceKind, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.model import summarize
from ..employees.repository import EmployeeRepository
from ..notifications.model import Reference
from ..sideeffects.outbox import Outbox, SideEffectDispatcher
from .model import Leave, LeaveView
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


def leave_remarks(leave_type: LeaveType) -> str:
    return f"Approved leave: {leave_type.value}"


class LeaveService:
    """Leave workflow: apply, edit, cancel, review.

    Approval and the attendance backfill are one storage operation guarded on
    `status='pending'`, so a leave is approved (and backfilled) at most once.
    """

    def __init__(self, leaves: LeaveRepository, employees: EmployeeRepository, effects: SideEffectDispatcher):
        self._leaves = leaves
        self._employees = employees
        self._effects = effects

    def _validate_period(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        exclude_leave_id: Optional[int] = None,
    ) -> None:
        if end_date < start_date:
            raise ValidationError("End date cannot be before start date")
        overlapping = self._leaves.find_overlapping(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            exclude_leave_id=exclude_leave_id,
        )
        if overlapping:
            raise ValidationError("You already have a leave request for this period.")

    def _reviewers_for(self, employee_id: int) -> list[int]:
        recipients = list(self._employees.list_ids_by_role(Role.SUPER_ADMIN))
        employee = self._employees.get_by_id(employee_id)
        if employee and employee.created_by is not None:
            recipients.append(int(employee.created_by))
        return recipients

    def apply(
        self,
        *,
        actor: Actor,
        start_date: date,
        end_date: date,
        leave_type: str,
        reason: str,
        now: Optional[datetime] = None,
    ) -> LeaveView:
        leave_type_enum = require_enum(LeaveType, leave_type, "leave type")
        reason = require_non_empty(reason, "Reason")
        self._validate_period(employee_id=actor.user_id, start_date=start_date, end_date=end_date)

        leave_id = self._leaves.create(
            employee_id=actor.user_id,
            start_date=start_date,
            end_date=end_date,
            leave_type=leave_type_enum,
            reason=reason,
            applied_date=now or now_local(),
        )
        view = self.get_view(leave_id)
        name = view.employee.name if view.employee else f"Employee #{actor.user_id}"

        outbox = Outbox()
        outbox.notify_many(
            recipient_ids=self._reviewers_for(actor.user_id),
            type=NotificationType.LEAVE_APPLIED,
            title="New Leave Request",
            message=(
                f"{name} has applied for {leave_type_enum.value} leave "
                f"from {start_date.isoformat()} to {end_date.isoformat()}"
            ),
            sender_id=actor.user_id,
            reference=Reference(ReferenceKind.LEAVE, leave_id),
        )
        outbox.audit(
            actor=actor,
            action=AuditAction.LEAVE_APPLIED,
            resource_kind=ReferenceKind.LEAVE,
            resource_id=leave_id,
            description=f"Leave applied from {start_date.isoformat()} to {end_date.isoformat()}",
        )
        self._effects.dispatch(outbox)
        return view

    def update(
        self,
        *,
        actor: Actor,
        leave_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        leave_type: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> LeaveView:
        leave = self._get(leave_id)
        if leave.employee_id != actor.user_id:
            raise AuthorizationError("You can only edit your own leave requests")
        if leave.status != LeaveStatus.PENDING:
            raise ValidationError("Only pending leave requests can be edited")

        new_start = start_date or leave.start_date
        new_end = end_date or leave.end_date
        new_type = require_enum(LeaveType, leave_type, "leave type") if leave_type else leave.leave_type
        new_reason = require_non_empty(reason, "Reason") if reason is not None else leave.reason
        self._validate_period(
            employee_id=actor.user_id,
            start_date=new_start,
            end_date=new_end,
            exclude_leave_id=leave.leave_id,
        )

        if not self._leaves.update_pending(
            leave.leave_id,
            start_date=new_start,
            end_date=new_end,
            leave_type=new_type,
            reason=new_reason,
        ):
            raise ValidationError("Only pending leave requests can be edited")

        outbox = Outbox()
        outbox.audit(
            actor=actor,
            action=AuditAction.LEAVE_UPDATED,
            resource_kind=ReferenceKind.LEAVE,
            resource_id=leave.leave_id,
            description=f"Leave updated to {new_start.isoformat()} - {new_end.isoformat()}",
            changes={
                "before": {"startDate": leave.start_date, "endDate": leave.end_date, "leaveType": leave.leave_type},
                "after": {"startDate": new_start, "endDate": new_end, "leaveType": new_type},
            },
        )
        self._effects.dispatch(outbox)
        return self.get_view(leave.leave_id)

    def review(
        self,
        *,
        actor: Actor,
        leave_id: int,
        status: str,
        rejection_reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LeaveView:
        if not actor.is_reviewer:
            raise AuthorizationError("You do not have permission to review leave requests")
        if status not in (LeaveStatus.APPROVED.value, LeaveStatus.REJECTED.value):
            raise ValidationError("Invalid status")
        target = LeaveStatus(status)

        leave = self._leaves.get(int(leave_id))
        if not leave:
            raise NotFoundError("Leave request not found")
        if leave.status != LeaveStatus.PENDING:
            raise ValidationError("Leave request has already been processed")

        decided_at = now or now_local()
        rejection_reason = optional_text(rejection_reason)
        if target == LeaveStatus.APPROVED:
            days = list(iter_days(leave.start_date, leave.end_date))
            done = self._leaves.approve(
                leave.leave_id,
                approved_by=actor.user_id,
                approved_at=decided_at,
                attendance_days=days,
                attendance_remarks=leave_remarks(leave.leave_type),
            )
        else:
            done = self._leaves.reject(
                leave.leave_id,
                approved_by=actor.user_id,
                approved_at=decided_at,
                rejection_reason=rejection_reason,
            )
        if not done:
            # another reviewer got there first
            raise ValidationError("Leave request has already been processed")

        view = self.get_view(leave.leave_id)
        name = view.employee.name if view.employee else f"Employee #{leave.employee_id}"
        if target == LeaveStatus.APPROVED:
            title = "Leave Approved"
            message = (
                f"Your {leave.leave_type.value} leave from {leave.start_date.isoformat()} "
                f"to {leave.end_date.isoformat()} has been approved"
            )
        else:
            title = "Leave Rejected"
            message = f"Your {leave.leave_type.value} leave request was rejected"
            if rejection_reason:
                message += f": {rejection_reason}"

        outbox = Outbox()
        outbox.notify(
            recipient_id=leave.employee_id,
            type=NotificationType.LEAVE_APPROVED if target == LeaveStatus.APPROVED else NotificationType.LEAVE_REJECTED,
            title=title,
            message=message,
            sender_id=actor.user_id,
            reference=Reference(ReferenceKind.LEAVE, leave.leave_id),
        )
        outbox.audit(
            actor=actor,
            action=AuditAction.LEAVE_APPROVED if target == LeaveStatus.APPROVED else AuditAction.LEAVE_REJECTED,
            resource_kind=ReferenceKind.LEAVE,
            resource_id=leave.leave_id,
            description=f"Leave {target.value} for {name}",
        )
        self._effects.dispatch(outbox)
        return view

    def cancel(self, *, actor: Actor, leave_id: int) -> None:
        leave = self._leaves.get(int(leave_id))
        if not leave or leave.employee_id != actor.user_id:
            raise NotFoundError("Leave request not found")
        if leave.status != LeaveStatus.PENDING:
            raise ValidationError("Only pending leave requests can be cancelled")
        if not self._leaves.delete_pending(leave.leave_id, employee_id=actor.user_id):
            raise ValidationError("Only pending leave requests can be cancelled")

        outbox = Outbox()
        outbox.notify_many(
            recipient_ids=self._reviewers_for(actor.user_id),
            type=NotificationType.LEAVE_CANCELLED,
            title="Leave Request Cancelled",
            message=(
                f"A {leave.leave_type.value} leave request for {leave.start_date.isoformat()} "
                f"to {leave.end_date.isoformat()} was cancelled"
            ),
            sender_id=actor.user_id,
        )
        outbox.audit(
            actor=actor,
            action=AuditAction.LEAVE_CANCELLED,
            resource_kind=ReferenceKind.LEAVE,
            resource_id=leave.leave_id,
            description=f"Leave cancelled ({leave.start_date.isoformat()} - {leave.end_date.isoformat()})",
        )
        self._effects.dispatch(outbox)

    def my_leaves(self, *, actor: Actor, status: Optional[LeaveStatus] = None, year: Optional[int] = None) -> list[LeaveView]:
        # a leave belongs to the year it starts in
        leaves = self._leaves.list_leaves(
            employee_ids=[actor.user_id],
            status=status,
            start_from=date(year, 1, 1) if year else None,
            start_until=date(year, 12, 31) if year else None,
        )
        return self._views(leaves)

    def all_leaves(
        self,
        *,
        actor: Actor,
        status: Optional[LeaveStatus] = None,
        employee_id: Optional[int] = None,
        start_from: Optional[date] = None,
        end_until: Optional[date] = None,
    ) -> list[LeaveView]:
        if not actor.is_reviewer:
            raise AuthorizationError("You do not have permission to view all leave requests")

        employee_ids: Optional[list[int]] = None
        if actor.role == Role.ATTENDANCE_DEPARTMENT:
            # only the employees this account created
            employee_ids = list(self._employees.list_ids_created_by(actor.user_id))
            if employee_id is not None:
                employee_ids = [i for i in employee_ids if i == int(employee_id)]
        elif employee_id is not None:
            employee_ids = [int(employee_id)]

        leaves = self._leaves.list_leaves(
            employee_ids=employee_ids,
            status=status,
            start_from=start_from,
            end_until=end_until,
        )
        return self._views(leaves)

    def _get(self, leave_id: int) -> Leave:
        leave = self._leaves.get(int(leave_id))
        if not leave:
            raise NotFoundError("Leave request not found")
        return leave

    def get_view(self, leave_id: int) -> LeaveView:
        return self._views([self._get(leave_id)])[0]

    def _views(self, leaves: Sequence[Leave]) -> list[LeaveView]:
        ids: set[int] = set()
        for leave in leaves:
            ids.add(leave.employee_id)
            if leave.approved_by is not None:
                ids.add(int(leave.approved_by))
        people = self._employees.get_many(ids) if ids else {}

        def person(employee_id):
            e = people.get(int(employee_id)) if employee_id is not None else None
            return summarize(e) if e else None

        return [LeaveView(leave=l, employee=person(l.employee_id), approver=person(l.approved_by)) for l in leaves]
