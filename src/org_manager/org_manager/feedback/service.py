from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.actor import Actor
from ..common.datetime_utils import now_local
from ..common.validators import optional_enum, optional_text
from ..core.enums import (
    AuditAction,
    FeedbackCategory,
    FeedbackPriority,
    FeedbackStatus,
    NotificationType,
    ReferenceKind,
    Role,
)
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.model import summarize
from ..employees.repository import EmployeeRepository
from ..notifications.model import Reference
from ..sideeffects.outbox import Outbox, SideEffectDispatcher
from .model import Feedback, FeedbackView, NewFeedback
from .repository import FeedbackRepository


class FeedbackService:
    def __init__(self, feedback: FeedbackRepository, employees: EmployeeRepository, effects: SideEffectDispatcher):
        self._feedback = feedback
        self._employees = employees
        self._effects = effects

    def submit(
        self,
        *,
        actor: Actor,
        subject: Optional[str],
        message: Optional[str],
        category: Optional[str] = None,
        priority: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> FeedbackView:
        subject = optional_text(subject)
        message = optional_text(message)
        if not subject or not message:
            raise ValidationError("Subject and message are required")
        category_enum = optional_enum(FeedbackCategory, category, "category") or FeedbackCategory.OTHER
        priority_enum = optional_enum(FeedbackPriority, priority, "priority") or FeedbackPriority.MEDIUM

        submitter = self._employees.get_by_id(actor.user_id)
        if not submitter:
            raise NotFoundError("Employee not found")

        feedback_id = self._feedback.create(
            NewFeedback(
                submitted_by=actor.user_id,
                submitter_name=submitter.name,
                submitter_email=submitter.email or f"{submitter.employee_code}@company.local",
                category=category_enum,
                subject=subject,
                message=message,
                priority=priority_enum,
                created_at=now or now_local(),
            )
        )

        outbox = Outbox()
        outbox.notify_many(
            recipient_ids=self._employees.list_ids_by_role(Role.SUPER_ADMIN),
            type=NotificationType.FEEDBACK_RECEIVED,
            title="New Feedback",
            message=f"{submitter.name} submitted {category_enum.value} feedback: {subject}",
            sender_id=actor.user_id,
            reference=Reference(ReferenceKind.FEEDBACK, feedback_id),
        )
        outbox.audit(
            actor=actor,
            action=AuditAction.CREATE,
            resource_kind=ReferenceKind.FEEDBACK,
            resource_id=feedback_id,
            description=f"Feedback submitted: {subject}",
            changes={"after": {"category": category_enum, "subject": subject, "status": FeedbackStatus.NEW}},
        )
        self._effects.dispatch(outbox)
        return self._view(self._get(feedback_id))

    def my_feedback(self, *, actor: Actor) -> list[FeedbackView]:
        return [self._view(f) for f in self._feedback.list_feedback(submitted_by=actor.user_id)]

    def all_feedback(
        self,
        *,
        actor: Actor,
        status: Optional[FeedbackStatus] = None,
        category: Optional[FeedbackCategory] = None,
        priority: Optional[FeedbackPriority] = None,
    ) -> list[FeedbackView]:
        if not actor.is_super_admin:
            raise AuthorizationError("Access denied")
        items = self._feedback.list_feedback(status=status, category=category, priority=priority)
        return [self._view(f) for f in items]

    def get_feedback(self, *, actor: Actor, feedback_id: int) -> FeedbackView:
        feedback = self._get(feedback_id)
        if feedback.submitted_by != actor.user_id and not actor.is_super_admin:
            raise AuthorizationError("Access denied")
        return self._view(feedback)

    def review(
        self,
        *,
        actor: Actor,
        feedback_id: int,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        admin_notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> FeedbackView:
        if not actor.is_super_admin:
            raise AuthorizationError("Access denied")
        feedback = self._get(feedback_id)

        new_status = optional_enum(FeedbackStatus, status, "status") or feedback.status
        new_priority = optional_enum(FeedbackPriority, priority, "priority") or feedback.priority
        new_notes = feedback.admin_notes if admin_notes is None else str(admin_notes)

        reviewed_by, reviewed_at = feedback.reviewed_by, feedback.reviewed_at
        # The first move away from "new" stamps the reviewer.
        if new_status != FeedbackStatus.NEW and reviewed_by is None:
            reviewed_by, reviewed_at = actor.user_id, now or now_local()

        # rowcount is 0 for a no-op update, so existence is re-read below
        self._feedback.update_review(
            feedback.feedback_id,
            status=new_status,
            priority=new_priority,
            admin_notes=new_notes,
            reviewed_by=reviewed_by,
            reviewed_at=reviewed_at,
        )
        updated = self._get(feedback.feedback_id)

        outbox = Outbox()
        outbox.audit(
            actor=actor,
            action=AuditAction.UPDATE,
            resource_kind=ReferenceKind.FEEDBACK,
            resource_id=feedback.feedback_id,
            description=f"Feedback updated: {feedback.subject}",
            changes={
                "before": {"status": feedback.status, "priority": feedback.priority},
                "after": {"status": new_status, "priority": new_priority, "adminNotes": new_notes},
            },
        )
        self._effects.dispatch(outbox)
        return self._view(updated)

    def delete(self, *, actor: Actor, feedback_id: int) -> None:
        feedback = self._get(feedback_id)
        if feedback.submitted_by != actor.user_id and not actor.is_super_admin:
            raise AuthorizationError("Access denied")
        if not self._feedback.delete(feedback.feedback_id):
            raise NotFoundError("Feedback not found")

        outbox = Outbox()
        outbox.audit(
            actor=actor,
            action=AuditAction.DELETE,
            resource_kind=ReferenceKind.FEEDBACK,
            resource_id=feedback.feedback_id,
            description=f"Feedback deleted: {feedback.subject}",
            changes={"before": {"subject": feedback.subject, "status": feedback.status}},
        )
        self._effects.dispatch(outbox)

    def _get(self, feedback_id: int) -> Feedback:
        feedback = self._feedback.get(int(feedback_id))
        if not feedback:
            raise NotFoundError("Feedback not found")
        return feedback

    def _view(self, feedback: Feedback) -> FeedbackView:
        reviewer = self._employees.get_by_id(int(feedback.reviewed_by)) if feedback.reviewed_by is not None else None
        return FeedbackView(feedback=feedback, reviewer=summarize(reviewer) if reviewer else None)
