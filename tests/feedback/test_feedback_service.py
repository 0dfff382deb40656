from __future__ import annotations

from datetime import datetime

import pytest

from src.org_manager.org_manager.core.enums import (
    FeedbackCategory,
    FeedbackPriority,
    FeedbackStatus,
    NotificationType,
)
from src.org_manager.org_manager.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def _submit(container, people, **kwargs):
    data = {"subject": "Slow dashboard", "message": "The dashboard takes 10s to load"}
    data.update(kwargs)
    return container.feedback_service.submit(actor=people.actor(people.alice), **data)


def test_submit_defaults_and_notifies_super_admins(container, people):
    view = _submit(container, people)

    assert view.feedback.category == FeedbackCategory.OTHER
    assert view.feedback.priority == FeedbackPriority.MEDIUM
    assert view.feedback.status == FeedbackStatus.NEW
    assert view.feedback.submitter_name == "Alice"
    notes = container.repos.notifications.for_recipient(people.admin.employee_id)
    assert [n.type for n in notes] == [NotificationType.FEEDBACK_RECEIVED]
    assert container.repos.notifications.for_recipient(people.clerk.employee_id) == []


def test_subject_and_message_are_required(container, people):
    with pytest.raises(ValidationError, match="Subject and message are required"):
        _submit(container, people, message="  ")


def test_invalid_category_is_rejected(container, people):
    with pytest.raises(ValidationError):
        _submit(container, people, category="rant")


def test_first_review_stamps_reviewer(container, people, fixed_now):
    view = _submit(container, people, category="bug")
    admin = people.actor(people.admin)

    reviewed = container.feedback_service.review(
        actor=admin, feedback_id=view.feedback.feedback_id, status="in-review", admin_notes="Looking", now=fixed_now
    )
    assert reviewed.feedback.status == FeedbackStatus.IN_REVIEW
    assert reviewed.feedback.reviewed_by == people.admin.employee_id
    assert reviewed.feedback.reviewed_at == fixed_now
    assert reviewed.reviewer.name == "Admin"

    resolved = container.feedback_service.review(
        actor=admin, feedback_id=view.feedback.feedback_id, status="resolved", now=datetime(2026, 2, 5, 9, 0)
    )
    assert resolved.feedback.reviewed_at == fixed_now
    assert resolved.feedback.admin_notes == "Looking"


def test_only_super_admin_reviews_and_lists_all(container, people):
    view = _submit(container, people)

    with pytest.raises(AuthorizationError, match="Access denied"):
        container.feedback_service.review(actor=people.actor(people.clerk), feedback_id=view.feedback.feedback_id)
    with pytest.raises(AuthorizationError):
        container.feedback_service.all_feedback(actor=people.actor(people.clerk))

    assert len(container.feedback_service.all_feedback(actor=people.actor(people.admin))) == 1


def test_feedback_is_visible_to_owner_and_super_admin_only(container, people):
    view = _submit(container, people)
    feedback_id = view.feedback.feedback_id

    assert container.feedback_service.get_feedback(actor=people.actor(people.alice), feedback_id=feedback_id)
    assert container.feedback_service.get_feedback(actor=people.actor(people.admin), feedback_id=feedback_id)
    with pytest.raises(AuthorizationError):
        container.feedback_service.get_feedback(actor=people.actor(people.bob), feedback_id=feedback_id)


def test_owner_can_delete(container, people):
    view = _submit(container, people)
    alice = people.actor(people.alice)

    container.feedback_service.delete(actor=alice, feedback_id=view.feedback.feedback_id)

    assert container.feedback_service.my_feedback(actor=alice) == []
    with pytest.raises(NotFoundError, match="Feedback not found"):
        container.feedback_service.get_feedback(actor=alice, feedback_id=view.feedback.feedback_id)
