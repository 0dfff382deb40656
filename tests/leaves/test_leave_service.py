from __future__ import annotations

from datetime import date

import pytest

from src.org_manager.org_manager.core.enums import (
    AttendanceStatus,
    AuditAction,
    LeaveStatus,
    NotificationType,
)
from src.org_manager.org_manager.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def _apply(container, people, start=date(2026, 3, 2), end=date(2026, 3, 4), who=None):
    return container.leave_service.apply(
        actor=people.actor(who or people.alice),
        start_date=start,
        end_date=end,
        leave_type="casual",
        reason="Family trip",
    )


def test_apply_notifies_super_admins_and_creator(container, people):
    view = _apply(container, people)

    assert view.leave.status == LeaveStatus.PENDING
    assert view.leave.days == 3
    assert view.employee.name == "Alice"

    notes = container.repos.notifications
    assert [n.type for n in notes.for_recipient(people.admin.employee_id)] == [NotificationType.LEAVE_APPLIED]
    assert [n.type for n in notes.for_recipient(people.clerk.employee_id)] == [NotificationType.LEAVE_APPLIED]
    assert AuditAction.LEAVE_APPLIED in container.repos.audit.actions()


def test_overlapping_request_is_rejected(container, people):
    _apply(container, people)

    with pytest.raises(ValidationError, match=r"You already have a leave request for this period\."):
        _apply(container, people, start=date(2026, 3, 4), end=date(2026, 3, 6))


def test_other_employee_may_take_same_days(container, people):
    _apply(container, people)
    view = _apply(container, people, who=people.bob)

    assert view.leave.employee_id == people.bob.employee_id


def test_end_before_start_is_rejected(container, people):
    with pytest.raises(ValidationError, match="End date cannot be before start date"):
        _apply(container, people, start=date(2026, 3, 5), end=date(2026, 3, 1))


def test_approval_backfills_attendance_for_every_day(container, people):
    view = _apply(container, people)

    approved = container.leave_service.review(
        actor=people.actor(people.admin), leave_id=view.leave.leave_id, status="approved"
    )

    assert approved.leave.status == LeaveStatus.APPROVED
    assert approved.approver.name == "Admin"
    rows = sorted(container.repos.attendance.all(), key=lambda r: r.work_date)
    assert [r.work_date for r in rows] == [date(2026, 3, 2), date(2026, 3, 3), date(2026, 3, 4)]
    assert all(r.status == AttendanceStatus.LEAVE for r in rows)
    assert all(r.remarks == "Approved leave: casual" for r in rows)
    assert all(r.employee_id == people.alice.employee_id for r in rows)

    notes = container.repos.notifications.for_recipient(people.alice.employee_id)
    assert [n.type for n in notes] == [NotificationType.LEAVE_APPROVED]


def test_approval_overwrites_existing_day(container, people, fixed_now):
    container.attendance_service.device_checkin(biometric_id="101", timestamp=fixed_now.replace(month=3, day=3))
    view = _apply(container, people)

    container.leave_service.review(actor=people.actor(people.clerk), leave_id=view.leave.leave_id, status="approved")

    rows = container.repos.attendance.all()
    assert len(rows) == 3
    assert all(r.status == AttendanceStatus.LEAVE for r in rows)


def test_second_review_is_rejected_and_nothing_duplicates(container, people):
    view = _apply(container, people)
    admin = people.actor(people.admin)
    container.leave_service.review(actor=admin, leave_id=view.leave.leave_id, status="approved")

    with pytest.raises(ValidationError, match="Leave request has already been processed"):
        container.leave_service.review(actor=admin, leave_id=view.leave.leave_id, status="approved")

    assert len(container.repos.attendance.all()) == 3


def test_reject_carries_reason_and_writes_no_attendance(container, people):
    view = _apply(container, people)

    rejected = container.leave_service.review(
        actor=people.actor(people.admin),
        leave_id=view.leave.leave_id,
        status="rejected",
        rejection_reason="Release week",
    )

    assert rejected.leave.status == LeaveStatus.REJECTED
    assert rejected.leave.rejection_reason == "Release week"
    assert container.repos.attendance.all() == []
    note = container.repos.notifications.for_recipient(people.alice.employee_id)[0]
    assert note.message.endswith(": Release week")


def test_review_requires_reviewer_and_valid_status(container, people):
    view = _apply(container, people)

    with pytest.raises(AuthorizationError):
        container.leave_service.review(actor=people.actor(people.bob), leave_id=view.leave.leave_id, status="approved")
    with pytest.raises(ValidationError, match="Invalid status"):
        container.leave_service.review(actor=people.actor(people.admin), leave_id=view.leave.leave_id, status="pending")
    with pytest.raises(NotFoundError):
        container.leave_service.review(actor=people.actor(people.admin), leave_id=999, status="approved")


def test_rejected_period_can_be_requested_again(container, people):
    view = _apply(container, people)
    container.leave_service.review(actor=people.actor(people.admin), leave_id=view.leave.leave_id, status="rejected")

    again = _apply(container, people)

    assert again.leave.status == LeaveStatus.PENDING


def test_update_only_by_owner_while_pending(container, people):
    view = _apply(container, people)

    with pytest.raises(AuthorizationError):
        container.leave_service.update(actor=people.actor(people.bob), leave_id=view.leave.leave_id, reason="x")

    updated = container.leave_service.update(
        actor=people.actor(people.alice), leave_id=view.leave.leave_id, end_date=date(2026, 3, 6)
    )
    assert updated.leave.end_date == date(2026, 3, 6)

    container.leave_service.review(actor=people.actor(people.admin), leave_id=view.leave.leave_id, status="approved")
    with pytest.raises(ValidationError, match="Only pending leave requests can be edited"):
        container.leave_service.update(actor=people.actor(people.alice), leave_id=view.leave.leave_id, reason="later")


def test_cancel_pending_leave(container, people):
    view = _apply(container, people)

    container.leave_service.cancel(actor=people.actor(people.alice), leave_id=view.leave.leave_id)

    assert container.repos.leaves.get(view.leave.leave_id) is None
    assert AuditAction.LEAVE_CANCELLED in container.repos.audit.actions()


def test_cancel_someone_elses_leave_is_not_found(container, people):
    view = _apply(container, people)

    with pytest.raises(NotFoundError):
        container.leave_service.cancel(actor=people.actor(people.bob), leave_id=view.leave.leave_id)


def test_attendance_department_sees_only_its_employees(container, people):
    _apply(container, people)
    _apply(container, people, who=people.bob)

    clerk_view = container.leave_service.all_leaves(actor=people.actor(people.clerk))
    admin_view = container.leave_service.all_leaves(actor=people.actor(people.admin))

    assert [v.leave.employee_id for v in clerk_view] == [people.alice.employee_id]
    assert len(admin_view) == 2


def test_my_leaves_filters_by_year(container, people):
    _apply(container, people)
    _apply(container, people, start=date(2025, 12, 1), end=date(2025, 12, 2))

    items = container.leave_service.my_leaves(actor=people.actor(people.alice), year=2026)

    assert [v.leave.start_date for v in items] == [date(2026, 3, 2)]


def test_leave_spanning_new_year_is_listed_under_its_start_year(container, people):
    _apply(container, people, start=date(2026, 12, 30), end=date(2027, 1, 2))
    alice = people.actor(people.alice)

    assert [v.leave.start_date for v in container.leave_service.my_leaves(actor=alice, year=2026)] == [
        date(2026, 12, 30)
    ]
    assert container.leave_service.my_leaves(actor=alice, year=2027) == []
