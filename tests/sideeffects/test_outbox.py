from __future__ import annotations

from datetime import date

from src.org_manager.org_manager.common.actor import Actor
from src.org_manager.org_manager.core.enums import AuditAction, NotificationType, ReferenceKind, Role
from src.org_manager.org_manager.sideeffects.outbox import Outbox


def _outbox():
    outbox = Outbox()
    outbox.notify(recipient_id=2, type=NotificationType.GENERAL, title="t", message="m", sender_id=1)
    outbox.audit(
        actor=Actor(user_id=1, role=Role.SUPER_ADMIN, ip_address="10.0.0.1"),
        action=AuditAction.UPDATE,
        resource_kind=ReferenceKind.SYSTEM,
        description="Changed something",
    )
    return outbox


def test_dispatch_delivers_every_intent(container):
    report = container.effects.dispatch(_outbox())

    assert (report.delivered, report.failed) == (2, 0)
    entry = container.repos.audit.entries[0]
    assert entry.performed_by == 1
    assert entry.performed_role == Role.SUPER_ADMIN
    assert entry.ip_address == "10.0.0.1"


def test_failing_notification_does_not_block_audit(container, caplog):
    container.repos.notifications.fail = True

    report = container.effects.dispatch(_outbox())

    assert report.delivered == 1
    assert report.failed == 1
    assert report.errors == ["notification store is down"]
    assert container.repos.audit.actions() == [AuditAction.UPDATE]
    assert "NotifyIntent failed" in caplog.text


def test_outbox_is_drained_after_dispatch(container):
    outbox = _outbox()
    container.effects.dispatch(outbox)

    assert len(outbox) == 0


def test_primary_write_survives_notification_outage(container, people):
    container.repos.notifications.fail = True

    view = container.leave_service.apply(
        actor=people.actor(people.alice),
        start_date=date(2026, 3, 2),
        end_date=date(2026, 3, 2),
        leave_type="annual",
        reason="Wedding",
    )

    assert container.repos.leaves.get(view.leave.leave_id) is not None
    assert container.repos.notifications.all() == []
    assert container.repos.audit.actions() == [AuditAction.LEAVE_APPLIED]


def test_failed_side_effects_are_summarised_in_the_log(container, people, caplog):
    container.repos.notifications.fail = True

    container.leave_service.apply(
        actor=people.actor(people.alice),
        start_date=date(2026, 3, 2),
        end_date=date(2026, 3, 2),
        leave_type="annual",
        reason="Wedding",
    )

    summaries = [r for r in caplog.records if r.levelname == "WARNING" and "side effects failed" in r.getMessage()]
    assert [r.getMessage() for r in summaries] == ["1 of 2 side effects failed: notification store is down"]
