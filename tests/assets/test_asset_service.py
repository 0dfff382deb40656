from __future__ import annotations

import pytest

from src.org_manager.org_manager.assets.status import derive_asset_status
from src.org_manager.org_manager.core.enums import (
    AssetCondition,
    AssetStatus,
    AssignmentStatus,
    AuditAction,
    NotificationType,
)
from src.org_manager.org_manager.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


def _laptops(container, people, quantity=5):
    return container.asset_service.create_asset(
        actor=people.actor(people.admin),
        data={"name": "ThinkPad", "category": "Laptop", "quantity": quantity},
    )


def test_create_asset_stamps_code_and_starts_available(container, people):
    asset = _laptops(container, people)

    assert asset.asset_code == "AST00001"
    assert asset.status == AssetStatus.AVAILABLE
    assert asset.quantity == 5
    assert asset.quantity_assigned == 0


def test_only_super_admin_manages_assets(container, people):
    with pytest.raises(AuthorizationError):
        container.asset_service.create_asset(
            actor=people.actor(people.clerk),
            data={"name": "Mouse", "category": "Mouse"},
        )


def test_assign_three_of_five_reports_remaining(container, people, fixed_now):
    asset = _laptops(container, people)

    result = container.asset_service.assign(
        actor=people.actor(people.admin),
        asset_id=asset.asset_id,
        employee_id=people.alice.employee_id,
        quantity=3,
        now=fixed_now,
    )

    stored = container.repos.assets.get(asset.asset_id)
    assert stored.quantity_assigned == 3
    assert stored.status == AssetStatus.ASSIGNED
    assert result.remaining == 2
    assert result.message.endswith("2 unit(s) remaining.")
    assert result.view.assignment.status == AssignmentStatus.ACTIVE
    assert result.view.employee.name == "Alice"

    notes = container.repos.notifications.for_recipient(people.alice.employee_id)
    assert [n.type for n in notes] == [NotificationType.ASSET_ASSIGNED]
    assert AuditAction.ASSIGN in container.repos.audit.actions()


def test_assign_more_than_available_is_rejected_without_changes(container, people):
    asset = _laptops(container, people)
    admin = people.actor(people.admin)
    container.asset_service.assign(actor=admin, asset_id=asset.asset_id, employee_id=people.alice.employee_id, quantity=3)

    with pytest.raises(ValidationError, match=r"Only 2 unit\(s\) available\. Cannot assign 3 unit\(s\)\."):
        container.asset_service.assign(actor=admin, asset_id=asset.asset_id, employee_id=people.bob.employee_id, quantity=3)

    stored = container.repos.assets.get(asset.asset_id)
    assert stored.quantity_assigned == 3
    assert len(container.repos.assets.list_active_assignments()) == 1


def test_assign_zero_quantity_is_rejected(container, people):
    asset = _laptops(container, people)

    with pytest.raises(ValidationError, match=r"Quantity to assign must be at least 1\."):
        container.asset_service.assign(
            actor=people.actor(people.admin),
            asset_id=asset.asset_id,
            employee_id=people.alice.employee_id,
            quantity=0,
        )


def test_assign_needs_employee_or_room(container, people):
    asset = _laptops(container, people)

    with pytest.raises(ValidationError, match=r"Assign to an employee or provide a room\."):
        container.asset_service.assign(actor=people.actor(people.admin), asset_id=asset.asset_id, quantity=1)


def test_assign_to_room_notifies_nobody(container, people):
    asset = _laptops(container, people)

    result = container.asset_service.assign(
        actor=people.actor(people.admin),
        asset_id=asset.asset_id,
        room="Meeting Room 2",
        quantity=5,
    )

    assert result.remaining == 0
    assert result.view.assignment.room == "Meeting Room 2"
    assert container.repos.notifications.all() == []


def test_assign_to_unknown_employee(container, people):
    asset = _laptops(container, people)

    with pytest.raises(NotFoundError):
        container.asset_service.assign(actor=people.actor(people.admin), asset_id=asset.asset_id, employee_id=999)


def test_return_restores_availability(container, people, fixed_now):
    asset = _laptops(container, people)
    admin = people.actor(people.admin)
    assigned = container.asset_service.assign(
        actor=admin,
        asset_id=asset.asset_id,
        employee_id=people.alice.employee_id,
        quantity=3,
        condition=AssetCondition.EXCELLENT,
    )

    view = container.asset_service.return_asset(
        actor=admin,
        assignment_id=assigned.view.assignment.assignment_id,
        now=fixed_now,
    )

    stored = container.repos.assets.get(asset.asset_id)
    assert stored.quantity_assigned == 0
    assert stored.status == AssetStatus.AVAILABLE
    assert view.assignment.status == AssignmentStatus.RETURNED
    assert view.assignment.condition_at_return == AssetCondition.EXCELLENT
    assert view.assignment.return_date == fixed_now


def test_partial_return_keeps_asset_assigned(container, people):
    asset = _laptops(container, people)
    admin = people.actor(people.admin)
    first = container.asset_service.assign(actor=admin, asset_id=asset.asset_id, employee_id=people.alice.employee_id, quantity=2)
    container.asset_service.assign(actor=admin, asset_id=asset.asset_id, employee_id=people.bob.employee_id, quantity=1)

    container.asset_service.return_asset(actor=admin, assignment_id=first.view.assignment.assignment_id)

    stored = container.repos.assets.get(asset.asset_id)
    assert stored.quantity_assigned == 1
    assert stored.status == AssetStatus.ASSIGNED


def test_damaged_return_puts_asset_on_hold(container, people):
    asset = _laptops(container, people, quantity=1)
    admin = people.actor(people.admin)
    assigned = container.asset_service.assign(actor=admin, asset_id=asset.asset_id, employee_id=people.alice.employee_id)

    container.asset_service.return_asset(
        actor=admin,
        assignment_id=assigned.view.assignment.assignment_id,
        status=AssignmentStatus.DAMAGED,
        condition=AssetCondition.POOR,
    )

    stored = container.repos.assets.get(asset.asset_id)
    assert stored.quantity_assigned == 0
    assert stored.status == AssetStatus.DAMAGED


def test_returning_twice_is_rejected(container, people):
    asset = _laptops(container, people)
    admin = people.actor(people.admin)
    assigned = container.asset_service.assign(actor=admin, asset_id=asset.asset_id, employee_id=people.alice.employee_id)
    assignment_id = assigned.view.assignment.assignment_id
    container.asset_service.return_asset(actor=admin, assignment_id=assignment_id)

    with pytest.raises(ValidationError, match="Assignment is not active"):
        container.asset_service.return_asset(actor=admin, assignment_id=assignment_id)

    assert container.repos.assets.get(asset.asset_id).quantity_assigned == 0


def test_return_rejects_active_as_closing_status(container, people):
    with pytest.raises(ValidationError, match="Invalid status"):
        container.asset_service.return_asset(
            actor=people.actor(people.admin),
            assignment_id=1,
            status=AssignmentStatus.ACTIVE,
        )


def test_concurrent_writer_is_retried(container, people):
    asset = _laptops(container, people)
    container.repos.assets.fail_next_writes = 2

    result = container.asset_service.assign(
        actor=people.actor(people.admin),
        asset_id=asset.asset_id,
        employee_id=people.alice.employee_id,
        quantity=2,
    )

    assert result.remaining == 3
    assert container.repos.assets.write_attempts == 3


def test_writer_that_keeps_losing_gets_conflict(container, people):
    asset = _laptops(container, people)
    container.repos.assets.fail_next_writes = 3

    with pytest.raises(ConflictError):
        container.asset_service.assign(
            actor=people.actor(people.admin),
            asset_id=asset.asset_id,
            employee_id=people.alice.employee_id,
        )

    assert container.repos.assets.get(asset.asset_id).quantity_assigned == 0
    assert container.repos.assets.list_active_assignments() == []


def test_quantity_cannot_drop_below_assigned(container, people):
    asset = _laptops(container, people)
    admin = people.actor(people.admin)
    container.asset_service.assign(actor=admin, asset_id=asset.asset_id, employee_id=people.alice.employee_id, quantity=3)

    with pytest.raises(ValidationError):
        container.asset_service.update_asset(actor=admin, asset_id=asset.asset_id, data={"quantity": 2})


def test_manual_hold_survives_quantity_change(container, people):
    asset = _laptops(container, people)
    admin = people.actor(people.admin)

    updated = container.asset_service.update_asset(
        actor=admin, asset_id=asset.asset_id, data={"status": "Under Repair"}
    )
    assert updated.status == AssetStatus.UNDER_REPAIR

    updated = container.asset_service.update_asset(actor=admin, asset_id=asset.asset_id, data={"quantity": 8})
    assert updated.quantity == 8
    assert updated.status == AssetStatus.UNDER_REPAIR


def test_deleted_asset_is_hidden(container, people):
    asset = _laptops(container, people)
    admin = people.actor(people.admin)

    container.asset_service.delete_asset(actor=admin, asset_id=asset.asset_id)

    with pytest.raises(NotFoundError):
        container.asset_service.get_asset(asset.asset_id)
    assert container.asset_service.list_assets() == []


def test_bulk_create_reports_failing_item(container, people):
    with pytest.raises(ValidationError, match="Item 2"):
        container.asset_service.bulk_create(
            actor=people.actor(people.admin),
            items=[{"name": "Desk Mouse", "category": "Mouse"}, {"name": "", "category": "Mouse"}],
        )
    assert container.repos.assets.list_assets() == []


def test_employee_can_only_see_own_holdings(container, people):
    with pytest.raises(AuthorizationError):
        container.asset_service.employee_holdings(
            actor=people.actor(people.bob), employee_id=people.alice.employee_id
        )


@pytest.mark.parametrize(
    "quantity, assigned, override, expected",
    [
        (5, 0, None, AssetStatus.AVAILABLE),
        (5, 3, None, AssetStatus.ASSIGNED),
        (5, 5, None, AssetStatus.ASSIGNED),
        (5, 2, AssetStatus.RETIRED, AssetStatus.RETIRED),
    ],
)
def test_derive_asset_status(quantity, assigned, override, expected):
    assert derive_asset_status(quantity, assigned, override) == expected


def test_derive_asset_status_rejects_overallocation():
    with pytest.raises(ValidationError):
        derive_asset_status(2, 3)


def test_analytics_counts_units_and_holders(container, people):
    asset = _laptops(container, people)
    admin = people.actor(people.admin)
    container.asset_service.assign(actor=admin, asset_id=asset.asset_id, employee_id=people.alice.employee_id, quantity=2)
    container.asset_service.assign(actor=admin, asset_id=asset.asset_id, room="Lab", quantity=1)

    stats = container.asset_analytics_service.stats()
    detailed = container.asset_analytics_service.detailed()

    assert stats["totalAssets"] == 1
    assert stats["assigned"] == 1
    assert detailed["assignedUnits"] == 3
    assert detailed["availableUnits"] == 2
    assert detailed["utilizationRate"] == 60.0
    assert detailed["topHolders"][0]["employeeId"] == people.alice.employee_id
    assert detailed["roomHoldings"] == [{"room": "Lab", "units": 1}]
