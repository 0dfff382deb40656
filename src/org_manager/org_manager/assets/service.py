from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence

from ..common.actor import Actor
from ..common.datetime_utils import now_local, parse_optional_date
from ..common.validators import optional_enum, optional_text, require_enum, require_int, require_non_empty
from ..core.constants import DEFAULT_ASSET_WRITE_RETRIES
from ..core.enums import (
    HOLD_STATUSES,
    AssetCategory,
    AssetCondition,
    AssetStatus,
    AssignmentStatus,
    AuditAction,
    NotificationType,
    ReferenceKind,
)
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..employees.model import summarize
from ..employees.repository import EmployeeRepository
from ..notifications.model import Reference
from ..sideeffects.outbox import Outbox, SideEffectDispatcher
from .model import (
    Asset,
    AssetAssignment,
    AssetDraft,
    AssetWrite,
    AssignmentClosing,
    AssignmentView,
    NewAssignment,
)
from .repository import AssetRepository
from .status import derive_asset_status, hold_of

logger = logging.getLogger(__name__)

_CLOSING_STATUSES = (AssignmentStatus.RETURNED, AssignmentStatus.DAMAGED, AssignmentStatus.LOST)

_TEXT_FIELDS = ("brand", "model", "serial_number", "specifications", "vendor", "location", "notes")


@dataclass(frozen=True)
class AssignResult:
    view: AssignmentView
    remaining: int

    @property
    def message(self) -> str:
        return f"Asset assigned successfully. {self.remaining} unit(s) remaining."


def _parse_price(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError("Purchase price must be a number")
    if price < 0:
        raise ValidationError("Purchase price cannot be negative")
    return price


def _parse_quantity(value: Any) -> int:
    quantity = require_int(value, "Quantity")
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1")
    return quantity


def _parse_manual_status(value: Any) -> Optional[AssetStatus]:
    """Only hold statuses can be set by hand; Available/Assigned clear a hold."""
    status = optional_enum(AssetStatus, value, "status")
    if status is None:
        return None
    return status if status in HOLD_STATUSES else None


def build_draft(data: dict) -> AssetDraft:
    hold = _parse_manual_status(data.get("status"))
    return AssetDraft(
        name=require_non_empty(data.get("name"), "Name"),
        category=require_enum(AssetCategory, data.get("category"), "category"),
        quantity=_parse_quantity(data.get("quantity", 1)),
        condition=optional_enum(AssetCondition, data.get("condition"), "condition") or AssetCondition.GOOD,
        status=hold or AssetStatus.AVAILABLE,
        brand=optional_text(data.get("brand")),
        model=optional_text(data.get("model")),
        serial_number=optional_text(data.get("serial_number")),
        specifications=optional_text(data.get("specifications")),
        purchase_date=parse_optional_date(data.get("purchase_date")),
        purchase_price=_parse_price(data.get("purchase_price")),
        vendor=optional_text(data.get("vendor")),
        warranty_expiry=parse_optional_date(data.get("warranty_expiry")),
        location=optional_text(data.get("location")),
        notes=optional_text(data.get("notes")),
    )


class AssetService:
    """Asset inventory plus the assignment ledger.

    Quantity writes go through `AssetRepository.assign` / `close_assignment`,
    which only apply when the asset version read here is still current.
    A stale write is re-read and retried up to `write_retries` times.
    """

    def __init__(
        self,
        assets: AssetRepository,
        employees: EmployeeRepository,
        effects: SideEffectDispatcher,
        *,
        write_retries: int = DEFAULT_ASSET_WRITE_RETRIES,
    ):
        self._assets = assets
        self._employees = employees
        self._effects = effects
        self._write_retries = max(1, int(write_retries))

    @staticmethod
    def _require_manager(actor: Actor) -> None:
        if not actor.is_super_admin:
            raise AuthorizationError("Only superAdmin can manage assets")

    def _active_asset(self, asset_id: int) -> Asset:
        asset = self._assets.get(int(asset_id))
        if not asset or not asset.is_active:
            raise NotFoundError("Asset not found")
        return asset

    # -------- Asset records --------
    def list_assets(
        self,
        *,
        status: Optional[AssetStatus] = None,
        category: Optional[AssetCategory] = None,
        search: Optional[str] = None,
    ) -> Sequence[Asset]:
        return self._assets.list_assets(status=status, category=category, search=optional_text(search))

    def get_asset(self, asset_id: int) -> Asset:
        return self._active_asset(asset_id)

    def create_asset(self, *, actor: Actor, data: dict) -> Asset:
        self._require_manager(actor)
        draft = build_draft(data)
        asset_id = self._assets.create(draft, created_by=actor.user_id)
        asset = self._active_asset(asset_id)

        outbox = Outbox()
        outbox.audit(
            actor=actor,
            action=AuditAction.CREATE,
            resource_kind=ReferenceKind.ASSET,
            resource_id=asset.asset_id,
            description=f"Created asset {asset.asset_code} ({asset.name})",
            changes={"after": {"quantity": asset.quantity, "category": asset.category.value}},
        )
        self._effects.dispatch(outbox)
        return asset

    def bulk_create(self, *, actor: Actor, items: Sequence[dict]) -> Sequence[Asset]:
        self._require_manager(actor)
        if not items:
            raise ValidationError("Provide at least one asset")

        drafts: list[AssetDraft] = []
        for index, item in enumerate(items, start=1):
            if not isinstance(item, dict):
                raise ValidationError(f"Item {index}: must be an object")
            try:
                drafts.append(build_draft(item))
            except ValidationError as e:
                raise ValidationError(f"Item {index}: {e}")

        ids = self._assets.create_many(drafts, created_by=actor.user_id)
        created = [self._active_asset(i) for i in ids]

        outbox = Outbox()
        outbox.audit(
            actor=actor,
            action=AuditAction.CREATE,
            resource_kind=ReferenceKind.ASSET,
            description=f"Bulk created {len(created)} asset(s)",
            changes={"after": {"codes": [a.asset_code for a in created]}},
        )
        self._effects.dispatch(outbox)
        return created

    def update_asset(self, *, actor: Actor, asset_id: int, data: dict) -> Asset:
        self._require_manager(actor)

        for _ in range(self._write_retries):
            asset = self._active_asset(asset_id)
            changes = self._build_changes(asset, data)
            if not changes:
                return asset
            if self._assets.update(
                asset.asset_id,
                changes=changes,
                expected_version=asset.version,
                modified_by=actor.user_id,
            ):
                break
        else:
            raise ConflictError("Asset was modified concurrently, please retry")

        updated = self._active_asset(asset_id)
        outbox = Outbox()
        outbox.audit(
            actor=actor,
            action=AuditAction.UPDATE,
            resource_kind=ReferenceKind.ASSET,
            resource_id=updated.asset_id,
            description=f"Updated asset {updated.asset_code}",
            changes={
                "before": {k: getattr(asset, k) for k in changes},
                "after": {k: getattr(updated, k) for k in changes},
            },
        )
        self._effects.dispatch(outbox)
        return updated

    @staticmethod
    def _build_changes(asset: Asset, data: dict) -> dict:
        changes: dict = {}
        if "name" in data:
            changes["name"] = require_non_empty(data.get("name"), "Name")
        if "category" in data:
            changes["category"] = require_enum(AssetCategory, data.get("category"), "category")
        if "condition" in data:
            changes["condition"] = require_enum(AssetCondition, data.get("condition"), "condition")
        for key in _TEXT_FIELDS:
            if key in data:
                changes[key] = optional_text(data.get(key))
        for key in ("purchase_date", "warranty_expiry"):
            if key in data:
                changes[key] = parse_optional_date(data.get(key))
        if "purchase_price" in data:
            changes["purchase_price"] = _parse_price(data.get("purchase_price"))

        quantity = asset.quantity
        if "quantity" in data:
            quantity = _parse_quantity(data.get("quantity"))
            if quantity < asset.quantity_assigned:
                raise ValidationError(
                    f"Quantity cannot be less than the {asset.quantity_assigned} unit(s) currently assigned"
                )
            changes["quantity"] = quantity

        if "quantity" in data or "status" in data:
            hold = _parse_manual_status(data["status"]) if "status" in data else hold_of(asset.status)
            changes["status"] = derive_asset_status(quantity, asset.quantity_assigned, hold)

        return {k: v for k, v in changes.items() if getattr(asset, k) != v}

    def delete_asset(self, *, actor: Actor, asset_id: int) -> None:
        self._require_manager(actor)
        asset = self._active_asset(asset_id)
        if not self._assets.soft_delete(asset.asset_id, modified_by=actor.user_id):
            raise NotFoundError("Asset not found")

        outbox = Outbox()
        outbox.audit(
            actor=actor,
            action=AuditAction.DELETE,
            resource_kind=ReferenceKind.ASSET,
            resource_id=asset.asset_id,
            description=f"Deleted asset {asset.asset_code} ({asset.name})",
        )
        self._effects.dispatch(outbox)

    # -------- Assignment ledger --------
    def assign(
        self,
        *,
        actor: Actor,
        asset_id: int,
        employee_id: Optional[int] = None,
        room: Optional[str] = None,
        quantity: Any = 1,
        condition: Optional[AssetCondition] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AssignResult:
        self._require_manager(actor)
        room = optional_text(room)
        notes = optional_text(notes)
        quantity = require_int(1 if quantity is None or quantity == "" else quantity, "Quantity to assign")

        employee = None
        for _ in range(self._write_retries):
            asset = self._active_asset(asset_id)
            if employee_id is None and not room:
                raise ValidationError("Assign to an employee or provide a room.")
            if quantity < 1:
                raise ValidationError("Quantity to assign must be at least 1.")
            if quantity > asset.available:
                raise ValidationError(
                    f"Only {asset.available} unit(s) available. Cannot assign {quantity} unit(s)."
                )
            if employee_id is not None and employee is None:
                employee = self._employees.get_by_id(int(employee_id))
                if not employee:
                    raise NotFoundError("Employee not found")

            new_assigned = asset.quantity_assigned + quantity
            write = AssetWrite(
                asset_id=asset.asset_id,
                expected_version=asset.version,
                quantity_assigned=new_assigned,
                status=derive_asset_status(asset.quantity, new_assigned),
                condition=condition or asset.condition,
                modified_by=actor.user_id,
            )
            assignment_id = self._assets.assign(
                write,
                NewAssignment(
                    asset_id=asset.asset_id,
                    quantity=quantity,
                    assigned_date=now or now_local(),
                    assigned_by=actor.user_id,
                    condition_at_assignment=write.condition,
                    employee_id=employee.employee_id if employee else None,
                    room=room,
                    notes=notes,
                ),
            )
            if assignment_id is not None:
                break
            logger.info("Asset %s changed during assignment, retrying", asset.asset_id)
        else:
            raise ConflictError("Asset was modified concurrently, please retry")

        remaining = asset.quantity - new_assigned
        holder = employee.name if employee else f"room {room}"

        outbox = Outbox()
        if employee:
            outbox.notify(
                recipient_id=employee.employee_id,
                type=NotificationType.ASSET_ASSIGNED,
                title="Asset Assigned",
                message=f"{asset.name} ({asset.asset_code}) x{quantity} has been assigned to you",
                sender_id=actor.user_id,
                reference=Reference(ReferenceKind.ASSET, asset.asset_id),
                extra={"assignmentId": assignment_id, "quantity": quantity},
            )
        outbox.audit(
            actor=actor,
            action=AuditAction.ASSIGN,
            resource_kind=ReferenceKind.ASSET,
            resource_id=asset.asset_id,
            description=f"Assigned {quantity} unit(s) of {asset.asset_code} to {holder}",
            changes={
                "before": {"quantityAssigned": asset.quantity_assigned, "status": asset.status.value},
                "after": {"quantityAssigned": new_assigned, "status": write.status.value},
            },
        )
        self._effects.dispatch(outbox)

        return AssignResult(view=self.assignment_view(assignment_id), remaining=remaining)

    def return_asset(
        self,
        *,
        actor: Actor,
        assignment_id: int,
        condition: Optional[AssetCondition] = None,
        notes: Optional[str] = None,
        status: Optional[AssignmentStatus] = None,
        now: Optional[datetime] = None,
    ) -> AssignmentView:
        self._require_manager(actor)
        closing_status = status or AssignmentStatus.RETURNED
        if closing_status not in _CLOSING_STATUSES:
            raise ValidationError("Invalid status")

        assignment = self._get_assignment(assignment_id)
        closing = None
        for _ in range(self._write_retries):
            if assignment.status != AssignmentStatus.ACTIVE:
                raise ValidationError("Assignment is not active")
            asset = self._assets.get(assignment.asset_id)
            if not asset:
                raise NotFoundError("Asset not found")

            closing = closing or AssignmentClosing(
                status=closing_status,
                return_date=now or now_local(),
                returned_by=actor.user_id,
                condition_at_return=condition or assignment.condition_at_assignment,
                return_notes=optional_text(notes),
            )
            new_assigned = max(0, asset.quantity_assigned - assignment.quantity)
            hold = AssetStatus.DAMAGED if closing_status == AssignmentStatus.DAMAGED else None
            write = AssetWrite(
                asset_id=asset.asset_id,
                expected_version=asset.version,
                quantity_assigned=new_assigned,
                status=derive_asset_status(asset.quantity, new_assigned, hold),
                condition=closing.condition_at_return,
                modified_by=actor.user_id,
            )
            if self._assets.close_assignment(write, assignment_id=assignment.assignment_id, closing=closing):
                break
            logger.info("Assignment %s or its asset changed during return, retrying", assignment.assignment_id)
            assignment = self._get_assignment(assignment_id)
        else:
            raise ConflictError("Asset was modified concurrently, please retry")

        outbox = Outbox()
        if assignment.employee_id is not None:
            outbox.notify(
                recipient_id=assignment.employee_id,
                type=NotificationType.ASSET_RETURNED,
                title="Asset Returned",
                message=f"{asset.name} ({asset.asset_code}) x{assignment.quantity} was marked {closing_status.value.lower()}",
                sender_id=actor.user_id,
                reference=Reference(ReferenceKind.ASSET, asset.asset_id),
                extra={"assignmentId": assignment.assignment_id},
            )
        outbox.audit(
            actor=actor,
            action=AuditAction.UNASSIGN,
            resource_kind=ReferenceKind.ASSET,
            resource_id=asset.asset_id,
            description=f"{closing_status.value}: {assignment.quantity} unit(s) of {asset.asset_code}",
            changes={
                "before": {"quantityAssigned": asset.quantity_assigned, "status": asset.status.value},
                "after": {"quantityAssigned": write.quantity_assigned, "status": write.status.value},
            },
        )
        self._effects.dispatch(outbox)

        return self.assignment_view(assignment.assignment_id)

    def _get_assignment(self, assignment_id: int) -> AssetAssignment:
        assignment = self._assets.get_assignment(int(assignment_id))
        if not assignment:
            raise NotFoundError("Assignment not found")
        return assignment

    def _views(self, assignments: Sequence[AssetAssignment], *, with_asset: bool = True) -> list[AssignmentView]:
        people: set[int] = set()
        for a in assignments:
            people.update(i for i in (a.employee_id, a.assigned_by, a.returned_by) if i is not None)
        employees = self._employees.get_many(people) if people else {}
        assets: dict[int, Optional[Asset]] = {}
        if with_asset:
            for asset_id in {a.asset_id for a in assignments}:
                assets[asset_id] = self._assets.get(asset_id)

        def person(employee_id):
            e = employees.get(employee_id) if employee_id is not None else None
            return summarize(e) if e else None

        return [
            AssignmentView(
                assignment=a,
                asset=assets.get(a.asset_id),
                employee=person(a.employee_id),
                assigned_by=person(a.assigned_by),
                returned_by=person(a.returned_by),
            )
            for a in assignments
        ]

    def assignment_view(self, assignment_id: int) -> AssignmentView:
        return self._views([self._get_assignment(assignment_id)])[0]

    def history(self, asset_id: int) -> list[AssignmentView]:
        asset = self._assets.get(int(asset_id))
        if not asset:
            raise NotFoundError("Asset not found")
        return self._views(self._assets.list_history(asset.asset_id), with_asset=False)

    def employee_holdings(self, *, actor: Actor, employee_id: int) -> list[AssignmentView]:
        if not actor.is_reviewer and actor.user_id != int(employee_id):
            raise AuthorizationError("You can only view your own assets")
        if not self._employees.get_by_id(int(employee_id)):
            raise NotFoundError("Employee not found")
        return self._views(self._assets.list_active_assignments(employee_id=int(employee_id)))
