from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import AssetCategory, AssetCondition, AssetStatus, AssignmentStatus
from ..employees.model import EmployeeSummary


@dataclass(frozen=True)
class Asset:
    asset_id: int
    asset_code: str
    name: str
    category: AssetCategory
    status: AssetStatus
    condition: AssetCondition
    quantity: int
    quantity_assigned: int
    created_by: int
    brand: Optional[str] = None
    model: Optional[str] = None
    serial_number: Optional[str] = None
    specifications: Optional[str] = None
    purchase_date: Optional[date] = None
    purchase_price: Optional[Decimal] = None
    vendor: Optional[str] = None
    warranty_expiry: Optional[date] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool = True
    version: int = 0
    modified_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def available(self) -> int:
        return self.quantity - self.quantity_assigned


@dataclass(frozen=True)
class AssetDraft:
    """Validated input for a new asset."""

    name: str
    category: AssetCategory
    quantity: int = 1
    condition: AssetCondition = AssetCondition.GOOD
    status: AssetStatus = AssetStatus.AVAILABLE
    brand: Optional[str] = None
    model: Optional[str] = None
    serial_number: Optional[str] = None
    specifications: Optional[str] = None
    purchase_date: Optional[date] = None
    purchase_price: Optional[Decimal] = None
    vendor: Optional[str] = None
    warranty_expiry: Optional[date] = None
    location: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class AssetAssignment:
    assignment_id: int
    asset_id: int
    quantity: int
    assigned_date: datetime
    assigned_by: int
    condition_at_assignment: AssetCondition
    status: AssignmentStatus
    employee_id: Optional[int] = None
    room: Optional[str] = None
    notes: Optional[str] = None
    return_date: Optional[datetime] = None
    returned_by: Optional[int] = None
    condition_at_return: Optional[AssetCondition] = None
    return_notes: Optional[str] = None


@dataclass(frozen=True)
class NewAssignment:
    asset_id: int
    quantity: int
    assigned_date: datetime
    assigned_by: int
    condition_at_assignment: AssetCondition
    employee_id: Optional[int] = None
    room: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class AssignmentClosing:
    status: AssignmentStatus
    return_date: datetime
    returned_by: int
    condition_at_return: AssetCondition
    return_notes: Optional[str] = None


@dataclass(frozen=True)
class AssetWrite:
    """New quantity/status/condition for an asset, applied only if `expected_version` is current."""

    asset_id: int
    expected_version: int
    quantity_assigned: int
    status: AssetStatus
    condition: AssetCondition
    modified_by: int


@dataclass(frozen=True)
class AssignmentView:
    """An assignment joined with its asset and the people involved."""

    assignment: AssetAssignment
    asset: Optional[Asset] = None
    employee: Optional[EmployeeSummary] = None
    assigned_by: Optional[EmployeeSummary] = None
    returned_by: Optional[EmployeeSummary] = None
