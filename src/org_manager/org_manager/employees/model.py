from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee account.

    Plain data object; password_hash never leaves the service layer.
    """

    employee_id: int
    employee_code: str
    name: str
    email: str
    password_hash: str
    role: Role
    department: Optional[str] = None
    biometric_id: Optional[str] = None
    is_active: bool = True
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class EmployeeSummary:
    """What other modules join onto their rows (no credentials)."""

    employee_id: int
    employee_code: str
    name: str
    email: str
    department: Optional[str] = None


def summarize(employee: Employee) -> EmployeeSummary:
    return EmployeeSummary(
        employee_id=employee.employee_id,
        employee_code=employee.employee_code,
        name=employee.name,
        email=employee.email,
        department=employee.department,
    )
