from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.actor import Actor
from ..common.validators import optional_text, require_non_empty
from ..core.enums import AuditAction, NotificationType, ReferenceKind, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..sideeffects.outbox import Outbox, SideEffectDispatcher
from .model import Employee
from .repository import EmployeeRepository

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    name: str
    email: str
    role: Role


class AuthService:
    """Use case: authenticate an employee (login / logout)."""

    def __init__(self, employees: EmployeeRepository, effects: SideEffectDispatcher):
        self._employees = employees
        self._effects = effects

    def authenticate(self, email: str, password: str, *, ip_address: Optional[str] = None) -> SessionUser:
        email = (email or "").strip().lower()
        employee = self._employees.get_by_email(email) if email else None
        if not employee or not employee.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(employee.password_hash, password or "")
        except ValueError:
            # placeholder or corrupted hashes
            ok = False
        if not ok:
            raise AuthenticationError("Invalid email or password")

        outbox = Outbox()
        outbox.audit(
            actor=Actor(user_id=employee.employee_id, role=employee.role, ip_address=ip_address),
            action=AuditAction.LOGIN,
            resource_kind=ReferenceKind.EMPLOYEE,
            resource_id=employee.employee_id,
            description=f"{employee.name} logged in",
        )
        self._effects.dispatch(outbox)

        return SessionUser(user_id=employee.employee_id, name=employee.name, email=employee.email, role=employee.role)

    def logout(self, *, actor: Actor) -> None:
        outbox = Outbox()
        outbox.audit(
            actor=actor,
            action=AuditAction.LOGOUT,
            resource_kind=ReferenceKind.EMPLOYEE,
            resource_id=actor.user_id,
            description="Logged out",
        )
        self._effects.dispatch(outbox)


class EmployeeService:
    """Use case: manage employee accounts."""

    def __init__(self, employees: EmployeeRepository, effects: SideEffectDispatcher):
        self._employees = employees
        self._effects = effects

    def get_profile(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def list_employees(
        self,
        *,
        actor: Actor,
        role: Optional[Role] = None,
        search: Optional[str] = None,
    ) -> Sequence[Employee]:
        if not actor.is_reviewer:
            raise AuthorizationError("You do not have permission to view employees")
        # attendanceDepartment only sees the employees it created
        created_by = None if actor.is_super_admin else actor.user_id
        return self._employees.list_employees(role=role, created_by=created_by, search=optional_text(search))

    def create_employee(
        self,
        *,
        actor: Actor,
        employee_code: str,
        name: str,
        email: str,
        password: str,
        role: Role = Role.EMPLOYEE,
        department: Optional[str] = None,
        biometric_id: Optional[str] = None,
    ) -> Employee:
        if not actor.is_reviewer:
            raise AuthorizationError("You do not have permission to create employees")
        if role != Role.EMPLOYEE and not actor.is_super_admin:
            raise AuthorizationError("Only superAdmin can create privileged accounts")

        employee_code = require_non_empty(employee_code, "Employee code")
        name = require_non_empty(name, "Name")
        email = require_non_empty(email, "Email").lower()
        if not _EMAIL_RE.match(email):
            raise ValidationError("Invalid email address")
        if not password or len(password) < 6:
            raise ValidationError("Password must be at least 6 characters")
        if self._employees.get_by_email(email):
            raise ValidationError("An employee with this email already exists")
        biometric_id = optional_text(biometric_id)
        if biometric_id and self._employees.get_by_biometric_id(biometric_id):
            raise ValidationError("Biometric ID is already in use")

        employee_id = self._employees.create(
            employee_code=employee_code,
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            department=optional_text(department),
            biometric_id=biometric_id,
            created_by=actor.user_id,
        )

        outbox = Outbox()
        outbox.notify(
            recipient_id=employee_id,
            type=NotificationType.EMPLOYEE_CREATED,
            title="Welcome",
            message=f"Your account ({employee_code}) has been created",
            sender_id=actor.user_id,
        )
        outbox.audit(
            actor=actor,
            action=AuditAction.CREATE,
            resource_kind=ReferenceKind.EMPLOYEE,
            resource_id=employee_id,
            description=f"Created employee {name} ({employee_code})",
            changes={"after": {"email": email, "role": role.value, "department": department}},
        )
        self._effects.dispatch(outbox)

        return self.get_profile(employee_id)
