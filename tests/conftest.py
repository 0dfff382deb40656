from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import pytest

from src.org_manager.org_manager.common.actor import Actor
from src.org_manager.org_manager.core.enums import Role
from src.org_manager.org_manager.employees.model import Employee
from tests.fakes import make_container


@pytest.fixture
def fixed_now():
    return datetime(2026, 2, 2, 9, 0, 0)


@dataclass
class People:
    admin: Employee
    clerk: Employee
    alice: Employee
    bob: Employee

    @staticmethod
    def actor(employee: Employee) -> Actor:
        return Actor(user_id=employee.employee_id, role=employee.role, ip_address="127.0.0.1")


@pytest.fixture
def container():
    return make_container()


@pytest.fixture
def people(container):
    employees = container.repos.employees
    admin = employees.add("Admin", role=Role.SUPER_ADMIN, biometric_id="1")
    clerk = employees.add("Clerk", role=Role.ATTENDANCE_DEPARTMENT, created_by=admin.employee_id)
    alice = employees.add("Alice", biometric_id="101", created_by=clerk.employee_id)
    bob = employees.add("Bob", biometric_id="102", created_by=admin.employee_id)
    return People(admin=admin, clerk=clerk, alice=alice, bob=bob)
