from __future__ import annotations

from typing import Iterable, Mapping, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Employee


class EmployeeRepository(Protocol):
    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_biometric_id(self, biometric_id: str) -> Optional[Employee]:
        """Active employees only."""

        raise NotImplementedError

    def get_many(self, employee_ids: Iterable[int]) -> Mapping[int, Employee]:
        raise NotImplementedError

    def list_ids_by_role(self, role: Role) -> Sequence[int]:
        """Active employees holding the role."""

        raise NotImplementedError

    def list_ids_created_by(self, creator_id: int) -> Sequence[int]:
        raise NotImplementedError

    def list_employees(
        self,
        *,
        role: Optional[Role] = None,
        created_by: Optional[int] = None,
        search: Optional[str] = None,
        limit: int = 500,
    ) -> Sequence[Employee]:
        raise NotImplementedError

    def count_active(self, *, exclude_role: Optional[Role] = None) -> int:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_code: str,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        department: Optional[str],
        biometric_id: Optional[str],
        created_by: Optional[int],
    ) -> int:
        raise NotImplementedError
