from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import REVIEWER_ROLES, Role


@dataclass(frozen=True)
class Actor:
    """The logged-in user performing an operation."""

    user_id: int
    role: Role
    ip_address: Optional[str] = None

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN

    @property
    def is_reviewer(self) -> bool:
        return self.role in REVIEWER_ROLES
