from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AuditAction, ReferenceKind
from .model import AuditEntry, NewAuditEntry


@dataclass(frozen=True)
class AuditFilter:
    action: Optional[AuditAction] = None
    resource_kind: Optional[ReferenceKind] = None
    resource_id: Optional[int] = None
    performed_by: Optional[int] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class AuditRepository(Protocol):
    def create(self, entry: NewAuditEntry) -> int:
        raise NotImplementedError

    def search(self, *, filters: AuditFilter, offset: int = 0, limit: int = 50) -> Sequence[AuditEntry]:
        """Newest first."""

        raise NotImplementedError

    def count(self, *, filters: AuditFilter) -> int:
        raise NotImplementedError
