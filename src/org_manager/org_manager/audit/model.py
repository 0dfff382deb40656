from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AuditAction, ReferenceKind, Role


@dataclass(frozen=True)
class NewAuditEntry:
    action: AuditAction
    resource_kind: ReferenceKind
    description: str
    resource_id: Optional[int] = None
    performed_by: Optional[int] = None
    performed_role: Optional[Role] = None
    changes: Optional[dict] = None
    ip_address: Optional[str] = None


@dataclass(frozen=True)
class AuditEntry:
    audit_id: int
    action: AuditAction
    resource_kind: ReferenceKind
    description: str
    created_at: datetime
    resource_id: Optional[int] = None
    performed_by: Optional[int] = None
    performed_role: Optional[Role] = None
    changes: Optional[dict] = None
    ip_address: Optional[str] = None
