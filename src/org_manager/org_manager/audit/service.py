from __future__ import annotations

from typing import Optional

from ..common.actor import Actor
from ..core.constants import MAX_PAGE_SIZE
from ..core.exceptions import AuthorizationError, ValidationError
from .model import NewAuditEntry
from .repository import AuditFilter, AuditRepository


class AuditService:
    def __init__(self, audit: AuditRepository):
        self._audit = audit

    def record(self, entry: NewAuditEntry) -> int:
        return self._audit.create(entry)

    def list_logs(
        self,
        *,
        actor: Actor,
        filters: Optional[AuditFilter] = None,
        page: int = 1,
        limit: int = 50,
    ) -> dict:
        if not actor.is_super_admin:
            raise AuthorizationError("Only superAdmin can view audit logs")
        if page < 1 or limit < 1 or limit > MAX_PAGE_SIZE:
            raise ValidationError("Invalid pagination")

        filters = filters or AuditFilter()
        if filters.date_from and filters.date_to and filters.date_to < filters.date_from:
            raise ValidationError("End date cannot be before start date")

        total = self._audit.count(filters=filters)
        return {
            "items": list(self._audit.search(filters=filters, offset=(page - 1) * limit, limit=limit)),
            "total": total,
            "page": page,
            "pages": (total + limit - 1) // limit,
        }
