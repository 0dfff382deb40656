from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import current_actor, ok, roles_required
from ..common.validators import optional_enum, optional_int
from ..container import Container
from ..core.enums import AuditAction, ReferenceKind, Role
from .repository import AuditFilter


def register(app: Flask, container: Container) -> None:
    @app.route("/api/audit-logs", methods=["GET"], endpoint="api_audit_logs")
    @roles_required(Role.SUPER_ADMIN)
    def audit_logs():
        args = request.args
        filters = AuditFilter(
            action=optional_enum(AuditAction, args.get("action"), "action"),
            resource_kind=optional_enum(ReferenceKind, args.get("resourceType"), "resourceType"),
            resource_id=optional_int(args.get("resourceId"), "resourceId"),
            performed_by=optional_int(args.get("userId"), "userId"),
            date_from=parse_optional_date(args.get("startDate")),
            date_to=parse_optional_date(args.get("endDate")),
        )
        result = container.audit_service.list_logs(
            actor=current_actor(),
            filters=filters,
            page=optional_int(args.get("page"), "page") or 1,
            limit=optional_int(args.get("limit"), "limit") or 50,
        )
        return ok(result["items"], count=len(result["items"]), total=result["total"], page=result["page"], pages=result["pages"])
