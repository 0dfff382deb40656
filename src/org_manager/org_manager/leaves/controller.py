from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date, parse_optional_date
from ..common.http import current_actor, json_body, login_required, ok, roles_required
from ..common.validators import optional_enum, optional_int
from ..container import Container
from ..core.enums import REVIEWER_ROLES, LeaveStatus


def register(app: Flask, container: Container) -> None:
    svc = container.leave_service

    @app.route("/api/leaves/apply", methods=["POST"], endpoint="api_leave_apply")
    @login_required
    def apply_leave():
        body = json_body()
        view = svc.apply(
            actor=current_actor(),
            start_date=parse_iso_date(body.get("startDate") or ""),
            end_date=parse_iso_date(body.get("endDate") or ""),
            leave_type=body.get("leaveType") or "",
            reason=body.get("reason") or "",
        )
        return ok(view, message="Leave application submitted successfully", status=201)

    @app.route("/api/leaves/my-leaves", methods=["GET"], endpoint="api_my_leaves")
    @login_required
    def my_leaves():
        items = svc.my_leaves(
            actor=current_actor(),
            status=optional_enum(LeaveStatus, request.args.get("status"), "status"),
            year=optional_int(request.args.get("year"), "year"),
        )
        return ok(items, count=len(items))

    @app.route("/api/leaves/all", methods=["GET"], endpoint="api_all_leaves")
    @roles_required(*REVIEWER_ROLES)
    def all_leaves():
        items = svc.all_leaves(
            actor=current_actor(),
            status=optional_enum(LeaveStatus, request.args.get("status"), "status"),
            employee_id=optional_int(request.args.get("employee"), "employee"),
            start_from=parse_optional_date(request.args.get("startDate")),
            end_until=parse_optional_date(request.args.get("endDate")),
        )
        return ok(items, count=len(items))

    @app.route("/api/leaves/<int:leave_id>", methods=["PUT"], endpoint="api_leave_update")
    @login_required
    def update_leave(leave_id: int):
        body = json_body()
        view = svc.update(
            actor=current_actor(),
            leave_id=leave_id,
            start_date=parse_optional_date(body.get("startDate")),
            end_date=parse_optional_date(body.get("endDate")),
            leave_type=body.get("leaveType"),
            reason=body.get("reason"),
        )
        return ok(view, message="Leave request updated successfully")

    @app.route("/api/leaves/<int:leave_id>/status", methods=["PUT"], endpoint="api_leave_status")
    @roles_required(*REVIEWER_ROLES)
    def update_leave_status(leave_id: int):
        body = json_body()
        status = str(body.get("status") or "")
        view = svc.review(
            actor=current_actor(),
            leave_id=leave_id,
            status=status,
            rejection_reason=body.get("rejectionReason"),
        )
        return ok(view, message=f"Leave {status} successfully")

    @app.route("/api/leaves/<int:leave_id>", methods=["DELETE"], endpoint="api_leave_cancel")
    @login_required
    def cancel_leave(leave_id: int):
        svc.cancel(actor=current_actor(), leave_id=leave_id)
        return ok(message="Leave request cancelled successfully")
