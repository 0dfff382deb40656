from __future__ import annotations

import hmac

from flask import Flask, current_app, request

from ..common.datetime_utils import parse_iso_datetime, parse_optional_date
from ..common.http import current_actor, fail, json_body, login_required, ok, roles_required
from ..common.validators import optional_enum, optional_int
from ..container import Container
from ..core.enums import REVIEWER_ROLES, AttendanceStatus


def _device_key_ok() -> bool:
    """Punch clocks authenticate with a shared key when one is configured."""
    expected = current_app.config.get("DEVICE_API_KEY") or ""
    if not expected:
        return True
    return hmac.compare_digest(request.headers.get("X-Device-Key", ""), expected)


def register(app: Flask, container: Container) -> None:
    svc = container.attendance_service

    @app.route("/api/attendance/device-checkin", methods=["POST"], endpoint="api_device_checkin")
    def device_checkin():
        if not _device_key_ok():
            return fail("Invalid device key", 401)
        body = json_body()
        timestamp = body.get("timestamp")
        result = svc.device_checkin(
            biometric_id=body.get("biometricId"),
            timestamp=parse_iso_datetime(timestamp) if timestamp else None,
            device_id=body.get("deviceId"),
        )
        if result.skipped:
            return ok(message=result.message, skipped=True)
        return ok(
            {"employee": result.employee, "attendance": result.record, "timestamp": result.timestamp},
            message=result.message,
            punchType=result.punch_type,
        )

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance")
    @login_required
    def list_attendance():
        items = svc.list_records(
            actor=current_actor(),
            employee_id=optional_int(request.args.get("employee"), "employee"),
            status=optional_enum(AttendanceStatus, request.args.get("status"), "status"),
            start_date=parse_optional_date(request.args.get("startDate")),
            end_date=parse_optional_date(request.args.get("endDate")),
        )
        return ok(items, count=len(items))

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="api_attendance_stats")
    @roles_required(*REVIEWER_ROLES)
    def attendance_stats():
        data = svc.stats(
            actor=current_actor(),
            start_date=parse_optional_date(request.args.get("startDate")),
            end_date=parse_optional_date(request.args.get("endDate")),
        )
        return ok(data)

    @app.route("/api/attendance/justifications/pending", methods=["GET"], endpoint="api_pending_justifications")
    @roles_required(*REVIEWER_ROLES)
    def pending_justifications():
        items = svc.pending_justifications(actor=current_actor())
        return ok(items, count=len(items))

    @app.route("/api/attendance/<int:attendance_id>/justification", methods=["POST"], endpoint="api_justify")
    @login_required
    def submit_justification(attendance_id: int):
        view = svc.submit_justification(
            actor=current_actor(),
            attendance_id=attendance_id,
            reason=json_body().get("reason"),
        )
        return ok(view, message="Justification submitted successfully")

    @app.route("/api/attendance/<int:attendance_id>/justification", methods=["PUT"], endpoint="api_review_justification")
    @roles_required(*REVIEWER_ROLES)
    def review_justification(attendance_id: int):
        body = json_body()
        status = str(body.get("status") or "")
        view = svc.review_justification(
            actor=current_actor(),
            attendance_id=attendance_id,
            status=status,
            remarks=body.get("remarks"),
        )
        return ok(view, message=f"Justification {status} successfully")
