from __future__ import annotations

from flask import Flask, request, session

from ..common.http import login_required, ok
from ..common.validators import optional_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.notification_service

    @app.route("/api/notifications", methods=["GET"], endpoint="api_notifications")
    @login_required
    def list_notifications():
        page = svc.list_for(
            recipient_id=int(session["user_id"]),
            page=optional_int(request.args.get("page"), "page"),
            limit=optional_int(request.args.get("limit"), "limit"),
            unread_only=request.args.get("unreadOnly", "").lower() in {"1", "true", "yes"},
        )
        return ok(
            page.items,
            count=len(page.items),
            total=page.total,
            unreadCount=page.unread_count,
            page=page.page,
            limit=page.limit,
        )

    @app.route("/api/notifications/unread-count", methods=["GET"], endpoint="api_notifications_unread_count")
    @login_required
    def unread_count():
        return ok({"unreadCount": svc.unread_count(recipient_id=int(session["user_id"]))})

    @app.route("/api/notifications/<int:notification_id>/read", methods=["PUT"], endpoint="api_notification_read")
    @login_required
    def mark_read(notification_id: int):
        n = svc.mark_read(recipient_id=int(session["user_id"]), notification_id=notification_id)
        return ok(n, message="Notification marked as read")

    @app.route("/api/notifications/mark-all-read", methods=["PUT"], endpoint="api_notifications_mark_all_read")
    @login_required
    def mark_all_read():
        updated = svc.mark_all_read(recipient_id=int(session["user_id"]))
        return ok(message="All notifications marked as read", count=updated)

    @app.route("/api/notifications/read", methods=["DELETE"], endpoint="api_notifications_delete_read")
    @login_required
    def delete_read():
        removed = svc.delete_read(recipient_id=int(session["user_id"]))
        return ok(message=f"{removed} read notification(s) deleted", count=removed)

    @app.route("/api/notifications/<int:notification_id>", methods=["DELETE"], endpoint="api_notification_delete")
    @login_required
    def delete_notification(notification_id: int):
        svc.delete(recipient_id=int(session["user_id"]), notification_id=notification_id)
        return ok(message="Notification deleted")
