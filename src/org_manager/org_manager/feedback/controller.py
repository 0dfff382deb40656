from __future__ import annotations

from flask import Flask, request

from ..common.http import current_actor, json_body, login_required, ok, roles_required
from ..common.validators import optional_enum
from ..container import Container
from ..core.enums import FeedbackCategory, FeedbackPriority, FeedbackStatus, Role


def register(app: Flask, container: Container) -> None:
    svc = container.feedback_service

    @app.route("/api/feedback", methods=["POST"], endpoint="api_feedback_submit")
    @login_required
    def submit_feedback():
        body = json_body()
        view = svc.submit(
            actor=current_actor(),
            subject=body.get("subject"),
            message=body.get("message"),
            category=body.get("category"),
            priority=body.get("priority"),
        )
        return ok(view, message="Feedback submitted successfully", status=201)

    @app.route("/api/feedback", methods=["GET"], endpoint="api_feedback")
    @roles_required(Role.SUPER_ADMIN)
    def all_feedback():
        items = svc.all_feedback(
            actor=current_actor(),
            status=optional_enum(FeedbackStatus, request.args.get("status"), "status"),
            category=optional_enum(FeedbackCategory, request.args.get("category"), "category"),
            priority=optional_enum(FeedbackPriority, request.args.get("priority"), "priority"),
        )
        return ok(items, count=len(items))

    @app.route("/api/feedback/my", methods=["GET"], endpoint="api_my_feedback")
    @login_required
    def my_feedback():
        items = svc.my_feedback(actor=current_actor())
        return ok(items, count=len(items))

    @app.route("/api/feedback/<int:feedback_id>", methods=["GET"], endpoint="api_feedback_detail")
    @login_required
    def get_feedback(feedback_id: int):
        return ok(svc.get_feedback(actor=current_actor(), feedback_id=feedback_id))

    @app.route("/api/feedback/<int:feedback_id>", methods=["PUT"], endpoint="api_feedback_update")
    @roles_required(Role.SUPER_ADMIN)
    def update_feedback(feedback_id: int):
        body = json_body()
        view = svc.review(
            actor=current_actor(),
            feedback_id=feedback_id,
            status=body.get("status"),
            priority=body.get("priority"),
            admin_notes=body.get("adminNotes"),
        )
        return ok(view, message="Feedback updated successfully")

    @app.route("/api/feedback/<int:feedback_id>", methods=["DELETE"], endpoint="api_feedback_delete")
    @login_required
    def delete_feedback(feedback_id: int):
        svc.delete(actor=current_actor(), feedback_id=feedback_id)
        return ok(message="Feedback deleted successfully")
