from __future__ import annotations

from flask import Flask, request

from ..common.http import current_actor, json_body, login_required, ok, roles_required
from ..common.serialization import snake_keys
from ..common.validators import optional_enum, optional_int, require_int
from ..container import Container
from ..core.enums import AssetCategory, AssetCondition, AssetStatus, AssignmentStatus, Role
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    svc = container.asset_service

    @app.route("/api/assets", methods=["GET"], endpoint="api_assets")
    @login_required
    def list_assets():
        items = svc.list_assets(
            status=optional_enum(AssetStatus, request.args.get("status"), "status"),
            category=optional_enum(AssetCategory, request.args.get("category"), "category"),
            search=request.args.get("search"),
        )
        return ok(items, count=len(items))

    @app.route("/api/assets", methods=["POST"], endpoint="api_asset_create")
    @roles_required(Role.SUPER_ADMIN)
    def create_asset():
        asset = svc.create_asset(actor=current_actor(), data=snake_keys(json_body()))
        return ok(asset, message="Asset created successfully", status=201)

    @app.route("/api/assets/bulk", methods=["POST"], endpoint="api_asset_bulk_create")
    @roles_required(Role.SUPER_ADMIN)
    def bulk_create():
        items = json_body().get("assets")
        if not isinstance(items, list):
            raise ValidationError("assets must be a list")
        created = svc.bulk_create(
            actor=current_actor(),
            items=[snake_keys(i) if isinstance(i, dict) else i for i in items],
        )
        return ok(created, message=f"{len(created)} asset(s) created successfully", count=len(created), status=201)

    @app.route("/api/assets/stats", methods=["GET"], endpoint="api_asset_stats")
    @login_required
    def asset_stats():
        return ok(container.asset_analytics_service.stats())

    @app.route("/api/assets/analytics/detailed", methods=["GET"], endpoint="api_asset_analytics")
    @roles_required(Role.SUPER_ADMIN)
    def asset_analytics():
        return ok(container.asset_analytics_service.detailed())

    @app.route("/api/assets/assign", methods=["POST"], endpoint="api_asset_assign")
    @roles_required(Role.SUPER_ADMIN)
    def assign_asset():
        body = json_body()
        result = svc.assign(
            actor=current_actor(),
            asset_id=require_int(body.get("assetId"), "assetId"),
            employee_id=optional_int(body.get("employeeId"), "employeeId"),
            room=body.get("room"),
            quantity=body.get("quantityToAssign", 1),
            condition=optional_enum(AssetCondition, body.get("conditionAtAssignment"), "conditionAtAssignment"),
            notes=body.get("notes"),
        )
        return ok(result.view, message=result.message, remaining=result.remaining)

    @app.route("/api/assets/return", methods=["POST"], endpoint="api_asset_return")
    @roles_required(Role.SUPER_ADMIN)
    def return_asset():
        body = json_body()
        view = svc.return_asset(
            actor=current_actor(),
            assignment_id=require_int(body.get("assignmentId"), "assignmentId"),
            condition=optional_enum(AssetCondition, body.get("conditionAtReturn"), "conditionAtReturn"),
            notes=body.get("returnNotes", body.get("notes")),
            status=optional_enum(AssignmentStatus, body.get("status"), "status"),
        )
        return ok(view, message="Asset returned successfully")

    @app.route("/api/assets/employee/<int:employee_id>", methods=["GET"], endpoint="api_employee_assets")
    @login_required
    def employee_assets(employee_id: int):
        items = svc.employee_holdings(actor=current_actor(), employee_id=employee_id)
        return ok(items, count=len(items))

    @app.route("/api/assets/<int:asset_id>/history", methods=["GET"], endpoint="api_asset_history")
    @login_required
    def asset_history(asset_id: int):
        items = svc.history(asset_id)
        return ok(items, count=len(items))

    @app.route("/api/assets/<int:asset_id>", methods=["GET"], endpoint="api_asset_get")
    @login_required
    def get_asset(asset_id: int):
        return ok(svc.get_asset(asset_id))

    @app.route("/api/assets/<int:asset_id>", methods=["PUT"], endpoint="api_asset_update")
    @roles_required(Role.SUPER_ADMIN)
    def update_asset(asset_id: int):
        asset = svc.update_asset(actor=current_actor(), asset_id=asset_id, data=snake_keys(json_body()))
        return ok(asset, message="Asset updated successfully")

    @app.route("/api/assets/<int:asset_id>", methods=["DELETE"], endpoint="api_asset_delete")
    @roles_required(Role.SUPER_ADMIN)
    def delete_asset(asset_id: int):
        svc.delete_asset(actor=current_actor(), asset_id=asset_id)
        return ok(message="Asset deleted successfully")
