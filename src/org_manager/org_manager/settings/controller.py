from __future__ import annotations

from flask import Flask

from ..common.http import current_actor, json_body, login_required, ok, roles_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError


def _values_from(body: dict) -> tuple[dict, dict]:
    """Accept `{key, value, description}` or `{settings: [{key, value, description}, ...]}`."""
    if "settings" in body:
        items = body.get("settings")
        if not isinstance(items, list):
            raise ValidationError("Settings array is required")
    else:
        items = [body] if body.get("key") else []

    values: dict = {}
    descriptions: dict = {}
    for item in items:
        if not isinstance(item, dict) or not item.get("key"):
            raise ValidationError("Setting key is required")
        values[item["key"]] = item.get("value")
        if item.get("description"):
            descriptions[item["key"]] = str(item["description"])
    return values, descriptions


def register(app: Flask, container: Container) -> None:
    svc = container.settings_service

    @app.route("/api/settings", methods=["GET"], endpoint="api_settings")
    @login_required
    def list_settings():
        return ok(svc.all_settings())

    @app.route("/api/settings", methods=["PUT"], endpoint="api_settings_update")
    @roles_required(Role.SUPER_ADMIN)
    def update_settings():
        values, descriptions = _values_from(json_body())
        data = svc.update(actor=current_actor(), values=values, descriptions=descriptions)
        return ok(data, message="Settings updated successfully")

    @app.route("/api/settings/<key>", methods=["GET"], endpoint="api_setting")
    @login_required
    def get_setting(key: str):
        return ok(svc.get_setting(key))
