from __future__ import annotations

from flask import Flask, request

from ..common.http import current_actor, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.todo_service

    @app.route("/api/todos", methods=["GET"], endpoint="api_todos")
    @login_required
    def list_todos():
        items = svc.list_todos(actor=current_actor(), search=request.args.get("search"))
        return ok(items, count=len(items))

    @app.route("/api/todos", methods=["POST"], endpoint="api_todo_create")
    @login_required
    def create_todo():
        todo = svc.create_todo(actor=current_actor(), description=json_body().get("description"))
        return ok(todo, message="Note created successfully", status=201)

    @app.route("/api/todos/<int:todo_id>", methods=["GET"], endpoint="api_todo")
    @login_required
    def get_todo(todo_id: int):
        return ok(svc.get_todo(actor=current_actor(), todo_id=todo_id))

    @app.route("/api/todos/<int:todo_id>", methods=["PUT"], endpoint="api_todo_update")
    @login_required
    def update_todo(todo_id: int):
        body = json_body()
        todo = svc.update_todo(
            actor=current_actor(),
            todo_id=todo_id,
            description=body.get("description"),
            status=body.get("status"),
        )
        return ok(todo, message="Note updated successfully")

    @app.route("/api/todos/<int:todo_id>/toggle", methods=["PATCH"], endpoint="api_todo_toggle")
    @login_required
    def toggle_todo(todo_id: int):
        return ok(svc.toggle(actor=current_actor(), todo_id=todo_id), message="Note status updated")

    @app.route("/api/todos/<int:todo_id>", methods=["DELETE"], endpoint="api_todo_delete")
    @login_required
    def delete_todo(todo_id: int):
        svc.delete_todo(actor=current_actor(), todo_id=todo_id)
        return ok(message="Note deleted successfully")
