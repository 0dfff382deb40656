from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.actor import Actor
from ..common.datetime_utils import now_local
from ..common.validators import optional_enum, optional_text, require_non_empty
from ..core.enums import AuditAction, ReferenceKind, TodoStatus
from ..core.exceptions import NotFoundError
from ..sideeffects.outbox import Outbox, SideEffectDispatcher
from .model import Todo
from .repository import TodoRepository


class TodoService:
    def __init__(self, todos: TodoRepository, effects: SideEffectDispatcher):
        self._todos = todos
        self._effects = effects

    def list_todos(self, *, actor: Actor, search: Optional[str] = None) -> list[Todo]:
        return list(self._todos.list_for(actor.user_id, search=optional_text(search)))

    def get_todo(self, *, actor: Actor, todo_id: int) -> Todo:
        todo = self._todos.get_owned(int(todo_id), employee_id=actor.user_id)
        if not todo:
            raise NotFoundError("Note not found")
        return todo

    def create_todo(self, *, actor: Actor, description: Optional[str], now: Optional[datetime] = None) -> Todo:
        description = require_non_empty(description, "Description")
        todo_id = self._todos.create(employee_id=actor.user_id, description=description, created_at=now or now_local())

        outbox = Outbox()
        outbox.audit(
            actor=actor,
            action=AuditAction.CREATE,
            resource_kind=ReferenceKind.TODO,
            resource_id=todo_id,
            description="Note created",
        )
        self._effects.dispatch(outbox)
        return self.get_todo(actor=actor, todo_id=todo_id)

    def update_todo(
        self,
        *,
        actor: Actor,
        todo_id: int,
        description: Optional[str] = None,
        status: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Todo:
        todo = self.get_todo(actor=actor, todo_id=todo_id)
        new_description = require_non_empty(description, "Description") if description is not None else todo.description
        new_status = optional_enum(TodoStatus, status, "status") or todo.status
        return self._save(actor=actor, todo=todo, description=new_description, status=new_status, now=now)

    def toggle(self, *, actor: Actor, todo_id: int, now: Optional[datetime] = None) -> Todo:
        todo = self.get_todo(actor=actor, todo_id=todo_id)
        new_status = TodoStatus.PENDING if todo.status == TodoStatus.COMPLETED else TodoStatus.COMPLETED
        return self._save(actor=actor, todo=todo, description=todo.description, status=new_status, now=now)

    def _save(self, *, actor: Actor, todo: Todo, description: str, status: TodoStatus, now: Optional[datetime]) -> Todo:
        now = now or now_local()
        if status == TodoStatus.COMPLETED:
            completed_at = todo.completed_at if todo.status == TodoStatus.COMPLETED else now
        else:
            completed_at = None

        if not self._todos.update(
            todo.todo_id,
            employee_id=actor.user_id,
            description=description,
            status=status,
            completed_at=completed_at,
            updated_at=now,
        ):
            raise NotFoundError("Note not found")

        outbox = Outbox()
        outbox.audit(
            actor=actor,
            action=AuditAction.UPDATE,
            resource_kind=ReferenceKind.TODO,
            resource_id=todo.todo_id,
            description=f"Note marked as {status.value}" if status != todo.status else "Note updated",
            changes={"before": {"status": todo.status}, "after": {"status": status}},
        )
        self._effects.dispatch(outbox)
        return self.get_todo(actor=actor, todo_id=todo.todo_id)

    def delete_todo(self, *, actor: Actor, todo_id: int) -> None:
        if not self._todos.delete(int(todo_id), employee_id=actor.user_id):
            raise NotFoundError("Note not found")

        outbox = Outbox()
        outbox.audit(
            actor=actor,
            action=AuditAction.DELETE,
            resource_kind=ReferenceKind.TODO,
            resource_id=int(todo_id),
            description="Note deleted",
        )
        self._effects.dispatch(outbox)
