from __future__ import annotations

from datetime import datetime

import pytest

from src.org_manager.org_manager.core.enums import AuditAction, TodoStatus
from src.org_manager.org_manager.core.exceptions import NotFoundError, ValidationError


def test_create_and_list_own_notes(container, people):
    alice = people.actor(people.alice)
    container.todo_service.create_todo(actor=alice, description="Renew badge")
    container.todo_service.create_todo(actor=alice, description="Order monitor")
    container.todo_service.create_todo(actor=people.actor(people.bob), description="Bob's note")

    items = container.todo_service.list_todos(actor=alice)
    found = container.todo_service.list_todos(actor=alice, search="badge")

    assert [t.description for t in items] == ["Order monitor", "Renew badge"]
    assert [t.description for t in found] == ["Renew badge"]


def test_description_is_required(container, people):
    with pytest.raises(ValidationError, match="Description is required"):
        container.todo_service.create_todo(actor=people.actor(people.alice), description="   ")


def test_toggle_stamps_and_clears_completion(container, people):
    alice = people.actor(people.alice)
    todo = container.todo_service.create_todo(actor=alice, description="Submit report")
    done_at = datetime(2026, 2, 2, 16, 0)

    done = container.todo_service.toggle(actor=alice, todo_id=todo.todo_id, now=done_at)
    assert done.status == TodoStatus.COMPLETED
    assert done.completed_at == done_at

    reopened = container.todo_service.toggle(actor=alice, todo_id=todo.todo_id)
    assert reopened.status == TodoStatus.PENDING
    assert reopened.completed_at is None


def test_editing_a_completed_note_keeps_completion_time(container, people):
    alice = people.actor(people.alice)
    todo = container.todo_service.create_todo(actor=alice, description="Submit report")
    done_at = datetime(2026, 2, 2, 16, 0)
    container.todo_service.toggle(actor=alice, todo_id=todo.todo_id, now=done_at)

    edited = container.todo_service.update_todo(actor=alice, todo_id=todo.todo_id, description="Submit Q1 report")

    assert edited.description == "Submit Q1 report"
    assert edited.completed_at == done_at


def test_notes_are_private(container, people):
    todo = container.todo_service.create_todo(actor=people.actor(people.alice), description="Private")
    bob = people.actor(people.bob)

    with pytest.raises(NotFoundError, match="Note not found"):
        container.todo_service.get_todo(actor=bob, todo_id=todo.todo_id)
    with pytest.raises(NotFoundError):
        container.todo_service.delete_todo(actor=bob, todo_id=todo.todo_id)


def test_delete_is_audited(container, people):
    alice = people.actor(people.alice)
    todo = container.todo_service.create_todo(actor=alice, description="Temp")

    container.todo_service.delete_todo(actor=alice, todo_id=todo.todo_id)

    assert container.todo_service.list_todos(actor=alice) == []
    assert container.repos.audit.actions() == [AuditAction.CREATE, AuditAction.DELETE]
