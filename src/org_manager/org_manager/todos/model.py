from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import TodoStatus


@dataclass(frozen=True)
class Todo:
    """A personal note; only its owner ever sees it."""

    todo_id: int
    employee_id: int
    description: str
    status: TodoStatus
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
