from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import TodoStatus
from .model import Todo


class TodoRepository(Protocol):
    def get_owned(self, todo_id: int, *, employee_id: int) -> Optional[Todo]:
        raise NotImplementedError

    def list_for(self, employee_id: int, *, search: Optional[str] = None) -> Sequence[Todo]:
        """Newest first."""

        raise NotImplementedError

    def create(self, *, employee_id: int, description: str, created_at: datetime) -> int:
        raise NotImplementedError

    def update(
        self,
        todo_id: int,
        *,
        employee_id: int,
        description: str,
        status: TodoStatus,
        completed_at: Optional[datetime],
        updated_at: datetime,
    ) -> bool:
        raise NotImplementedError

    def delete(self, todo_id: int, *, employee_id: int) -> bool:
        raise NotImplementedError
